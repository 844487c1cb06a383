"""
Tests for Importance Scorer

Covers the layer arithmetic, category boundaries and the worked scenarios.
"""

import pytest

from triage.classifier.scorer import (
    ImportanceScorer,
    analyze_keywords,
    base_score_for,
    category_for,
    frequency_multiplier,
    pin_to_category,
)
from triage.common.schemas import (
    AppBehaviorState,
    Category,
    ContentBehaviorState,
    ContentPreference,
    KeywordRule,
    KeywordType,
    NotificationEvent,
)


@pytest.fixture
def scorer():
    return ImportanceScorer()


def event(app_id="com.example.app", title=None, text=None, **kwargs):
    return NotificationEvent(app_id=app_id, title=title, text=text, **kwargs)


class TestScenarios:
    def test_direct_message_meeting_is_critical(self, scorer):
        result = scorer.score(
            event("com.whatsapp", "Rahul Kumar", "Are we meeting today?"),
            notifications_last_hour=1,
        )
        assert result.base_score == 60
        assert result.keyword_score == 10
        assert result.frequency_multiplier == 1.0
        assert result.final_score == 70
        assert result.category == Category.CRITICAL

    def test_noisy_video_app_is_silent(self, scorer):
        result = scorer.score(
            event("com.google.android.youtube", "NetworkChuck: New router teardown", ""),
            notifications_last_hour=25,
        )
        assert result.base_score == 15
        assert result.keyword_score == 0
        assert result.frequency_multiplier == 0.3
        assert result.final_score == 4  # round(4.5) == 4
        assert result.category == Category.SILENT

    def test_preference_alone_is_not_critical(self, scorer):
        preference = ContentPreference(
            app_id="com.google.android.youtube", content_id="Kurzgesagt", preference_score=20
        )
        result = scorer.score(
            event("com.google.android.youtube", "Kurzgesagt: Black holes explained", None),
            preference=preference,
        )
        assert result.final_score == 35
        assert result.category == Category.NORMAL


class TestBaseScore:
    @pytest.mark.parametrize("app_id,expected", [
        ("com.phonepe.app", 80),
        ("com.phonepe.app.beta", 80),
        ("com.whatsapp", 60),
        ("com.google.android.gm", 50),
        ("com.instagram.android", 35),
        ("com.spotify.music", 15),
        ("com.supercell.game.clash", 10),
        ("com.example.app", 30),
    ])
    def test_category_weights(self, app_id, expected):
        assert base_score_for(app_id) == expected

    def test_custom_base_score_wins(self):
        state = AppBehaviorState(app_id="com.whatsapp", custom_base_score=5)
        assert base_score_for("com.whatsapp", state) == 5


class TestKeywords:
    def test_blank_text(self):
        assert analyze_keywords("   ").score == 0

    def test_each_keyword_counts_once(self):
        analysis = analyze_keywords("urgent urgent urgent")
        assert analysis.critical_hits == 1
        assert analysis.score == 20

    def test_clamped_high(self):
        analysis = analyze_keywords("urgent emergency fraud breach")
        assert analysis.raw_score == 80
        assert analysis.score == 40

    def test_clamped_low(self):
        analysis = analyze_keywords("sale discount coupon promo")
        assert analysis.raw_score == -32
        assert analysis.score == -30

    def test_inactive_custom_rule_ignored(self):
        rules = [
            KeywordRule(keyword="Zorblax", type=KeywordType.CRITICAL, score_modifier=25),
            KeywordRule(keyword="quux", type=KeywordType.SPAM, score_modifier=-10, is_active=False),
        ]
        analysis = analyze_keywords("zorblax and quux", rules)
        assert analysis.custom_score == 25
        assert "zorblax" in analysis.matched

    def test_critical_hit_adds_twenty(self, scorer):
        without = scorer.score(event(text="hello there"))
        with_hit = scorer.score(event(text="hello there urgent"))
        assert with_hit.final_score - without.final_score == 20

    def test_keyword_monotonicity(self, scorer):
        scores = [
            scorer.score(event(text=t)).final_score
            for t in ("hello", "hello urgent", "hello urgent emergency")
        ]
        assert scores == sorted(scores)


class TestFrequency:
    @pytest.mark.parametrize("count,multiplier", [
        (0, 1.0), (2, 1.0), (3, 0.9), (5, 0.9), (6, 0.7),
        (10, 0.7), (11, 0.5), (20, 0.5), (21, 0.3), (500, 0.3),
    ])
    def test_tiers(self, count, multiplier):
        assert frequency_multiplier(count) == multiplier


class TestCategoryBoundaries:
    @pytest.mark.parametrize("score,category", [
        (100, Category.CRITICAL), (70, Category.CRITICAL), (69, Category.IMPORTANT),
        (40, Category.IMPORTANT), (39, Category.NORMAL), (15, Category.NORMAL),
        (14, Category.SILENT), (0, Category.SILENT),
    ])
    def test_category_for(self, score, category):
        assert category_for(score) == category

    @pytest.mark.parametrize("base,category", [
        (70, Category.CRITICAL), (69, Category.IMPORTANT), (40, Category.IMPORTANT),
        (39, Category.NORMAL), (15, Category.NORMAL), (14, Category.SILENT),
    ])
    def test_boundaries_through_scorer(self, scorer, base, category):
        state = AppBehaviorState(app_id="com.example.app", custom_base_score=base)
        result = scorer.score(event(), app_state=state)
        assert result.final_score == base
        assert result.category == category


class TestLayers:
    def test_missing_state_is_neutral(self, scorer):
        result = scorer.score(event(text="hi"))
        assert result.content_preference_score == 0
        assert result.app_behavior_score == 0
        assert result.content_behavior_score == 0
        assert result.locked is False

    def test_learned_behavior_terms(self, scorer):
        app = AppBehaviorState(app_id="com.example.app", behavior_adjustment=-10)
        content = ContentBehaviorState(app_id="com.example.app", content_id="x", behavior_score=5)
        result = scorer.score(event(), app_state=app, content_state=content)
        assert result.final_score == 30 - 10 + 5

    def test_final_score_clamped(self, scorer):
        app = AppBehaviorState(app_id="com.phonepe.app", behavior_adjustment=20)
        preference = ContentPreference(app_id="com.phonepe.app", content_id="x", preference_score=20)
        result = scorer.score(
            event("com.phonepe.app", text="urgent emergency fraud"),
            app_state=app, preference=preference,
        )
        assert result.final_score == 100

        low = scorer.score(
            event(text="sale discount coupon promo"),
            app_state=AppBehaviorState(app_id="com.example.app", behavior_adjustment=-20),
        )
        assert low.final_score == 0

    def test_idempotent(self, scorer):
        app = AppBehaviorState(app_id="com.whatsapp", behavior_adjustment=7)
        e = event("com.whatsapp", "Rahul", "payment due")
        assert scorer.score(e, app_state=app) == scorer.score(e, app_state=app)

    def test_layers_audit_trail(self, scorer):
        result = scorer.score(event(text="urgent"), notifications_last_hour=4)
        names = [layer.name for layer in result.layers]
        assert names == [
            "base", "content_preference", "keywords", "app_behavior", "content_behavior", "frequency",
        ]
        assert "urgent" in scorer.explain(result)


class TestAppLock:
    @pytest.mark.parametrize("category,expected", [
        (Category.CRITICAL, 70),
        (Category.IMPORTANT, 40),
        (Category.NORMAL, 30),
        (Category.SILENT, 14),
    ])
    def test_lock_pins_into_band(self, scorer, category, expected):
        app = AppBehaviorState(app_id="com.example.app", is_locked=True, locked_category=category)
        result = scorer.score(event(), app_state=app)
        assert result.locked is True
        assert result.final_score == expected
        assert result.category == category

    def test_lock_without_category_has_no_effect(self, scorer):
        app = AppBehaviorState(app_id="com.example.app", is_locked=True)
        result = scorer.score(event(), app_state=app)
        assert result.locked is False
        assert result.final_score == 30

    def test_pin_to_category(self):
        assert pin_to_category(95, Category.IMPORTANT) == 69
        assert pin_to_category(3, Category.NORMAL) == 15
        assert pin_to_category(50, Category.IMPORTANT) == 50
