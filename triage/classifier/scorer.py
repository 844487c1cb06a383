"""
Importance Scorer

Combines independent signals into a bounded 0-100 score and a category.

Layers, in evaluation order:
1. Base score        - app category weight, or the user's custom base score
2. Content preference - manual per-sender/channel preference
3. Keywords          - built-in and user keyword hits, clamped to [-30, 40]
4. Frequency         - penalty multiplier for noisy sources
5. App behavior      - learned per-app adjustment
6. Content behavior  - learned per-sender/channel adjustment
7. App lock          - pins the result into a manually locked category

final = clamp(round((base + pref + keywords + app + content) * multiplier), 0, 100)

The scorer is a pure function of its inputs. Missing rows contribute nothing.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..common.catalog import (
    BANKING_APPS,
    BASE_WEIGHT_BANKING,
    BASE_WEIGHT_DEFAULT,
    BASE_WEIGHT_EMAIL,
    BASE_WEIGHT_ENTERTAINMENT,
    BASE_WEIGHT_GAMES,
    BASE_WEIGHT_MESSAGING,
    BASE_WEIGHT_SOCIAL,
    CRITICAL_KEYWORDS,
    EMAIL_APPS,
    ENTERTAINMENT_APPS,
    FINANCIAL_KEYWORDS,
    FREQUENCY_SPAM_MULTIPLIER,
    FREQUENCY_TIERS,
    IMPORTANT_KEYWORDS,
    KEYWORD_SCORE_MAX,
    KEYWORD_SCORE_MIN,
    KEYWORD_WEIGHT_CRITICAL,
    KEYWORD_WEIGHT_FINANCIAL,
    KEYWORD_WEIGHT_IMPORTANT,
    KEYWORD_WEIGHT_SPAM,
    MESSAGING_APPS,
    SCORE_CRITICAL_MIN,
    SCORE_IMPORTANT_MIN,
    SCORE_MAX,
    SCORE_MIN,
    SCORE_NORMAL_MIN,
    SOCIAL_APPS,
    SPAM_KEYWORDS,
)
from ..common.schemas import (
    AppBehaviorState,
    Category,
    ContentBehaviorState,
    ContentPreference,
    KeywordRule,
    NotificationEvent,
    active_rules,
)


def clamp(value, low, high):
    return max(low, min(high, value))


def category_for(score: int) -> Category:
    """Map a 0-100 score to its category (bands are non-overlapping)"""
    if score >= SCORE_CRITICAL_MIN:
        return Category.CRITICAL
    if score >= SCORE_IMPORTANT_MIN:
        return Category.IMPORTANT
    if score >= SCORE_NORMAL_MIN:
        return Category.NORMAL
    return Category.SILENT


CATEGORY_BANDS = {
    Category.CRITICAL: (SCORE_CRITICAL_MIN, SCORE_MAX),
    Category.IMPORTANT: (SCORE_IMPORTANT_MIN, SCORE_CRITICAL_MIN - 1),
    Category.NORMAL: (SCORE_NORMAL_MIN, SCORE_IMPORTANT_MIN - 1),
    Category.SILENT: (SCORE_MIN, SCORE_NORMAL_MIN - 1),
}


def pin_to_category(score: int, category: Category) -> int:
    """Move a score to the nearest value inside the category's band"""
    low, high = CATEGORY_BANDS[category]
    return clamp(score, low, high)


def base_score_for(app_id: str, app_state: Optional[AppBehaviorState] = None) -> int:
    """App category weight; a custom base score short-circuits the lookup"""
    if app_state is not None and app_state.custom_base_score is not None:
        return app_state.custom_base_score

    app = (app_id or "").lower()
    if any(bank in app for bank in BANKING_APPS):
        return BASE_WEIGHT_BANKING
    if app in MESSAGING_APPS:
        return BASE_WEIGHT_MESSAGING
    if app in EMAIL_APPS:
        return BASE_WEIGHT_EMAIL
    if app in SOCIAL_APPS:
        return BASE_WEIGHT_SOCIAL
    if app in ENTERTAINMENT_APPS:
        return BASE_WEIGHT_ENTERTAINMENT
    if "game" in app:
        return BASE_WEIGHT_GAMES
    return BASE_WEIGHT_DEFAULT


def frequency_multiplier(notifications_last_hour: int) -> float:
    """Penalty-only step function of recent volume"""
    for max_count, multiplier in FREQUENCY_TIERS:
        if notifications_last_hour <= max_count:
            return multiplier
    return FREQUENCY_SPAM_MULTIPLIER


@dataclass
class KeywordAnalysis:
    """Keyword hits found in a notification"""
    critical_hits: int = 0
    important_hits: int = 0
    spam_hits: int = 0
    financial_hits: int = 0
    custom_score: int = 0
    matched: List[str] = field(default_factory=list)

    @property
    def raw_score(self) -> int:
        """Sum of all keyword contributions before clamping"""
        return (
            self.critical_hits * KEYWORD_WEIGHT_CRITICAL
            + self.important_hits * KEYWORD_WEIGHT_IMPORTANT
            + self.spam_hits * KEYWORD_WEIGHT_SPAM
            + self.financial_hits * KEYWORD_WEIGHT_FINANCIAL
            + self.custom_score
        )

    @property
    def score(self) -> int:
        return clamp(self.raw_score, KEYWORD_SCORE_MIN, KEYWORD_SCORE_MAX)


def analyze_keywords(text: str, rules: Sequence[KeywordRule] = ()) -> KeywordAnalysis:
    """
    Count keyword hits in notification text.

    Each distinct built-in keyword present counts once. Every active custom rule
    whose keyword appears adds its modifier.
    """
    analysis = KeywordAnalysis()
    text = (text or "").lower()
    if not text.strip():
        return analysis

    def hits(keywords) -> int:
        found = sorted(k for k in keywords if k in text)
        analysis.matched.extend(found)
        return len(found)

    analysis.critical_hits = hits(CRITICAL_KEYWORDS)
    analysis.important_hits = hits(IMPORTANT_KEYWORDS)
    analysis.spam_hits = hits(SPAM_KEYWORDS)
    analysis.financial_hits = hits(FINANCIAL_KEYWORDS)

    for rule in active_rules(list(rules)):
        if rule.keyword in text:
            analysis.custom_score += rule.score_modifier
            analysis.matched.append(rule.keyword)

    return analysis


# ============================================================================
# Layers
# ============================================================================

@dataclass
class ScoringContext:
    """Everything a layer may look at for one notification"""
    event: NotificationEvent
    app_state: Optional[AppBehaviorState] = None
    preference: Optional[ContentPreference] = None
    content_state: Optional[ContentBehaviorState] = None
    keyword_rules: Sequence[KeywordRule] = ()
    notifications_last_hour: int = 0


@dataclass
class LayerContribution:
    """One layer's effect, kept for auditing"""
    name: str
    value: float
    detail: str = ""


class ScoringLayer(ABC):
    """A signed term added to the pre-penalty sum"""

    name: str = ""

    @abstractmethod
    def contribute(self, ctx: ScoringContext) -> LayerContribution:
        pass


class BaseScoreLayer(ScoringLayer):
    name = "base"

    def contribute(self, ctx: ScoringContext) -> LayerContribution:
        custom = ctx.app_state is not None and ctx.app_state.custom_base_score is not None
        return LayerContribution(
            self.name,
            base_score_for(ctx.event.app_id, ctx.app_state),
            "custom base score" if custom else "app category",
        )


class ContentPreferenceLayer(ScoringLayer):
    name = "content_preference"

    def contribute(self, ctx: ScoringContext) -> LayerContribution:
        if ctx.preference is None:
            return LayerContribution(self.name, 0, "no preference")
        return LayerContribution(self.name, ctx.preference.preference_score, ctx.preference.content_id)


class KeywordLayer(ScoringLayer):
    name = "keywords"

    def contribute(self, ctx: ScoringContext) -> LayerContribution:
        analysis = analyze_keywords(ctx.event.all_text, ctx.keyword_rules)
        return LayerContribution(self.name, analysis.score, ", ".join(analysis.matched))


class AppBehaviorLayer(ScoringLayer):
    name = "app_behavior"

    def contribute(self, ctx: ScoringContext) -> LayerContribution:
        if ctx.app_state is None:
            return LayerContribution(self.name, 0, "no history")
        return LayerContribution(self.name, ctx.app_state.behavior_adjustment)


class ContentBehaviorLayer(ScoringLayer):
    name = "content_behavior"

    def contribute(self, ctx: ScoringContext) -> LayerContribution:
        if ctx.content_state is None:
            return LayerContribution(self.name, 0, "no history")
        return LayerContribution(self.name, ctx.content_state.behavior_score)


DEFAULT_LAYERS = (
    BaseScoreLayer(),
    ContentPreferenceLayer(),
    KeywordLayer(),
    AppBehaviorLayer(),
    ContentBehaviorLayer(),
)


@dataclass
class ScoreBreakdown:
    """Per-factor result of scoring one notification"""
    base_score: int
    content_preference_score: int
    keyword_score: int
    frequency_multiplier: float
    app_behavior_score: int
    content_behavior_score: int
    final_score: int
    category: Category
    locked: bool = False
    layers: List[LayerContribution] = field(default_factory=list)


class ImportanceScorer:
    """
    Scores notifications from app weight, preferences, keywords, frequency
    and learned behavior.

    Stateless; one instance can serve every notification.
    """

    def __init__(self, layers: Sequence[ScoringLayer] = DEFAULT_LAYERS):
        self._layers = tuple(layers)

    def score(
        self,
        event: NotificationEvent,
        app_state: Optional[AppBehaviorState] = None,
        preference: Optional[ContentPreference] = None,
        content_state: Optional[ContentBehaviorState] = None,
        keyword_rules: Sequence[KeywordRule] = (),
        notifications_last_hour: int = 0,
    ) -> ScoreBreakdown:
        """
        Score one notification.

        Args:
            event: The notification
            app_state: Behavior row for the app (None on first sighting)
            preference: Manual preference for the content (None if no identity)
            content_state: Behavior row for the content (None if no identity)
            keyword_rules: User keyword rules; inactive ones are skipped
            notifications_last_hour: Recent volume from this app

        Returns:
            ScoreBreakdown with every factor and the final score/category
        """
        ctx = ScoringContext(
            event=event,
            app_state=app_state,
            preference=preference,
            content_state=content_state,
            keyword_rules=keyword_rules,
            notifications_last_hour=notifications_last_hour,
        )

        contributions = [layer.contribute(ctx) for layer in self._layers]
        terms = {c.name: int(c.value) for c in contributions}

        multiplier = frequency_multiplier(notifications_last_hour)
        contributions.append(
            LayerContribution("frequency", multiplier, f"{notifications_last_hour} in the last hour")
        )

        final_score = clamp(round(sum(terms.values()) * multiplier), SCORE_MIN, SCORE_MAX)

        locked = False
        if app_state is not None and app_state.is_locked and app_state.locked_category is not None:
            final_score = pin_to_category(final_score, app_state.locked_category)
            locked = True
            contributions.append(
                LayerContribution("app_lock", final_score, app_state.locked_category.value)
            )

        return ScoreBreakdown(
            base_score=terms.get(BaseScoreLayer.name, 0),
            content_preference_score=terms.get(ContentPreferenceLayer.name, 0),
            keyword_score=terms.get(KeywordLayer.name, 0),
            frequency_multiplier=multiplier,
            app_behavior_score=terms.get(AppBehaviorLayer.name, 0),
            content_behavior_score=terms.get(ContentBehaviorLayer.name, 0),
            final_score=final_score,
            category=category_for(final_score),
            locked=locked,
            layers=contributions,
        )

    def explain(self, breakdown: ScoreBreakdown) -> str:
        """
        Generate human-readable explanation of a score.

        Args:
            breakdown: Result of ``score``

        Returns:
            Multi-line explanation string
        """
        lines = [f"Score {breakdown.final_score} -> {breakdown.category.value}"]
        for c in breakdown.layers:
            value = f"x{c.value:.1f}" if c.name == "frequency" else f"{int(c.value):+d}"
            if c.name == "app_lock":
                value = f"pinned to {int(c.value)}"
            suffix = f" ({c.detail})" if c.detail else ""
            lines.append(f"  {c.name}: {value}{suffix}")
        return "\n".join(lines)
