"""Tests for the periodic behavior updater."""

import logging

import pytest
from unittest.mock import Mock

from triage.common.catalog import HOUR_MS
from triage.common.schemas import ContentType
from triage.learning.interactions import record_opened, record_received, update_frequency
from triage.learning.learner import BehaviorLearner
from triage.learning.store import BehaviorStore
from triage.learning.updater import BehaviorUpdater

T0 = 1_700_000_000_000


@pytest.fixture
def store():
    return BehaviorStore()


def receive_and_open(row, n, opened):
    for i in range(n):
        row = record_received(row, T0 + i)
        if i < opened:
            row = record_opened(row)
    return row


class TestBehaviorUpdater:
    def test_recomputes_apps_and_contents(self, store):
        store.update_app("com.whatsapp", lambda r: receive_and_open(r, 20, 18))
        store.update_content("com.whatsapp", "Mom", lambda r: receive_and_open(r, 10, 0), ContentType.CONTACT)

        summary = BehaviorUpdater(store).run_once(now=T0)

        assert summary.apps_updated == 1
        assert summary.contents_updated == 1
        assert summary.failures == 0
        assert store.get_app("com.whatsapp").behavior_adjustment == 15
        content = store.get_content("com.whatsapp", "Mom")
        assert content.open_rate == 0.0
        assert content.content_type == ContentType.CONTACT

    def test_expires_stale_frequency_windows(self, store):
        store.update_app("com.noisy", lambda r: update_frequency(record_received(r, T0), T0, T0))
        BehaviorUpdater(store).run_once(now=T0 + 2 * HOUR_MS)
        assert store.get_app("com.noisy").notifications_last_hour == 0

    def test_failing_row_does_not_stop_batch(self, store, caplog):
        store.get_or_create_app("com.bad")
        store.get_or_create_app("com.good")

        learner = BehaviorLearner()
        real = learner.recalculate_rates

        def flaky(row):
            if getattr(row, "app_id", None) == "com.bad":
                raise RuntimeError("boom")
            return real(row)

        learner.recalculate_rates = Mock(side_effect=flaky)

        with caplog.at_level(logging.WARNING, logger="triage.learning.updater"):
            summary = BehaviorUpdater(store, learner).run_once(now=T0)

        assert summary.apps_updated == 1
        assert summary.failures == 1
        assert "com.bad" in caplog.text

    def test_recompute_reads_current_row(self, store):
        """Increments landing between listing and recompute are kept."""
        store.update_app("com.x", lambda r: receive_and_open(r, 5, 5))
        original_list = store.list_apps

        def list_then_increment():
            rows = original_list()
            store.update_app("com.x", lambda r: record_received(r, T0))
            return rows

        store.list_apps = list_then_increment
        BehaviorUpdater(store).run_once(now=T0)

        row = store.get_app("com.x")
        assert row.total_received == 6
        assert row.open_rate == pytest.approx(5 / 6)

    def test_row_deleted_after_listing_stays_deleted(self, store):
        store.get_or_create_app("com.gone")
        store.get_or_create_content("com.gone", "Mom", ContentType.CONTACT)
        apps, contents = store.list_apps(), store.list_contents()
        store.delete_app("com.gone")
        store.delete_content("com.gone", "Mom")

        store.list_apps = lambda: apps
        store.list_contents = lambda: contents
        summary = BehaviorUpdater(store).run_once(now=T0)

        assert store.get_app("com.gone") is None
        assert store.get_content("com.gone", "Mom") is None
        assert summary.apps_updated == 0
        assert summary.contents_updated == 0
        assert summary.failures == 0
