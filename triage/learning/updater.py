"""
Behavior Updater

Periodic batch that refreshes rates and learned adjustments for every row.
Scheduling is left to the caller (cron, the HTTP endpoint, a timer).
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..common.schemas import now_ms
from .interactions import expire_frequency_windows
from .learner import BehaviorLearner
from .store import BehaviorStore

logger = logging.getLogger("triage.learning.updater")


@dataclass
class UpdateSummary:
    """Counts from one updater run"""
    apps_updated: int = 0
    contents_updated: int = 0
    failures: int = 0


class BehaviorUpdater:
    """Recomputes every app and content row from its current counters."""

    def __init__(self, store: BehaviorStore, learner: Optional[BehaviorLearner] = None):
        self._store = store
        self._learner = learner or BehaviorLearner()

    def run_once(self, now: Optional[int] = None) -> UpdateSummary:
        """
        Refresh all rows.

        Each row is recomputed inside its key lock from the row stored at that
        moment, so increments that land while the batch runs are kept.
        A failing row is logged and skipped; a row deleted since the listing
        stays deleted.

        Args:
            now: Epoch ms used to expire frequency windows (default: current time)

        Returns:
            UpdateSummary
        """
        now = now if now is not None else now_ms()
        summary = UpdateSummary()

        for app in self._store.list_apps():
            try:
                updated = self._store.update_app(
                    app.app_id,
                    lambda row: self._learner.recalculate_rates(expire_frequency_windows(row, now)),
                    create=False,
                )
            except Exception as e:
                summary.failures += 1
                logger.warning("Behavior update failed for app %s: %s", app.app_id, e)
                continue
            if updated is None:
                logger.debug("App %s deleted during update, skipped", app.app_id)
            else:
                summary.apps_updated += 1

        for content in self._store.list_contents():
            try:
                updated = self._store.update_content(
                    content.app_id,
                    content.content_id,
                    self._learner.recalculate_rates,
                    content.content_type,
                    create=False,
                )
            except Exception as e:
                summary.failures += 1
                logger.warning(
                    "Behavior update failed for %s/%s: %s", content.app_id, content.content_id, e
                )
                continue
            if updated is None:
                logger.debug("Content %s/%s deleted during update, skipped", content.app_id, content.content_id)
            else:
                summary.contents_updated += 1

        logger.info(
            "Behavior update completed: %d apps, %d contents, %d failures",
            summary.apps_updated, summary.contents_updated, summary.failures,
        )
        return summary
