"""
Notification Processor

End-to-end handling of one notification:

1. Extract the sender/channel identity
2. Load (or create) the app, preference and content rows
3. Score with the heuristic scorer
4. Optionally reconcile with the advisory classifier
5. Count the notification on the app and content rows
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from ..common.schemas import (
    AppBehaviorState,
    Category,
    ContentBehaviorState,
    ContentIdentity,
    NotificationEvent,
    now_ms,
)
from ..learning.interactions import (
    INTERACTION_KINDS,
    apply_interaction,
    expire_frequency_windows,
    record_received,
    update_frequency,
)
from ..learning.store import BehaviorStore
from .advisory import default_preference_hint
from .content_extractor import ContentExtractor
from .reconciler import OUTCOME_SKIPPED, AdvisoryReconciler, ReconcileResult
from .scorer import ImportanceScorer, ScoreBreakdown

logger = logging.getLogger("triage.classifier.pipeline")


@dataclass
class ProcessedNotification:
    """Everything decided about one notification"""
    event: NotificationEvent
    identity: ContentIdentity
    breakdown: ScoreBreakdown
    reconcile: ReconcileResult

    @property
    def final_score(self) -> int:
        return self.reconcile.final_score

    @property
    def category(self) -> Category:
        return self.reconcile.category


class NotificationProcessor:
    """
    Wires extractor, scorer, reconciler and store together.

    The processor holds no state of its own; all rows live in the store.
    """

    def __init__(
        self,
        store: BehaviorStore,
        extractor: Optional[ContentExtractor] = None,
        scorer: Optional[ImportanceScorer] = None,
        reconciler: Optional[AdvisoryReconciler] = None,
        preference_hint: str = "",
    ):
        self._store = store
        self._extractor = extractor or ContentExtractor()
        self._scorer = scorer or ImportanceScorer()
        self._reconciler = reconciler or AdvisoryReconciler()
        self._preference_hint = preference_hint

    def process(self, event: NotificationEvent, now: Optional[int] = None) -> ProcessedNotification:
        """
        Score a notification and record that it was received.

        Args:
            event: The notification
            now: Epoch ms for frequency bookkeeping (default: current time)

        Returns:
            ProcessedNotification
        """
        now = now if now is not None else now_ms()
        received_at = event.received_at or now

        identity = self._extractor.extract(event.app_id, event.title, event.text)
        # A window that closed since the last notification no longer counts
        app = expire_frequency_windows(self._store.get_or_create_app(event.app_id), received_at)

        preference = content_state = None
        if identity.is_resolved:
            preference = self._store.get_or_create_preference(
                event.app_id, identity.content_id, identity.content_type
            )
            content_state = self._store.get_or_create_content(
                event.app_id, identity.content_id, identity.content_type
            )

        breakdown = self._scorer.score(
            event,
            app_state=app,
            preference=preference,
            content_state=content_state,
            keyword_rules=self._store.active_keywords(),
            notifications_last_hour=app.notifications_last_hour,
        )

        if breakdown.locked:
            # A manual lock outranks the advisory opinion
            reconcile = ReconcileResult(
                breakdown.final_score, breakdown.final_score, breakdown.category, OUTCOME_SKIPPED, "app locked"
            )
        else:
            hint = self._preference_hint or default_preference_hint(
                identity.content_id, preference.preference_score if preference else 0
            )
            reconcile = self._reconciler.reconcile(
                breakdown.final_score,
                f"{event.title or ''} - {event.text or ''}",
                identity.content_id,
                hint,
            )

        self._store.update_app(
            event.app_id,
            lambda row: update_frequency(record_received(row, received_at), received_at, now),
        )
        if identity.is_resolved:
            self._store.update_content(
                event.app_id,
                identity.content_id,
                lambda row: record_received(row, received_at),
                identity.content_type,
            )

        logger.debug(
            "Scored %s/%s: %d -> %d %s",
            event.app_id, identity.content_id, breakdown.final_score,
            reconcile.final_score, reconcile.category.value,
        )
        return ProcessedNotification(event, identity, breakdown, reconcile)

    def record_interaction(
        self,
        app_id: str,
        content_id: Optional[str],
        kind: str,
        time_to_action_ms: int = 0,
    ) -> Tuple[AppBehaviorState, Optional[ContentBehaviorState]]:
        """
        Apply an opened/dismissed/ignored interaction to the app and content rows.

        Raises:
            ValueError: unknown interaction kind
        """
        if kind not in INTERACTION_KINDS:
            raise ValueError(f"Unknown interaction kind: {kind}")

        app = self._store.update_app(
            app_id, lambda row: apply_interaction(row, kind, time_to_action_ms)
        )
        content = None
        if content_id is not None:
            content = self._store.update_content(
                app_id, content_id, lambda row: apply_interaction(row, kind, time_to_action_ms)
            )
        return app, content
