"""
Advisory Reconciler

Merges an optional external verdict into a heuristic score, fail-open.

Policy:
- Classifier failure (any exception) or confidence <= 0.7 -> score unchanged
- Confident "important"     -> max(score + 15, 70)
- Confident "not important" -> min(score - 15, 30)

The result is clamped to 0-100 and the category recomputed from it.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from ..common.catalog import (
    ADVISORY_BOOST,
    ADVISORY_BOOST_FLOOR,
    ADVISORY_CONFIDENCE_THRESHOLD,
    ADVISORY_SUPPRESS,
    ADVISORY_SUPPRESS_CEILING,
    SCORE_MAX,
    SCORE_MIN,
)
from ..common.errors import AdvisoryUnavailable
from ..common.schemas import Category
from .advisory import AdvisoryVerdict
from .scorer import category_for, clamp

logger = logging.getLogger("triage.classifier.reconciler")

OUTCOME_SKIPPED = "skipped"
OUTCOME_UNAVAILABLE = "unavailable"
OUTCOME_LOW_CONFIDENCE = "low_confidence"
OUTCOME_BOOSTED = "boosted"
OUTCOME_SUPPRESSED = "suppressed"


class Classifier(Protocol):
    def classify(
        self, notification_text: str, content_id: Optional[str], preference_hint: str = ""
    ) -> AdvisoryVerdict:
        ...


@dataclass
class ReconcileResult:
    """Outcome of reconciling one score with the advisory classifier"""
    original_score: int
    final_score: int
    category: Category
    outcome: str
    reason: str = ""

    @property
    def changed(self) -> bool:
        return self.final_score != self.original_score


def apply_verdict(score: int, verdict: AdvisoryVerdict) -> ReconcileResult:
    """Apply a verdict to a score using the fixed boost/suppress policy."""
    if verdict.confidence <= ADVISORY_CONFIDENCE_THRESHOLD:
        return ReconcileResult(score, score, category_for(score), OUTCOME_LOW_CONFIDENCE, verdict.reason)

    if verdict.important:
        adjusted = max(score + ADVISORY_BOOST, ADVISORY_BOOST_FLOOR)
        outcome = OUTCOME_BOOSTED
    else:
        adjusted = min(score - ADVISORY_SUPPRESS, ADVISORY_SUPPRESS_CEILING)
        outcome = OUTCOME_SUPPRESSED

    adjusted = clamp(adjusted, SCORE_MIN, SCORE_MAX)
    return ReconcileResult(score, adjusted, category_for(adjusted), outcome, verdict.reason)


class AdvisoryReconciler:
    """
    Optional override of the heuristic score by an external classifier.

    One call per notification, never retried. With no classifier configured
    every result is ``skipped``.
    """

    def __init__(self, classifier: Optional[Classifier] = None):
        self._classifier = classifier

    @property
    def is_enabled(self) -> bool:
        return self._classifier is not None

    def reconcile(
        self,
        score: int,
        notification_text: str,
        content_id: Optional[str],
        preference_hint: str = "",
    ) -> ReconcileResult:
        """
        Reconcile a heuristic score with the classifier's verdict.

        Args:
            score: Final score from the scorer
            notification_text: Text handed to the classifier
            content_id: Resolved sender/channel; unresolved content is skipped
            preference_hint: User preference summary for the prompt

        Returns:
            ReconcileResult (unchanged score on skip, failure or low confidence)
        """
        if self._classifier is None or content_id is None:
            return ReconcileResult(score, score, category_for(score), OUTCOME_SKIPPED)

        try:
            verdict = self._classifier.classify(notification_text, content_id, preference_hint)
        except AdvisoryUnavailable as e:
            logger.warning("Advisory classifier unavailable for %s: %s", content_id, e)
            return ReconcileResult(score, score, category_for(score), OUTCOME_UNAVAILABLE, str(e))
        except Exception as e:
            logger.warning("Advisory classifier failed for %s: %s: %s", content_id, type(e).__name__, e)
            return ReconcileResult(score, score, category_for(score), OUTCOME_UNAVAILABLE, str(e))

        result = apply_verdict(score, verdict)
        if result.changed:
            logger.info(
                "Advisory %s %s: %d -> %d (confidence %.2f)",
                result.outcome, content_id, score, result.final_score, verdict.confidence,
            )
        return result
