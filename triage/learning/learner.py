"""
Behavior Learner

Turns raw engagement counters into a bounded score adjustment.

- High open rate     -> user cares, boost
- High dismiss rate  -> user doesn't care, reduce
- High ignore rate   -> user doesn't care, reduce

Signals are tiered step functions summed and clamped to [-20, 20]. Nothing is
learned until a source has sent at least 5 notifications.

Works on both AppBehaviorState and ContentBehaviorState; the learned value is
written to the row's ``learned_field``.
"""

from typing import Sequence, Tuple, TypeVar

from ..common.catalog import (
    BEHAVIOR_MAX_ADJUSTMENT,
    DISMISS_RATE_TIERS,
    HIGH_ENGAGEMENT_OPEN_RATE,
    IGNORE_RATE_TIERS,
    IGNORED_CONTENT_RATE,
    LEARNING_MIN_SAMPLES,
    OPEN_RATE_TIERS,
    SPAMMY_AVG_PER_DAY,
    SPAMMY_LAST_HOUR,
    SUGGESTION_MIN_SAMPLES,
)
from ..common.schemas import AppBehaviorState, EngagementCounters, now_ms

State = TypeVar("State", bound=EngagementCounters)


def _tier(rate: float, tiers: Sequence[Tuple[float, int]]) -> int:
    """Highest tier whose threshold the rate strictly exceeds"""
    for threshold, points in tiers:
        if rate > threshold:
            return points
    return 0


class BehaviorLearner:
    """Stateless learning rules over engagement counters."""

    def calculate_adjustment(self, state: EngagementCounters) -> int:
        """
        Adjustment for a state row from its current rates.

        Returns:
            Integer in [-20, 20]; 0 below the minimum sample size
        """
        if state.total_received < LEARNING_MIN_SAMPLES:
            return 0

        adjustment = (
            _tier(state.open_rate, OPEN_RATE_TIERS)
            + _tier(state.dismiss_rate, DISMISS_RATE_TIERS)
            + _tier(state.ignore_rate, IGNORE_RATE_TIERS)
        )
        return max(-BEHAVIOR_MAX_ADJUSTMENT, min(BEHAVIOR_MAX_ADJUSTMENT, adjustment))

    def recalculate_rates(self, state: State) -> State:
        """
        Refresh rates from counters, then the learned adjustment from the rates.

        Returns a new row; the caller persists it.
        """
        total = state.total_received
        if total > 0:
            rates = {
                "open_rate": min(1.0, state.total_opened / total),
                "dismiss_rate": min(1.0, state.total_dismissed / total),
                "ignore_rate": min(1.0, state.total_ignored / total),
            }
        else:
            rates = {"open_rate": 0.0, "dismiss_rate": 0.0, "ignore_rate": 0.0}

        refreshed = state.model_copy(update=rates)
        return refreshed.model_copy(update={
            state.learned_field: self.calculate_adjustment(refreshed),
            "last_updated": now_ms(),
        })

    def should_suggest_auto_silence(self, state: EngagementCounters) -> bool:
        """User ignores almost everything and never opens"""
        if state.total_received < SUGGESTION_MIN_SAMPLES:
            return False
        return state.ignore_rate > 0.8 and state.open_rate < 0.1

    def should_suggest_upgrade(self, state: EngagementCounters) -> bool:
        if state.total_received < SUGGESTION_MIN_SAMPLES:
            return False
        return state.open_rate > 0.7

    def explain_adjustment(self, state: EngagementCounters) -> str:
        """One-sentence, user-facing reason for the current adjustment"""
        if state.total_received < LEARNING_MIN_SAMPLES:
            return "Not enough data yet to learn your preferences"
        if state.open_rate > 0.7:
            return f"You open these notifications frequently ({int(state.open_rate * 100)}%)"
        if state.dismiss_rate > 0.6:
            return f"You quickly dismiss these notifications ({int(state.dismiss_rate * 100)}%)"
        if state.ignore_rate > 0.7:
            return f"You rarely interact with these notifications ({int(state.ignore_rate * 100)}% ignored)"
        if state.learned_score > 0:
            return "You seem to find these notifications useful"
        if state.learned_score < 0:
            return "You seem to find these notifications less important"
        return "Still learning your preferences for this app"

    def is_spammy(self, app: AppBehaviorState) -> bool:
        return app.notifications_last_hour > SPAMMY_LAST_HOUR or app.average_per_day > SPAMMY_AVG_PER_DAY

    def has_high_engagement(self, state: EngagementCounters) -> bool:
        return state.open_rate > HIGH_ENGAGEMENT_OPEN_RATE and state.total_received > LEARNING_MIN_SAMPLES

    def is_ignored(self, state: EngagementCounters) -> bool:
        return state.ignore_rate > IGNORED_CONTENT_RATE and state.total_received > LEARNING_MIN_SAMPLES
