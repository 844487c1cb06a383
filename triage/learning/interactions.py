"""
Interaction transitions for behavior rows.

Each function takes a row and returns an updated copy; nothing is persisted
here. Counters only grow. Rates are left alone until the learner refreshes them.

Frequency counters use fixed windows: a window opens with the first
notification after the previous one expired and counts every notification
until it closes.
"""

from typing import TypeVar

from ..common.catalog import DAY_MS, HOUR_MS, QUICK_DISMISS_THRESHOLD_MS
from ..common.schemas import AppBehaviorState, EngagementCounters

State = TypeVar("State", bound=EngagementCounters)

OPENED = "opened"
DISMISSED = "dismissed"
IGNORED = "ignored"

INTERACTION_KINDS = (OPENED, DISMISSED, IGNORED)


def record_received(state: State, at_ms: int) -> State:
    return state.model_copy(update={
        "total_received": state.total_received + 1,
        "last_notification_time": at_ms,
    })


def record_opened(state: State) -> State:
    return state.model_copy(update={"total_opened": state.total_opened + 1})


def record_ignored(state: State) -> State:
    return state.model_copy(update={"total_ignored": state.total_ignored + 1})


def record_dismissed(state: State, time_to_action_ms: int) -> State:
    """Count a dismissal only when it was quick; slow dismissals are neutral."""
    if time_to_action_ms is None or time_to_action_ms >= QUICK_DISMISS_THRESHOLD_MS:
        return state
    return state.model_copy(update={"total_dismissed": state.total_dismissed + 1})


def apply_interaction(state: State, kind: str, time_to_action_ms: int = 0) -> State:
    """Dispatch an interaction kind to its transition."""
    if kind == OPENED:
        return record_opened(state)
    if kind == DISMISSED:
        return record_dismissed(state, time_to_action_ms)
    if kind == IGNORED:
        return record_ignored(state)
    raise ValueError(f"Unknown interaction kind: {kind}")


def update_frequency(app: AppBehaviorState, received_at_ms: int, now_ms: int) -> AppBehaviorState:
    """
    Count a notification in the hour/day windows and refresh the daily average.

    Call after ``record_received`` so ``total_received`` includes this
    notification.
    """
    update = {}

    if app.hour_window_start and received_at_ms - app.hour_window_start < HOUR_MS:
        update["notifications_last_hour"] = app.notifications_last_hour + 1
    else:
        update["hour_window_start"] = received_at_ms
        update["notifications_last_hour"] = 1

    if app.day_window_start and received_at_ms - app.day_window_start < DAY_MS:
        update["notifications_last_day"] = app.notifications_last_day + 1
    else:
        update["day_window_start"] = received_at_ms
        update["notifications_last_day"] = 1

    first_seen = app.first_notification_time or received_at_ms
    update["first_notification_time"] = first_seen
    span_days = max(1.0, (now_ms - first_seen) / DAY_MS)
    update["average_per_day"] = app.total_received / span_days

    return app.model_copy(update=update)


def expire_frequency_windows(app: AppBehaviorState, now_ms: int) -> AppBehaviorState:
    """Zero out window counters whose window has closed."""
    update = {}
    if app.notifications_last_hour and now_ms - app.hour_window_start >= HOUR_MS:
        update["notifications_last_hour"] = 0
    if app.notifications_last_day and now_ms - app.day_window_start >= DAY_MS:
        update["notifications_last_day"] = 0
    if not update:
        return app
    return app.model_copy(update=update)
