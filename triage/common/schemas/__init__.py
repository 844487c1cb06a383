"""
Triage Schemas

Notification events, content identities and the behavior/preference rows
exchanged between the classifier, the learner and the store.
"""

from .notification import (
    Category,
    ContentType,
    KeywordType,
    NotificationEvent,
    ContentIdentity,
    EngagementCounters,
    AppBehaviorState,
    ContentBehaviorState,
    ContentPreference,
    KeywordRule,
    active_rules,
    now_ms,
)

__all__ = [
    "Category",
    "ContentType",
    "KeywordType",
    "NotificationEvent",
    "ContentIdentity",
    "EngagementCounters",
    "AppBehaviorState",
    "ContentBehaviorState",
    "ContentPreference",
    "KeywordRule",
    "active_rules",
    "now_ms",
]
