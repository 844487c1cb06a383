"""
Triage Learning

Engagement tracking and the rules that turn it into score adjustments.
"""

from .learner import BehaviorLearner
from .interactions import (
    DISMISSED,
    IGNORED,
    INTERACTION_KINDS,
    OPENED,
    apply_interaction,
    expire_frequency_windows,
    record_dismissed,
    record_ignored,
    record_opened,
    record_received,
    update_frequency,
)
from .store import BehaviorStore
from .updater import BehaviorUpdater, UpdateSummary

__all__ = [
    "BehaviorLearner",
    "BehaviorStore",
    "BehaviorUpdater",
    "UpdateSummary",
    "OPENED",
    "DISMISSED",
    "IGNORED",
    "INTERACTION_KINDS",
    "apply_interaction",
    "expire_frequency_windows",
    "record_received",
    "record_opened",
    "record_ignored",
    "record_dismissed",
    "update_frequency",
]
