"""
Notification Schemas

Inbound notification events, content identities, and the per-app / per-content
state rows that the scorer reads and the learner refreshes.

Rows are owned by the caller: they are loaded before scoring and written back
after, and are only ever replaced (``model_copy``), never mutated in place.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..catalog import (
    BEHAVIOR_MAX_ADJUSTMENT,
    CUSTOM_KEYWORD_MODIFIER_LIMIT,
    PREFERENCE_MAX_SCORE,
    SCORE_MAX,
    SCORE_MIN,
)


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds"""
    return int(time.time() * 1000)


# ============================================================================
# Enums
# ============================================================================

class Category(str, Enum):
    """User-facing importance bucket"""
    CRITICAL = "CRITICAL"
    IMPORTANT = "IMPORTANT"
    NORMAL = "NORMAL"
    SILENT = "SILENT"


class ContentType(str, Enum):
    """Kind of sender/channel identified inside an app"""
    CHANNEL = "channel"
    CONTACT = "contact"
    GROUP = "group"
    SENDER = "sender"
    ACCOUNT = "account"
    GENERIC = "generic"


class KeywordType(str, Enum):
    """User keyword rule types"""
    CRITICAL = "CRITICAL"
    IMPORTANT = "IMPORTANT"
    SPAM = "SPAM"


# ============================================================================
# Events
# ============================================================================

@dataclass
class NotificationEvent:
    """A notification as intercepted from the OS"""
    app_id: str
    app_name: str = ""
    title: Optional[str] = None
    text: Optional[str] = None
    sub_text: Optional[str] = None
    big_text: Optional[str] = None
    posted_at: int = 0  # epoch ms
    received_at: int = 0  # epoch ms

    @property
    def all_text(self) -> str:
        """Title, text, sub text and big text joined, skipping missing parts"""
        parts = [self.title, self.text, self.sub_text, self.big_text]
        return " ".join(p for p in parts if p is not None)


@dataclass(frozen=True)
class ContentIdentity:
    """Sender/channel recovered from notification text"""
    content_id: Optional[str]
    content_type: ContentType = ContentType.GENERIC

    @property
    def is_resolved(self) -> bool:
        return self.content_id is not None


# ============================================================================
# State rows
# ============================================================================

class EngagementCounters(BaseModel):
    """
    Counter/rate shape shared by app-level and content-level behavior.

    Counters only grow; rates are derived (count / total_received) and are
    refreshed by the learner, not on every increment.
    """
    total_received: int = Field(default=0, ge=0)
    total_opened: int = Field(default=0, ge=0)
    total_dismissed: int = Field(default=0, ge=0)
    total_ignored: int = Field(default=0, ge=0)

    open_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    dismiss_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    ignore_rate: float = Field(default=0.0, ge=0.0, le=1.0)

    last_notification_time: int = 0
    last_updated: int = Field(default_factory=now_ms)

    # Name of the field holding the learned adjustment
    learned_field: ClassVar[str] = ""

    @property
    def learned_score(self) -> int:
        return getattr(self, self.learned_field)


class AppBehaviorState(EngagementCounters):
    """Learned behavior and manual overrides for one app"""
    app_id: str

    behavior_adjustment: int = Field(
        default=0, ge=-BEHAVIOR_MAX_ADJUSTMENT, le=BEHAVIOR_MAX_ADJUSTMENT
    )

    notifications_last_hour: int = Field(default=0, ge=0)
    notifications_last_day: int = Field(default=0, ge=0)
    average_per_day: float = Field(default=0.0, ge=0.0)
    first_notification_time: int = 0
    hour_window_start: int = 0
    day_window_start: int = 0

    is_locked: bool = False
    locked_category: Optional[Category] = None
    custom_base_score: Optional[int] = Field(default=None, ge=SCORE_MIN, le=SCORE_MAX)

    learned_field: ClassVar[str] = "behavior_adjustment"


class ContentBehaviorState(EngagementCounters):
    """Learned behavior for one sender/channel inside an app"""
    app_id: str
    content_id: str
    content_type: ContentType = ContentType.GENERIC

    behavior_score: int = Field(
        default=0, ge=-BEHAVIOR_MAX_ADJUSTMENT, le=BEHAVIOR_MAX_ADJUSTMENT
    )

    learned_field: ClassVar[str] = "behavior_score"


class ContentPreference(BaseModel):
    """Manual user preference for one sender/channel (-20 silent .. +20 important)"""
    app_id: str
    content_id: str
    content_type: ContentType = ContentType.GENERIC
    preference_score: int = Field(
        default=0, ge=-PREFERENCE_MAX_SCORE, le=PREFERENCE_MAX_SCORE
    )
    is_locked: bool = False
    created_at: int = Field(default_factory=now_ms)
    last_updated: int = Field(default_factory=now_ms)


class KeywordRule(BaseModel):
    """User-defined keyword that nudges the score when present"""
    keyword: str
    type: KeywordType
    score_modifier: int = Field(
        ge=-CUSTOM_KEYWORD_MODIFIER_LIMIT, le=CUSTOM_KEYWORD_MODIFIER_LIMIT
    )
    is_active: bool = True
    created_at: int = Field(default_factory=now_ms)

    @field_validator("keyword")
    @classmethod
    def _normalize_keyword(cls, value: str) -> str:
        value = value.strip().lower()
        if not value:
            raise ValueError("keyword must not be blank")
        return value


def active_rules(rules: List[KeywordRule]) -> List[KeywordRule]:
    """Filter keyword rules down to the enabled ones"""
    return [r for r in rules if r.is_active]
