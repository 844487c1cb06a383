"""
Base Family Extractor

Abstract base class for source-family extractors. Each family knows how one
kind of app formats its notification titles and recovers the sender/channel
from them.
"""

import re
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from ...common.schemas import ContentIdentity, ContentType


class SourceFamily(str, Enum):
    """Closed set of app families with known notification formats"""
    VIDEO = "video"
    DIRECT_MESSAGE = "direct_message"
    SOCIAL = "social"
    MAIL = "mail"
    SMS = "sms"
    GENERIC = "generic"


def combine(title: Optional[str], text: Optional[str]) -> str:
    """Title and text joined by a space, skipping missing parts"""
    return " ".join(p for p in (title, text) if p is not None)


def clean(value: Optional[str]) -> Optional[str]:
    """Trim a candidate id; blank candidates become None"""
    if value is None:
        return None
    value = re.sub(r"\s+", " ", value).strip()
    return value or None


class FamilyExtractor(ABC):
    """
    Abstract base class for family extractors.

    Subclasses set ``family`` and ``content_type`` and implement ``find_id``.
    Extraction never raises; a miss yields an identity with no content id.
    """

    family: SourceFamily = SourceFamily.GENERIC
    content_type: ContentType = ContentType.GENERIC

    @abstractmethod
    def find_id(self, title: Optional[str], text: Optional[str]) -> Optional[str]:
        """
        Recover the sender/channel name.

        Args:
            title: Notification title
            text: Notification body text

        Returns:
            Content id or None when nothing can be recovered confidently
        """
        pass

    def classify(self, content_id: str) -> ContentType:
        """Content type for a recovered id. Override when a family has subtypes."""
        return self.content_type

    def extract(self, title: Optional[str], text: Optional[str]) -> ContentIdentity:
        content_id = clean(self.find_id(title, text))
        if content_id is None:
            return ContentIdentity(None, self.content_type)
        return ContentIdentity(content_id, self.classify(content_id))


class GenericExtractor(FamilyExtractor):
    """Fallback for apps without a known format"""

    def find_id(self, title: Optional[str], text: Optional[str]) -> Optional[str]:
        return None
