"""Chat apps: the contact or group a conversation belongs to."""

import re
from typing import Optional

from ...common.schemas import ContentType
from .base import FamilyExtractor, SourceFamily

# "Tech Group (5 messages)" -> "Tech Group"
_COUNTER_SUFFIX = re.compile(r"\s*\([^()]*\)\s*$")

GROUP_NAME_MIN_LENGTH = 20


class DirectMessageExtractor(FamilyExtractor):
    family = SourceFamily.DIRECT_MESSAGE
    content_type = ContentType.CONTACT

    def find_id(self, title: Optional[str], text: Optional[str]) -> Optional[str]:
        if title is None:
            return None
        return _COUNTER_SUFFIX.sub("", title)

    def classify(self, content_id: str) -> ContentType:
        # Group chats usually say so, or carry long names
        if "group" in content_id.lower() or len(content_id) > GROUP_NAME_MIN_LENGTH:
            return ContentType.GROUP
        return ContentType.CONTACT
