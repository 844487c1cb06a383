"""SMS apps: the sender name or number."""

import re
from typing import Optional

from ...common.schemas import ContentType
from .base import FamilyExtractor, SourceFamily

_SENDER_PREFIX = re.compile(r"^\s*(?:new message from|sms from)\s+", re.IGNORECASE)


class SmsSenderExtractor(FamilyExtractor):
    family = SourceFamily.SMS
    content_type = ContentType.SENDER

    def find_id(self, title: Optional[str], text: Optional[str]) -> Optional[str]:
        if title is None:
            return None
        return _SENDER_PREFIX.sub("", title)
