"""Mail clients: the sender address, or the display name in the title."""

import re
from typing import Optional

from ...common.schemas import ContentType
from .base import FamilyExtractor, SourceFamily

_EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")


class MailSenderExtractor(FamilyExtractor):
    family = SourceFamily.MAIL
    content_type = ContentType.SENDER

    def find_id(self, title: Optional[str], text: Optional[str]) -> Optional[str]:
        if title is None:
            return None

        for source in (title, text):
            if source:
                match = _EMAIL_PATTERN.search(source)
                if match:
                    return match.group(0)

        return title
