"""Social networks: the account behind a like/comment/mention."""

import re
from typing import Optional

from ...common.schemas import ContentType
from .base import FamilyExtractor, SourceFamily, combine

ACTION_VERBS = ("liked", "commented", "followed", "mentioned", "tagged", "retweeted", "replied")

# "@john_doe liked your photo", "jane.smith commented: nice"
_HANDLE_PATTERN = re.compile(
    r"@?([A-Za-z0-9._]+)\s+(?:" + "|".join(ACTION_VERBS) + r")\b",
    re.IGNORECASE,
)


class SocialAccountExtractor(FamilyExtractor):
    family = SourceFamily.SOCIAL
    content_type = ContentType.ACCOUNT

    def find_id(self, title: Optional[str], text: Optional[str]) -> Optional[str]:
        match = _HANDLE_PATTERN.search(combine(title, text))
        if match:
            return match.group(1)
        return None
