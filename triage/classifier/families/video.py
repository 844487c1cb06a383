"""Video platforms: the channel that uploaded."""

import re
from typing import Optional

from ...common.schemas import ContentType
from .base import FamilyExtractor, SourceFamily, combine

# "New video from NetworkChuck", "uploaded by NetworkChuck: title"
_FROM_PATTERN = re.compile(r"(?:new video from|uploaded by)\s+(.+?)(?::|$)", re.IGNORECASE)
# "NetworkChuck uploaded: title", "NetworkChuck posted a video"
_LEADING_PATTERN = re.compile(r"^(.+?)\s+(?:uploaded|posted|shared)\b", re.IGNORECASE)


class VideoChannelExtractor(FamilyExtractor):
    family = SourceFamily.VIDEO
    content_type = ContentType.CHANNEL

    def find_id(self, title: Optional[str], text: Optional[str]) -> Optional[str]:
        combined = combine(title, text)

        match = _FROM_PATTERN.search(combined)
        if match and match.group(1).strip():
            return match.group(1)

        match = _LEADING_PATTERN.search(combined)
        if match:
            return match.group(1)

        # Fallback: "Channel: video title"
        if title and ":" in title:
            channel = title.split(":", 1)[0].strip()
            if channel:
                return channel

        return None
