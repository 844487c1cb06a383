"""
Content Extractor

Recovers a stable (content_id, content_type) from raw notification text so that
learning can happen per sender/channel instead of per app.

Algorithm:
1. Resolve the app id to a SourceFamily (exact ids first, then substrings)
2. Dispatch to that family's extractor
3. Unknown apps, or notifications without title and text, get no identity

Extraction is deterministic and never raises; a miss degrades scoring to
app-level signals only.
"""

import logging
from typing import Dict, List, Optional, Tuple

from ..common.schemas import ContentIdentity, ContentType
from .families import (
    DirectMessageExtractor,
    FamilyExtractor,
    GenericExtractor,
    MailSenderExtractor,
    SmsSenderExtractor,
    SocialAccountExtractor,
    SourceFamily,
    VideoChannelExtractor,
)

logger = logging.getLogger("triage.classifier.content_extractor")

# Exact app ids with a known format
DEFAULT_APP_FAMILIES: Dict[str, SourceFamily] = {
    "com.google.android.youtube": SourceFamily.VIDEO,
    "com.whatsapp": SourceFamily.DIRECT_MESSAGE,
    "com.whatsapp.w4b": SourceFamily.DIRECT_MESSAGE,
    "com.instagram.android": SourceFamily.SOCIAL,
    "com.twitter.android": SourceFamily.SOCIAL,
}

# Substring rules, checked in order after the exact ids
DEFAULT_SUBSTRING_FAMILIES: List[Tuple[str, SourceFamily]] = [
    ("mail", SourceFamily.MAIL),
    ("messaging", SourceFamily.SMS),
    ("sms", SourceFamily.SMS),
]


class ContentExtractor:
    """
    Dispatches notifications to per-family extractors.

    New families are added with ``register`` without touching existing ones.
    """

    def __init__(
        self,
        app_families: Optional[Dict[str, SourceFamily]] = None,
        substring_families: Optional[List[Tuple[str, SourceFamily]]] = None,
    ):
        self._app_families = dict(DEFAULT_APP_FAMILIES if app_families is None else app_families)
        self._substring_families = list(
            DEFAULT_SUBSTRING_FAMILIES if substring_families is None else substring_families
        )
        self._extractors: Dict[SourceFamily, FamilyExtractor] = {}
        for extractor in (
            VideoChannelExtractor(),
            DirectMessageExtractor(),
            SocialAccountExtractor(),
            MailSenderExtractor(),
            SmsSenderExtractor(),
            GenericExtractor(),
        ):
            self._extractors[extractor.family] = extractor

    def register(self, extractor: FamilyExtractor, app_ids: Tuple[str, ...] = ()) -> None:
        """Add or replace a family extractor and route the given app ids to it."""
        self._extractors[extractor.family] = extractor
        for app_id in app_ids:
            self._app_families[app_id.lower()] = extractor.family

    def resolve_family(self, app_id: str) -> SourceFamily:
        app_id = (app_id or "").lower()
        family = self._app_families.get(app_id)
        if family is not None:
            return family
        for needle, family in self._substring_families:
            if needle in app_id:
                return family
        return SourceFamily.GENERIC

    def extract(
        self,
        app_id: str,
        title: Optional[str],
        text: Optional[str],
    ) -> ContentIdentity:
        """
        Extract content identity from a notification.

        Args:
            app_id: Source app id (e.g. "com.whatsapp")
            title: Notification title
            text: Notification body text

        Returns:
            ContentIdentity; content_id is None when nothing was recovered
        """
        if title is None and text is None:
            return ContentIdentity(None, ContentType.GENERIC)

        family = self.resolve_family(app_id)
        extractor = self._extractors.get(family) or self._extractors[SourceFamily.GENERIC]
        identity = extractor.extract(title, text)

        logger.debug(
            "Extracted %s/%s from %s (%s)",
            identity.content_id, identity.content_type.value, app_id, family.value,
        )
        return identity
