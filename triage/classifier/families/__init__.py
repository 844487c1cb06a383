"""
Source Families

One extractor per known notification format. The app id picks the family;
the family recovers the content identity.

Available Families:
- VideoChannelExtractor: video platforms (channel)
- DirectMessageExtractor: chat apps (contact / group)
- SocialAccountExtractor: social networks (account)
- MailSenderExtractor: mail clients (sender)
- SmsSenderExtractor: SMS apps (sender)
- GenericExtractor: everything else (no identity)
"""

from .base import FamilyExtractor, GenericExtractor, SourceFamily
from .direct_message import DirectMessageExtractor
from .mail import MailSenderExtractor
from .sms import SmsSenderExtractor
from .social import SocialAccountExtractor
from .video import VideoChannelExtractor

__all__ = [
    "FamilyExtractor",
    "GenericExtractor",
    "SourceFamily",
    "DirectMessageExtractor",
    "MailSenderExtractor",
    "SmsSenderExtractor",
    "SocialAccountExtractor",
    "VideoChannelExtractor",
]
