"""
Tests for Content Extractor

Tests family resolution and per-family sender/channel recovery.
"""

import pytest

from triage.classifier.content_extractor import ContentExtractor
from triage.classifier.families import FamilyExtractor, SourceFamily
from triage.common.schemas import ContentType


@pytest.fixture
def extractor():
    return ContentExtractor()


class TestFamilyResolution:
    @pytest.mark.parametrize("app_id,family", [
        ("com.google.android.youtube", SourceFamily.VIDEO),
        ("com.whatsapp", SourceFamily.DIRECT_MESSAGE),
        ("com.whatsapp.w4b", SourceFamily.DIRECT_MESSAGE),
        ("com.instagram.android", SourceFamily.SOCIAL),
        ("com.twitter.android", SourceFamily.SOCIAL),
        ("com.yahoo.mobile.client.android.mail", SourceFamily.MAIL),
        ("com.google.android.apps.messaging", SourceFamily.SMS),
        ("com.example.sms", SourceFamily.SMS),
        ("com.example.app", SourceFamily.GENERIC),
        ("", SourceFamily.GENERIC),
    ])
    def test_resolve_family(self, extractor, app_id, family):
        assert extractor.resolve_family(app_id) == family

    def test_register_new_family(self, extractor):
        class FixedExtractor(FamilyExtractor):
            family = SourceFamily.GENERIC
            content_type = ContentType.ACCOUNT

            def find_id(self, title, text):
                return "fixed"

        extractor.register(FixedExtractor(), app_ids=("com.example.custom",))
        identity = extractor.extract("com.example.custom", "anything", None)
        assert identity.content_id == "fixed"
        assert identity.content_type == ContentType.ACCOUNT


class TestExtract:
    def test_no_title_no_text(self, extractor):
        identity = extractor.extract("com.whatsapp", None, None)
        assert identity.content_id is None
        assert identity.content_type == ContentType.GENERIC

    def test_unknown_app(self, extractor):
        identity = extractor.extract("com.example.app", "Hello", "World")
        assert identity.content_id is None
        assert identity.content_type == ContentType.GENERIC
        assert not identity.is_resolved


class TestVideoChannel:
    @pytest.mark.parametrize("title,text,expected", [
        ("New video from NetworkChuck", None, "NetworkChuck"),
        ("Check this", "uploaded by Veritasium: Why gravity", "Veritasium"),
        ("NetworkChuck uploaded a new video", "", "NetworkChuck"),
        ("Linus Tech Tips posted", None, "Linus Tech Tips"),
        ("NetworkChuck: New router teardown", "", "NetworkChuck"),
    ])
    def test_channel_patterns(self, extractor, title, text, expected):
        identity = extractor.extract("com.google.android.youtube", title, text)
        assert identity.content_id == expected
        assert identity.content_type == ContentType.CHANNEL

    def test_no_channel(self, extractor):
        identity = extractor.extract("com.google.android.youtube", "Recommended", "Something")
        assert identity.content_id is None
        assert identity.content_type == ContentType.CHANNEL


class TestDirectMessage:
    def test_contact(self, extractor):
        identity = extractor.extract("com.whatsapp", "Rahul Kumar", "Are we meeting today?")
        assert identity.content_id == "Rahul Kumar"
        assert identity.content_type == ContentType.CONTACT

    def test_group_with_counter(self, extractor):
        identity = extractor.extract("com.whatsapp", "Tech Group (5 messages)", "hi")
        assert identity.content_id == "Tech Group"
        assert identity.content_type == ContentType.GROUP

    def test_long_name_is_group(self, extractor):
        identity = extractor.extract("com.whatsapp.w4b", "Family And Friends Weekend", "hi")
        assert identity.content_type == ContentType.GROUP

    def test_no_title(self, extractor):
        identity = extractor.extract("com.whatsapp", None, "hello")
        assert identity.content_id is None
        assert identity.content_type == ContentType.CONTACT

    def test_empty_after_counter(self, extractor):
        identity = extractor.extract("com.whatsapp", "(3 messages)", "hello")
        assert identity.content_id is None


class TestSocialAccount:
    @pytest.mark.parametrize("app_id,title,text,expected", [
        ("com.instagram.android", "Instagram", "@john_doe liked your photo", "john_doe"),
        ("com.instagram.android", "jane.smith commented: nice", None, "jane.smith"),
        ("com.twitter.android", "elonfan retweeted your post", None, "elonfan"),
        ("com.twitter.android", "Someone", "dev_guy REPLIED to you", "dev_guy"),
    ])
    def test_handles(self, extractor, app_id, title, text, expected):
        identity = extractor.extract(app_id, title, text)
        assert identity.content_id == expected
        assert identity.content_type == ContentType.ACCOUNT

    def test_no_action_verb(self, extractor):
        identity = extractor.extract("com.instagram.android", "Instagram", "New stories for you")
        assert identity.content_id is None
        assert identity.content_type == ContentType.ACCOUNT


class TestMailSender:
    def test_address_in_title(self, extractor):
        identity = extractor.extract("com.google.android.gm.mail", "Alice <Alice@Example.com>", "Hi")
        assert identity.content_id == "Alice@Example.com"
        assert identity.content_type == ContentType.SENDER

    def test_address_in_text(self, extractor):
        identity = extractor.extract("com.example.mail", "Bob", "From bob@work.io about lunch")
        assert identity.content_id == "bob@work.io"

    def test_title_fallback(self, extractor):
        identity = extractor.extract("com.example.mail", "  Weekly Digest  ", "no address here")
        assert identity.content_id == "Weekly Digest"

    def test_no_title(self, extractor):
        identity = extractor.extract("com.example.mail", None, "carol@example.com")
        assert identity.content_id is None
        assert identity.content_type == ContentType.SENDER


class TestSmsSender:
    @pytest.mark.parametrize("title,expected", [
        ("New message from Mom", "Mom"),
        ("SMS from +1 555 0100", "+1 555 0100"),
        ("new MESSAGE from Bank", "Bank"),
        ("Dad", "Dad"),
    ])
    def test_sender(self, extractor, title, expected):
        identity = extractor.extract("com.google.android.apps.messaging", title, "text")
        assert identity.content_id == expected
        assert identity.content_type == ContentType.SENDER

    def test_empty_after_prefix(self, extractor):
        identity = extractor.extract("com.example.sms", "SMS from   ", "text")
        assert identity.content_id is None
