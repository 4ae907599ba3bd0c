"""
WhatsApp Event Normalization Tests

Test conversion of client events into relay payloads.
"""

import pytest

from transport.whatsapp.client import MediaBlob
from transport.whatsapp.normalize import (
    NormalizationError,
    build_edit_payload,
    build_new_message_payload,
    build_revoke_payload,
    should_relay,
)
from transport.whatsapp.schemas import ClientMessage


def message(**overrides):
    data = {
        "id": "3EB0ABC",
        "serialized_id": "false_96312345678@c.us_3EB0ABC",
        "from": "96312345678@c.us",
        "type": "chat",
        "body": "Hello bridge",
    }
    data.update(overrides)
    return ClientMessage(**data)


class TestNewMessageDirect:
    """Direct (1:1) messages."""

    def test_text_message_payload(self):
        payload = build_new_message_payload(message())

        assert payload == {
            "event_type": "new_message",
            "whatsapp_message_id": "3EB0ABC",
            "sender_id": "96312345678",
            "author_id": None,
            "reply_to_id": "96312345678@c.us",
            "is_group": False,
            "group_name": None,
            "group_id": None,
            "type": "chat",
            "message_text": "Hello bridge",
            "has_media": False,
            "location": None,
        }

    def test_linked_device_sender_keeps_suffix(self):
        payload = build_new_message_payload(message(**{"from": "123456789012345@lid"}))

        assert payload["sender_id"] == "123456789012345@lid"
        assert payload["reply_to_id"] == "123456789012345@lid"

    def test_group_name_ignored_for_direct_messages(self):
        payload = build_new_message_payload(message(), group_name="Drivers")

        assert payload["group_name"] is None


class TestNewMessageGroup:
    """Group messages."""

    def test_group_message_payload(self):
        msg = message(**{"from": "120363000000000000@g.us", "author": "96312345678@c.us"})

        payload = build_new_message_payload(msg, group_name="Drivers")

        assert payload["is_group"] is True
        assert payload["sender_id"] == "120363000000000000"
        assert payload["group_id"] == "120363000000000000"
        assert payload["group_name"] == "Drivers"
        assert payload["author_id"] == "96312345678"
        assert payload["reply_to_id"] == "120363000000000000@g.us"


class TestNewMessageContent:
    """Location and media."""

    def test_location_message(self):
        msg = message(type="location", body="", location={"latitude": 33.5, "longitude": 36.3})

        payload = build_new_message_payload(msg)

        assert payload["location"] == {"lat": 33.5, "lng": 36.3}
        assert payload["message_text"] == "GPS: 33.5,36.3"
        assert payload["has_media"] is False

    def test_location_without_coordinates_rejected(self):
        with pytest.raises(NormalizationError):
            build_new_message_payload(message(type="location"))

    def test_image_media(self):
        msg = message(type="image", body="caption", has_media=True)
        media = MediaBlob(data="aGVsbG8=", mimetype="image/jpeg")

        payload = build_new_message_payload(msg, media=media)

        assert payload["has_media"] is True
        assert payload["media_data"] == "aGVsbG8="
        assert payload["media_type"] == "image/jpeg"
        assert payload["message_text"] == "caption"

    @pytest.mark.parametrize("voice_type", ["ptt", "audio"])
    def test_voice_media_clears_text(self, voice_type):
        msg = message(type=voice_type, body="ignored", has_media=True)
        media = MediaBlob(data="T2dnUw==", mimetype="audio/ogg; codecs=opus")

        payload = build_new_message_payload(msg, media=media)

        assert payload["message_text"] == ""
        assert payload["media_type"] == "audio/ogg; codecs=opus"

    def test_media_fields_absent_without_media(self):
        payload = build_new_message_payload(message(type="image", has_media=True))

        assert payload["has_media"] is False
        assert "media_data" not in payload
        assert "media_type" not in payload


class TestShouldRelay:

    def test_own_messages_skipped(self):
        assert should_relay(message(from_me=True)) is False

    def test_status_broadcast_skipped(self):
        assert should_relay(message(**{"from": "status@broadcast"})) is False

    def test_regular_message_relayed(self):
        assert should_relay(message()) is True


class TestEditAndRevoke:

    def test_edit_payload(self):
        payload = build_edit_payload(message(**{"from": "120363000000000000@g.us"}), "new text")

        assert payload == {
            "event_type": "message_edit",
            "whatsapp_message_id": "3EB0ABC",
            "message_text": "new text",
            "sender_id": "120363000000000000",
            "is_group": True,
        }

    def test_revoke_prefers_before_id(self):
        payload = build_revoke_payload(message(id="AFTER"), message(id="BEFORE"))

        assert payload == {"event_type": "message_revoke", "whatsapp_message_id": "BEFORE"}

    def test_revoke_falls_back_to_after_id(self):
        payload = build_revoke_payload(message(id="AFTER"), None)

        assert payload["whatsapp_message_id"] == "AFTER"

    def test_revoke_without_ids(self):
        assert build_revoke_payload(None, None) is None
