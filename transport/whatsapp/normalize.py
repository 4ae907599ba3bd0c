"""
WhatsApp Event Normalization

PURE CONVERSION - NO I/O

Converts client events into the flat payloads the webhook consumer reads.
Metadata that needs the client (group name, media) is fetched by the
EventRouter and passed in.
"""

from typing import Any, Dict, Optional

from .client import MediaBlob
from .identifiers import clean_id
from .schemas import (
    ClientMessage,
    LocationPayload,
    MessageEditPayload,
    MessageRevokePayload,
    NewMessagePayload,
)

GROUP_SUFFIX = "@g.us"
STATUS_BROADCAST = "status@broadcast"
VOICE_TYPES = ("ptt", "audio")


class NormalizationError(Exception):
    """Event cannot be turned into a payload."""
    pass


def is_group_address(address: Optional[str]) -> bool:
    return bool(address) and GROUP_SUFFIX in address


def should_relay(message: ClientMessage) -> bool:
    """Own messages and status broadcasts are never relayed."""
    return not message.from_me and message.from_ != STATUS_BROADCAST


def build_new_message_payload(
    message: ClientMessage,
    group_name: Optional[str] = None,
    media: Optional[MediaBlob] = None,
) -> Dict[str, Any]:
    """
    Build the `new_message` payload.

    Rules:
    - sender_id is the chat (the group for group messages)
    - author_id is set only inside groups
    - location messages carry {lat, lng} and a "GPS: lat,lng" text
    - voice notes with media carry no text
    """
    is_group = is_group_address(message.from_)
    chat_number = clean_id(message.from_)

    payload = NewMessagePayload(
        whatsapp_message_id=message.id,
        sender_id=chat_number,
        author_id=clean_id(message.author) if message.author else None,
        reply_to_id=message.from_,
        is_group=is_group,
        group_name=group_name if is_group else None,
        group_id=chat_number if is_group else None,
        type=message.type,
        message_text=message.body,
    )

    if message.type == "location":
        if message.location is None:
            raise NormalizationError(f"Location message {message.id} has no coordinates")
        lat, lng = message.location.latitude, message.location.longitude
        payload.location = LocationPayload(lat=lat, lng=lng)
        payload.message_text = f"GPS: {lat},{lng}"
    elif media is not None:
        payload.has_media = True
        payload.media_data = media.data
        payload.media_type = media.mimetype
        if message.type in VOICE_TYPES:
            payload.message_text = ""

    result = payload.model_dump()
    if not payload.has_media:
        result.pop("media_data")
        result.pop("media_type")
    return result


def build_edit_payload(message: ClientMessage, new_body: Optional[str]) -> Dict[str, Any]:
    """Build the `message_edit` payload."""
    return MessageEditPayload(
        whatsapp_message_id=message.id,
        message_text=new_body,
        sender_id=clean_id(message.from_),
        is_group=is_group_address(message.from_),
    ).model_dump()


def build_revoke_payload(
    after: Optional[ClientMessage],
    before: Optional[ClientMessage],
) -> Optional[Dict[str, Any]]:
    """
    Build the `message_revoke` payload.

    Prefers the id of the original (before) message. None when neither
    side carries an id.
    """
    message_id = None
    if before is not None:
        message_id = before.id
    elif after is not None:
        message_id = after.id
    if not message_id:
        return None
    return MessageRevokePayload(whatsapp_message_id=message_id).model_dump()
