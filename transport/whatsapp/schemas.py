"""
WhatsApp Transport Layer - Pydantic Schemas

PURE DATA MODELS - NO LOGIC
Defines the contract between the WhatsApp gateway, the bridge and the
webhook consumer.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field


# ============================================================================
# CLIENT EVENTS (INPUT FROM GATEWAY)
# ============================================================================

class MessageLocation(BaseModel):
    """Shared location."""
    latitude: float
    longitude: float


class ClientMessage(BaseModel):
    """
    A WhatsApp message as reported by the gateway.

    `id` is the short message id relayed downstream, `serialized_id` the
    full id the client needs to react to it.
    """

    id: str
    serialized_id: Optional[str] = None
    from_: str = Field(..., alias="from")
    author: Optional[str] = None
    from_me: bool = False
    type: str = "chat"
    body: Optional[str] = ""
    has_media: bool = False
    location: Optional[MessageLocation] = None

    class Config:
        populate_by_name = True

    @property
    def handle_id(self) -> str:
        return self.serialized_id or self.id


ClientEventType = Literal[
    "message",
    "message_edit",
    "message_revoke_everyone",
    "ready",
    "disconnected",
    "qr",
]


class ClientEvent(BaseModel):
    """
    Event pushed by the gateway to POST /client/events.

    Fields used per event:
        message:                  message
        message_edit:             message, new_body
        message_revoke_everyone:  message (after), before
        disconnected:             reason
        qr:                       qr
    """

    event: ClientEventType
    message: Optional[ClientMessage] = None
    before: Optional[ClientMessage] = None
    new_body: Optional[str] = None
    reason: Optional[str] = None
    qr: Optional[str] = None

    class Config:
        extra = "allow"  # gateway may add fields


# ============================================================================
# OUTBOUND SEND REQUEST (INPUT FROM CONSUMER)
# ============================================================================

class SendMessageRequest(BaseModel):
    """Body of POST /send-message. `reply_id` wins over `phone`."""

    phone: Optional[str] = None
    reply_id: Optional[str] = None
    message: Optional[str] = None

    class Config:
        coerce_numbers_to_str = True

    def is_complete(self) -> bool:
        return bool(self.message) and bool(self.phone or self.reply_id)


# ============================================================================
# RELAY PAYLOADS (OUTPUT TO CONSUMER)
# ============================================================================

class LocationPayload(BaseModel):
    lat: float
    lng: float


class NewMessagePayload(BaseModel):
    """Payload relayed for every incoming message."""

    event_type: Literal["new_message"] = "new_message"
    whatsapp_message_id: str
    sender_id: Optional[str] = Field(..., description="Chat id: person or group")
    author_id: Optional[str] = Field(None, description="Group member who wrote it")
    reply_to_id: str = Field(..., description="Full source address to reply to")
    is_group: bool
    group_name: Optional[str] = None
    group_id: Optional[str] = None
    type: str
    message_text: Optional[str] = None
    has_media: bool = False
    location: Optional[LocationPayload] = None
    media_data: Optional[str] = None
    media_type: Optional[str] = None


class MessageEditPayload(BaseModel):
    event_type: Literal["message_edit"] = "message_edit"
    whatsapp_message_id: str
    message_text: Optional[str] = None
    sender_id: Optional[str] = None
    is_group: bool


class MessageRevokePayload(BaseModel):
    event_type: Literal["message_revoke"] = "message_revoke"
    whatsapp_message_id: str
