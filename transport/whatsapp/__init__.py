"""WhatsApp Transport Layer - Module Exports

The HTTP router lives in `transport.whatsapp.webhook` and is imported
by main.py directly (it depends on infra, which depends on this package).
"""

from .client import (
    ChatInfo,
    GatewayMessagingClient,
    MediaBlob,
    MessageHandle,
    MessagingClient,
    MessagingClientError,
)
from .events import EventRouter
from .identifiers import (
    AddressingScheme,
    ChatTarget,
    IdentifierResolver,
    InvalidSpecifierError,
    TargetRef,
    clean_id,
)
from .normalize import (
    NormalizationError,
    build_edit_payload,
    build_new_message_payload,
    build_revoke_payload,
)
from .schemas import (
    ClientEvent,
    ClientMessage,
    MessageLocation,
    SendMessageRequest,
)
from .sender import WhatsAppSenderError, send_with_fallback
from .stub import StubMessagingClient

__all__ = [
    # Schemas
    "ClientEvent",
    "ClientMessage",
    "MessageLocation",
    "SendMessageRequest",
    # Identifiers
    "AddressingScheme",
    "ChatTarget",
    "IdentifierResolver",
    "InvalidSpecifierError",
    "TargetRef",
    "clean_id",
    # Normalization
    "build_new_message_payload",
    "build_edit_payload",
    "build_revoke_payload",
    "NormalizationError",
    # Client
    "MessagingClient",
    "MessagingClientError",
    "GatewayMessagingClient",
    "StubMessagingClient",
    "MessageHandle",
    "ChatInfo",
    "MediaBlob",
    # Routing / sending
    "EventRouter",
    "send_with_fallback",
    "WhatsAppSenderError",
]
