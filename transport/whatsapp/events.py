"""
WhatsApp Event Router

Turns messaging-client events into relay payloads and hands them to the
DeliveryGate. Also tracks the connection / pairing state of the client.
"""

import logging
from typing import Optional

from relay import DeliveryGate

from .client import MessageHandle, MessagingClient
from .normalize import (
    build_edit_payload,
    build_new_message_payload,
    build_revoke_payload,
    is_group_address,
    should_relay,
)
from .identifiers import clean_id
from .schemas import ClientEvent, ClientMessage

logger = logging.getLogger(__name__)

UNKNOWN_GROUP = "Unknown Group"


class EventRouter:
    """
    Dispatches client events.

    Connection states: "disconnected" -> "scan_required" (qr) -> "connected" (ready)
    """

    def __init__(self, client: MessagingClient, gate: DeliveryGate):
        self.client = client
        self.gate = gate
        self.state = "disconnected"
        self.pairing_code: Optional[str] = None

    async def dispatch(self, event: ClientEvent) -> None:
        """Route one event to its handler."""
        if event.event == "message":
            if event.message is None:
                logger.warning("message event without message body, ignoring")
                return
            await self.on_message(event.message)
        elif event.event == "message_edit":
            if event.message is None:
                logger.warning("message_edit event without message body, ignoring")
                return
            await self.on_message_edit(event.message, event.new_body)
        elif event.event == "message_revoke_everyone":
            await self.on_message_revoke(event.message, event.before)
        elif event.event == "ready":
            self.on_ready()
        elif event.event == "disconnected":
            self.on_disconnected(event.reason)
        elif event.event == "qr":
            self.on_pairing_code(event.qr)

    async def on_message(self, message: ClientMessage) -> None:
        if not should_relay(message):
            return

        group_name = None
        if is_group_address(message.from_):
            group_name = await self._fetch_group_name(message.from_)
            logger.info(
                f"📢 [GP: {group_name}] {clean_id(message.from_)} | 👤 {clean_id(message.author)} | {message.type}"
            )
        else:
            logger.info(f"📩 [DM] {clean_id(message.from_)} | {message.type}")

        media = None
        if message.type != "location" and message.has_media:
            try:
                media = await self.client.download_media(message.handle_id)
            except Exception as e:
                logger.error(f"Media Error: {e}", extra={"message_id": message.id})

        payload = build_new_message_payload(message, group_name=group_name, media=media)
        await self.gate.relay(payload, MessageHandle(self.client, message.handle_id))

    async def on_message_edit(self, message: ClientMessage, new_body: Optional[str]) -> None:
        logger.info(f"✏️ [EDIT] From {clean_id(message.author or message.from_)}")
        payload = build_edit_payload(message, new_body)
        await self.gate.relay(payload, MessageHandle(self.client, message.handle_id))

    async def on_message_revoke(
        self,
        after: Optional[ClientMessage],
        before: Optional[ClientMessage],
    ) -> None:
        payload = build_revoke_payload(after, before)
        if payload is None:
            logger.debug("Revoke event without message id, ignoring")
            return
        logger.info(f"🗑️ [REVOKE] Message {payload['whatsapp_message_id']} deleted")
        await self.gate.relay(payload, None)

    def on_ready(self) -> None:
        """Client connected: the backlog gets a chance right away."""
        self.state = "connected"
        self.pairing_code = None
        logger.info("✅ WhatsApp Bridge Ready & Connected!")
        if len(self.gate.queue) > 0:
            self.gate.queue.schedule_drain(delay=0)

    def on_disconnected(self, reason: Optional[str]) -> None:
        self.state = "disconnected"
        logger.error(f"❌ Disconnected! Reason: {reason}. Waiting for new QR code...")

    def on_pairing_code(self, code: Optional[str]) -> None:
        if not code:
            return
        self.state = "scan_required"
        self.pairing_code = code
        logger.warning("⚠️ SCAN REQUIRED: pairing code available at GET /qr-code")

    async def _fetch_group_name(self, chat_id: str) -> str:
        try:
            chat = await self.client.get_chat(chat_id)
        except Exception as e:
            logger.error(f"⚠️ Could not fetch group metadata: {e}", extra={"chat_id": chat_id})
            return UNKNOWN_GROUP
        return chat.name or UNKNOWN_GROUP
