"""
Stub messaging client for testing and offline development.

Deterministic, records every call, fails only where told to.
"""

from typing import Dict, List, Optional, Set, Tuple

from .client import ChatInfo, MediaBlob, MessagingClient, MessagingClientError


class StubMessagingClient(MessagingClient):
    """
    In-memory fake WhatsApp client.

    Args:
        failing_chats: Chat ids whose sends raise MessagingClientError
        chat_names: Known chat names for get_chat
        media: Media blobs by message id
    """

    def __init__(
        self,
        failing_chats: Optional[Set[str]] = None,
        chat_names: Optional[Dict[str, str]] = None,
        media: Optional[Dict[str, MediaBlob]] = None,
    ):
        self.failing_chats = set(failing_chats or ())
        self.chat_names = dict(chat_names or {})
        self.media = dict(media or {})
        self.send_attempts: List[Tuple[str, str]] = []
        self.sent: List[Tuple[str, str]] = []
        self.reactions: List[Tuple[str, str]] = []

    async def send_message(self, chat_id: str, text: str) -> None:
        self.send_attempts.append((chat_id, text))
        if chat_id in self.failing_chats:
            raise MessagingClientError(f"No chat found for {chat_id}")
        self.sent.append((chat_id, text))

    async def react(self, message_id: str, emoji: str) -> None:
        self.reactions.append((message_id, emoji))

    async def get_chat(self, chat_id: str) -> ChatInfo:
        if chat_id not in self.chat_names:
            raise MessagingClientError(f"Unknown chat {chat_id}")
        return ChatInfo(
            chat_id=chat_id,
            name=self.chat_names[chat_id],
        )

    async def download_media(self, message_id: str) -> Optional[MediaBlob]:
        return self.media.get(message_id)
