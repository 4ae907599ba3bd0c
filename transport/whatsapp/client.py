"""
WhatsApp Messaging Client boundary.

The WhatsApp session itself (pairing, encryption, socket) runs in a
separate gateway process. The bridge only needs four operations from it:
send, react, chat metadata and media download.

Rules:
- Bridge code depends ONLY on MessagingClient
- Every failure is raised as MessagingClientError
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class MessagingClientError(Exception):
    """The messaging client could not complete an operation."""
    pass


@dataclass
class ChatInfo:
    """Chat metadata (only the name is used)."""

    chat_id: str
    name: Optional[str] = None


@dataclass
class MediaBlob:
    """Downloaded media, base64 encoded as delivered by the client."""

    data: str
    mimetype: str


class MessagingClient(ABC):
    """Abstract WhatsApp client."""

    @abstractmethod
    async def send_message(self, chat_id: str, text: str) -> None:
        """Send a text message to a fully-qualified chat id."""
        raise NotImplementedError

    @abstractmethod
    async def react(self, message_id: str, emoji: str) -> None:
        """React to a message by its serialized id."""
        raise NotImplementedError

    @abstractmethod
    async def get_chat(self, chat_id: str) -> ChatInfo:
        """Fetch chat metadata."""
        raise NotImplementedError

    @abstractmethod
    async def download_media(self, message_id: str) -> Optional[MediaBlob]:
        """Download the media attached to a message, None if unavailable."""
        raise NotImplementedError

    async def close(self) -> None:
        """Release resources."""
        return None


class MessageHandle:
    """
    Back-reference to an incoming message, used only to react to it.

    Holds the id, not the message, so queued items stay small.
    """

    def __init__(self, client: MessagingClient, message_id: str):
        self.client = client
        self.message_id = message_id

    async def react(self, emoji: str) -> None:
        await self.client.react(self.message_id, emoji)

    def __repr__(self) -> str:
        return f"MessageHandle({self.message_id!r})"


class GatewayMessagingClient(MessagingClient):
    """
    MessagingClient talking to the WhatsApp gateway over HTTP.

    Gateway API:
        POST /messages                   {"chat_id", "text"}
        POST /messages/{id}/react        {"emoji"}
        GET  /chats/{chat_id}            -> {"id", "name"}
        GET  /messages/{id}/media        -> {"data", "mimetype"}
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise MessagingClientError(f"Gateway request failed: {e!r}") from e

        if not response.is_success:
            raise MessagingClientError(
                f"Gateway {method} {path} returned {response.status_code}: {response.text[:200]}"
            )
        return response

    async def send_message(self, chat_id: str, text: str) -> None:
        await self._request("POST", "/messages", json={"chat_id": chat_id, "text": text})

    async def react(self, message_id: str, emoji: str) -> None:
        await self._request("POST", f"/messages/{message_id}/react", json={"emoji": emoji})

    async def get_chat(self, chat_id: str) -> ChatInfo:
        response = await self._request("GET", f"/chats/{chat_id}")
        body = response.json()
        return ChatInfo(
            chat_id=body.get("id", chat_id),
            name=body.get("name"),
        )

    async def download_media(self, message_id: str) -> Optional[MediaBlob]:
        response = await self._request("GET", f"/messages/{message_id}/media")
        if response.status_code == 204:
            return None
        body = response.json()
        if not body or not body.get("data"):
            return None
        return MediaBlob(
            data=body["data"],
            mimetype=body.get("mimetype", "application/octet-stream"),
        )

    async def close(self) -> None:
        await self._client.aclose()
