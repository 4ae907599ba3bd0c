"""
WhatsApp Sender Tests

Primary target first, alternate exactly once, second error surfaced.
"""

import pytest

from transport.whatsapp.identifiers import IdentifierResolver
from transport.whatsapp.sender import WhatsAppSenderError, send_with_fallback
from transport.whatsapp.stub import StubMessagingClient


@pytest.fixture
def resolver():
    return IdentifierResolver()


class TestSendWithFallback:

    @pytest.mark.asyncio
    async def test_primary_success(self, resolver):
        client = StubMessagingClient()
        target = resolver.resolve("0912345678")

        used = await send_with_fallback(client, target, "hi")

        assert used == target.primary
        assert client.send_attempts == [("96312345678@c.us", "hi")]

    @pytest.mark.asyncio
    async def test_alternate_after_primary_failure(self, resolver):
        client = StubMessagingClient(failing_chats={"96312345678@c.us"})
        target = resolver.resolve("0912345678")

        used = await send_with_fallback(client, target, "hi")

        assert used == target.alternate
        assert client.send_attempts == [
            ("96312345678@c.us", "hi"),
            ("96312345678@lid", "hi"),
        ]
        assert client.sent == [("96312345678@lid", "hi")]

    @pytest.mark.asyncio
    async def test_both_fail_raises_second_error(self, resolver):
        client = StubMessagingClient(
            failing_chats={"201234567890123@lid", "201234567890123@c.us"}
        )
        target = resolver.resolve("201234567890123")

        with pytest.raises(WhatsAppSenderError) as exc_info:
            await send_with_fallback(client, target, "hi")

        assert "201234567890123@c.us" in str(exc_info.value)
        assert len(client.send_attempts) == 2

    @pytest.mark.asyncio
    async def test_reply_reference_fallback_toggles_suffix(self, resolver):
        client = StubMessagingClient(failing_chats={"96312345678@c.us"})
        target = resolver.resolve("96312345678@c.us", explicit=True)

        await send_with_fallback(client, target, "reply")

        assert [chat for chat, _ in client.send_attempts] == [
            "96312345678@c.us",
            "96312345678@lid",
        ]

    @pytest.mark.asyncio
    async def test_group_reference_retried_once_verbatim(self, resolver):
        group = "120363000000000000@g.us"
        client = StubMessagingClient(failing_chats={group})
        target = resolver.resolve(group, explicit=True)

        with pytest.raises(WhatsAppSenderError):
            await send_with_fallback(client, target, "reply")

        assert [chat for chat, _ in client.send_attempts] == [group, group]
