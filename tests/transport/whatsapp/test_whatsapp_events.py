"""
WhatsApp Event Router Tests

Client events → payloads → DeliveryGate, plus connection state.
"""

import asyncio

import pytest

from relay import DeliveryGate, DownstreamError, DownstreamResponse, RetryQueue
from transport.whatsapp.client import MediaBlob, MessageHandle, MessagingClientError
from transport.whatsapp.events import UNKNOWN_GROUP, EventRouter
from transport.whatsapp.schemas import ClientEvent
from transport.whatsapp.stub import StubMessagingClient


class FakeDownstream:
    def __init__(self, reachable=True, reaction=None):
        self.reachable = reachable
        self.reaction = reaction
        self.received = []

    async def post(self, payload):
        if not self.reachable:
            raise DownstreamError("down")
        self.received.append(dict(payload))
        return DownstreamResponse(status_code=200, reaction=self.reaction)


def make_router(client=None, downstream=None):
    client = client or StubMessagingClient()
    downstream = downstream or FakeDownstream()
    queue = RetryQueue(retry_delay=60)
    gate = DeliveryGate(downstream, queue)
    return EventRouter(client, gate), downstream, queue


def message_event(**message):
    data = {"id": "MSG1", "from": "96312345678@c.us", "type": "chat", "body": "hi"}
    data.update(message)
    return ClientEvent(event="message", message=data)


class TestMessageEvents:

    @pytest.mark.asyncio
    async def test_direct_message_relayed(self):
        router, downstream, _ = make_router()

        await router.dispatch(message_event())

        assert len(downstream.received) == 1
        assert downstream.received[0]["event_type"] == "new_message"
        assert downstream.received[0]["sender_id"] == "96312345678"

    @pytest.mark.asyncio
    async def test_own_message_not_relayed(self):
        router, downstream, _ = make_router()

        await router.dispatch(message_event(from_me=True))

        assert downstream.received == []

    @pytest.mark.asyncio
    async def test_group_name_fetched(self):
        client = StubMessagingClient(chat_names={"120363000000000000@g.us": "Drivers"})
        router, downstream, _ = make_router(client)

        await router.dispatch(message_event(**{
            "from": "120363000000000000@g.us",
            "author": "96312345678@c.us",
        }))

        assert downstream.received[0]["group_name"] == "Drivers"

    @pytest.mark.asyncio
    async def test_group_metadata_failure_uses_placeholder(self):
        router, downstream, _ = make_router(StubMessagingClient())

        await router.dispatch(message_event(**{"from": "120363000000000000@g.us"}))

        assert downstream.received[0]["group_name"] == UNKNOWN_GROUP

    @pytest.mark.asyncio
    async def test_media_downloaded(self):
        client = StubMessagingClient(media={"MSG1": MediaBlob(data="AAAA", mimetype="image/png")})
        router, downstream, _ = make_router(client)

        await router.dispatch(message_event(type="image", has_media=True))

        assert downstream.received[0]["has_media"] is True
        assert downstream.received[0]["media_data"] == "AAAA"

    @pytest.mark.asyncio
    async def test_media_failure_relays_without_media(self):
        class BrokenMediaClient(StubMessagingClient):
            async def download_media(self, message_id):
                raise MessagingClientError("media expired")

        router, downstream, _ = make_router(BrokenMediaClient())

        await router.dispatch(message_event(type="image", has_media=True))

        assert downstream.received[0]["has_media"] is False

    @pytest.mark.asyncio
    async def test_reaction_uses_serialized_id(self):
        client = StubMessagingClient()
        router, _, _ = make_router(client, FakeDownstream(reaction="✅"))

        await router.dispatch(message_event(serialized_id="false_963@c.us_MSG1"))

        assert client.reactions == [("false_963@c.us_MSG1", "✅")]

    @pytest.mark.asyncio
    async def test_unreachable_consumer_queues_with_handle(self):
        router, _, queue = make_router(downstream=FakeDownstream(reachable=False))

        await router.dispatch(message_event())

        items = queue.snapshot()
        assert len(items) == 1
        assert isinstance(items[0].source, MessageHandle)
        assert items[0].source.message_id == "MSG1"
        await queue.close()


class TestEditRevokeEvents:

    @pytest.mark.asyncio
    async def test_edit_relayed(self):
        router, downstream, _ = make_router()

        await router.dispatch(ClientEvent(
            event="message_edit",
            message={"id": "MSG1", "from": "96312345678@c.us"},
            new_body="edited",
            prev_body="original",
        ))

        assert downstream.received[0]["event_type"] == "message_edit"
        assert downstream.received[0]["message_text"] == "edited"

    @pytest.mark.asyncio
    async def test_revoke_relayed_without_source(self):
        router, _, queue = make_router(downstream=FakeDownstream(reachable=False))

        await router.dispatch(ClientEvent(
            event="message_revoke_everyone",
            before={"id": "OLD", "from": "96312345678@c.us"},
        ))

        items = queue.snapshot()
        assert items[0].payload["event_type"] == "message_revoke"
        assert items[0].payload["whatsapp_message_id"] == "OLD"
        assert items[0].source is None
        await queue.close()

    @pytest.mark.asyncio
    async def test_revoke_without_ids_ignored(self):
        router, downstream, _ = make_router()

        await router.dispatch(ClientEvent(event="message_revoke_everyone"))

        assert downstream.received == []


class TestConnectionEvents:

    @pytest.mark.asyncio
    async def test_pairing_code_then_ready(self):
        router, _, _ = make_router()

        await router.dispatch(ClientEvent(event="qr", qr="2@abc"))
        assert router.state == "scan_required"
        assert router.pairing_code == "2@abc"

        await router.dispatch(ClientEvent(event="ready"))
        assert router.state == "connected"
        assert router.pairing_code is None

    @pytest.mark.asyncio
    async def test_disconnected(self):
        router, _, _ = make_router()
        await router.dispatch(ClientEvent(event="ready"))

        await router.dispatch(ClientEvent(event="disconnected", reason="LOGOUT"))

        assert router.state == "disconnected"

    @pytest.mark.asyncio
    async def test_ready_drains_backlog(self):
        downstream = FakeDownstream(reachable=False)
        router, _, queue = make_router(downstream=downstream)
        await router.dispatch(message_event())
        downstream.reachable = True

        await router.dispatch(ClientEvent(event="ready"))
        await asyncio.sleep(0.01)

        assert len(downstream.received) == 1
        assert len(queue) == 0
        await queue.close()
