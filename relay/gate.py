"""
Delivery Gate

Every payload bound for the webhook consumer passes through here.

- Success: optional reaction on the source event, then drain the backlog
- Failure: queue the payload and schedule a sweep
- Never raises to the caller
"""

import logging
from typing import Any, Mapping, Optional

from .downstream import DownstreamClient, DownstreamResponse
from .queue import ReactionSource, RelayItem, RetryQueue

logger = logging.getLogger(__name__)


class DeliveryGate:
    """
    At-least-once relay to the webhook consumer.

    The gate is the only producer of RetryQueue items. The queue sweeps
    through `deliver`, the same primitive `relay` uses.
    """

    def __init__(self, downstream: DownstreamClient, queue: RetryQueue):
        self.downstream = downstream
        self.queue = queue
        self.queue.bind(self.deliver)

    async def deliver(self, item: RelayItem) -> DownstreamResponse:
        """
        One delivery attempt, reaction included.

        Raises:
            DownstreamError: Consumer did not accept the payload
        """
        response = await self.downstream.post(item.payload)
        if response.reaction:
            await item.react(response.reaction)
        return response

    async def relay(
        self,
        payload: Mapping[str, Any],
        source: Optional[ReactionSource] = None,
    ) -> None:
        """Deliver a payload now, or park it in the retry queue."""
        item = RelayItem(payload=payload, source=source)

        try:
            await self.deliver(item)
        except Exception as e:
            logger.error(
                f"❌ [Webhook Offline] Delivery failed! Queuing message from {item.describe()}",
                extra={
                    "event_type": item.payload.get("event_type"),
                    "error": str(e),
                },
            )
            self.queue.enqueue(item)
            if not self.queue.draining:
                self.queue.schedule_drain()
            return

        logger.debug(
            f"Relayed {item.payload.get('event_type')} from {item.describe()}",
        )
        if len(self.queue) > 0:
            self.queue.schedule_drain(delay=0)
