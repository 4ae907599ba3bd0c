"""
In-memory Retry Queue

Backlog of relay items the webhook consumer did not accept.

Rules:
- FIFO, insertion order = retry order
- At most one sweep runs at a time (draining flag)
- A sweep works on a detached batch; failures go to the current tail
- Lost on process exit (no persistence)
"""

import asyncio
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Protocol, Set

logger = logging.getLogger(__name__)


class ReactionSource(Protocol):
    """Handle to the chat event a payload came from."""

    async def react(self, emoji: str) -> None:
        ...


@dataclass
class RelayItem:
    """One downstream-bound payload plus the event that produced it."""

    payload: Mapping[str, Any]
    source: Optional[ReactionSource] = None
    reacted: bool = field(default=False, compare=False)

    def __post_init__(self):
        if not isinstance(self.payload, MappingProxyType):
            self.payload = MappingProxyType(dict(self.payload))

    async def react(self, emoji: str) -> None:
        """Apply a reaction to the source event, at most once, never raising."""
        if self.source is None or self.reacted:
            return
        self.reacted = True
        try:
            await self.source.react(emoji)
        except Exception as e:
            logger.debug(f"Reaction {emoji!r} failed: {e}")

    def describe(self) -> str:
        return str(self.payload.get("sender_id") or self.payload.get("whatsapp_message_id"))


DeliverFn = Callable[[RelayItem], Awaitable[Any]]


class RetryQueue:
    """
    Retry backlog with a delayed, mutually exclusive sweep.

    Args:
        deliver: Coroutine delivering one item; raises on failure
        retry_delay: Seconds between a failure and the next sweep
        max_items: Capacity; the oldest item is evicted when full. 0 = unbounded
    """

    def __init__(
        self,
        deliver: Optional[DeliverFn] = None,
        retry_delay: float = 10.0,
        max_items: int = 0,
    ):
        self._deliver = deliver
        self.retry_delay = retry_delay
        self.max_items = max_items
        self._items: List[RelayItem] = []
        self._draining = False
        self._timer: Optional[asyncio.Task] = None
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    def bind(self, deliver: DeliverFn) -> None:
        """Set the delivery primitive (the DeliveryGate binds itself)."""
        self._deliver = deliver

    @property
    def draining(self) -> bool:
        return self._draining

    def __len__(self) -> int:
        return len(self._items)

    def snapshot(self) -> List[RelayItem]:
        """Copy of the queued items, head first."""
        return list(self._items)

    def enqueue(self, item: RelayItem) -> None:
        """Append an item to the tail."""
        if self.max_items and len(self._items) >= self.max_items:
            evicted = self._items.pop(0)
            logger.warning(
                f"[Queue] Full ({self.max_items}), dropping oldest item from {evicted.describe()}",
                extra={"queue_size": len(self._items)},
            )
        self._items.append(item)

    async def drain(self) -> int:
        """
        Retry every queued item once.

        Returns:
            Number of items delivered (0 if a sweep was already running)
        """
        if self._draining or not self._items:
            return 0
        if self._deliver is None:
            raise RuntimeError("RetryQueue has no delivery function bound")

        self._draining = True
        batch, self._items = self._items, []
        delivered = 0
        logger.info(f"🔄 [Queue] Attempting to resend {len(batch)} pending messages...")

        try:
            for index, item in enumerate(batch):
                try:
                    await self._deliver(item)
                except asyncio.CancelledError:
                    # Shutdown: keep the rest of the batch visible to close()
                    self._items.extend(batch[index:])
                    raise
                except Exception as e:
                    logger.warning(
                        f"⚠️ [Queue] Retry failed for {item.describe()}, requeuing...",
                        extra={"error": str(e)},
                    )
                    self.enqueue(item)
                else:
                    delivered += 1
                    logger.info(f"✅ [Recovered] Message from {item.describe()} delivered")
        finally:
            self._draining = False

        if self._items:
            self.schedule_drain()
        return delivered

    def schedule_drain(self, delay: Optional[float] = None) -> Optional[asyncio.Task]:
        """
        Start a sweep in the background after `delay` seconds.

        Delayed sweeps are coalesced into one pending timer. A zero delay
        always starts a new sweep task (it is a no-op if one is running).
        Nothing is scheduled once the queue is closed.
        """
        if self._closed:
            logger.debug("[Queue] Closed, not scheduling a sweep")
            return None
        if delay is None:
            delay = self.retry_delay

        if delay > 0 and self._timer is not None and not self._timer.done():
            return self._timer

        task = asyncio.get_running_loop().create_task(self._drain_later(delay))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        if delay > 0:
            self._timer = task
        return task

    async def _drain_later(self, delay: float) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        if self._timer is asyncio.current_task():
            self._timer = None
        try:
            await self.drain()
        except Exception as e:
            logger.error(f"[Queue] Sweep failed: {e}", exc_info=True)

    async def close(self) -> None:
        """Cancel pending sweep timers. Queued items are dropped with the process."""
        self._closed = True
        pending = [task for task in self._tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._timer = None
        if self._items:
            logger.warning(f"[Queue] Shutting down with {len(self._items)} undelivered items")
