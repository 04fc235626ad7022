"""SSE event bus for page revalidation broadcasts.

EventBus supports multiple concurrent subscribers, each with its own
asyncio.Queue. publish() may be called from any thread: sync endpoints run in
FastAPI's threadpool, so events are handed to each subscriber's loop with
call_soon_threadsafe.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncGenerator

logger = logging.getLogger(__name__)


class EventBus:
    """Publish/subscribe bus for cache revalidation events."""

    def __init__(self, max_subscribers: int = 10, queue_size: int = 100) -> None:
        self._subscribers: list[tuple[asyncio.AbstractEventLoop, asyncio.Queue]] = []
        self._max_subscribers = max_subscribers
        self._queue_size = queue_size

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, event_type: str, data: dict) -> None:
        """Broadcast an event to all subscriber queues."""
        event = {"type": event_type, "data": data}
        for loop, queue in list(self._subscribers):
            try:
                loop.call_soon_threadsafe(self._offer, queue, event)
            except RuntimeError:
                # Subscriber loop already closed
                self._discard(queue)

    @staticmethod
    def _offer(queue: asyncio.Queue, event: dict) -> None:
        try:
            queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.debug("Dropping %s event for slow subscriber", event["type"])

    def _discard(self, queue: asyncio.Queue) -> None:
        self._subscribers = [(lp, q) for lp, q in self._subscribers if q is not queue]

    async def subscribe(self) -> AsyncGenerator[dict, None]:
        """Yield events as they arrive.

        Removes the subscriber queue on exit (generator close or error).
        """
        if len(self._subscribers) >= self._max_subscribers:
            return
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_size)
        self._subscribers.append((asyncio.get_running_loop(), queue))
        try:
            while True:
                event = await queue.get()
                yield event
        finally:
            self._discard(queue)


# Module-level singleton used by the page cache and the SSE endpoint
event_bus = EventBus()
