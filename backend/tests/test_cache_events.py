"""Tests for page revalidation and the SSE event bus."""

import asyncio
import threading
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from careercoach.cache import REVALIDATE_EVENT, PageCache
from careercoach.events import EventBus


class TestPageCache:

    def test_revalidate_publishes_event(self):
        bus = MagicMock()
        cache = PageCache(bus=bus)
        before = datetime.now(timezone.utc)

        stamp = cache.revalidate_path("/")

        assert stamp >= before
        bus.publish.assert_called_once_with(
            REVALIDATE_EVENT, {"path": "/", "revalidated_at": stamp.isoformat()}
        )

    def test_rejects_relative_path(self):
        with pytest.raises(ValueError):
            PageCache(bus=EventBus()).revalidate_path("dashboard")


class TestEventBus:

    def test_publish_reaches_subscriber(self):
        bus = EventBus()
        cache = PageCache(bus=bus)

        async def scenario():
            stream = bus.subscribe()
            pending = asyncio.ensure_future(stream.__anext__())
            await asyncio.sleep(0)  # let the subscriber register
            cache.revalidate_path("/")
            event = await asyncio.wait_for(pending, timeout=1.0)
            await stream.aclose()
            return event

        event = asyncio.run(scenario())

        assert event["type"] == REVALIDATE_EVENT
        assert event["data"]["path"] == "/"
        assert bus.subscriber_count == 0

    def test_publish_from_worker_thread(self):
        bus = EventBus()

        async def scenario():
            stream = bus.subscribe()
            pending = asyncio.ensure_future(stream.__anext__())
            await asyncio.sleep(0)
            worker = threading.Thread(target=bus.publish, args=("revalidate", {"path": "/"}))
            worker.start()
            worker.join()
            event = await asyncio.wait_for(pending, timeout=1.0)
            await stream.aclose()
            return event

        assert asyncio.run(scenario())["data"] == {"path": "/"}

    def test_publish_without_subscribers(self):
        EventBus().publish("revalidate", {"path": "/"})

    def test_subscriber_limit(self):
        bus = EventBus(max_subscribers=0)

        async def scenario():
            return [event async for event in bus.subscribe()]

        assert asyncio.run(scenario()) == []
