"""Page cache invalidation.

revalidate_path() marks a rendered page as stale and tells connected
frontends (over the SSE event bus) to re-render it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from careercoach.events import EventBus, event_bus as default_event_bus

logger = logging.getLogger(__name__)

REVALIDATE_EVENT = "revalidate"


class PageCache:
    """Publishes revalidation of rendered paths on an event bus."""

    def __init__(self, bus: Optional[EventBus] = None) -> None:
        self._bus = bus or default_event_bus

    def revalidate_path(self, path: str) -> datetime:
        """Invalidate path and broadcast a revalidate event.

        Returns the revalidation time carried in the event.
        """
        if not path.startswith("/"):
            raise ValueError(f"path must start with '/': {path!r}")

        now = datetime.now(timezone.utc)
        self._bus.publish(
            REVALIDATE_EVENT,
            {"path": path, "revalidated_at": now.isoformat()},
        )
        logger.debug("Revalidated %s", path)
        return now


page_cache = PageCache()
