"""In-process fan-out of notification events to connected clients.

Delivery is best-effort and at-most-once: events are neither persisted nor
replayed, so a subscriber only sees what is published while it is attached.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

logger = logging.getLogger(__name__)


class BroadcastEventKind(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    RESOLVED = "resolved"
    DELETED = "deleted"


@dataclass(frozen=True)
class BroadcastEvent:
    kind: BroadcastEventKind
    payload: dict[str, Any]
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def event_name(self) -> str:
        return f"notification_{self.kind.value}"

    def to_message(self) -> dict[str, Any]:
        """Serialize for a JSON transport."""
        return {
            "event": self.event_name,
            "data": self.payload,
            "timestamp": self.timestamp.isoformat(),
        }


Subscriber = Callable[[BroadcastEvent], None]


class BroadcastChannel:
    """Publish/subscribe channel shared by every request in the process."""

    def __init__(self) -> None:
        self._subscribers: dict[UUID, Subscriber] = {}

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Attach a subscriber and return a function that detaches it."""
        token = uuid4()
        self._subscribers[token] = callback

        def unsubscribe() -> None:
            self._subscribers.pop(token, None)

        return unsubscribe

    def publish(self, kind: BroadcastEventKind, payload: dict[str, Any]) -> BroadcastEvent:
        event = BroadcastEvent(kind=kind, payload=payload)
        # Snapshot so subscribers may detach while we iterate.
        for callback in list(self._subscribers.values()):
            try:
                callback(event)
            except Exception:
                logger.exception("Broadcast subscriber failed for %s", event.event_name)
        logger.debug(
            "Broadcast %s to %d subscriber(s)", event.event_name, len(self._subscribers)
        )
        return event


class QueueSubscriber:
    """Bridges the channel onto an asyncio queue owned by one event loop.

    Publishers may run on any thread (request handlers, worker tasks); events
    are handed to the loop with ``call_soon_threadsafe``. When the queue is
    full the event is dropped for this subscriber only.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop, maxsize: int = 100):
        self.loop = loop
        self.queue: asyncio.Queue[BroadcastEvent] = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0

    def __call__(self, event: BroadcastEvent) -> None:
        self.loop.call_soon_threadsafe(self._offer, event)

    def _offer(self, event: BroadcastEvent) -> None:
        try:
            self.queue.put_nowait(event)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning("Subscriber queue full, dropped %s", event.event_name)

    async def get(self) -> BroadcastEvent:
        return await self.queue.get()


notification_channel = BroadcastChannel()
