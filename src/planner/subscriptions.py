"""In-process snapshot broadcast.

Subscribers register the collections they care about and receive the
full, freshly loaded result set of a collection every time it changes.
Each message replaces whatever the subscriber held before; there is
no diffing.

Shutdown:
    Call ``SnapshotBroadcaster.close()`` during app shutdown so that
    open streams end and uvicorn can finish its graceful shutdown.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncGenerator, Iterable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

COLLECTIONS: tuple[str, ...] = (
    "sensors",
    "switches",
    "lighting",
    "other_devices",
    "voice_assistants",
    "gateways",
    "floors",
    "rooms",
    "room_templates",
    "house_config",
)


@dataclass(eq=False)
class _Subscriber:
    collections: frozenset[str]
    queue: asyncio.Queue[str | None]


def _end_stream(sub: _Subscriber) -> None:
    """Replace anything still queued with the end-of-stream marker."""
    while not sub.queue.empty():
        sub.queue.get_nowait()
    sub.queue.put_nowait(None)


class SnapshotBroadcaster:
    """Fan out collection result sets to connected subscribers."""

    def __init__(self, queue_size: int = 100) -> None:
        self._queue_size = queue_size
        self._subscribers: set[_Subscriber] = set()
        self._closed = False

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def wants(self, collection: str) -> bool:
        """Whether any subscriber listens to the collection."""
        return any(collection in sub.collections for sub in self._subscribers)

    def publish(self, collection: str, records: list[dict[str, Any]]) -> None:
        """Deliver a full result set to every subscriber of ``collection``.

        Subscribers whose queue is full are dropped. Their queued frames are
        discarded and their stream ends, so the client reconnects and starts
        again from a fresh result set.
        """
        data = json.dumps({"collection": collection, "items": records}, default=str)
        dead: list[_Subscriber] = []
        for sub in self._subscribers:
            if collection not in sub.collections:
                continue
            try:
                sub.queue.put_nowait(data)
            except asyncio.QueueFull:
                dead.append(sub)
        for sub in dead:
            logger.warning("Dropping slow snapshot subscriber")
            self._subscribers.discard(sub)
            _end_stream(sub)

    def close(self) -> None:
        self._closed = True
        for sub in self._subscribers:
            _end_stream(sub)

    def subscribe(self, collections: Iterable[str]) -> _Subscriber:
        sub = _Subscriber(
            collections=frozenset(collections),
            queue=asyncio.Queue(maxsize=self._queue_size),
        )
        self._subscribers.add(sub)
        return sub

    def unsubscribe(self, sub: _Subscriber) -> None:
        self._subscribers.discard(sub)

    async def stream(
        self,
        collections: Iterable[str],
        initial: dict[str, list[dict[str, Any]]] | None = None,
    ) -> AsyncGenerator[str, None]:
        """Yield SSE frames: the initial result sets, then every change."""
        sub = self.subscribe(collections)
        try:
            for collection, records in (initial or {}).items():
                payload = json.dumps({"collection": collection, "items": records}, default=str)
                yield f"data: {payload}\n\n"
            while not self._closed:
                data = await sub.queue.get()
                if data is None:
                    break
                yield f"data: {data}\n\n"
        except asyncio.CancelledError:
            pass
        finally:
            self.unsubscribe(sub)


_broadcaster: SnapshotBroadcaster | None = None


def get_broadcaster() -> SnapshotBroadcaster:
    """Process-wide broadcaster."""
    global _broadcaster
    if _broadcaster is None:
        from src.settings import get_settings

        _broadcaster = SnapshotBroadcaster(queue_size=get_settings().snapshot_queue_size)
    return _broadcaster


def reset_broadcaster() -> None:
    """Close and forget the process-wide broadcaster."""
    global _broadcaster
    if _broadcaster is not None:
        _broadcaster.close()
    _broadcaster = None
