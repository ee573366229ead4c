"""Connected viewers and the set of keys they are watching."""

from __future__ import annotations

import asyncio
import logging
import uuid

from livescores.api.models import ScoreboardKey

log = logging.getLogger(__name__)


class QueueConnection:
    """Push handle for one viewer: a bounded queue drained by its stream response."""

    def __init__(self, maxsize: int = 32) -> None:
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=maxsize)
        self.closed = False

    async def send(self, data: str) -> None:
        if self.closed:
            raise ConnectionError("connection closed")
        await self._queue.put(data)

    async def receive(self, timeout: float | None = None) -> str | None:
        """Next queued message, or None if nothing arrived within ``timeout``."""
        try:
            return await asyncio.wait_for(self._queue.get(), timeout=timeout)
        except asyncio.TimeoutError:
            return None

    def pending(self) -> int:
        return self._queue.qsize()

    def close(self) -> None:
        self.closed = True


class Subscriber:
    """One connected viewer watching one scoreboard."""

    def __init__(
        self,
        key: ScoreboardKey,
        connection: QueueConnection,
        id: str | None = None,
    ) -> None:
        self.id = id or uuid.uuid4().hex
        self.key = key
        self.connection = connection

    def __repr__(self) -> str:
        return f"Subscriber({self.id[:8]}, {self.key})"


class SubscriptionRegistry:
    """Tracks subscribers and the keys with at least one of them.

    Every mutation completes without awaiting, so under asyncio no other
    task can observe a key whose active flag disagrees with its subscribers.
    Not safe for use from multiple threads.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, Subscriber] = {}
        self._by_key: dict[ScoreboardKey, dict[str, Subscriber]] = {}

    def __len__(self) -> int:
        return len(self._subscribers)

    def __contains__(self, subscriber_id: str) -> bool:
        return subscriber_id in self._subscribers

    def subscribe(self, subscriber: Subscriber) -> None:
        if subscriber.id in self._subscribers:
            raise ValueError(f"Subscriber {subscriber.id} already registered")
        self._subscribers[subscriber.id] = subscriber
        group = self._by_key.setdefault(subscriber.key, {})
        group[subscriber.id] = subscriber
        if len(group) == 1:
            log.info("Key %s is now active", subscriber.key)

    def unsubscribe(self, subscriber_id: str) -> Subscriber | None:
        """Remove a subscriber; unknown ids are ignored. Returns the removed one."""
        subscriber = self._subscribers.pop(subscriber_id, None)
        if subscriber is None:
            return None
        group = self._by_key.get(subscriber.key, {})
        group.pop(subscriber_id, None)
        if not group:
            self._by_key.pop(subscriber.key, None)
            log.info("Key %s is no longer active", subscriber.key)
        return subscriber

    def subscribers_for(self, key: ScoreboardKey) -> list[Subscriber]:
        return list(self._by_key.get(key, {}).values())

    def is_active(self, key: ScoreboardKey) -> bool:
        return key in self._by_key

    @property
    def active_keys(self) -> list[ScoreboardKey]:
        """Snapshot of keys with at least one subscriber."""
        return list(self._by_key)
