"""Owns the cache, subscriber registry, broadcaster and poll loop."""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator

from livescores.api.client import ScoreboardClient
from livescores.api.endpoints import get_scoreboard
from livescores.api.models import LiveMessage, ScoreboardKey
from livescores.config import Settings
from livescores.errors import TransportWriteError, UpstreamError
from livescores.services.broadcaster import Broadcaster
from livescores.services.cache import CacheEntry, ScoreboardCache
from livescores.services.poller import PollScheduler
from livescores.services.subscriptions import (
    QueueConnection,
    Subscriber,
    SubscriptionRegistry,
)

log = logging.getLogger(__name__)

KEEPALIVE = ": keepalive\n\n"


class LiveScoreService:
    """Single entry point used by the transport layer.

    Collaborators can be injected for tests; anything omitted is built
    from ``settings``.
    """

    def __init__(
        self,
        settings: Settings,
        client: ScoreboardClient | None = None,
        cache: ScoreboardCache | None = None,
        registry: SubscriptionRegistry | None = None,
        broadcaster: Broadcaster | None = None,
        scheduler: PollScheduler | None = None,
    ) -> None:
        self.settings = settings
        self.client = client or ScoreboardClient(timeout=settings.upstream_timeout)
        self.cache = cache or ScoreboardCache(
            self._fetch,
            live_ttl=settings.live_ttl,
            idle_ttl=settings.idle_ttl,
            max_entries=settings.max_cache_entries,
        )
        self.registry = registry or SubscriptionRegistry()
        self.broadcaster = broadcaster or Broadcaster(
            self.registry, send_timeout=settings.send_timeout
        )
        self.scheduler = scheduler or PollScheduler(
            self.cache,
            self.registry,
            self.broadcaster,
            interval=settings.poll_interval,
        )

    async def _fetch(self, key: ScoreboardKey) -> Any:
        return await get_scoreboard(self.client, key)

    async def start(self) -> None:
        self.scheduler.start()
        log.info("Live score service started")

    async def stop(self) -> None:
        await self.scheduler.stop()
        for key in self.registry.active_keys:
            for sub in self.registry.subscribers_for(key):
                self.disconnect(sub.id)
        await self.client.close()
        log.info("Live score service stopped")

    # ── Pull ──

    async def scoreboard(self, key: ScoreboardKey) -> tuple[Any, CacheEntry | None]:
        """Resolve ``key`` through the cache. Upstream errors propagate."""
        payload = await self.cache.resolve(key)
        return payload, self.cache.get_entry(key)

    # ── Push ──

    async def connect(self, key: ScoreboardKey) -> Subscriber:
        """Register a viewer on ``key`` with its snapshot already queued.

        The snapshot is queued before the viewer becomes visible to the
        broadcaster, so it always precedes the first update. If the upstream
        fetch fails the viewer is still registered and waits for the poller.
        """
        connection = QueueConnection(maxsize=self.settings.subscriber_queue_size)
        subscriber = Subscriber(key, connection)
        try:
            snapshot = await self.cache.resolve(key)
            await self.broadcaster.send(
                subscriber, LiveMessage.for_key("hello", key, snapshot)
            )
        except UpstreamError as exc:
            log.warning("No snapshot for %s on connect: %s", key, exc)
        except TransportWriteError as exc:
            log.warning("Could not queue snapshot: %s", exc)
        self.registry.subscribe(subscriber)
        log.info("%s connected (%d watching)", subscriber, len(self.registry))
        return subscriber

    def disconnect(self, subscriber_id: str) -> None:
        subscriber = self.registry.unsubscribe(subscriber_id)
        if subscriber is None:
            return
        subscriber.connection.close()
        log.info("%s disconnected (%d watching)", subscriber, len(self.registry))

    async def stream(self, subscriber: Subscriber) -> AsyncIterator[str]:
        """Yield queued SSE frames for one viewer until it goes away."""
        connection = subscriber.connection
        try:
            while not (connection.closed and connection.pending() == 0):
                data = await connection.receive(timeout=self.settings.keepalive_interval)
                if data is not None:
                    yield data
                elif not connection.closed:
                    yield KEEPALIVE
        finally:
            self.disconnect(subscriber.id)
