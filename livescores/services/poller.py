"""Background loop that refreshes watched scoreboards and broadcasts changes."""

from __future__ import annotations

import asyncio
import logging

from livescores.api.models import LiveMessage, ScoreboardKey
from livescores.errors import UpstreamError
from livescores.services.broadcaster import Broadcaster
from livescores.services.cache import ScoreboardCache
from livescores.services.subscriptions import SubscriptionRegistry

log = logging.getLogger(__name__)


class PollScheduler:
    """Every ``interval`` seconds, re-resolve each active key.

    A key is broadcast when its fingerprint differs from the one last
    broadcast for it, or when it had no entry before the tick. Comparing
    against the last broadcast rather than the pre-tick entry means a
    refresh made by a pull or a new viewer between ticks still reaches
    everyone. Keys are handled one after another, so updates for a key go
    out in tick order.
    """

    def __init__(
        self,
        cache: ScoreboardCache,
        registry: SubscriptionRegistry,
        broadcaster: Broadcaster,
        interval: float = 5.0,
    ) -> None:
        self.cache = cache
        self.registry = registry
        self.broadcaster = broadcaster
        self.interval = interval
        self._task: asyncio.Task[None] | None = None
        self._last_sent: dict[ScoreboardKey, str] = {}

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def poll_key(self, key: ScoreboardKey) -> bool:
        """Refresh one key; returns True if an update was broadcast."""
        before = self.cache.get_entry(key)
        # nothing broadcast yet: viewers hold the pre-tick entry from their hello
        baseline = self._last_sent.get(key, before.fingerprint if before is not None else None)
        payload = await self.cache.resolve(key)
        after = self.cache.get_entry(key)
        if after is None:
            return False
        if baseline is not None and after.fingerprint == baseline:
            self._last_sent[key] = baseline
            return False
        await self.broadcaster.broadcast(
            key, LiveMessage.for_key("scoreboard", key, payload)
        )
        self._last_sent[key] = after.fingerprint
        return True

    async def tick(self) -> list[ScoreboardKey]:
        """One pass over the active keys. Returns the keys that were broadcast."""
        for stale in [k for k in self._last_sent if not self.registry.is_active(k)]:
            del self._last_sent[stale]
        changed: list[ScoreboardKey] = []
        for key in self.registry.active_keys:
            # the last viewer may have left while an earlier key was fetching
            if not self.registry.is_active(key):
                continue
            try:
                if await self.poll_key(key):
                    changed.append(key)
            except UpstreamError as exc:
                log.warning("Poll of %s failed, retrying next tick: %s", key, exc)
            except Exception:
                log.exception("Unexpected error polling %s", key)
        return changed

    async def run(self) -> None:
        log.info("Poll scheduler started, interval %.1fs", self.interval)
        try:
            while True:
                await asyncio.sleep(self.interval)
                await self.tick()
        except asyncio.CancelledError:
            log.info("Poll scheduler stopped")
            raise

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self.run(), name="poll-scheduler")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
