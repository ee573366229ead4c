"""In-memory scoreboard cache with adaptive TTL, keyed by (sport, date)."""

from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from livescores.api.models import ScoreboardKey
from livescores.services.fingerprint import count_live_games, fingerprint, ttl_for

log = logging.getLogger(__name__)

Fetcher = Callable[[ScoreboardKey], Awaitable[Any]]


class CacheEntry:
    """Last known state of one scoreboard."""

    def __init__(
        self,
        key: ScoreboardKey,
        payload: Any,
        fetched_at: float,
        ttl: float,
        fingerprint: str,
        live_count: int,
    ) -> None:
        self.key = key
        self.payload = payload
        self.fetched_at = fetched_at
        self.ttl = ttl
        self.fingerprint = fingerprint
        self.live_count = live_count
        self.cached_at = datetime.now(timezone.utc)

    def is_fresh(self, now: float) -> bool:
        return now - self.fetched_at < self.ttl


class ScoreboardCache:
    """Cache-on-read store.

    ``resolve`` serves a fresh entry without I/O, otherwise refetches and
    overwrites the entry. Concurrent misses for one key share a single
    upstream call. Upstream errors propagate and leave the prior entry as is.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        *,
        live_ttl: float = 20.0,
        idle_ttl: float = 120.0,
        max_entries: int = 256,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetcher = fetcher
        self.live_ttl = live_ttl
        self.idle_ttl = idle_ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[ScoreboardKey, CacheEntry] = OrderedDict()
        self._inflight: dict[ScoreboardKey, asyncio.Task[CacheEntry]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get_entry(self, key: ScoreboardKey) -> CacheEntry | None:
        """Current entry for ``key`` regardless of freshness, no I/O."""
        return self._entries.get(key)

    async def resolve(self, key: ScoreboardKey) -> Any:
        entry = self._entries.get(key)
        if entry is not None and entry.is_fresh(self._clock()):
            self._entries.move_to_end(key)
            return entry.payload
        entry = await self._refresh(key)
        return entry.payload

    async def _refresh(self, key: ScoreboardKey) -> CacheEntry:
        task = self._inflight.get(key)
        if task is None or task.done():
            task = asyncio.create_task(self._fetch(key))
            self._inflight[key] = task
            task.add_done_callback(lambda t: self._finish(key, t))
        # shield: one caller going away must not cancel the fetch for the rest
        return await asyncio.shield(task)

    def _finish(self, key: ScoreboardKey, task: asyncio.Task[CacheEntry]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if not task.cancelled():
            # mark retrieved; awaiting callers still receive the error
            task.exception()

    async def _fetch(self, key: ScoreboardKey) -> CacheEntry:
        payload = await self._fetcher(key)
        live = count_live_games(payload)
        entry = CacheEntry(
            key=key,
            payload=payload,
            fetched_at=self._clock(),
            ttl=ttl_for(live, live_ttl=self.live_ttl, idle_ttl=self.idle_ttl),
            fingerprint=fingerprint(payload),
            live_count=live,
        )
        self._store(entry)
        log.debug("Fetched %s: %d live, ttl %.0fs", key, live, entry.ttl)
        return entry

    def _store(self, entry: CacheEntry) -> None:
        self._entries[entry.key] = entry
        self._entries.move_to_end(entry.key)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            log.debug("Evicted %s", evicted)

    def invalidate(self, key: ScoreboardKey) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()
