"""Derived projections of an opaque scoreboard payload: fingerprint, live count, TTL."""

from __future__ import annotations

import hashlib
import json
from typing import Any

from livescores.errors import SerializationError

LIVE_STATE = "in"


def fingerprint(payload: Any) -> str:
    """Stable SHA-1 of a payload, independent of key order."""
    try:
        canonical = json.dumps(
            payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False
        )
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Payload is not JSON-serializable: {exc}") from exc
    return hashlib.sha1(canonical.encode("utf-8")).hexdigest()


def count_live_games(payload: Any) -> int:
    """Number of events whose status state is in progress.

    Tolerates schema drift: anything that isn't shaped like ESPN's
    ``events[].status.type.state`` counts as not live.
    """
    if not isinstance(payload, dict):
        return 0
    events = payload.get("events")
    if not isinstance(events, list):
        return 0
    live = 0
    for event in events:
        try:
            if event["status"]["type"]["state"] == LIVE_STATE:
                live += 1
        except (KeyError, TypeError):
            continue
    return live


def ttl_for(live_count: int, *, live_ttl: float = 20.0, idle_ttl: float = 120.0) -> float:
    """Freshness window in seconds for a payload with ``live_count`` live games."""
    return live_ttl if live_count > 0 else idle_ttl
