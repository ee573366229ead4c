"""Shared test fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from livescores.api.models import ScoreboardKey
from livescores.config import Settings


class FakeClock:
    """Manually advanced stand-in for time.monotonic."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_payload(*states: str, note: str = "") -> dict:
    """ESPN-shaped scoreboard with one event per status state ("pre", "in", "post")."""
    events = [
        {
            "id": f"40154{i}",
            "name": f"Team {i}A at Team {i}B",
            "status": {"type": {"state": state, "completed": state == "post"}},
        }
        for i, state in enumerate(states)
    ]
    payload: dict = {"leagues": [{"abbreviation": "NCAAF"}], "events": events}
    if note:
        payload["note"] = note
    return payload


@pytest.fixture
def settings() -> Settings:
    return Settings(
        live_ttl=20,
        idle_ttl=120,
        poll_interval=5,
        send_timeout=0.05,
        keepalive_interval=0.05,
        subscriber_queue_size=4,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def key() -> ScoreboardKey:
    return ScoreboardKey(sport="cfb", date="20251101")


@pytest.fixture
def fetcher() -> AsyncMock:
    """Upstream fetch stub; returns an idle board unless a test changes it."""
    return AsyncMock(return_value=make_payload("pre", "post"))
