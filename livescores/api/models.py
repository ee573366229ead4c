"""Pydantic models for scoreboard keys and the pull/push wire formats."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ScoreboardKey(BaseModel):
    """One (sport, date) scoreboard. Dates are always compact ``YYYYMMDD``."""

    model_config = ConfigDict(frozen=True)

    sport: str
    date: str

    @property
    def key(self) -> str:
        return f"{self.sport}:{self.date}"

    def __str__(self) -> str:
        return self.key


class LiveMeta(BaseModel):
    sport: str
    date: str
    key: str


class LiveMessage(BaseModel):
    """Envelope written to push subscribers."""

    type: Literal["hello", "scoreboard"]
    meta: LiveMeta
    payload: Any = None

    @classmethod
    def for_key(
        cls, type_: Literal["hello", "scoreboard"], key: ScoreboardKey, payload: Any
    ) -> LiveMessage:
        meta = LiveMeta(sport=key.sport, date=key.date, key=key.key)
        return cls(type=type_, meta=meta, payload=payload)


class ScoreboardResponse(BaseModel):
    """Pull response. ``cached_at`` is when the payload was fetched upstream, not when it was served."""

    sport: str
    date: str
    payload: Any = None
    cached_at: datetime = Field(
        description="UTC time of the last successful upstream fetch for this scoreboard"
    )


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str = "ok"
    subscribers: int = 0
    active_keys: list[str] = []
    cache_entries: int = 0
