"""FastAPI application exposing the pull and push scoreboard endpoints."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from livescores.api.endpoints import make_key
from livescores.api.models import ErrorResponse, HealthResponse, ScoreboardResponse
from livescores.config import Settings, load_settings
from livescores.errors import UpstreamError
from livescores.services.live_service import LiveScoreService

log = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-store, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
    "Vary": "sport, date",
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=ErrorResponse(error=message).model_dump()
    )


def create_app(
    service: LiveScoreService | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Build the app around ``service`` (or a new one from ``settings``)."""
    if service is None:
        service = LiveScoreService(settings or load_settings())
    settings = service.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await service.start()
        yield
        await service.stop()

    app = FastAPI(title="Live Scoreboard", lifespan=lifespan)
    app.state.service = service
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    def resolve_key(sport: str | None, date: str | None):
        return make_key(
            sport, date, default_sport=settings.default_sport, tz=settings.timezone
        )

    @app.get("/health")
    async def health() -> HealthResponse:
        return HealthResponse(
            subscribers=len(service.registry),
            active_keys=[k.key for k in service.registry.active_keys],
            cache_entries=len(service.cache),
        )

    @app.get("/api/scoreboard", response_model=ScoreboardResponse)
    async def scoreboard(
        sport: str | None = Query(None, description="cfb or cbb"),
        date: str | None = Query(None, description="YYYY-MM-DD or YYYYMMDD"),
    ):
        try:
            key = resolve_key(sport, date)
        except ValueError as exc:
            return _error(400, str(exc))
        try:
            payload, entry = await service.scoreboard(key)
        except UpstreamError as exc:
            log.warning("Scoreboard fetch for %s failed: %s", key, exc)
            return _error(502, str(exc) or "Fetch failed")
        cached_at = entry.cached_at if entry is not None else datetime.now(timezone.utc)
        return ScoreboardResponse(
            sport=key.sport, date=key.date, payload=payload, cached_at=cached_at
        )

    @app.get("/api/live")
    async def live(
        sport: str | None = Query(None, description="cfb or cbb"),
        date: str | None = Query(None, description="YYYY-MM-DD or YYYYMMDD"),
    ):
        try:
            key = resolve_key(sport, date)
        except ValueError as exc:
            return _error(400, str(exc))
        subscriber = await service.connect(key)
        return StreamingResponse(
            service.stream(subscriber),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
            background=BackgroundTask(service.disconnect, subscriber.id),
        )

    return app
