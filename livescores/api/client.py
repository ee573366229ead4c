"""Async httpx wrapper with a hard deadline and error translation."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from livescores.errors import (
    SerializationError,
    UpstreamConnectionError,
    UpstreamHTTPError,
    UpstreamTimeout,
)

log = logging.getLogger(__name__)

BASE_URL = "https://site.api.espn.com/apis/site/v2/sports"


class ScoreboardClient:
    """Async HTTP client for the ESPN site scoreboard API.

    Every request is bounded by ``timeout`` seconds end to end. There are no
    retries here; the poll loop simply tries again on its next tick.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        kwargs: dict[str, Any] = {
            "base_url": BASE_URL,
            "timeout": timeout,
            "headers": {"cache-control": "no-cache"},
        }
        if transport is not None:
            kwargs["transport"] = transport
        self._client = httpx.AsyncClient(**kwargs)

    async def close(self) -> None:
        await self._client.aclose()

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET ``path`` and return the decoded JSON body."""
        url = f"{BASE_URL}{path}"
        try:
            response = await asyncio.wait_for(
                self._client.get(path, params=params), timeout=self.timeout
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise UpstreamTimeout(url, self.timeout) from exc
        except httpx.RequestError as exc:
            raise UpstreamConnectionError(f"Upstream request failed: {exc}") from exc
        if response.is_error:
            raise UpstreamHTTPError(response.status_code, url)
        try:
            return response.json()
        except ValueError as exc:
            raise SerializationError(f"Upstream body is not JSON: {url}") from exc
