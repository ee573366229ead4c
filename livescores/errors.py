"""Exception types raised across the live scoreboard service."""

from __future__ import annotations


class LiveScoresError(Exception):
    """Base class for all service errors."""


class UpstreamError(LiveScoresError):
    """The scoreboard provider could not deliver a payload."""


class UpstreamTimeout(UpstreamError):
    """The provider did not answer within the configured bound."""

    def __init__(self, url: str, timeout: float) -> None:
        super().__init__(f"Upstream timed out after {timeout:g}s: {url}")
        self.url = url
        self.timeout = timeout


class UpstreamHTTPError(UpstreamError):
    """The provider answered with a non-success status."""

    def __init__(self, status_code: int, url: str) -> None:
        super().__init__(f"Upstream returned HTTP {status_code}: {url}")
        self.status_code = status_code
        self.url = url


class UpstreamConnectionError(UpstreamError):
    """The request never got an answer: refused, DNS failure, dropped connection."""


class SerializationError(UpstreamError):
    """The provider body was not valid JSON."""


class TransportWriteError(LiveScoresError):
    """A push to one subscriber failed."""

    def __init__(self, subscriber_id: str, reason: str = "") -> None:
        msg = f"Write to subscriber {subscriber_id} failed"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
        self.subscriber_id = subscriber_id
