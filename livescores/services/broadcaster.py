"""Best-effort fan-out of envelopes to every subscriber on a key."""

from __future__ import annotations

import asyncio
import logging

from livescores.api.models import LiveMessage, ScoreboardKey
from livescores.errors import TransportWriteError
from livescores.services.subscriptions import Subscriber, SubscriptionRegistry

log = logging.getLogger(__name__)


def encode_event(message: LiveMessage) -> str:
    """Frame an envelope as one server-sent event."""
    return f"data: {message.model_dump_json()}\n\n"


class Broadcaster:
    """Pushes messages to subscribers, dropping any whose write fails."""

    def __init__(self, registry: SubscriptionRegistry, send_timeout: float = 2.0) -> None:
        self.registry = registry
        self.send_timeout = send_timeout

    async def send(self, subscriber: Subscriber, message: LiveMessage) -> None:
        """Write one message to one subscriber within ``send_timeout``."""
        data = encode_event(message)
        try:
            await asyncio.wait_for(
                subscriber.connection.send(data), timeout=self.send_timeout
            )
        except asyncio.TimeoutError as exc:
            raise TransportWriteError(subscriber.id, "send timed out") from exc
        except ConnectionError as exc:
            raise TransportWriteError(subscriber.id, str(exc)) from exc

    async def broadcast(self, key: ScoreboardKey, message: LiveMessage) -> int:
        """Deliver ``message`` to everyone on ``key``. Returns successful deliveries."""
        subscribers = self.registry.subscribers_for(key)
        if not subscribers:
            return 0
        results = await asyncio.gather(
            *(self.send(sub, message) for sub in subscribers),
            return_exceptions=True,
        )
        delivered = 0
        for sub, result in zip(subscribers, results):
            if isinstance(result, TransportWriteError):
                log.warning("Dropping %s: %s", sub, result)
                self.drop(sub)
            elif isinstance(result, BaseException):
                raise result
            else:
                delivered += 1
        return delivered

    def drop(self, subscriber: Subscriber) -> None:
        subscriber.connection.close()
        self.registry.unsubscribe(subscriber.id)
