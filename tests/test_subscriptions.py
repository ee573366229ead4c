"""Tests for SubscriptionRegistry and QueueConnection."""

from __future__ import annotations

import pytest

from livescores.api.models import ScoreboardKey
from livescores.services.subscriptions import QueueConnection, Subscriber, SubscriptionRegistry


def _sub(key: ScoreboardKey, id: str | None = None) -> Subscriber:
    return Subscriber(key, QueueConnection(), id=id)


def test_first_subscriber_activates_key(key):
    reg = SubscriptionRegistry()
    assert not reg.is_active(key)
    reg.subscribe(_sub(key))
    assert reg.is_active(key)
    assert reg.active_keys == [key]


def test_subscribe_then_unsubscribe_leaves_no_active_key(key):
    reg = SubscriptionRegistry()
    sub = _sub(key)
    reg.subscribe(sub)
    assert reg.unsubscribe(sub.id) is sub
    assert not reg.is_active(key)
    assert reg.active_keys == []
    assert len(reg) == 0


def test_key_stays_active_until_last_subscriber_leaves(key):
    reg = SubscriptionRegistry()
    a, b = _sub(key), _sub(key)
    reg.subscribe(a)
    reg.subscribe(b)

    reg.unsubscribe(a.id)
    assert reg.is_active(key)
    assert reg.subscribers_for(key) == [b]

    reg.unsubscribe(b.id)
    assert not reg.is_active(key)
    assert reg.subscribers_for(key) == []


def test_subscribers_are_grouped_by_key():
    reg = SubscriptionRegistry()
    cfb = ScoreboardKey(sport="cfb", date="20251101")
    cbb = ScoreboardKey(sport="cbb", date="20251101")
    a, b, c = _sub(cfb), _sub(cfb), _sub(cbb)
    for s in (a, b, c):
        reg.subscribe(s)

    assert set(s.id for s in reg.subscribers_for(cfb)) == {a.id, b.id}
    assert reg.subscribers_for(cbb) == [c]
    assert set(reg.active_keys) == {cfb, cbb}
    assert len(reg) == 3


def test_unknown_id_is_ignored(key):
    reg = SubscriptionRegistry()
    reg.subscribe(_sub(key))
    assert reg.unsubscribe("nope") is None
    assert reg.is_active(key)


def test_duplicate_id_rejected(key):
    reg = SubscriptionRegistry()
    reg.subscribe(_sub(key, id="same"))
    with pytest.raises(ValueError):
        reg.subscribe(_sub(key, id="same"))


def test_active_keys_is_a_snapshot(key):
    reg = SubscriptionRegistry()
    sub = _sub(key)
    reg.subscribe(sub)
    keys = reg.active_keys
    reg.unsubscribe(sub.id)
    assert keys == [key]


async def test_connection_send_and_receive():
    conn = QueueConnection(maxsize=2)
    await conn.send("one")
    assert conn.pending() == 1
    assert await conn.receive(timeout=0.1) == "one"
    assert await conn.receive(timeout=0.01) is None


async def test_closed_connection_refuses_writes():
    conn = QueueConnection()
    conn.close()
    with pytest.raises(ConnectionError):
        await conn.send("late")
