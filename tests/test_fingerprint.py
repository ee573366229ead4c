"""Tests for payload fingerprinting, live counting and the TTL policy."""

from __future__ import annotations

import pytest

from conftest import make_payload
from livescores.errors import SerializationError
from livescores.services.fingerprint import count_live_games, fingerprint, ttl_for


def test_fingerprint_is_deterministic():
    payload = make_payload("in", "pre")
    assert fingerprint(payload) == fingerprint(payload)


def test_fingerprint_ignores_key_order():
    a = {"events": [{"id": "1", "score": 7}], "season": 2025}
    b = {"season": 2025, "events": [{"score": 7, "id": "1"}]}
    assert fingerprint(a) == fingerprint(b)


def test_fingerprint_changes_with_any_field():
    base = make_payload("in")
    changed = make_payload("in")
    changed["events"][0]["name"] = "Different"
    assert fingerprint(base) != fingerprint(changed)
    assert fingerprint(base) != fingerprint(make_payload("in", note="x"))


def test_fingerprint_rejects_unserializable():
    with pytest.raises(SerializationError):
        fingerprint({"when": object()})


def test_count_live_games():
    assert count_live_games(make_payload("pre", "in", "in", "post")) == 2
    assert count_live_games(make_payload("pre", "post")) == 0


@pytest.mark.parametrize("payload", [None, [], {}, {"events": None}, {"events": [None, 3, {"status": "in"}]}])
def test_count_live_games_tolerates_schema_drift(payload):
    assert count_live_games(payload) == 0


def test_live_ttl_shorter_than_idle():
    assert ttl_for(1) < ttl_for(0)
    assert ttl_for(0) == 120
    assert ttl_for(3) == 20
    assert ttl_for(2, live_ttl=5, idle_ttl=60) == 5
