"""Tests for the in-memory cache client."""

from __future__ import annotations

import time

from memsession.backends.session.memory import MemoryCacheClient


def test_set_get_delete():
    client = MemoryCacheClient()
    assert client.set("k", "value") is True
    assert client.get("k") == b"value"
    assert client.delete("k") is True
    assert client.delete("k") is False
    assert client.get("k") is None


def test_get_default_for_missing_key():
    client = MemoryCacheClient()
    assert client.get("missing", default=b"x") == b"x"


def test_relative_expiry(monkeypatch):
    now = [1_000.0]
    monkeypatch.setattr(time, "time", lambda: now[0])
    client = MemoryCacheClient()

    client.set("k", b"v", expire=5)
    now[0] += 4
    assert client.get("k") == b"v"
    now[0] += 2
    assert client.get("k") is None


def test_absolute_expiry_beyond_thirty_days(monkeypatch):
    now = [1_700_000_000.0]
    monkeypatch.setattr(time, "time", lambda: now[0])
    client = MemoryCacheClient()

    client.set("k", b"v", expire=int(now[0]) + 60)
    now[0] += 59
    assert client.get("k") == b"v"
    now[0] += 2
    assert client.get("k") is None


def test_zero_expiry_never_expires(monkeypatch):
    now = [1_000.0]
    monkeypatch.setattr(time, "time", lambda: now[0])
    client = MemoryCacheClient()

    client.set("k", b"v")
    now[0] += 10 * 365 * 86400
    assert client.get("k") == b"v"


def test_maxsize_bounds_entries():
    client = MemoryCacheClient(maxsize=2)
    client.set("a", b"1", expire=10)
    client.set("b", b"2", expire=20)
    client.set("c", b"3", expire=30)

    assert len(client) == 2
    assert client.get("c") == b"3"


def test_flush_all():
    client = MemoryCacheClient()
    client.set("a", b"1")
    client.set("b", b"2")

    assert client.flush_all() is True
    assert len(client) == 0
