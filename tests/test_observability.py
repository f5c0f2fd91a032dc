"""Tests for the optional Logfire backend."""

from __future__ import annotations

import logging
import sys

from memsession.backends.observability import logfire as logfire_backend


def test_configure_is_noop_without_token(monkeypatch):
    monkeypatch.delenv("LOGFIRE_TOKEN", raising=False)
    logfire_backend.reset()

    assert logfire_backend.configure() is False
    # Second call short-circuits
    assert logfire_backend.configure() is True
    logfire_backend.reset()


def test_configure_warns_when_package_missing(monkeypatch, caplog):
    monkeypatch.setenv("LOGFIRE_TOKEN", "token")
    monkeypatch.setitem(sys.modules, "logfire", None)
    logfire_backend.reset()

    with caplog.at_level(logging.WARNING, logger="memsession"):
        assert logfire_backend.configure() is False

    assert any("logfire is not installed" in r.getMessage() for r in caplog.records)
    logfire_backend.reset()
