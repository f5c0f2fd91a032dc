"""Session state storage for web-session middleware.

Provides a memcached-backed store and an in-process variant sharing the same
client surface.

Usage:
    # memsession.yaml
    session:
      store: memcached
      servers:
        - cache-1:11211
        - cache-2:11211
      prefix: "sess:"
      touch_after: 60
      options:
        connect_timeout: 2
        timeout: 1

    # In-process store (single process, development)
    session:
      store: memory
      maxsize: 10000

    # Or via environment variables
    SESSION_STORE=memcached
    MEMCACHE_SERVERS=cache-1:11211,cache-2:11211
    SESSION_PREFIX=sess:
    SESSION_TOUCH_AFTER=60
"""
from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

from memsession.backends.session.memcached import MemcachedSessionStore
from memsession.backends.session.memory import MemoryCacheClient
from memsession.settings import SessionConfig, load_settings


class SessionStore(Protocol):
    """Interface a session middleware expects from its storage backend."""

    async def get(self, sid: str) -> dict[str, Any] | None:
        """Get session by ID. Returns None if not found."""
        ...

    async def set(self, sid: str, session: dict[str, Any]) -> Any:
        """Persist session."""
        ...

    async def destroy(self, sid: str) -> Any:
        """Delete session."""
        ...

    async def touch(self, sid: str, session: dict[str, Any]) -> Any:
        """Refresh session expiry."""
        ...

    async def length(self) -> int | None:
        """Number of stored sessions, or None when the backend cannot count."""
        ...

    async def clear(self) -> Any:
        """Remove all sessions."""
        ...

    def on(self, event: str, listener: Callable[..., Any]) -> None:
        """Register a listener for store events (e.g. ``destroy``)."""
        ...

    def off(self, event: str, listener: Callable[..., Any]) -> None:
        """Remove a previously registered listener."""
        ...


def _load_session_config() -> SessionConfig:
    return load_settings().session


def create_session_store(client: Any | None = None) -> SessionStore:
    """Factory to create session store based on config.

    Precedence for all fields: env vars > memsession.yaml > defaults.
    An explicit ``client`` is used as-is regardless of the configured store.
    """
    cfg = _load_session_config()

    if client is None and cfg.store == "memory":
        client = MemoryCacheClient(maxsize=cfg.maxsize)
    elif client is None and cfg.store != "memcached":
        raise ValueError(
            f"Unknown session store {cfg.store!r}. "
            "Set session.store to 'memcached' or 'memory' in memsession.yaml (or SESSION_STORE)."
        )

    return MemcachedSessionStore(
        client=client,
        servers=cfg.servers,
        prefix=cfg.prefix,
        touch_after=cfg.touch_after,
        debug=cfg.debug,
        **cfg.options,
    )
