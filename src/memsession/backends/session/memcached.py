"""Memcached-backed session store backend."""

from __future__ import annotations

import asyncio
import json
import logging
import math
import time
from collections import defaultdict
from collections.abc import Callable
from datetime import datetime
from typing import Any

from memsession.backends.session.memory import MAX_RELATIVE_EXPIRE
from memsession.settings import DEFAULT_SERVERS, env_servers, parse_servers

logger = logging.getLogger(__name__)

ONE_DAY = 86400


def _now_ms() -> int:
    return int(time.time() * 1000)


def _epoch_ms(value: Any) -> int:
    """Normalize a stored lastModified value to milliseconds since the epoch.

    Accepts numbers (already ms), ISO-8601 strings and datetimes. Anything
    else counts as "never modified".
    """
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, datetime):
        return int(value.timestamp() * 1000)
    if isinstance(value, str):
        try:
            return int(datetime.fromisoformat(value.strip()).timestamp() * 1000)
        except ValueError:
            return 0
    return 0


def session_ttl(session: dict[str, Any]) -> int:
    """TTL in seconds derived from ``cookie.maxAge`` (ms), one day by default."""
    cookie = session.get("cookie")
    max_age = cookie.get("maxAge") if isinstance(cookie, dict) else None
    if isinstance(max_age, bool) or not isinstance(max_age, (int, float)):
        return ONE_DAY
    if not math.isfinite(max_age):
        return ONE_DAY
    ttl = math.floor(max_age / 1000)
    # 0 means "never expire" to memcached; negative values are already expired
    return 1 if ttl == 0 else ttl


def memcached_expire(ttl: int) -> int:
    """Translate a relative TTL into the value memcached expects."""
    if ttl > MAX_RELATIVE_EXPIRE:
        return int(time.time()) + ttl
    return ttl


class MemcachedSessionStore:
    """Memcached-backed session store.

    Suitable for multi-worker deployments sharing one or more memcached
    servers. Every operation is a coroutine; the blocking client call runs in
    a worker thread. Callers that do not need the result can schedule the
    coroutine with ``asyncio.create_task`` and move on.

    Client errors are logged and re-raised unchanged. Unreadable payloads are
    treated as a missing session.
    """

    def __init__(
        self,
        client: Any | None = None,
        servers: list[str] | str | None = None,
        prefix: str = "",
        touch_after: int = 0,
        debug: bool = False,
        **client_options: Any,
    ):
        if touch_after < 0:
            raise ValueError(f"touch_after must be >= 0 seconds, got {touch_after}")
        self.prefix = prefix or ""
        self.touch_after = int(touch_after)
        self.debug = bool(debug)
        self._listeners: dict[str, list[Callable[..., Any]]] = defaultdict(list)

        if client is None:
            from pymemcache.client.hash import HashClient

            server_list = parse_servers(servers) or env_servers() or list(DEFAULT_SERVERS)
            client = HashClient(server_list, **client_options)
            self._owns_client = True
            if self.debug:
                logger.info("pymemcache initialized for servers: %s", ",".join(server_list))
        else:
            self._owns_client = False
        self.client = client

    def get_key(self, sid: str) -> str:
        """Translate ``sid`` into a memcached key."""
        return self.prefix + sid

    # -- events ---------------------------------------------------------

    def on(self, event: str, listener: Callable[..., Any]) -> None:
        self._listeners[event].append(listener)

    def off(self, event: str, listener: Callable[..., Any]) -> None:
        try:
            self._listeners[event].remove(listener)
        except ValueError:
            pass

    def emit(self, event: str, *args: Any) -> None:
        for listener in list(self._listeners.get(event, ())):
            try:
                listener(*args)
            except Exception:
                logger.exception("Session %s listener failed", event)

    # -- store operations -----------------------------------------------

    async def get(self, sid: str) -> dict[str, Any] | None:
        """Fetch the session for ``sid``. Returns None if absent or unreadable."""
        start = time.perf_counter()
        key = self.get_key(sid)
        try:
            try:
                data = await asyncio.to_thread(self.client.get, key)
            except Exception as e:
                logger.error("Session GET failed: %s", e)
                raise
            if not data:
                return None
            return self._decode(key, data)
        finally:
            if self.debug:
                logger.info("Session GET took %dms", (time.perf_counter() - start) * 1000)

    def _decode(self, key: str, data: bytes | str) -> dict[str, Any] | None:
        try:
            if isinstance(data, bytes):
                data = data.decode("utf-8")
            session = json.loads(data)
        except ValueError:
            logger.warning("Parsing session data failed for %s, treating as missing", key)
            return None
        if not isinstance(session, dict):
            logger.warning("Session data for %s is not an object, treating as missing", key)
            return None
        return session

    async def set(self, sid: str, session: dict[str, Any]) -> Any:
        """Persist ``session`` under ``sid`` with a TTL taken from its cookie.

        When touch tracking is on, ``session["lastModified"]`` is stamped in
        place once the session has been serialized.
        """
        start = time.perf_counter()
        key = self.get_key(sid)
        ttl = session_ttl(session)
        if self.touch_after > 0:
            last_modified = _now_ms()
            payload = json.dumps({**session, "lastModified": last_modified}).encode("utf-8")
            session["lastModified"] = last_modified
        else:
            payload = json.dumps(session).encode("utf-8")
        try:
            result = await asyncio.to_thread(
                self.client.set, key, payload, expire=memcached_expire(ttl), noreply=False
            )
        except Exception as e:
            logger.error("Session SET failed: %s", e)
            raise

        if self.debug:
            logger.info(
                "Session SET %s (ttl=%ds) took %dms",
                key,
                ttl,
                (time.perf_counter() - start) * 1000,
            )
        return result

    async def touch(self, sid: str, session: dict[str, Any]) -> Any:
        """Refresh the TTL for ``sid`` by rewriting, at most once per touch window."""
        touch_window = self.touch_after * 1000
        last_modified = _epoch_ms(session.get("lastModified"))

        if touch_window > 0 and last_modified > 0:
            elapsed = _now_ms() - last_modified
            if elapsed < touch_window:
                return None
            return await self.set(sid, session)
        return None

    async def destroy(self, sid: str) -> Any:
        """Delete the session for ``sid``, emitting ``destroy`` first."""
        key = self.get_key(sid)
        self.emit("destroy", sid)
        try:
            return await asyncio.to_thread(self.client.delete, key, noreply=False)
        except Exception as e:
            logger.error("Session DESTROY failed: %s", e)
            raise

    async def length(self) -> int | None:
        # memcached cannot enumerate or count keys
        return None

    async def clear(self) -> Any:
        """Flush every key on the shared servers, not only this store's prefix."""
        try:
            return await asyncio.to_thread(self.client.flush_all, noreply=False)
        except Exception as e:
            logger.error("Session CLEAR failed: %s", e)
            raise

    def close(self) -> None:
        """Close the client if this store created it."""
        if self._owns_client:
            self.client.close()
