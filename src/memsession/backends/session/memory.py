"""In-memory cache client backend."""

from __future__ import annotations

import threading
import time
from typing import Any

from cachetools import TLRUCache

# memcached reads relative expiry values above 30 days as Unix timestamps
MAX_RELATIVE_EXPIRE = 60 * 60 * 24 * 30


def _expires_at(expire: int, now: float) -> float:
    if not expire:
        return float("inf")
    if expire > MAX_RELATIVE_EXPIRE:
        return float(expire)
    return now + expire


class MemoryCacheClient:
    """In-memory cache client using cachetools TLRUCache.

    Mirrors the subset of the pymemcache client surface the session store
    uses (get, set, delete, flush_all), including memcached's expiry rules.
    Suitable for single-process deployments, development and tests.
    """

    def __init__(self, maxsize: int = 10000):
        self._cache: TLRUCache = TLRUCache(
            maxsize=maxsize,
            ttu=lambda _key, value, now: _expires_at(value[1], now),
            timer=time.time,
        )
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> bytes | None:
        with self._lock:
            entry = self._cache.get(key)
        return entry[0] if entry is not None else default

    def set(self, key: str, value: bytes | str, expire: int = 0, noreply: bool | None = None) -> bool:
        if isinstance(value, str):
            value = value.encode("utf-8")
        with self._lock:
            self._cache[key] = (bytes(value), int(expire))
        return True

    def delete(self, key: str, noreply: bool | None = None) -> bool:
        with self._lock:
            return self._cache.pop(key, None) is not None

    def flush_all(self, delay: int = 0, noreply: bool | None = None) -> bool:
        with self._lock:
            self._cache.clear()
        return True

    def close(self) -> None:
        pass

    def __len__(self) -> int:
        with self._lock:
            self._cache.expire()
            return len(self._cache)
