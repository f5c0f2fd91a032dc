"""memsession — memcached session storage for web-session middleware.

File guide
----------
settings.py                        Configuration (memsession.yaml, .env, env vars)
session.py                         SessionStore interface + create_session_store factory
backends/session/memcached.py      MemcachedSessionStore (pymemcache HashClient by default)
backends/session/memory.py         MemoryCacheClient, in-process cache client (cachetools)
backends/observability/logfire.py  Optional Logfire forwarding of store logs

Public API
----------
- ``MemcachedSessionStore`` — the store; get/set/touch/destroy/length/clear coroutines
- ``MemoryCacheClient``     — drop-in client for single-process use and tests
- ``create_session_store``  — build a store from settings
"""

from memsession.backends.session.memcached import MemcachedSessionStore
from memsession.backends.session.memory import MemoryCacheClient
from memsession.session import SessionStore, create_session_store

__all__ = [
    "MemcachedSessionStore",
    "MemoryCacheClient",
    "SessionStore",
    "create_session_store",
]
