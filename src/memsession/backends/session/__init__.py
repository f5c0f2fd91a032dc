"""Session storage backends (memcached, memory)."""

from memsession.backends.session.memcached import MemcachedSessionStore
from memsession.backends.session.memory import MemoryCacheClient

__all__ = ["MemcachedSessionStore", "MemoryCacheClient"]
