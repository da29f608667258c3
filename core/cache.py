# core/cache.py

"""
In-memory cache of resolved user contexts.

Resolving a context costs a profile read plus a relationship query
(owned properties or active leases), so the result is reused for a fixed
TTL. Entries are keyed by principal id.

Concurrent resolutions for the same user may both write; the last write
wins. The lock only protects the dict itself, resolution is never
serialized.
"""

import time
from typing import Callable, Dict, Optional, TYPE_CHECKING
from threading import Lock

from core.config import settings
from core.logging_config import logger

if TYPE_CHECKING:
    from core.context import UserContext


class CacheEntry:
    """A cached context with the time it was written."""

    def __init__(self, context: "UserContext", timestamp: float):
        self.context = context
        self.timestamp = timestamp

    def is_fresh(self, now: float, ttl_seconds: float) -> bool:
        return now - self.timestamp < ttl_seconds


class ContextCache:
    """
    Process-wide context cache with TTL support.

    `clock` returns seconds and is injectable so tests can move time.
    """

    def __init__(self, ttl_seconds: float = 300, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = Lock()

    def get(self, user_id: str) -> Optional["UserContext"]:
        """
        Get a context from the cache.

        Returns:
            Cached context, or None on a miss or a stale entry
        """
        with self._lock:
            entry = self._entries.get(user_id)
            if entry is None:
                return None

            if not entry.is_fresh(self._clock(), self.ttl_seconds):
                del self._entries[user_id]
                logger.debug(f"Context cache expired: {user_id}")
                return None

            return entry.context

    def put(self, user_id: str, context: "UserContext"):
        with self._lock:
            self._entries[user_id] = CacheEntry(context, self._clock())

    def invalidate(self, user_id: Optional[str] = None):
        """
        Drop one user's entry, or every entry when no user is given
        (global sign-out).
        """
        with self._lock:
            if user_id is None:
                self._entries.clear()
                logger.info("Context cache cleared")
            else:
                self._entries.pop(user_id, None)
                logger.info(f"Context cache invalidated for user {user_id}")

    def cleanup_expired(self) -> int:
        """Remove all expired entries. Returns how many were dropped."""
        with self._lock:
            now = self._clock()
            expired = [
                user_id for user_id, entry in self._entries.items()
                if not entry.is_fresh(now, self.ttl_seconds)
            ]
            for user_id in expired:
                del self._entries[user_id]
            return len(expired)

    def size(self) -> int:
        with self._lock:
            return len(self._entries)


# Global cache instance
_context_cache = ContextCache(ttl_seconds=settings.CONTEXT_CACHE_TTL_SECONDS)


def get_context_cache() -> ContextCache:
    """Get the global context cache instance."""
    return _context_cache
