"""In-memory cache store with per-entry TTL."""

import threading
import time
from typing import Any, Callable, Optional

from energy_oracle.cache_store.base import CacheEntry, CacheStore

from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="cache_store/in_memory_cache_store")

DEFAULT_TTL_SECONDS = 300


class InMemoryCacheStore(CacheStore):
    """Thread-safe, TTL-aware in-memory cache.

    Expired entries are removed lazily, on the lookup that finds them stale.
    """

    def __init__(self, default_ttl_seconds: float = DEFAULT_TTL_SECONDS,
                 clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize the store with a default TTL (seconds) and a monotonic clock."""
        logger.debug("Initializing InMemoryCacheStore")
        self.default_ttl = default_ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None if missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not entry.is_valid(self._clock()):
                self._entries.pop(key, None)
                logger.debug("Cache entry expired", extra={"key": key})
                return None
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        """Store a value under `key`, replacing any previous entry."""
        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        with self._lock:
            self._entries[key] = CacheEntry(key=key, value=value, stored_at=self._clock(), ttl=ttl)

    def clear(self) -> None:
        """Clear all entries."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info("Oracle cache cleared", extra={"entries": count})

    def keys(self) -> list[str]:
        """Return the keys of entries that are still valid."""
        now = self._clock()
        with self._lock:
            return [key for key, entry in self._entries.items() if entry.is_valid(now)]

    def __len__(self) -> int:
        """Number of entries that are still valid."""
        return len(self.keys())
