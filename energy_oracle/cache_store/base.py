"""Shared protocol and types for cache storage backends."""

from dataclasses import dataclass
from typing import Any, List, Optional, Protocol


@dataclass
class CacheEntry:
    """A cached value with the monotonic time it was stored and its TTL."""
    key: str
    value: Any
    stored_at: float
    ttl: float

    def is_valid(self, now: float) -> bool:
        """Return True while the entry is younger than its TTL."""
        return now - self.stored_at < self.ttl


class CacheStore(Protocol):
    """Protocol for cache storage backends."""

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None if missing or expired."""

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        """Store a value, optionally overriding the default TTL."""

    def clear(self) -> None:
        """Drop every entry."""

    def keys(self) -> List[str]:
        """Return the keys of all entries that are still valid."""
