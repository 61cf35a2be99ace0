"""
Response Cache

TTL-keyed store of normalized responses. Expired entries are treated as
absent on read and deleted at that point. When a write pushes the store past
max_entries, every expired entry is swept inline, so no background timer is
needed.

The store is thread-safe using threading.Lock; no awaits happen while the
lock is held.
"""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass
class CacheEntry:
    """Stored value and its monotonic expiry time."""

    value: Any
    expires_at: float


class ResponseCache:
    """
    Thread-safe in-memory TTL cache.

    Example:
        cache = ResponseCache(max_entries=1000)
        cache.set("GET:https://api/x:", response, ttl_seconds=60)
        cache.get("GET:https://api/x:")  # response until 60s have passed
    """

    def __init__(
        self,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._max_entries = max_entries
        self._clock = clock
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None if missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() >= entry.expires_at:
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store a value for ttl_seconds, sweeping expired entries when full."""
        with self._lock:
            now = self._clock()
            self._entries[key] = CacheEntry(value=value, expires_at=now + ttl_seconds)
            if len(self._entries) > self._max_entries:
                self._sweep(now)

    def _sweep(self, now: float) -> int:
        expired = [k for k, e in self._entries.items() if now >= e.expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> int:
        """Drop every entry. Returns the number removed."""
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
            return removed

    def stats(self) -> dict[str, int]:
        """Entry counts: total, still valid, expired but not yet removed."""
        with self._lock:
            now = self._clock()
            expired = sum(1 for e in self._entries.values() if now >= e.expires_at)
            total = len(self._entries)
            return {"total": total, "valid": total - expired, "expired": expired}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
