"""In-memory TTL cache shared by all requests of one server process.

Entries expire lazily: a read that finds an expired entry removes it and
reports a miss. There is no size bound; the key space is the small set of
distinct queries a single process issues. Nothing survives a restart.

The cache is constructed once at startup and injected into the client, so
tests can build isolated instances.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Hashable
from typing import Any

import structlog

from gemcontext.models.cache import CacheEntry

log = structlog.get_logger()


class Cache:
    """Thread-safe key/value store with per-entry expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[Hashable, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Any | None:
        """Return the cached value, or ``None`` on a miss or an expired entry."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() >= entry.expires_at:
                del self._entries[key]
                log.debug("cache_expired", key=key)
                return None
            return entry.value

    def set(self, key: Hashable, value: Any, ttl: float) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
