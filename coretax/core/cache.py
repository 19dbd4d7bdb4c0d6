"""In-process response cache.

A bounded map of key to (value, expiry). Entries disappear when their TTL
elapses or when a write invalidates every key sharing a prefix. Once the
map is full the entries closest to expiry are evicted first.
"""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from functools import lru_cache

from loguru import logger

from coretax.core.config import CacheConfig, get_settings


class CacheProfile(StrEnum):
    """Named TTL profiles, resolved against ``CacheConfig``."""

    STATIC = "static"
    USER = "user"
    REALTIME = "realtime"
    DASHBOARD = "dashboard"


@dataclass(slots=True)
class _Entry:
    value: object
    expires_at: float


class ResponseCache:
    """Thread-safe TTL cache with prefix invalidation.

    Args:
        config: TTL profiles and the entry limit.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self, config: CacheConfig, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self._config = config
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def ttl_for(self, profile: CacheProfile) -> int:
        match profile:
            case CacheProfile.STATIC:
                return self._config.static_ttl_seconds
            case CacheProfile.USER:
                return self._config.user_ttl_seconds
            case CacheProfile.REALTIME:
                return self._config.realtime_ttl_seconds
            case CacheProfile.DASHBOARD:
                return self._config.dashboard_ttl_seconds

    def get(self, key: str) -> object | None:
        """Return the cached value, or None when missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                del self._entries[key]
                return None
            return entry.value

    def set(
        self, key: str, value: object, profile: CacheProfile = CacheProfile.USER
    ) -> None:
        with self._lock:
            now = self._clock()
            if key not in self._entries and len(self._entries) >= self._config.max_entries:
                self._evict(now)
            self._entries[key] = _Entry(value, now + self.ttl_for(profile))

    def invalidate_prefix(self, prefix: str) -> int:
        """Drop every key starting with ``prefix``; returns how many were dropped."""
        with self._lock:
            stale = [key for key in self._entries if key.startswith(prefix)]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug("Invalidated {} cache entries for {}", len(stale), prefix)
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def _evict(self, now: float) -> None:
        # Caller holds the lock
        for key in [k for k, e in self._entries.items() if e.expires_at <= now]:
            del self._entries[key]
        if len(self._entries) >= self._config.max_entries:
            oldest = min(self._entries, key=lambda k: self._entries[k].expires_at)
            del self._entries[oldest]


@lru_cache
def get_response_cache() -> ResponseCache:
    """Process-wide cache instance."""
    return ResponseCache(get_settings().cache_config)


def cache_key(*parts: object) -> str:
    """Join key parts with ``:``; prefixes used for invalidation end with ``:``.

    Examples:
        >>> cache_key("notifications", 7, "page=1")
        'notifications:7:page=1'
    """
    return ":".join(str(part) for part in parts)
