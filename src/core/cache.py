#!/usr/bin/env python3
"""
In-Memory Caching System

Provides a lightweight in-memory key/value store with per-entry TTL.

Expiry is lazy: an entry is visible while ``now <= expires_at`` and is
deleted by the read that finds it expired. There is no background sweep,
no size bound and no delete operation; a later ``set`` on the same key
replaces the entry (last write wins).

One instance is shared by every consumer in the process. It is built by the
service container and passed in explicitly, never imported as a global.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A single cache entry."""
    key: str
    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        """Check if this entry has expired at the given time."""
        return now > self.expires_at


class TTLCache:
    """
    In-memory cache with per-entry time-to-live.

    Features:
    - TTL expiration checked on read
    - Expired entries removed by the read that discovers them
    - Injectable clock for deterministic tests
    - Hit/miss statistics
    """

    def __init__(self, now: Optional[Callable[[], float]] = None):
        """
        Initialize cache.

        Args:
            now: Function returning the current time in seconds (defaults to time.time)
        """
        self._now = now or time.time
        self._store: Dict[str, CacheEntry] = {}

        # Statistics
        self._stats = {
            'hits': 0,
            'misses': 0,
            'sets': 0,
            'expired': 0
        }

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get value from cache.

        Args:
            key: Cache key
            default: Value returned when the key is absent or expired

        Returns:
            Cached value or default
        """
        entry = self._store.get(key)

        if entry is None:
            self._stats['misses'] += 1
            return default

        if entry.is_expired(self._now()):
            del self._store[key]
            self._stats['misses'] += 1
            self._stats['expired'] += 1
            logger.debug(f"Cache key expired: {key}")
            return default

        self._stats['hits'] += 1
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """
        Set value in cache.

        Args:
            key: Cache key
            value: Value to cache
            ttl_seconds: Time-to-live in seconds
        """
        self._store[key] = CacheEntry(
            key=key,
            value=value,
            expires_at=self._now() + ttl_seconds
        )
        self._stats['sets'] += 1
        logger.debug(f"Cached key: {key} (TTL: {ttl_seconds}s)")

    def __contains__(self, key: str) -> bool:
        """Membership test without touching statistics or evicting."""
        entry = self._store.get(key)
        return entry is not None and not entry.is_expired(self._now())

    def __len__(self) -> int:
        """Number of stored entries, including expired ones not yet read."""
        return len(self._store)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        total_requests = self._stats['hits'] + self._stats['misses']
        hit_rate = (self._stats['hits'] / total_requests * 100) if total_requests > 0 else 0

        return {
            'entries': len(self._store),
            'hits': self._stats['hits'],
            'misses': self._stats['misses'],
            'hit_rate': hit_rate,
            'sets': self._stats['sets'],
            'expired': self._stats['expired']
        }
