"""
Cache Manager Utility
====================

Provides in-memory caching for resolved remote object references.
Handles TTL expiry, size management and cache statistics.

Key Features:
- In-memory caching with configurable TTL
- LRU eviction when cache size limit is reached
- Cache statistics
- Thread-safe operations for concurrent access
- Background cleanup of expired entries

Classes:
    CacheManager: Main caching interface
    CacheEntry: Internal cache entry with metadata
    CacheStats: Cache performance statistics

Author: Alitheia Core Team
"""

import logging
import time
from typing import Any, Optional, Dict
from dataclasses import dataclass
import threading
from collections import OrderedDict

# Import configuration
from ..config import config


@dataclass
class CacheEntry:
    """
    Internal cache entry with metadata

    Attributes:
        data (Any): Cached data
        timestamp (float): When entry was created (monotonic clock)
        ttl (int): Time-to-live in seconds, 0 or less never expires
        access_count (int): Number of times accessed
        last_access (float): Last access timestamp
    """
    data: Any
    timestamp: float
    ttl: int
    access_count: int = 0
    last_access: float = 0

    def is_expired(self) -> bool:
        """Check if cache entry has expired"""
        if self.ttl <= 0:
            return False
        return time.monotonic() - self.timestamp > self.ttl

    def touch(self) -> None:
        """Update access statistics"""
        self.access_count += 1
        self.last_access = time.monotonic()


@dataclass
class CacheStats:
    """
    Cache performance statistics

    Attributes:
        hits (int): Number of cache hits
        misses (int): Number of cache misses
        sets (int): Number of cache sets
        evictions (int): Number of evicted entries
        expired (int): Number of expired entries cleaned
        total_size (int): Current cache size
        max_size (int): Maximum cache size
    """
    hits: int = 0
    misses: int = 0
    sets: int = 0
    evictions: int = 0
    expired: int = 0
    total_size: int = 0
    max_size: int = 0

    def hit_rate(self) -> float:
        """Calculate cache hit rate"""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def to_dict(self) -> Dict:
        """Convert stats to dictionary"""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "evictions": self.evictions,
            "expired": self.expired,
            "total_size": self.total_size,
            "max_size": self.max_size,
            "hit_rate": self.hit_rate()
        }


class CacheManager:
    """
    Main caching interface with in-memory storage
    Thread-safe implementation with LRU eviction and TTL support
    """

    def __init__(self, max_size: int = None, default_ttl: int = None,
                 cleanup_interval: float = 60.0, enable_cleanup_thread: bool = True):
        """
        Initialize Cache Manager

        Args:
            max_size (int): Maximum number of cache entries (default from config)
            default_ttl (int): Default TTL in seconds (default from config)
            cleanup_interval (float): Seconds between background expiry sweeps
            enable_cleanup_thread (bool): Whether to run the background sweeper
        """
        self.logger = logging.getLogger(__name__)

        self.max_size = max_size or config.CACHE_MAX_SIZE
        self.default_ttl = default_ttl if default_ttl is not None else config.RESOLVER_CACHE_TTL
        self.cleanup_interval = cleanup_interval

        self._lock = threading.RLock()

        # Cache storage (using OrderedDict for LRU)
        self._cache: "OrderedDict[str, CacheEntry]" = OrderedDict()

        self.stats = CacheStats(max_size=self.max_size)

        self._stop_event = threading.Event()
        self._cleanup_thread: Optional[threading.Thread] = None
        if enable_cleanup_thread:
            self._cleanup_thread = threading.Thread(
                target=self._cleanup_loop, name="cache-cleanup", daemon=True
            )
            self._cleanup_thread.start()

        self.logger.debug(f"Cache Manager initialized (max_size={self.max_size}, ttl={self.default_ttl})")

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache

        Args:
            key (str): Cache key

        Returns:
            Any: Cached value or None if not found/expired
        """
        with self._lock:
            if key not in self._cache:
                self.stats.misses += 1
                self.logger.debug(f"Cache miss: {key}")
                return None

            entry = self._cache[key]

            if entry.is_expired():
                self._remove_entry(key)
                self.stats.misses += 1
                self.stats.expired += 1
                self.logger.debug(f"Cache expired: {key}")
                return None

            entry.touch()
            self._cache.move_to_end(key)

            self.stats.hits += 1
            self.logger.debug(f"Cache hit: {key}")

            return entry.data

    def set(self, key: str, value: Any, ttl: int = None) -> None:
        """
        Set value in cache

        Args:
            key (str): Cache key
            value (Any): Value to cache
            ttl (int): Time-to-live in seconds (default: use default_ttl)
        """
        with self._lock:
            ttl = ttl if ttl is not None else self.default_ttl

            entry = CacheEntry(
                data=value,
                timestamp=time.monotonic(),
                ttl=ttl
            )

            if key in self._cache:
                self._cache[key] = entry
                self._cache.move_to_end(key)
            else:
                self._cache[key] = entry

                if len(self._cache) > self.max_size:
                    self._evict_lru()

            self.stats.total_size = len(self._cache)
            self.stats.sets += 1
            self.logger.debug(f"Cache set: {key} (TTL: {ttl}s)")

    def delete(self, key: str) -> bool:
        """
        Delete key from cache

        Args:
            key (str): Cache key

        Returns:
            bool: True if key was deleted, False if not found
        """
        with self._lock:
            if key in self._cache:
                self._remove_entry(key)
                self.logger.debug(f"Cache deleted: {key}")
                return True

            return False

    def clear(self) -> None:
        """Clear all cache entries"""
        with self._lock:
            self._cache.clear()
            self.stats = CacheStats(max_size=self.max_size)
            self.logger.debug("Cache cleared")

    def has_key(self, key: str) -> bool:
        """
        Check if key exists in cache (and is not expired)

        Args:
            key (str): Cache key

        Returns:
            bool: True if key exists and is valid
        """
        with self._lock:
            if key not in self._cache:
                return False

            entry = self._cache[key]
            if entry.is_expired():
                self._remove_entry(key)
                return False

            return True

    def get_stats(self) -> CacheStats:
        """Get cache statistics"""
        with self._lock:
            self.stats.total_size = len(self._cache)
            return self.stats

    def get_keys(self) -> list:
        """Get list of all cache keys"""
        with self._lock:
            return list(self._cache.keys())

    def cleanup_expired(self) -> int:
        """
        Manually cleanup expired entries

        Returns:
            int: Number of entries cleaned
        """
        with self._lock:
            expired_keys = [key for key, entry in self._cache.items() if entry.is_expired()]

            for key in expired_keys:
                self._remove_entry(key)
                self.stats.expired += 1

            if expired_keys:
                self.logger.debug(f"Cleaned {len(expired_keys)} expired cache entries")

            return len(expired_keys)

    def _evict_lru(self) -> None:
        """Evict least recently used entry"""
        if not self._cache:
            return

        lru_key = next(iter(self._cache))
        self._remove_entry(lru_key)
        self.stats.evictions += 1

        self.logger.debug(f"Evicted LRU entry: {lru_key}")

    def _remove_entry(self, key: str) -> None:
        """Remove entry from cache"""
        if key in self._cache:
            del self._cache[key]
            self.stats.total_size = len(self._cache)

    def _cleanup_loop(self) -> None:
        """Background thread to cleanup expired entries"""
        while not self._stop_event.wait(self.cleanup_interval):
            try:
                self.cleanup_expired()
            except Exception as e:
                self.logger.error(f"Error in cache cleanup thread: {e}")

    def shutdown(self) -> None:
        """Stop the background cleanup thread"""
        self._stop_event.set()
        if self._cleanup_thread is not None and self._cleanup_thread.is_alive():
            self._cleanup_thread.join(timeout=5)

        self.logger.debug("Cache Manager shutdown complete")
