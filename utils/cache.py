"""
Per-key TTL Caching

Generic in-memory cache with a fixed time-to-live per cache instance.
Absorbs upstream latency and rate limits for per-wallet payloads.
"""
import asyncio
import time
import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")


@dataclass
class CacheEntry(Generic[V]):
    """Cache entry with value and insertion time"""
    value: V
    inserted_at: float

    def is_fresh(self, now: float, ttl: float) -> bool:
        """Entry is valid while its age is strictly below the TTL"""
        return (now - self.inserted_at) < ttl


@dataclass
class CacheStats:
    """Cache statistics"""
    name: str
    cache_hits: int = 0
    cache_misses: int = 0
    cache_sets: int = 0
    expirations: int = 0
    evictions: int = 0

    @property
    def cache_hit_rate(self) -> float:
        """Calculate cache hit rate"""
        total = self.cache_hits + self.cache_misses
        return self.cache_hits / total if total > 0 else 0.0


class TTLCache(Generic[K, V]):
    """
    In-memory key -> value cache with one TTL for every entry.

    Features:
    - Lazy expiry: stale entries read as missing and are dropped on access
    - put() always supersedes the previous entry and restarts its clock
    - Optional max_size with least-recently-inserted eviction
    - Safe for concurrent coroutines (single asyncio.Lock)

    Without max_size the cache grows with every distinct key for the life of
    the process.
    """

    def __init__(
        self,
        ttl_seconds: float,
        *,
        name: str = "cache",
        max_size: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_size is not None and max_size <= 0:
            raise ValueError("max_size must be positive when set")

        self.ttl_seconds = ttl_seconds
        self.name = name
        self.max_size = max_size
        self._clock = clock
        self._entries: "OrderedDict[K, CacheEntry[V]]" = OrderedDict()
        self._lock = asyncio.Lock()
        self.stats = CacheStats(name=name)

        logger.info(
            f"TTLCache '{name}' initialized: ttl={ttl_seconds}s, "
            f"max_size={max_size if max_size is not None else 'unbounded'}"
        )

    async def get(self, key: K) -> Tuple[Optional[V], bool]:
        """
        Look up a key.

        Returns:
            (value, True) for a fresh entry, (None, False) when the key is
            absent or its entry has outlived the TTL
        """
        async with self._lock:
            entry = self._entries.get(key)

            if entry is None:
                self.stats.cache_misses += 1
                logger.debug(f"Cache MISS [{self.name}]: {key}")
                return None, False

            now = self._clock()
            if not entry.is_fresh(now, self.ttl_seconds):
                del self._entries[key]
                self.stats.cache_misses += 1
                self.stats.expirations += 1
                logger.debug(
                    f"Cache EXPIRED [{self.name}]: {key} "
                    f"(age: {now - entry.inserted_at:.1f}s)"
                )
                return None, False

            self.stats.cache_hits += 1
            logger.debug(
                f"Cache HIT [{self.name}]: {key} (age: {now - entry.inserted_at:.1f}s)"
            )
            return entry.value, True

    async def put(self, key: K, value: V) -> None:
        """Store value under key, replacing any previous entry."""
        async with self._lock:
            # Re-inserting moves the key to the newest position
            self._entries.pop(key, None)

            if self.max_size is not None:
                while len(self._entries) >= self.max_size:
                    oldest_key, _ = self._entries.popitem(last=False)
                    self.stats.evictions += 1
                    logger.debug(f"Cache EVICT [{self.name}]: {oldest_key}")

            self._entries[key] = CacheEntry(value=value, inserted_at=self._clock())
            self.stats.cache_sets += 1
            logger.debug(f"Cache SET [{self.name}]: {key} (ttl: {self.ttl_seconds}s)")

    def __len__(self) -> int:
        return len(self._entries)

    def get_info(self) -> Dict[str, Any]:
        """Get cache info"""
        return {
            "name": self.name,
            "size": len(self._entries),
            "max_size": self.max_size,
            "ttl_seconds": self.ttl_seconds,
            "hits": self.stats.cache_hits,
            "misses": self.stats.cache_misses,
            "hit_rate": round(self.stats.cache_hit_rate, 4),
            "expirations": self.stats.expirations,
            "evictions": self.stats.evictions,
        }
