"""Tests for the per-key TTL cache."""

import asyncio

import pytest

from utils.cache import TTLCache


class TestTTLCacheExpiry:
    """Entries are valid strictly before inserted_at + ttl."""

    @pytest.mark.asyncio
    async def test_hit_within_ttl(self, clock):
        cache = TTLCache(120, name="test", clock=clock)
        await cache.put("k", "v")

        clock.advance(119.999)
        assert await cache.get("k") == ("v", True)

    @pytest.mark.asyncio
    async def test_miss_at_exact_ttl(self, clock):
        cache = TTLCache(120, name="test", clock=clock)
        await cache.put("k", "v")

        clock.advance(120)
        assert await cache.get("k") == (None, False)

    @pytest.mark.asyncio
    async def test_miss_after_ttl_drops_entry(self, clock):
        cache = TTLCache(120, name="test", clock=clock)
        await cache.put("k", "v")

        clock.advance(120.001)
        assert await cache.get("k") == (None, False)
        assert len(cache) == 0
        assert cache.stats.expirations == 1

    @pytest.mark.asyncio
    async def test_absent_key(self, clock):
        cache = TTLCache(30, clock=clock)
        assert await cache.get("missing") == (None, False)
        assert cache.stats.cache_misses == 1


class TestTTLCachePut:

    @pytest.mark.asyncio
    async def test_overwrite_resets_timestamp(self, clock):
        cache = TTLCache(10, clock=clock)
        await cache.put("k", 1)
        clock.advance(8)
        await cache.put("k", 2)
        clock.advance(8)

        assert await cache.get("k") == (2, True)
        assert len(cache) == 1

    @pytest.mark.asyncio
    async def test_max_size_evicts_oldest_insert(self, clock):
        cache = TTLCache(60, max_size=2, clock=clock)
        await cache.put("a", 1)
        await cache.put("b", 2)
        await cache.put("c", 3)

        assert await cache.get("a") == (None, False)
        assert await cache.get("b") == (2, True)
        assert await cache.get("c") == (3, True)
        assert cache.stats.evictions == 1

    @pytest.mark.asyncio
    async def test_reinsert_refreshes_eviction_order(self, clock):
        cache = TTLCache(60, max_size=2, clock=clock)
        await cache.put("a", 1)
        await cache.put("b", 2)
        await cache.put("a", 10)
        await cache.put("c", 3)

        assert await cache.get("a") == (10, True)
        assert await cache.get("b") == (None, False)

    @pytest.mark.asyncio
    async def test_concurrent_puts_leave_one_entry_per_key(self, clock):
        cache = TTLCache(60, clock=clock)
        await asyncio.gather(*(cache.put(f"k{i % 5}", i) for i in range(50)))

        assert len(cache) == 5


class TestTTLCacheConfig:

    def test_rejects_non_positive_ttl(self):
        with pytest.raises(ValueError):
            TTLCache(0)

    def test_rejects_non_positive_max_size(self):
        with pytest.raises(ValueError):
            TTLCache(10, max_size=0)

    @pytest.mark.asyncio
    async def test_get_info(self, clock):
        cache = TTLCache(300, name="pnl_history", clock=clock)
        await cache.put("k", "v")
        await cache.get("k")
        await cache.get("other")

        info = cache.get_info()
        assert info["name"] == "pnl_history"
        assert info["size"] == 1
        assert info["ttl_seconds"] == 300
        assert info["hits"] == 1
        assert info["misses"] == 1
        assert info["hit_rate"] == 0.5
