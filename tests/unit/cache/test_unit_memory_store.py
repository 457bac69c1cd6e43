# tests/unit/cache/test_unit_memory_store.py — v1
"""Tests for cache/memory_store.py and cache/cache_factory.py."""

from __future__ import annotations

import pytest

from classboard.cache.cache_factory import create_response_cache
from classboard.cache.memory_store import MemoryResponseCache, NullResponseCache
from classboard.core.models import CategoryResult

from conftest import make_settings


class TestMemoryResponseCache:
    @pytest.mark.asyncio
    async def test_miss_then_hit(self):
        cache = MemoryResponseCache()
        assert await cache.get("k") is None
        await cache.put("k", "v")
        assert await cache.get("k") == "v"
        stats = cache.stats
        assert (stats.hits, stats.misses, stats.size) == (1, 1, 1)
        assert stats.hit_rate == 0.5

    @pytest.mark.asyncio
    async def test_lru_eviction(self):
        cache = MemoryResponseCache(max_entries=2)
        await cache.put("a", 1)
        await cache.put("b", 2)
        await cache.get("a")
        await cache.put("c", 3)
        assert "a" in cache
        assert "b" not in cache
        assert "c" in cache
        assert cache.stats.evictions == 1

    @pytest.mark.asyncio
    async def test_unbounded(self):
        cache = MemoryResponseCache(max_entries=0)
        for i in range(50):
            await cache.put(str(i), i)
        assert len(cache) == 50

    def test_negative_bound_rejected(self):
        with pytest.raises(ValueError):
            MemoryResponseCache(max_entries=-1)

    @pytest.mark.asyncio
    async def test_values_are_copied(self):
        cache = MemoryResponseCache()
        original = CategoryResult(tags=["exam"])
        await cache.put("k", original)
        original.tags.append("mutated")

        first = await cache.get("k")
        assert first.tags == ["exam"]
        first.tags.append("again")
        assert (await cache.get("k")).tags == ["exam"]

    @pytest.mark.asyncio
    async def test_overwrite_keeps_single_entry(self):
        cache = MemoryResponseCache()
        await cache.put("k", 1)
        await cache.put("k", 2)
        assert len(cache) == 1
        assert await cache.get("k") == 2

    @pytest.mark.asyncio
    async def test_delete_and_clear(self):
        cache = MemoryResponseCache()
        await cache.put("a", 1)
        await cache.put("b", 2)
        await cache.delete("a")
        await cache.delete("missing")
        assert "a" not in cache
        await cache.clear()
        assert len(cache) == 0


class TestNullResponseCache:
    @pytest.mark.asyncio
    async def test_stores_nothing(self):
        cache = NullResponseCache()
        await cache.put("k", "v")
        assert await cache.get("k") is None
        assert cache.stats.misses == 1


class TestCacheFactory:
    def test_default(self):
        assert isinstance(create_response_cache(), MemoryResponseCache)

    def test_disabled(self):
        cache = create_response_cache(make_settings(ai_cache_enabled=False))
        assert isinstance(cache, NullResponseCache)

    def test_bound_from_settings(self):
        cache = create_response_cache(make_settings(ai_cache_max_entries=7))
        assert cache.stats.max_entries == 7
