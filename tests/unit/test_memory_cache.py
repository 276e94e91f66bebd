"""Unit tests for MemoryCacheProvider and cache-key generation."""

from __future__ import annotations

import asyncio

import pytest

from gigtrail.providers.cache.memory_cache import MemoryCacheProvider, generate_cache_key
from tests.conftest import FakeClock


# ======================================================================
# generate_cache_key
# ======================================================================


class TestGenerateCacheKey:
    def test_case_and_whitespace_insensitive(self) -> None:
        assert generate_cache_key("Coldplay", "US") == generate_cache_key(" coldplay ", " us ")

    def test_missing_country_is_worldwide(self) -> None:
        assert generate_cache_key("Coldplay") == "coldplay:worldwide"
        assert generate_cache_key("Coldplay", "") == "coldplay:worldwide"
        assert generate_cache_key("Coldplay", "   ") == "coldplay:worldwide"

    def test_different_countries_differ(self) -> None:
        assert generate_cache_key("Coldplay", "US") != generate_cache_key("Coldplay", "GB")


# ======================================================================
# MemoryCacheProvider
# ======================================================================


class TestMemoryCacheProvider:
    @pytest.fixture()
    def cache(self, fake_clock: FakeClock) -> MemoryCacheProvider:
        return MemoryCacheProvider(default_ttl=60.0, timer=fake_clock)

    def test_get_missing_key_returns_none(self, cache: MemoryCacheProvider) -> None:
        assert cache.get("nonexistent") is None

    def test_set_and_get(self, cache: MemoryCacheProvider) -> None:
        cache.set("key1", "value1")
        assert cache.get("key1") == "value1"

    def test_set_overwrites_existing(self, cache: MemoryCacheProvider) -> None:
        cache.set("key1", "old")
        cache.set("key1", "new")
        assert cache.get("key1") == "new"

    def test_entry_expires_after_ttl(
        self, cache: MemoryCacheProvider, fake_clock: FakeClock
    ) -> None:
        cache.set("key1", "value1", ttl=10.0)
        fake_clock.advance(5.0)
        assert cache.get("key1") == "value1"
        fake_clock.advance(6.0)
        assert cache.get("key1") is None
        assert cache.has("key1") is False

    def test_default_ttl_applies(self, cache: MemoryCacheProvider, fake_clock: FakeClock) -> None:
        cache.set("key1", "value1")
        fake_clock.advance(59.0)
        assert cache.has("key1") is True
        fake_clock.advance(2.0)
        assert cache.has("key1") is False

    def test_per_entry_ttl(self, cache: MemoryCacheProvider, fake_clock: FakeClock) -> None:
        cache.set("short", 1, ttl=1.0)
        cache.set("long", 2, ttl=100.0)
        fake_clock.advance(2.0)
        assert cache.get("short") is None
        assert cache.get("long") == 2

    def test_delete(self, cache: MemoryCacheProvider) -> None:
        cache.set("key1", "value1")
        assert cache.delete("key1") is True
        assert cache.get("key1") is None
        assert cache.delete("key1") is False

    def test_clear(self, cache: MemoryCacheProvider) -> None:
        cache.set("a", 1)
        cache.set("b", 2)
        cache.clear()
        assert cache.get_stats().size == 0

    def test_stats_exclude_expired(
        self, cache: MemoryCacheProvider, fake_clock: FakeClock
    ) -> None:
        cache.set("a", 1, ttl=1.0)
        cache.set("b", 2, ttl=100.0)
        fake_clock.advance(5.0)
        stats = cache.get_stats()
        assert stats.size == 1
        assert stats.keys == ["b"]

    def test_cleanup_expired_counts_removed(
        self, cache: MemoryCacheProvider, fake_clock: FakeClock
    ) -> None:
        cache.set("a", 1, ttl=1.0)
        cache.set("b", 2, ttl=1.0)
        cache.set("c", 3, ttl=100.0)
        fake_clock.advance(2.0)
        assert cache.cleanup_expired() == 2
        assert cache.cleanup_expired() == 0

    def test_stores_complex_values(self, cache: MemoryCacheProvider) -> None:
        data = {"artists": ["Coldplay", "Radiohead"], "count": 2}
        cache.set("complex", data)
        assert cache.get("complex") == data

    @pytest.mark.asyncio
    async def test_auto_cleanup_task_lifecycle(self, cache: MemoryCacheProvider) -> None:
        task = cache.start_auto_cleanup(interval=0.01)
        assert cache.start_auto_cleanup(interval=0.01) is task
        await asyncio.sleep(0)
        await cache.stop_auto_cleanup()
        assert task.done()
