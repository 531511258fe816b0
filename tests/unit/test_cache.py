"""
Unit Tests - Dashboard Cache
"""
import json

import pytest

from streamdash.serving.cache import CacheManager, get_redis


@pytest.fixture
def cache() -> CacheManager:
    return CacheManager("test", default_ttl=60)


def counting_factory(value):
    calls = []

    async def factory():
        calls.append(1)
        return value

    return factory, calls


async def failing_factory():
    raise ConnectionError("document store unreachable")


class TestCacheManager:
    """Tests for namespaced caching with stale fallback"""

    @pytest.mark.asyncio
    async def test_set_and_get(self, cache, fake_redis):
        await cache.set("k", {"a": 1})

        assert await cache.get("k") == {"a": 1}
        assert fake_redis.ttls["test:k"] == 60

    @pytest.mark.asyncio
    async def test_fresh_hit_skips_factory(self, cache, fake_redis):
        factory, calls = counting_factory({"value": 1})

        first = await cache.get_or_stale("k", factory)
        second = await cache.get_or_stale("k", factory)

        assert first == second == ({"value": 1}, False)
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_last_value_never_expires(self, cache, fake_redis):
        factory, _ = counting_factory([1, 2])
        await cache.get_or_stale("k", factory, ttl=5)

        assert fake_redis.ttls == {"test:k": 5}
        assert json.loads(fake_redis.store["test:last:k"]) == [1, 2]

    @pytest.mark.asyncio
    async def test_failure_serves_stale_value(self, cache, fake_redis):
        factory, _ = counting_factory({"value": 1})
        await cache.get_or_stale("k", factory)
        fake_redis.expire_fresh()

        value, stale = await cache.get_or_stale("k", failing_factory)

        assert value == {"value": 1}
        assert stale is True

    @pytest.mark.asyncio
    async def test_failure_without_previous_value_raises(self, cache, fake_redis):
        with pytest.raises(ConnectionError):
            await cache.get_or_stale("k", failing_factory)

    @pytest.mark.asyncio
    async def test_redis_outage_still_computes(self, cache, fake_redis):
        fake_redis.fail = True
        factory, calls = counting_factory({"value": 2})

        assert await cache.get_or_stale("k", factory) == ({"value": 2}, False)
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_uninitialized_redis_still_computes(self, cache, monkeypatch):
        from streamdash.serving import cache as cache_module

        monkeypatch.setattr(cache_module, "_redis_client", None)
        factory, _ = counting_factory("value")

        assert await cache.get_or_stale("k", factory) == ("value", False)
        with pytest.raises(RuntimeError):
            get_redis()

    @pytest.mark.asyncio
    async def test_invalidate_all_keeps_fallbacks(self, cache, fake_redis):
        factory, _ = counting_factory(1)
        await cache.get_or_stale("a", factory)
        await cache.get_or_stale("b", factory)

        assert await cache.invalidate_all() == 2
        assert sorted(fake_redis.store) == ["test:last:a", "test:last:b"]
