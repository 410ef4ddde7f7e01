"""
Unit tests for the TTL cache and in-flight de-duplication
"""
import asyncio

import pytest

from sitefront.cache import TTLCache


def test_set_get_and_expiry():
    async def scenario():
        cache = TTLCache(default_ttl=10)
        await cache.set("a", 1, ttl=0.01)
        assert await cache.get("a") == 1
        await asyncio.sleep(0.05)
        assert await cache.get("a", "gone") == "gone"

    asyncio.run(scenario())


def test_concurrent_loads_share_one_call():
    calls = []

    async def loader():
        calls.append(1)
        await asyncio.sleep(0.01)
        return "value"

    async def scenario():
        cache = TTLCache()
        results = await asyncio.gather(*(cache.get_or_load("k", loader) for _ in range(5)))
        assert results == ["value"] * 5
        assert await cache.get_or_load("k", loader) == "value"

    asyncio.run(scenario())
    assert len(calls) == 1


def test_failures_reach_every_waiter_and_are_not_cached():
    calls = []

    async def failing():
        calls.append(1)
        await asyncio.sleep(0.01)
        raise ValueError("boom")

    async def scenario():
        cache = TTLCache()
        results = await asyncio.gather(
            *(cache.get_or_load("k", failing) for _ in range(3)), return_exceptions=True
        )
        assert all(isinstance(r, ValueError) for r in results)
        assert not cache.pending("k")
        with pytest.raises(ValueError):
            await cache.get_or_load("k", failing)

    asyncio.run(scenario())
    assert len(calls) == 2


def test_zero_ttl_skips_caching():
    calls = []

    async def loader():
        calls.append(1)
        return None

    async def scenario():
        cache = TTLCache()
        await cache.get_or_load("k", loader, ttl_for=lambda value: 0)
        await cache.get_or_load("k", loader, ttl_for=lambda value: 0)

    asyncio.run(scenario())
    assert len(calls) == 2


def test_delete_and_clear():
    async def scenario():
        cache = TTLCache(default_ttl=60)
        await cache.set("a", 1)
        await cache.delete("a")
        assert await cache.get("a") is None
        await cache.set("c", 3)
        await cache.clear()
        assert await cache.get("c") is None

    asyncio.run(scenario())


def test_waiters_reload_when_the_loading_caller_is_cancelled():
    calls = []

    async def loader():
        calls.append(1)
        await asyncio.sleep(0.05)
        return "site"

    async def scenario():
        cache = TTLCache(default_ttl=60)
        first = asyncio.create_task(cache.get_or_load("blog.example.com", loader))
        await asyncio.sleep(0.01)
        waiter = asyncio.create_task(cache.get_or_load("blog.example.com", loader))
        await asyncio.sleep(0.01)
        assert cache.pending("blog.example.com")

        first.cancel()
        with pytest.raises(asyncio.CancelledError):
            await first
        return await waiter

    assert asyncio.run(scenario()) == "site"
    assert len(calls) == 2
