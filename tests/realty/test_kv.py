"""Tests for the Redis and in-process key-value adapters."""

from __future__ import annotations

import pytest

from realty.exceptions import StoreUnavailableError
from realty.kv import LocalKeyValueStore, RedisKeyValueStore, connect_key_value_store
from realty.settings import AppSettings
from tests.realty.support.fakes import FakeClock
from tests.realty.support.in_memory_redis import InMemoryRedis


@pytest.mark.asyncio
async def test_local_store_round_trip_and_delete() -> None:
    store = LocalKeyValueStore(FakeClock())

    await store.put("session:abc", "payload")
    assert await store.get("session:abc") == "payload"

    await store.delete("session:abc")
    assert await store.get("session:abc") is None


@pytest.mark.asyncio
async def test_local_store_expires_entries_after_ttl() -> None:
    clock = FakeClock()
    store = LocalKeyValueStore(clock)

    await store.put("rate_limit:login:1.2.3.4", "{}", ttl_seconds=60)
    clock.advance(59)
    assert await store.get("rate_limit:login:1.2.3.4") == "{}"

    clock.advance(1)
    assert await store.get("rate_limit:login:1.2.3.4") is None


@pytest.mark.asyncio
async def test_local_store_lists_only_live_keys_under_prefix() -> None:
    clock = FakeClock()
    store = LocalKeyValueStore(clock)
    await store.put("popular_search:pool", "1", ttl_seconds=10)
    await store.put("popular_search:condo", "1", ttl_seconds=100)
    await store.put("metrics:logins:2023-11-14", "1")

    clock.advance(30)

    assert await store.list("popular_search:") == ["popular_search:condo"]


@pytest.mark.asyncio
async def test_redis_store_passes_ttl_as_expiry() -> None:
    redis = InMemoryRedis()
    store = RedisKeyValueStore(redis)

    await store.put("session:abc", "payload", ttl_seconds=604800)
    await store.put("agents:all", "[]")

    assert redis.ttl == {"session:abc": 604800, "agents:all": None}
    assert await store.get("session:abc") == "payload"
    assert await store.list("session:") == ["session:abc"]


@pytest.mark.asyncio
async def test_redis_store_wraps_failures() -> None:
    redis = InMemoryRedis()
    redis.fail = True
    store = RedisKeyValueStore(redis)

    with pytest.raises(StoreUnavailableError):
        await store.get("session:abc")
    with pytest.raises(StoreUnavailableError):
        await store.put("session:abc", "payload")
    with pytest.raises(StoreUnavailableError):
        await store.list("session:")


@pytest.mark.asyncio
async def test_connect_without_redis_url_uses_local_store() -> None:
    store = await connect_key_value_store(AppSettings(redis_url=None))

    assert isinstance(store, LocalKeyValueStore)
