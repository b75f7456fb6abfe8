"""Tests for the cache-aside layer and its key builders."""

from __future__ import annotations

import json

import pytest

from realty.cache import CacheLayer, properties_key
from realty.exceptions import StoreUnavailableError
from realty.kv import LocalKeyValueStore, RedisKeyValueStore
from tests.realty.support.fakes import FakeClock
from tests.realty.support.in_memory_redis import InMemoryRedis


def test_properties_key_ignores_order_and_unset_filters() -> None:
    first = properties_key({"city": "Fullerton", "minPrice": 500000, "status": None})
    second = properties_key({"minPrice": 500000, "city": "Fullerton"})

    assert first == second
    assert first.startswith("properties:")
    assert len(first.split(":", 1)[1]) == 32
    assert properties_key({"city": "Brea"}) != first


@pytest.mark.asyncio
async def test_cache_set_writes_envelope(store: LocalKeyValueStore, cache: CacheLayer) -> None:
    await cache.cache_set("agents:all", [{"id": 1}], ttl=120)

    envelope = json.loads(await store.get("agents:all"))
    assert envelope == {
        "value": [{"id": 1}],
        "writtenAtMillis": 1_700_000_000_000,
        "ttlSeconds": 120,
    }
    assert await cache.cache_get("agents:all") == [{"id": 1}]


@pytest.mark.asyncio
async def test_cache_entry_expires_with_store_ttl(
    clock: FakeClock, cache: CacheLayer
) -> None:
    await cache.cache_set("agents:all", ["x"], ttl=60)
    clock.advance(61)

    assert await cache.cache_get("agents:all") is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    ["not json", json.dumps({"value": 1}), json.dumps(["wrong", "shape"])],
)
async def test_malformed_entry_is_a_miss(
    store: LocalKeyValueStore, cache: CacheLayer, payload: str
) -> None:
    await store.put("properties:abc", payload)

    assert await cache.cache_get("properties:abc") is None


@pytest.mark.asyncio
async def test_get_or_populate_overwrites_malformed_entry(
    store: LocalKeyValueStore, cache: CacheLayer
) -> None:
    await store.put("properties:abc", "{broken")
    calls: list[int] = []

    async def loader() -> list[int]:
        calls.append(1)
        return [1, 2, 3]

    assert await cache.get_or_populate("properties:abc", loader, ttl=30) == [1, 2, 3]
    assert await cache.get_or_populate("properties:abc", loader, ttl=30) == [1, 2, 3]
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_store_outage_is_a_miss_unless_strict() -> None:
    redis = InMemoryRedis()
    cache = CacheLayer(RedisKeyValueStore(redis), FakeClock())
    redis.fail = True

    assert await cache.cache_get("session:abc") is None
    with pytest.raises(StoreUnavailableError):
        await cache.cache_get("session:abc", strict=True)
    with pytest.raises(StoreUnavailableError):
        await cache.cache_set("session:abc", {"id": 1})


@pytest.mark.asyncio
async def test_get_or_populate_serves_loader_when_store_is_down() -> None:
    redis = InMemoryRedis()
    cache = CacheLayer(RedisKeyValueStore(redis), FakeClock())
    redis.fail = True

    async def loader() -> dict[str, int]:
        return {"count": 3}

    assert await cache.get_or_populate("agents:all", loader) == {"count": 3}


@pytest.mark.asyncio
async def test_bulk_delete_counts_removed_keys(cache: CacheLayer) -> None:
    await cache.cache_set("properties:a", 1)
    await cache.cache_set("properties:b", 2)
    await cache.cache_set("agents:all", 3)

    assert await cache.bulk_delete("properties:") == 2
    assert await cache.cache_get("properties:a") is None
    assert await cache.cache_get("agents:all") == 3


@pytest.mark.asyncio
async def test_health_check_reports_store_state() -> None:
    redis = InMemoryRedis()
    cache = CacheLayer(RedisKeyValueStore(redis), FakeClock())

    assert await cache.health_check() is True
    redis.fail = True
    assert await cache.health_check() is False
