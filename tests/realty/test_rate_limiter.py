"""Tests for the fixed-window rate limiter."""

from __future__ import annotations

import pytest

from realty.cache import CacheLayer
from realty.kv import RedisKeyValueStore
from realty.services.rate_limiter import (
    LOGIN_POLICY,
    REGISTER_POLICY,
    RateLimiter,
    window_start_for,
)
from tests.realty.support.fakes import FakeClock
from tests.realty.support.in_memory_redis import InMemoryRedis


def test_window_start_aligns_to_bucket() -> None:
    assert window_start_for(1_700_000_123_456, 900) == 1_700_000_100_000
    assert window_start_for(1_700_000_100_000, 900) == 1_700_000_100_000


def test_policies_match_auth_endpoints() -> None:
    assert (REGISTER_POLICY.limit, REGISTER_POLICY.window_seconds) == (5, 3600)
    assert (LOGIN_POLICY.limit, LOGIN_POLICY.window_seconds) == (10, 900)
    assert LOGIN_POLICY.identifier("10.0.0.1") == "login:10.0.0.1"


@pytest.mark.asyncio
async def test_admits_up_to_limit_then_rejects(cache: CacheLayer, clock: FakeClock) -> None:
    limiter = RateLimiter(cache, clock)

    results = [await limiter.check("login:1.2.3.4", 3, 900) for _ in range(4)]

    assert [result.allowed for result in results] == [True, True, True, False]
    assert [result.remaining for result in results] == [2, 1, 0, 0]
    expected_reset = window_start_for(int(clock() * 1000), 900) + 900_000
    assert {result.reset_time for result in results} == {expected_reset}


@pytest.mark.asyncio
async def test_identifiers_are_counted_separately(cache: CacheLayer, clock: FakeClock) -> None:
    limiter = RateLimiter(cache, clock)

    assert (await limiter.check("login:a", 1, 900)).allowed
    assert not (await limiter.check("login:a", 1, 900)).allowed
    assert (await limiter.check("login:b", 1, 900)).allowed


@pytest.mark.asyncio
async def test_new_window_resets_the_count(cache: CacheLayer, clock: FakeClock) -> None:
    limiter = RateLimiter(cache, clock)
    for _ in range(2):
        await limiter.check("register:ip", 2, 3600)
    assert not (await limiter.check("register:ip", 2, 3600)).allowed

    clock.now = window_start_for(int(clock() * 1000), 3600) / 1000 + 3600

    result = await limiter.check("register:ip", 2, 3600)
    assert result.allowed
    assert result.remaining == 1


@pytest.mark.asyncio
async def test_rejected_requests_are_not_persisted(cache: CacheLayer, clock: FakeClock) -> None:
    limiter = RateLimiter(cache, clock)
    await limiter.check("login:ip", 1, 900)
    await limiter.check("login:ip", 1, 900)
    await limiter.check("login:ip", 1, 900)

    assert (await cache.cache_get("rate_limit:login:ip"))["count"] == 1


@pytest.mark.asyncio
async def test_fails_open_when_store_is_down() -> None:
    redis = InMemoryRedis()
    clock = FakeClock()
    limiter = RateLimiter(CacheLayer(RedisKeyValueStore(redis), clock), clock)
    redis.fail = True

    result = await limiter.check("login:ip", 10, 900)

    assert result.allowed
    assert result.remaining == 10


@pytest.mark.asyncio
async def test_fails_closed_when_configured() -> None:
    redis = InMemoryRedis()
    clock = FakeClock()
    limiter = RateLimiter(CacheLayer(RedisKeyValueStore(redis), clock), clock, fail_open=False)
    redis.fail = True

    result = await limiter.check("login:ip", 10, 900)

    assert not result.allowed
    assert result.remaining == 0
