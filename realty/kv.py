"""Key-value store adapters backing the cache, session and rate-limit layers.

Every higher-level component talks to a :class:`KeyValueStore`: a minimal
``put``/``get``/``delete``/``list`` contract over string values.  Operations
are atomic per key only; nothing here offers cross-key transactions.

Two implementations ship with the API:

* :class:`RedisKeyValueStore` wraps ``redis.asyncio`` and converts every Redis
  failure into :class:`~realty.exceptions.StoreUnavailableError` so callers
  handle a single I/O error type.
* :class:`LocalKeyValueStore` keeps entries in process with native TTL
  expiry.  It serves single-worker deployments without ``REDIS_URL`` and the
  test-suite.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Protocol

from redis.asyncio import Redis
from redis.exceptions import RedisError

from realty.exceptions import StoreUnavailableError
from realty.settings import AppSettings

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Contract shared by every key-value backend."""

    async def put(self, key: str, value: str, ttl_seconds: int | None = None) -> None: ...

    async def get(self, key: str) -> str | None: ...

    async def delete(self, key: str) -> None: ...

    async def list(self, prefix: str) -> list[str]: ...

    async def ping(self) -> bool: ...

    async def close(self) -> None: ...


class RedisKeyValueStore:
    """Redis-backed store; TTLs map onto ``SET ... EX``."""

    def __init__(self, redis: Redis) -> None:
        self._redis = redis

    async def put(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        try:
            if ttl_seconds is not None and ttl_seconds > 0:
                await self._redis.set(key, value, ex=ttl_seconds)
            else:
                await self._redis.set(key, value)
        except RedisError as exc:
            raise StoreUnavailableError(f"put failed for key {key}") from exc

    async def get(self, key: str) -> str | None:
        try:
            payload = await self._redis.get(key)
        except RedisError as exc:
            raise StoreUnavailableError(f"get failed for key {key}") from exc
        if isinstance(payload, bytes):
            return payload.decode("utf-8")
        return payload

    async def delete(self, key: str) -> None:
        try:
            await self._redis.delete(key)
        except RedisError as exc:
            raise StoreUnavailableError(f"delete failed for key {key}") from exc

    async def list(self, prefix: str) -> list[str]:
        keys: list[str] = []
        try:
            async for key in self._redis.scan_iter(match=f"{prefix}*"):
                keys.append(key.decode("utf-8") if isinstance(key, bytes) else key)
        except RedisError as exc:
            raise StoreUnavailableError(f"list failed for prefix {prefix}") from exc
        return keys

    async def ping(self) -> bool:
        try:
            return bool(await self._redis.ping())
        except RedisError as exc:
            raise StoreUnavailableError("ping failed") from exc

    async def close(self) -> None:
        await self._redis.aclose()


class LocalKeyValueStore:
    """In-process store honouring per-key expiry.

    Entries are kept as ``(expires_at, value)`` tuples; expired entries are
    purged lazily whenever they are read or listed.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[float | None, str]] = {}
        self._lock = asyncio.Lock()

    def _expired(self, expires_at: float | None) -> bool:
        return expires_at is not None and expires_at <= self._clock()

    async def put(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        expires_at = None
        if ttl_seconds is not None and ttl_seconds > 0:
            expires_at = self._clock() + ttl_seconds
        async with self._lock:
            self._entries[key] = (expires_at, value)

    async def get(self, key: str) -> str | None:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._expired(expires_at):
                self._entries.pop(key, None)
                return None
            return value

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._entries.pop(key, None)

    async def list(self, prefix: str) -> list[str]:
        async with self._lock:
            stale = [key for key, (expires_at, _) in self._entries.items() if self._expired(expires_at)]
            for key in stale:
                self._entries.pop(key, None)
            return [key for key in self._entries if key.startswith(prefix)]

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        async with self._lock:
            self._entries.clear()


async def connect_key_value_store(settings: AppSettings) -> KeyValueStore:
    """Build the store for this process.

    Redis is used when ``REDIS_URL`` is configured and answers a ``PING``;
    otherwise the API degrades to the in-process store and logs why.
    """

    if not settings.redis_url:
        logger.info("REDIS_URL not configured; using in-process key-value store")
        return LocalKeyValueStore()

    client = Redis.from_url(settings.redis_url, decode_responses=True, encoding="utf-8")
    try:
        await client.ping()
    except RedisError as exc:
        logger.warning(
            "Redis connection failed: %s. Falling back to in-process key-value store.",
            exc,
        )
        await client.aclose()
        return LocalKeyValueStore()

    logger.info("Redis connection established successfully")
    return RedisKeyValueStore(client)


__all__ = [
    "KeyValueStore",
    "LocalKeyValueStore",
    "RedisKeyValueStore",
    "connect_key_value_store",
]
