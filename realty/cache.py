"""Cache-aside layer over the key-value store.

Values are wrapped in a :class:`CacheEntry` envelope before being written.
The envelope's ``ttlSeconds`` mirrors the store-native expiry so entries
delete themselves; ``writtenAtMillis`` is informational and never checked on
read.  A payload that cannot be decoded is logged and treated as a miss so
that the next populate overwrites it.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from datetime import UTC, datetime
from hashlib import sha256
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from realty.exceptions import StoreUnavailableError
from realty.kv import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 3600
SESSION_TTL_SECONDS = 604800
ANALYTICS_TTL_SECONDS = 30 * 24 * 3600
METRICS_TTL_SECONDS = 7 * 24 * 3600
USER_PREFS_TTL_SECONDS = 24 * 3600

_PROPERTIES_PREFIX = "properties"
_SESSION_PREFIX = "session"
_RATE_LIMIT_PREFIX = "rate_limit"
_POPULAR_SEARCH_PREFIX = "popular_search"
_METRIC_PREFIX = "metrics"
_USER_PREFS_PREFIX = "user_prefs"
_SEARCH_ANALYTICS_PREFIX = "search_analytics"
_HEALTH_CHECK_KEY = "health_check"

AGENTS_KEY = "agents:all"


class CacheEntry(BaseModel):
    """Envelope stored under every cache key."""

    model_config = ConfigDict(populate_by_name=True)

    value: Any
    written_at_millis: int = Field(alias="writtenAtMillis")
    ttl_seconds: int = Field(alias="ttlSeconds")


def properties_key(filters: Mapping[str, Any]) -> str:
    """Return the cache key for a property listing query.

    Unset filters are dropped and the remainder serialised with sorted keys,
    so equivalent queries share one entry.
    """

    canonical = {name: value for name, value in filters.items() if value is not None}
    signature = json.dumps(canonical, sort_keys=True, default=str)
    digest = sha256(signature.encode("utf-8")).hexdigest()[:32]
    return f"{_PROPERTIES_PREFIX}:{digest}"


def session_key(token: str) -> str:
    return f"{_SESSION_PREFIX}:{token}"


def rate_limit_key(identifier: str) -> str:
    return f"{_RATE_LIMIT_PREFIX}:{identifier}"


def popular_search_key(query: str) -> str:
    return f"{_POPULAR_SEARCH_PREFIX}:{query}"


def popular_search_prefix() -> str:
    return f"{_POPULAR_SEARCH_PREFIX}:"


def metric_key(metric: str, day: str) -> str:
    return f"{_METRIC_PREFIX}:{metric}:{day}"


def user_prefs_key(user_id: int) -> str:
    return f"{_USER_PREFS_PREFIX}:{user_id}"


def search_analytics_key(now_ms: int, nonce: str) -> str:
    return f"{_SEARCH_ANALYTICS_PREFIX}:{now_ms}:{nonce}"


def _now_millis(clock: Callable[[], float]) -> int:
    return int(clock() * 1000)


class CacheLayer:
    """JSON cache-aside helpers bound to one key-value store."""

    def __init__(
        self,
        store: KeyValueStore,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._clock = clock

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def now_millis(self) -> int:
        """Return the layer's clock reading in epoch milliseconds."""

        return _now_millis(self._clock)

    def today(self) -> str:
        """Return the current UTC day as ``YYYY-MM-DD``."""

        return datetime.fromtimestamp(self._clock(), tz=UTC).strftime("%Y-%m-%d")

    def _encode(self, value: Any, ttl: int) -> str:
        entry = CacheEntry(
            value=value,
            written_at_millis=self.now_millis(),
            ttl_seconds=ttl,
        )
        return json.dumps(entry.model_dump(by_alias=True, mode="json"))

    async def cache_set(
        self, key: str, value: Any, ttl: int = DEFAULT_CACHE_TTL_SECONDS
    ) -> None:
        """Store ``value`` under ``key``; store failures propagate."""

        await self._store.put(key, self._encode(value, ttl), ttl)

    async def cache_get(self, key: str, *, strict: bool = False) -> Any | None:
        """Return the cached value, or ``None`` on any kind of miss.

        Store failures count as a miss unless ``strict`` is set, in which case
        :class:`StoreUnavailableError` reaches the caller.  Malformed payloads
        are always a miss.
        """

        try:
            payload = await self._store.get(key)
        except StoreUnavailableError as exc:
            if strict:
                raise
            logger.warning(f"Cache get failed for key {key}: {exc}")
            return None

        if payload is None:
            return None

        try:
            entry = CacheEntry.model_validate(json.loads(payload))
        except (json.JSONDecodeError, ValidationError, TypeError) as exc:
            logger.warning(f"Discarding malformed cache entry {key}: {exc}")
            return None
        return entry.value

    async def cache_delete(self, key: str) -> None:
        await self._store.delete(key)

    async def get_or_populate(
        self,
        key: str,
        loader: Callable[[], Awaitable[Any]],
        ttl: int = DEFAULT_CACHE_TTL_SECONDS,
    ) -> Any:
        """Return the cached value for ``key`` or compute and store it.

        Concurrent misses may both invoke ``loader``; the last write wins.
        """

        cached = await self.cache_get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {key}")
            return cached

        logger.debug(f"Cache miss: {key}")
        value = await loader()
        try:
            await self.cache_set(key, value, ttl)
        except StoreUnavailableError as exc:
            logger.warning(f"Cache populate failed for key {key}: {exc}")
        return value

    async def bulk_delete(self, prefix: str) -> int:
        """Delete every key under ``prefix`` and return how many were removed."""

        try:
            keys = await self._store.list(prefix)
            for key in keys:
                await self._store.delete(key)
        except StoreUnavailableError as exc:
            logger.error(f"Bulk delete failed for prefix {prefix}: {exc}")
            return 0
        return len(keys)

    async def health_check(self) -> bool:
        """Round-trip a probe entry through the store."""

        probe = str(self.now_millis())
        try:
            await self.cache_set(_HEALTH_CHECK_KEY, probe, 60)
            result = await self.cache_get(_HEALTH_CHECK_KEY)
            await self.cache_delete(_HEALTH_CHECK_KEY)
        except StoreUnavailableError as exc:
            logger.error(f"Key-value health check failed: {exc}")
            return False
        return result == probe


__all__ = [
    "AGENTS_KEY",
    "ANALYTICS_TTL_SECONDS",
    "CacheEntry",
    "CacheLayer",
    "DEFAULT_CACHE_TTL_SECONDS",
    "METRICS_TTL_SECONDS",
    "SESSION_TTL_SECONDS",
    "USER_PREFS_TTL_SECONDS",
    "metric_key",
    "popular_search_key",
    "popular_search_prefix",
    "properties_key",
    "rate_limit_key",
    "search_analytics_key",
    "session_key",
    "user_prefs_key",
]
