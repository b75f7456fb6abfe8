"""Async Redis double covering the commands used by ``RedisKeyValueStore``."""

from __future__ import annotations

import fnmatch
from collections.abc import AsyncIterator

from redis.exceptions import ConnectionError as RedisConnectionError


class InMemoryRedis:
    """Lightweight async Redis double; set ``fail = True`` to simulate an outage."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}
        self.ttl: dict[str, int | None] = {}
        self.fail = False
        self.closed = False

    def _check(self) -> None:
        if self.fail:
            raise RedisConnectionError("Connection refused")

    async def ping(self) -> bool:
        self._check()
        return True

    async def get(self, key: str) -> str | None:
        self._check()
        return self._store.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> None:
        self._check()
        self._store[key] = value
        self.ttl[key] = ex

    async def delete(self, *keys: str) -> None:
        self._check()
        for key in keys:
            self._store.pop(key, None)
            self.ttl.pop(key, None)

    async def scan_iter(self, match: str) -> AsyncIterator[str]:
        self._check()
        for key in list(self._store.keys()):
            if fnmatch.fnmatch(key, match):
                yield key

    async def aclose(self) -> None:
        self.closed = True
