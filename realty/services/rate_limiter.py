"""Fixed-window rate limiting on top of the cache layer.

Each identifier owns one ``RateWindow`` record under ``rate_limit:<id>``.
Windows are aligned buckets of ``window_seconds``; a record whose
``windowStart`` differs from the current bucket is ignored and ages out via
its own TTL.  Only admitted requests are persisted.

The check reads, decides, then writes, without any atomic increment.  Two
concurrent requests for the same identifier can both read the same count and
both be admitted, so a burst may overshoot ``limit``.  A burst straddling a
window boundary may also admit up to ``2 * limit`` requests in quick
succession.  Both are accepted for the auth endpoints this guards.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from realty.cache import CacheLayer, rate_limit_key
from realty.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


class RateWindow(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    count: int
    window_start: int = Field(alias="windowStart")


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_time: int


@dataclass(frozen=True)
class RateLimitPolicy:
    """Limit applied to one endpoint, keyed as ``<name>:<client ip>``."""

    name: str
    limit: int
    window_seconds: int
    message: str

    def identifier(self, client_ip: str) -> str:
        return f"{self.name}:{client_ip}"


REGISTER_POLICY = RateLimitPolicy(
    name="register",
    limit=5,
    window_seconds=3600,
    message="Too many registration attempts. Please try again later.",
)
LOGIN_POLICY = RateLimitPolicy(
    name="login",
    limit=10,
    window_seconds=900,
    message="Too many login attempts. Please try again later.",
)


def window_start_for(now_ms: int, window_seconds: int) -> int:
    window_ms = window_seconds * 1000
    return (now_ms // window_ms) * window_ms


class RateLimiter:
    """Fixed-window counter; see the module docstring for its guarantees."""

    def __init__(
        self,
        cache: CacheLayer,
        clock: Callable[[], float] = time.time,
        *,
        fail_open: bool = True,
    ) -> None:
        self._cache = cache
        self._clock = clock
        self._fail_open = fail_open

    async def check(
        self, identifier: str, limit: int, window_seconds: int
    ) -> RateLimitResult:
        now_ms = int(self._clock() * 1000)
        window_start = window_start_for(now_ms, window_seconds)
        reset_time = window_start + window_seconds * 1000
        key = rate_limit_key(identifier)

        try:
            current = await self._read_window(key)
            count = current.count if current and current.window_start == window_start else 0
            candidate = count + 1
            allowed = candidate <= limit
            if allowed:
                window = RateWindow(count=candidate, window_start=window_start)
                await self._cache.cache_set(
                    key, window.model_dump(by_alias=True), window_seconds
                )
        except StoreUnavailableError as exc:
            if self._fail_open:
                logger.warning(
                    f"Rate limit store unavailable for {identifier}; admitting request: {exc}"
                )
                return RateLimitResult(allowed=True, remaining=limit, reset_time=reset_time)
            logger.warning(
                f"Rate limit store unavailable for {identifier}; rejecting request: {exc}"
            )
            return RateLimitResult(allowed=False, remaining=0, reset_time=reset_time)

        return RateLimitResult(
            allowed=allowed,
            remaining=max(0, limit - candidate),
            reset_time=reset_time,
        )

    async def _read_window(self, key: str) -> RateWindow | None:
        payload = await self._cache.cache_get(key, strict=True)
        if payload is None:
            return None
        try:
            return RateWindow.model_validate(payload)
        except ValidationError:
            logger.warning(f"Ignoring malformed rate window under {key}")
            return None


__all__ = [
    "LOGIN_POLICY",
    "REGISTER_POLICY",
    "RateLimitPolicy",
    "RateLimitResult",
    "RateLimiter",
    "RateWindow",
    "window_start_for",
]
