"""Search tracking, popular-search counters and daily metrics.

Everything here is stored through the cache layer with a TTL, so old data
simply expires.  Counters are read-modify-write without an atomic increment
and share the rate limiter's overcount under concurrent updates.  No method
raises on store failures: analytics must never fail the request it observes.
"""

from __future__ import annotations

import logging
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

from realty.cache import (
    ANALYTICS_TTL_SECONDS,
    METRICS_TTL_SECONDS,
    CacheLayer,
    metric_key,
    popular_search_key,
    popular_search_prefix,
    search_analytics_key,
)
from realty.exceptions import StoreUnavailableError
from realty.schemas.analytics import MetricPoint, PopularSearch

logger = logging.getLogger(__name__)

REGISTRATIONS = "registrations"
LOGINS = "logins"
PROPERTY_VIEWS = "property_views"
SEARCHES = "searches"


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class AnalyticsTracker:
    def __init__(self, cache: CacheLayer) -> None:
        self._cache = cache

    async def track_search(
        self, query: str, filters: dict[str, Any], results_count: int
    ) -> None:
        now_ms = self._cache.now_millis()
        record = {
            "query": query,
            "filters": filters,
            "resultsCount": results_count,
            "timestamp": now_ms,
        }
        try:
            await self._cache.cache_set(
                search_analytics_key(now_ms, secrets.token_hex(4)),
                record,
                ANALYTICS_TTL_SECONDS,
            )
        except StoreUnavailableError as exc:
            logger.warning(f"Failed to track search: {exc}")
            return
        await self.increment_popular_search(query)

    async def increment_popular_search(self, query: str) -> None:
        normalized = query.strip().lower()
        if not normalized:
            return
        key = popular_search_key(normalized)
        current = _as_int(await self._cache.cache_get(key))
        try:
            await self._cache.cache_set(key, current + 1, METRICS_TTL_SECONDS)
        except StoreUnavailableError as exc:
            logger.warning(f"Failed to increment popular search {normalized!r}: {exc}")

    async def get_popular_searches(self, limit: int = 10) -> list[PopularSearch]:
        prefix = popular_search_prefix()
        try:
            keys = await self._cache.store.list(prefix)
        except StoreUnavailableError as exc:
            logger.warning(f"Failed to list popular searches: {exc}")
            return []

        searches: list[PopularSearch] = []
        for key in keys:
            count = _as_int(await self._cache.cache_get(key))
            if count > 0:
                searches.append(PopularSearch(query=key[len(prefix):], count=count))
        searches.sort(key=lambda item: (-item.count, item.query))
        return searches[:limit]

    async def increment_metric(self, metric: str, value: int = 1) -> None:
        key = metric_key(metric, self._cache.today())
        current = _as_int(await self._cache.cache_get(key))
        try:
            await self._cache.cache_set(key, current + value, METRICS_TTL_SECONDS)
        except StoreUnavailableError as exc:
            logger.warning(f"Failed to increment metric {metric}: {exc}")

    async def get_metrics(self, metric: str, days: int = 7) -> list[MetricPoint]:
        """Return one point per UTC day, oldest first; missing days are zero."""

        today = datetime.strptime(self._cache.today(), "%Y-%m-%d").replace(tzinfo=UTC)
        points: list[MetricPoint] = []
        for offset in range(days - 1, -1, -1):
            day = (today - timedelta(days=offset)).strftime("%Y-%m-%d")
            value = _as_int(await self._cache.cache_get(metric_key(metric, day)))
            points.append(MetricPoint(date=day, value=value))
        return points


__all__ = [
    "AnalyticsTracker",
    "LOGINS",
    "PROPERTY_VIEWS",
    "REGISTRATIONS",
    "SEARCHES",
]
