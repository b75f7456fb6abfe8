"""Listing queries with cache-aside reads and search tracking."""

from __future__ import annotations

import logging

from realty.cache import DEFAULT_CACHE_TTL_SECONDS, CacheLayer, properties_key
from realty.db.repositories import PropertyRepository, SearchHistoryRepository
from realty.exceptions import NotFound
from realty.schemas.property import (
    PropertyDetail,
    PropertyFilters,
    PropertyOut,
    PropertySearchResponse,
)
from realty.services.analytics_service import PROPERTY_VIEWS, SEARCHES, AnalyticsTracker
from realty.services.presentation import property_detail, property_summary
from realty.utils.pricing import dollars_to_cents

logger = logging.getLogger(__name__)


def _cents(dollars: int | None) -> int | None:
    return dollars_to_cents(dollars) if dollars is not None else None


class PropertyService:
    def __init__(
        self,
        repository: PropertyRepository,
        cache: CacheLayer,
        analytics: AnalyticsTracker,
        *,
        cache_ttl: int = DEFAULT_CACHE_TTL_SECONDS,
        history: SearchHistoryRepository | None = None,
    ) -> None:
        self._repository = repository
        self._cache = cache
        self._analytics = analytics
        self._cache_ttl = cache_ttl
        self._history = history

    async def list_properties(self, filters: PropertyFilters) -> list[PropertyOut]:
        """Return listings matching ``filters``.

        ``min_price``/``max_price`` arrive in whole dollars and are compared
        against the stored cents price after conversion.
        """

        async def load() -> list[dict]:
            rows = await self._repository.list_properties(
                status=filters.status,
                property_type=filters.property_type,
                min_price_cents=_cents(filters.min_price),
                max_price_cents=_cents(filters.max_price),
                min_bedrooms=filters.min_bedrooms,
                min_bathrooms=filters.min_bathrooms,
                city=filters.city,
                featured_only=filters.featured is True,
                limit=filters.limit,
                offset=filters.offset,
            )
            return [
                property_summary(row).model_dump(by_alias=True, mode="json") for row in rows
            ]

        payload = await self._cache.get_or_populate(
            properties_key(filters.cache_signature()), load, self._cache_ttl
        )
        await self._analytics.increment_metric(PROPERTY_VIEWS)
        return [PropertyOut.model_validate(item) for item in payload]

    async def search(
        self,
        query: str,
        filters: PropertyFilters,
        *,
        user_id: int | None = None,
    ) -> PropertySearchResponse:
        rows = await self._repository.search_properties(
            query,
            property_type=filters.property_type,
            min_price_cents=_cents(filters.min_price),
            max_price_cents=_cents(filters.max_price),
            min_bedrooms=filters.min_bedrooms,
            min_bathrooms=filters.min_bathrooms,
        )
        signature = filters.cache_signature()
        await self._analytics.track_search(query, signature, len(rows))
        await self._analytics.increment_metric(SEARCHES)
        if user_id is not None and self._history is not None:
            await self._history.save(
                user_id=user_id,
                search_query=query,
                filters=signature,
                results_count=len(rows),
            )

        return PropertySearchResponse(
            properties=[property_summary(row) for row in rows],
            query=query,
            filters=signature,
        )

    async def get_property(self, property_id: int) -> PropertyDetail:
        prop = await self._repository.get_property(property_id, with_images=True)
        if prop is None:
            raise NotFound("Property not found")
        return property_detail(prop)
