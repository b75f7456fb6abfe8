"""Property listing queries."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import Select, or_, select
from sqlalchemy.orm import selectinload

from realty.db.models import Property
from realty.db.repositories.base import BaseRepository


class PropertyRepository(BaseRepository):
    """Read access to listings.

    Price bounds are expected in cents; callers convert whole-dollar query
    parameters before getting here.
    """

    @staticmethod
    def _ordered(query: Select) -> Select:
        return query.order_by(Property.is_featured.desc(), Property.created_at.desc(), Property.id.desc())

    @staticmethod
    def _apply_common_filters(
        query: Select,
        *,
        property_type: str | None,
        min_price_cents: int | None,
        max_price_cents: int | None,
        min_bedrooms: int | None,
        min_bathrooms: float | None,
    ) -> Select:
        if property_type:
            query = query.where(Property.property_type == property_type)
        if min_price_cents is not None:
            query = query.where(Property.price >= min_price_cents)
        if max_price_cents is not None:
            query = query.where(Property.price <= max_price_cents)
        if min_bedrooms is not None:
            query = query.where(Property.bedrooms >= min_bedrooms)
        if min_bathrooms is not None:
            query = query.where(Property.bathrooms >= min_bathrooms)
        return query

    async def list_properties(
        self,
        *,
        status: str | None = None,
        property_type: str | None = None,
        min_price_cents: int | None = None,
        max_price_cents: int | None = None,
        min_bedrooms: int | None = None,
        min_bathrooms: float | None = None,
        city: str | None = None,
        featured_only: bool = False,
        limit: int | None = None,
        offset: int | None = None,
    ) -> Sequence[Property]:
        query = self._apply_common_filters(
            select(Property),
            property_type=property_type,
            min_price_cents=min_price_cents,
            max_price_cents=max_price_cents,
            min_bedrooms=min_bedrooms,
            min_bathrooms=min_bathrooms,
        )
        if status:
            query = query.where(Property.status == status)
        if city:
            query = query.where(Property.city == city)
        if featured_only:
            query = query.where(Property.is_featured.is_(True))

        query = self._ordered(query)
        if limit is not None:
            query = query.limit(limit)
        if offset:
            query = query.offset(offset)

        result = await self._session.execute(query)
        return result.scalars().unique().all()

    async def search_properties(
        self,
        search_query: str,
        *,
        property_type: str | None = None,
        min_price_cents: int | None = None,
        max_price_cents: int | None = None,
        min_bedrooms: int | None = None,
        min_bathrooms: float | None = None,
    ) -> Sequence[Property]:
        """Case-insensitive substring match over the descriptive columns."""

        term = f"%{search_query}%"
        query = select(Property).where(
            or_(
                Property.title.ilike(term),
                Property.description.ilike(term),
                Property.address.ilike(term),
                Property.city.ilike(term),
                Property.neighborhood.ilike(term),
                Property.mls_number.ilike(term),
            )
        )
        query = self._apply_common_filters(
            query,
            property_type=property_type,
            min_price_cents=min_price_cents,
            max_price_cents=max_price_cents,
            min_bedrooms=min_bedrooms,
            min_bathrooms=min_bathrooms,
        )
        result = await self._session.execute(self._ordered(query))
        return result.scalars().unique().all()

    async def get_property(self, property_id: int, *, with_images: bool = False) -> Property | None:
        query = select(Property).where(Property.id == property_id)
        if with_images:
            query = query.options(selectinload(Property.images))
        result = await self._session.execute(query)
        return result.scalars().unique().one_or_none()

    async def existing_ids(self, property_ids: Sequence[int]) -> set[int]:
        if not property_ids:
            return set()
        result = await self._session.execute(
            select(Property.id).where(Property.id.in_(set(property_ids)))
        )
        return set(result.scalars().all())
