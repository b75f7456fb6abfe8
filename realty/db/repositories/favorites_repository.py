"""Persistence for the per-user favorite property set."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from sqlalchemy import delete, func, select

from realty.db.models import Property, UserFavorite
from realty.db.repositories.base import BaseRepository


class FavoritesRepository(BaseRepository):
    async def list_properties(self, user_id: int) -> Sequence[Property]:
        """Return favorited properties, most recently added first."""

        query = (
            select(Property)
            .join(UserFavorite, UserFavorite.property_id == Property.id)
            .where(UserFavorite.user_id == user_id)
            .order_by(UserFavorite.created_at.desc(), UserFavorite.id.desc())
        )
        result = await self._session.execute(query)
        return result.scalars().unique().all()

    async def add(self, user_id: int, property_id: int) -> None:
        await self.add_many(user_id, [property_id])

    async def add_many(self, user_id: int, property_ids: Iterable[int]) -> None:
        """Insert each id at most once; existing memberships are left alone."""

        unique_ids = list(dict.fromkeys(property_ids))
        await self.insert_ignoring_conflicts(
            UserFavorite.__table__,
            [{"user_id": user_id, "property_id": property_id} for property_id in unique_ids],
            conflict_columns=["user_id", "property_id"],
        )

    async def remove(self, user_id: int, property_id: int) -> None:
        await self._session.execute(
            delete(UserFavorite).where(
                UserFavorite.user_id == user_id,
                UserFavorite.property_id == property_id,
            )
        )

    async def count_for_user(self, user_id: int, property_id: int | None = None) -> int:
        query = select(func.count(UserFavorite.id)).where(UserFavorite.user_id == user_id)
        if property_id is not None:
            query = query.where(UserFavorite.property_id == property_id)
        result = await self._session.execute(query)
        return int(result.scalar_one())
