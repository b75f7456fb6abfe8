"""Server side of the favorites set.

Every write goes through :meth:`FavoritesRepository.add_many`, an
``INSERT ... ON CONFLICT DO NOTHING`` against the unique
``(user_id, property_id)`` constraint.  Replaying a toggle or a whole sync
batch therefore leaves exactly one row per property.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from realty.db.repositories import FavoritesRepository, PropertyRepository
from realty.exceptions import NotFound
from realty.schemas.favorites import FavoriteSyncResponse
from realty.schemas.property import PropertyOut
from realty.services.presentation import property_summary

logger = logging.getLogger(__name__)


class FavoritesService:
    """Coordinates favorite persistence with property existence checks."""

    def __init__(
        self,
        *,
        favorites: FavoritesRepository,
        properties: PropertyRepository,
    ) -> None:
        self._favorites = favorites
        self._properties = properties

    async def list_favorites(self, user_id: int) -> list[PropertyOut]:
        rows = await self._favorites.list_properties(user_id)
        return [property_summary(row) for row in rows]

    async def add_favorite(self, user_id: int, property_id: int) -> None:
        if not await self._properties.existing_ids([property_id]):
            raise NotFound("Property not found")
        await self._favorites.add(user_id, property_id)

    async def remove_favorite(self, user_id: int, property_id: int) -> None:
        await self._favorites.remove(user_id, property_id)

    async def sync_favorites(
        self, user_id: int, favorite_ids: Sequence[int]
    ) -> FavoriteSyncResponse:
        """Merge a client-held list into the durable set.

        Unknown property ids are skipped rather than failing the whole batch,
        so a stale local list cannot block the client from ever syncing.
        """

        known = await self._properties.existing_ids(favorite_ids)
        skipped = sorted(set(favorite_ids) - known)
        if skipped:
            logger.info(f"Skipping unknown property ids during favorites sync: {skipped}")

        await self._favorites.add_many(
            user_id, [property_id for property_id in favorite_ids if property_id in known]
        )
        return FavoriteSyncResponse(synced=len(favorite_ids))
