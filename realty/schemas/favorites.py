"""Pydantic schemas that power the favorites API surface."""

from __future__ import annotations

from pydantic import Field

from realty.schemas.base import CamelModel
from realty.schemas.property import PropertyOut


class FavoriteCreate(CamelModel):
    property_id: int = Field(..., ge=1, description="Primary key from the properties table")


class FavoriteSyncRequest(CamelModel):
    favorite_ids: list[int] = Field(
        default_factory=list,
        max_length=500,
        description=(
            "Property ids accumulated on the client before sign-in. Repeats"
            " are tolerated; each id is inserted at most once."
        ),
    )


class FavoriteSyncResponse(CamelModel):
    success: bool = True
    synced: int


class FavoriteListResponse(CamelModel):
    favorites: list[PropertyOut]
