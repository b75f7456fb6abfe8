"""FastAPI router for the signed-in user's favorite properties."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from realty.schemas.auth import SessionRecord
from realty.schemas.base import SuccessResponse
from realty.schemas.favorites import (
    FavoriteCreate,
    FavoriteListResponse,
    FavoriteSyncRequest,
    FavoriteSyncResponse,
)
from realty.services.dependencies import get_favorites_service, require_user
from realty.services.favorites_service import FavoritesService

router = APIRouter()


@router.get("", response_model=FavoriteListResponse)
async def list_favorites(
    user: SessionRecord = Depends(require_user),
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoriteListResponse:
    """Return favorited properties, newest first."""

    return FavoriteListResponse(favorites=await service.list_favorites(user.id))


@router.post("", response_model=SuccessResponse)
async def add_favorite(
    payload: FavoriteCreate,
    user: SessionRecord = Depends(require_user),
    service: FavoritesService = Depends(get_favorites_service),
) -> SuccessResponse:
    """Insert the favorite if absent; repeating the call is harmless."""

    await service.add_favorite(user.id, payload.property_id)
    return SuccessResponse()


@router.post("/sync", response_model=FavoriteSyncResponse)
async def sync_favorites(
    payload: FavoriteSyncRequest,
    user: SessionRecord = Depends(require_user),
    service: FavoritesService = Depends(get_favorites_service),
) -> FavoriteSyncResponse:
    """Merge the client's locally held favorites into the stored set."""

    return await service.sync_favorites(user.id, payload.favorite_ids)


@router.delete("/{property_id}", response_model=SuccessResponse)
async def remove_favorite(
    property_id: int,
    user: SessionRecord = Depends(require_user),
    service: FavoritesService = Depends(get_favorites_service),
) -> SuccessResponse:
    await service.remove_favorite(user.id, property_id)
    return SuccessResponse()
