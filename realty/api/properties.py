"""Property listing, search and detail endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from realty.schemas.auth import SessionRecord
from realty.schemas.property import (
    PropertyDetailResponse,
    PropertyFilters,
    PropertyListResponse,
    PropertySearchResponse,
)
from realty.services.dependencies import get_property_service, optional_user
from realty.services.property_service import PropertyService

router = APIRouter()


@router.get("", response_model=PropertyListResponse)
async def list_properties(
    status: str | None = Query(None, description="Listing status, e.g. for_sale"),
    property_type: str | None = Query(None, alias="propertyType"),
    min_price: int | None = Query(None, alias="minPrice", ge=0, description="Whole dollars"),
    max_price: int | None = Query(None, alias="maxPrice", ge=0, description="Whole dollars"),
    min_bedrooms: int | None = Query(None, alias="minBedrooms", ge=0),
    min_bathrooms: float | None = Query(None, alias="minBathrooms", ge=0),
    city: str | None = Query(None),
    featured: bool | None = Query(None, description="Only featured listings when true"),
    limit: int | None = Query(None, ge=1, le=100),
    offset: int | None = Query(None, ge=0),
    service: PropertyService = Depends(get_property_service),
) -> PropertyListResponse:
    """Return listings, featured first then newest, served cache-aside."""

    filters = PropertyFilters(
        status=status,
        property_type=property_type,
        min_price=min_price,
        max_price=max_price,
        min_bedrooms=min_bedrooms,
        min_bathrooms=min_bathrooms,
        city=city,
        featured=True if featured else None,
        limit=limit,
        offset=offset,
    )
    return PropertyListResponse(properties=await service.list_properties(filters))


# Declared before "/{property_id}" so "search" is not parsed as an id.
@router.get("/search", response_model=PropertySearchResponse)
async def search_properties(
    q: str = Query(..., min_length=1, max_length=255, description="Free-text query"),
    property_type: str | None = Query(None, alias="propertyType"),
    min_price: int | None = Query(None, alias="minPrice", ge=0),
    max_price: int | None = Query(None, alias="maxPrice", ge=0),
    min_bedrooms: int | None = Query(None, alias="minBedrooms", ge=0),
    min_bathrooms: float | None = Query(None, alias="minBathrooms", ge=0),
    user: SessionRecord | None = Depends(optional_user),
    service: PropertyService = Depends(get_property_service),
) -> PropertySearchResponse:
    filters = PropertyFilters(
        property_type=property_type,
        min_price=min_price,
        max_price=max_price,
        min_bedrooms=min_bedrooms,
        min_bathrooms=min_bathrooms,
    )
    return await service.search(q, filters, user_id=user.id if user else None)


@router.get("/{property_id}", response_model=PropertyDetailResponse)
async def get_property(
    property_id: int,
    service: PropertyService = Depends(get_property_service),
) -> PropertyDetailResponse:
    return PropertyDetailResponse(property=await service.get_property(property_id))
