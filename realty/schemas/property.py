"""Property listing schemas."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from realty.schemas.base import CamelModel


class PropertyImageOut(CamelModel):
    id: int
    image_url: str
    alt_text: str | None = None
    display_order: int = 0
    is_primary: bool = False


class PropertyOut(CamelModel):
    """Listing payload; ``price`` is in cents, ``price_display`` formatted."""

    id: int
    mls_number: str
    agent_id: int | None = None
    title: str
    description: str | None = None
    address: str
    city: str
    state: str
    zip_code: str
    price: int
    price_display: str
    bedrooms: int
    bathrooms: float
    square_feet: int
    lot_size: str | None = None
    year_built: int | None = None
    property_type: str
    status: str
    is_featured: bool
    days_on_market: int
    neighborhood: str | None = None
    school_district: str | None = None
    features: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    main_image_url: str | None = None
    agent_initials: str | None = None
    agent_first_name: str | None = None
    agent_last_name: str | None = None


class PropertyDetail(PropertyOut):
    agent_email: str | None = None
    agent_phone: str | None = None
    images: list[PropertyImageOut] = Field(default_factory=list)


class PropertyFilters(CamelModel):
    """Listing filters; ``min_price``/``max_price`` are whole dollars."""

    status: str | None = None
    property_type: str | None = None
    min_price: int | None = Field(None, ge=0)
    max_price: int | None = Field(None, ge=0)
    min_bedrooms: int | None = Field(None, ge=0)
    min_bathrooms: float | None = Field(None, ge=0)
    city: str | None = None
    featured: bool | None = None
    limit: int | None = Field(None, ge=1, le=100)
    offset: int | None = Field(None, ge=0)

    def cache_signature(self) -> dict[str, Any]:
        """Filters as sent on the wire, minus unset ones."""

        return self.model_dump(by_alias=True, exclude_none=True)


class PropertyListResponse(CamelModel):
    properties: list[PropertyOut]


class PropertySearchResponse(CamelModel):
    properties: list[PropertyOut]
    query: str
    filters: dict[str, Any] = Field(default_factory=dict)


class PropertyDetailResponse(CamelModel):
    property: PropertyDetail
