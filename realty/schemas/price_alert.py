"""Price alert schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from realty.schemas.base import CamelModel


class PriceAlertCreate(CamelModel):
    property_id: int = Field(..., ge=1)
    target_price: int = Field(..., gt=0, description="Threshold in cents")
    alert_type: Literal["below", "above"]


class PriceAlertOut(CamelModel):
    id: int
    property_id: int
    target_price: int
    alert_type: str
    is_active: bool
    created_at: datetime
    property_title: str | None = None
    property_address: str | None = None
    current_price: int | None = None


class PriceAlertListResponse(CamelModel):
    alerts: list[PriceAlertOut]


class PriceAlertCreatedResponse(CamelModel):
    success: bool = True
    alert: PriceAlertOut
