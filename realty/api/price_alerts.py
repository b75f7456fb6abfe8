from __future__ import annotations

from fastapi import APIRouter, Depends, status

from realty.schemas.auth import SessionRecord
from realty.schemas.price_alert import (
    PriceAlertCreate,
    PriceAlertCreatedResponse,
    PriceAlertListResponse,
)
from realty.services.dependencies import get_price_alert_service, require_user
from realty.services.price_alert_service import PriceAlertService

router = APIRouter()


@router.get("", response_model=PriceAlertListResponse)
async def list_price_alerts(
    user: SessionRecord = Depends(require_user),
    service: PriceAlertService = Depends(get_price_alert_service),
) -> PriceAlertListResponse:
    """Active alerts with the property's current price."""

    return PriceAlertListResponse(alerts=await service.list_alerts(user.id))


@router.post("", response_model=PriceAlertCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_price_alert(
    payload: PriceAlertCreate,
    user: SessionRecord = Depends(require_user),
    service: PriceAlertService = Depends(get_price_alert_service),
) -> PriceAlertCreatedResponse:
    return PriceAlertCreatedResponse(alert=await service.create_alert(user.id, payload))
