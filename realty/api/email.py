"""Email history, stats and notification preferences for the current user."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from realty.schemas.auth import SessionRecord
from realty.schemas.email import (
    EmailNotificationListResponse,
    EmailPreferences,
    EmailPreferencesResponse,
    EmailStatsResponse,
)
from realty.services.dependencies import get_email_service, require_user
from realty.services.email import EmailService

router = APIRouter()


@router.get("/notifications", response_model=EmailNotificationListResponse)
async def list_notifications(
    limit: int = Query(50, ge=1, le=200),
    user: SessionRecord = Depends(require_user),
    service: EmailService = Depends(get_email_service),
) -> EmailNotificationListResponse:
    return EmailNotificationListResponse(
        notifications=await service.get_email_history(user.id, limit)
    )


@router.get("/stats", response_model=EmailStatsResponse)
async def email_stats(
    user: SessionRecord = Depends(require_user),
    service: EmailService = Depends(get_email_service),
) -> EmailStatsResponse:
    return EmailStatsResponse(stats=await service.get_email_stats(user.id))


@router.get("/preferences", response_model=EmailPreferencesResponse)
async def get_preferences(
    user: SessionRecord = Depends(require_user),
    service: EmailService = Depends(get_email_service),
) -> EmailPreferencesResponse:
    """Stored preferences, or the defaults when none were saved."""

    return EmailPreferencesResponse(preferences=await service.get_preferences(user.id))


@router.post("/preferences", response_model=EmailPreferencesResponse)
async def update_preferences(
    payload: EmailPreferences,
    user: SessionRecord = Depends(require_user),
    service: EmailService = Depends(get_email_service),
) -> EmailPreferencesResponse:
    return EmailPreferencesResponse(
        preferences=await service.update_preferences(user.id, payload)
    )
