"""Inbound provider webhooks."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from realty.schemas.email import SendGridEvent, WebhookAck
from realty.services.dependencies import get_email_service
from realty.services.email import EmailService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/sendgrid", response_model=WebhookAck)
async def sendgrid_events(
    events: list[SendGridEvent],
    service: EmailService = Depends(get_email_service),
) -> WebhookAck:
    """Reconcile stored notification statuses with SendGrid delivery events."""

    logger.info(f"Received {len(events)} SendGrid events")
    processed = await service.apply_webhook_events(events)
    return WebhookAck(processed=processed)
