"""Email notification, preference and webhook schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from realty.schemas.base import CamelModel

NotificationType = Literal[
    "property_inquiry",
    "tour_request",
    "price_alert",
    "new_listing",
    "welcome",
    "password_reset",
    "property_update",
]
NotificationStatus = Literal["pending", "sent", "failed", "bounced"]
Frequency = Literal["immediate", "daily", "weekly"]


class EmailNotificationOut(CamelModel):
    id: int
    user_id: int | None = None
    property_id: int | None = None
    agent_id: int | None = None
    type: str
    recipient_email: str
    recipient_name: str
    subject: str
    status: str
    sent_at: datetime | None = None
    error_message: str | None = None
    template_id: str | None = None
    template_data: dict[str, Any] | None = None
    created_at: datetime


class EmailNotificationListResponse(CamelModel):
    notifications: list[EmailNotificationOut]


class EmailStats(CamelModel):
    total: int = 0
    sent: int = 0
    failed: int = 0
    pending: int = 0
    by_type: dict[str, int] = Field(default_factory=dict)


class EmailStatsResponse(CamelModel):
    stats: EmailStats


class EmailPreferences(CamelModel):
    property_updates: bool = True
    price_alerts: bool = True
    new_listings: bool = True
    market_reports: bool = False
    agent_communications: bool = True
    frequency: Frequency = "immediate"


class EmailPreferencesResponse(CamelModel):
    preferences: EmailPreferences


class SendGridEvent(BaseModel):
    """One element of the SendGrid event webhook array (snake_case upstream)."""

    model_config = ConfigDict(extra="allow")

    event: str
    email: str | None = None
    timestamp: int | None = None
    sg_message_id: str | None = None
    reason: str | None = None


class WebhookAck(CamelModel):
    success: bool = True
    processed: int = 0
