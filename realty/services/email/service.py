"""Transactional email: persistence, delivery, history and webhook updates.

A notification row is written as ``pending`` before contacting the
provider and then moved to ``sent`` or ``failed``.  Delivery problems are
recorded on the row and logged; :meth:`EmailService.send` reports them as
``False`` rather than raising, so an email outage never fails the request
that triggered it.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from realty.cache import USER_PREFS_TTL_SECONDS, CacheLayer, user_prefs_key
from realty.db.models import Agent, Property
from realty.db.repositories import EmailRepository
from realty.exceptions import EmailDeliveryError, StoreUnavailableError
from realty.schemas.email import (
    EmailNotificationOut,
    EmailPreferences,
    EmailStats,
    SendGridEvent,
)
from realty.services.email.sendgrid import OutboundEmail, SendGridTransport
from realty.services.email.templates import render
from realty.services.presentation import notification_summary
from realty.utils.pricing import format_price

logger = logging.getLogger(__name__)

SUPPORT_EMAIL = "info@2020realtors.com"
SUPPORT_PHONE = "(714) 262-4263"

# Provider event -> stored status; anything else is acknowledged and ignored.
WEBHOOK_STATUS_MAP = {
    "delivered": "sent",
    "bounce": "bounced",
    "dropped": "failed",
    "deferred": "pending",
    "processed": "pending",
}


@dataclass
class NotificationRequest:
    type: str
    recipient_email: str
    recipient_name: str
    subject: str
    user_id: int | None = None
    property_id: int | None = None
    agent_id: int | None = None
    template_id: str | None = None
    template_data: dict[str, Any] = field(default_factory=dict)


def provider_message_id(sg_message_id: str) -> str:
    """SendGrid event ids append ``.filter...`` to the X-Message-Id value."""

    return sg_message_id.split(".", 1)[0]


class EmailService:
    def __init__(
        self,
        repository: EmailRepository,
        transport: SendGridTransport,
        *,
        site_url: str,
        cache: CacheLayer | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._repository = repository
        self._transport = transport
        self._site_url = site_url.rstrip("/")
        self._cache = cache
        self._clock = clock

    def _now(self) -> datetime:
        return datetime.fromtimestamp(self._clock(), tz=UTC)

    def _url(self, path: str) -> str:
        return f"{self._site_url}{path}"

    async def send(self, request: NotificationRequest) -> bool:
        notification = await self._repository.create_notification(
            type=request.type,
            recipient_email=request.recipient_email,
            recipient_name=request.recipient_name,
            subject=request.subject,
            user_id=request.user_id,
            property_id=request.property_id,
            agent_id=request.agent_id,
            template_id=request.template_id,
            template_data=request.template_data,
        )
        message = OutboundEmail(
            to_email=request.recipient_email,
            to_name=request.recipient_name,
            subject=request.subject,
            html=render(request.type, request.template_data),
            template_id=request.template_id,
            template_data=request.template_data,
        )

        try:
            message_id = await self._transport.send(message)
        except EmailDeliveryError as exc:
            logger.error(f"Email {notification.id} ({request.type}) failed: {exc}")
            await self._repository.update_status(notification, "failed", error_message=str(exc))
            return False

        await self._repository.update_status(
            notification, "sent", sent_at=self._now(), provider_message_id=message_id
        )
        logger.info(f"Email {notification.id} ({request.type}) sent")
        return True

    async def send_welcome(
        self, *, user_id: int, email: str, first_name: str, last_name: str
    ) -> bool:
        return await self.send(
            NotificationRequest(
                type="welcome",
                recipient_email=email,
                recipient_name=f"{first_name} {last_name}",
                subject="Welcome to 20/20 Realtors - Your Real Estate Journey Begins!",
                user_id=user_id,
                template_data={
                    "firstName": first_name,
                    "lastName": last_name,
                    "dashboardUrl": self._url("/dashboard"),
                    "propertiesUrl": self._url("/properties"),
                    "supportEmail": SUPPORT_EMAIL,
                    "supportPhone": SUPPORT_PHONE,
                },
            )
        )

    async def send_property_inquiry(
        self,
        *,
        prop: Property,
        agent: Agent,
        inquirer_name: str,
        inquirer_email: str,
        inquirer_phone: str | None,
        message: str | None,
    ) -> bool:
        agent_name = f"{agent.user.first_name} {agent.user.last_name}"
        return await self.send(
            NotificationRequest(
                type="property_inquiry",
                recipient_email=agent.user.email,
                recipient_name=agent_name,
                subject=f"New Property Inquiry - {prop.title}",
                property_id=prop.id,
                agent_id=agent.id,
                template_data={
                    "agentName": agent_name,
                    "propertyTitle": prop.title,
                    "propertyAddress": prop.address,
                    "inquirerName": inquirer_name,
                    "inquirerEmail": inquirer_email,
                    "inquirerPhone": inquirer_phone or "Not provided",
                    "message": message or "",
                    "dashboardUrl": self._url("/agent/dashboard"),
                },
            )
        )

    async def send_tour_confirmation(
        self,
        *,
        prop: Property,
        agent: Agent | None,
        client_name: str,
        client_email: str,
        requested_date: str | None,
        user_id: int | None = None,
    ) -> bool:
        agent_name = f"{agent.user.first_name} {agent.user.last_name}" if agent else "Our team"
        agent_phone = (agent.user.phone if agent else None) or SUPPORT_PHONE
        return await self.send(
            NotificationRequest(
                type="tour_request",
                recipient_email=client_email,
                recipient_name=client_name,
                subject=f"Tour Request Confirmation - {prop.title}",
                user_id=user_id,
                property_id=prop.id,
                agent_id=agent.id if agent else None,
                template_data={
                    "clientName": client_name,
                    "propertyTitle": prop.title,
                    "propertyAddress": prop.address,
                    "requestedDate": requested_date or "To be scheduled",
                    "agentName": agent_name,
                    "agentPhone": agent_phone,
                    "propertyUrl": self._url(f"/property/{prop.id}"),
                },
            )
        )

    async def send_price_alert(
        self,
        *,
        user_id: int,
        user_email: str,
        user_name: str,
        prop: Property,
        old_price: int,
        new_price: int,
    ) -> bool:
        change = new_price - old_price
        change_type = "decrease" if change < 0 else "increase"
        percentage = round(abs(change) / old_price * 100) if old_price else 0
        label = "Drop" if change_type == "decrease" else "Increase"
        return await self.send(
            NotificationRequest(
                type="price_alert",
                recipient_email=user_email,
                recipient_name=user_name,
                subject=f"Price {label} Alert - {prop.title}",
                user_id=user_id,
                property_id=prop.id,
                template_data={
                    "userName": user_name,
                    "propertyTitle": prop.title,
                    "oldPrice": format_price(old_price),
                    "newPrice": format_price(new_price),
                    "priceChange": format_price(abs(change)),
                    "changeType": change_type,
                    "changePercentage": percentage,
                    "propertyUrl": self._url(f"/property/{prop.id}"),
                },
            )
        )

    async def send_new_listing(
        self, *, user_email: str, user_name: str, prop: Property, search_criteria: str
    ) -> bool:
        return await self.send(
            NotificationRequest(
                type="new_listing",
                recipient_email=user_email,
                recipient_name=user_name,
                subject=f"New Property Match - {prop.title}",
                property_id=prop.id,
                template_data={
                    "userName": user_name,
                    "propertyTitle": prop.title,
                    "propertyAddress": prop.address,
                    "price": format_price(prop.price),
                    "bedrooms": prop.bedrooms,
                    "bathrooms": prop.bathrooms,
                    "sqft": f"{prop.square_feet:,}",
                    "searchCriteria": search_criteria,
                    "propertyUrl": self._url(f"/property/{prop.id}"),
                    "unsubscribeUrl": self._url("/unsubscribe"),
                },
            )
        )

    async def get_email_history(
        self, user_id: int | None = None, limit: int = 50
    ) -> list[EmailNotificationOut]:
        rows = await self._repository.list_notifications(user_id, limit)
        return [notification_summary(row) for row in rows]

    async def get_email_stats(self, user_id: int | None = None) -> EmailStats:
        stats = EmailStats()
        for row in await self._repository.stats_by_type(user_id):
            stats.total += int(row["total"] or 0)
            stats.sent += int(row["sent"] or 0)
            stats.failed += int(row["failed"] or 0)
            stats.pending += int(row["pending"] or 0)
            stats.by_type[row["type"]] = int(row["total"] or 0)
        return stats

    async def get_preferences(self, user_id: int) -> EmailPreferences:
        key = user_prefs_key(user_id)
        if self._cache is not None:
            cached = await self._cache.cache_get(key)
            if cached is not None:
                return EmailPreferences.model_validate(cached)

        row = await self._repository.get_preferences(user_id)
        preferences = EmailPreferences.model_validate(row) if row else EmailPreferences()
        if self._cache is not None:
            try:
                await self._cache.cache_set(
                    key, preferences.model_dump(by_alias=True), USER_PREFS_TTL_SECONDS
                )
            except StoreUnavailableError as exc:
                logger.warning(f"Failed to cache email preferences for user {user_id}: {exc}")
        return preferences

    async def update_preferences(
        self, user_id: int, preferences: EmailPreferences
    ) -> EmailPreferences:
        row = await self._repository.upsert_preferences(user_id, preferences.model_dump())
        if self._cache is not None:
            await self._cache.cache_delete(user_prefs_key(user_id))
        return EmailPreferences.model_validate(row)

    async def apply_webhook_events(self, events: Sequence[SendGridEvent]) -> int:
        """Update stored statuses from provider events; return how many applied."""

        processed = 0
        for event in events:
            status = WEBHOOK_STATUS_MAP.get(event.event)
            if status is None or not event.sg_message_id:
                logger.debug(f"Ignoring SendGrid event {event.event!r}")
                continue

            notification = await self._repository.find_by_provider_message_id(
                provider_message_id(event.sg_message_id)
            )
            if notification is None:
                logger.info(f"No notification matches SendGrid message {event.sg_message_id}")
                continue

            # A late "processed"/"deferred" must not undo a final delivery state.
            if status == "pending" and notification.status != "pending":
                continue

            error_message = event.reason if status in {"bounced", "failed"} else None
            await self._repository.update_status(
                notification, status, error_message=error_message
            )
            processed += 1
        return processed
