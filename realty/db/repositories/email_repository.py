"""Email notification log and notification preferences."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import case, func, select

from realty.db.models import EmailNotification, UserEmailPreferences
from realty.db.repositories.base import BaseRepository


class EmailRepository(BaseRepository):
    async def create_notification(
        self,
        *,
        type: str,
        recipient_email: str,
        recipient_name: str,
        subject: str,
        user_id: int | None = None,
        property_id: int | None = None,
        agent_id: int | None = None,
        template_id: str | None = None,
        template_data: dict[str, Any] | None = None,
    ) -> EmailNotification:
        notification = EmailNotification(
            type=type,
            recipient_email=recipient_email,
            recipient_name=recipient_name,
            subject=subject,
            status="pending",
            user_id=user_id,
            property_id=property_id,
            agent_id=agent_id,
            template_id=template_id,
            template_data=template_data,
        )
        self._session.add(notification)
        await self._session.flush()
        return notification

    async def update_status(
        self,
        notification: EmailNotification,
        status: str,
        *,
        sent_at: datetime | None = None,
        error_message: str | None = None,
        provider_message_id: str | None = None,
    ) -> None:
        notification.status = status
        if sent_at is not None:
            notification.sent_at = sent_at
        notification.error_message = error_message
        if provider_message_id is not None:
            notification.provider_message_id = provider_message_id
        await self._session.flush()

    async def find_by_provider_message_id(
        self, provider_message_id: str
    ) -> EmailNotification | None:
        result = await self._session.execute(
            select(EmailNotification).where(
                EmailNotification.provider_message_id == provider_message_id
            )
        )
        return result.scalars().first()

    async def list_notifications(
        self, user_id: int | None = None, limit: int = 50
    ) -> Sequence[EmailNotification]:
        query = select(EmailNotification)
        if user_id is not None:
            query = query.where(EmailNotification.user_id == user_id)
        query = query.order_by(
            EmailNotification.created_at.desc(), EmailNotification.id.desc()
        ).limit(limit)
        result = await self._session.execute(query)
        return result.scalars().all()

    async def stats_by_type(self, user_id: int | None = None) -> list[dict[str, Any]]:
        """Return one row per notification type with status counters."""

        query = select(
            EmailNotification.type,
            func.count(EmailNotification.id).label("total"),
            func.sum(case((EmailNotification.status == "sent", 1), else_=0)).label("sent"),
            func.sum(case((EmailNotification.status == "failed", 1), else_=0)).label("failed"),
            func.sum(case((EmailNotification.status == "pending", 1), else_=0)).label("pending"),
        )
        if user_id is not None:
            query = query.where(EmailNotification.user_id == user_id)
        query = query.group_by(EmailNotification.type)
        result = await self._session.execute(query)
        return [dict(row._mapping) for row in result.all()]

    async def get_preferences(self, user_id: int) -> UserEmailPreferences | None:
        result = await self._session.execute(
            select(UserEmailPreferences).where(UserEmailPreferences.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def upsert_preferences(self, user_id: int, values: dict[str, Any]) -> UserEmailPreferences:
        preferences = await self.get_preferences(user_id)
        if preferences is None:
            preferences = UserEmailPreferences(user_id=user_id, **values)
            self._session.add(preferences)
        else:
            for field, value in values.items():
                setattr(preferences, field, value)
        await self._session.flush()
        return preferences
