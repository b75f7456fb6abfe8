"""Inquiries, search history and price alerts."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import and_, or_, select

from realty.db.models import PriceAlert, Property, PropertyInquiry, SearchHistory, User
from realty.db.repositories.base import BaseRepository


class InquiryRepository(BaseRepository):
    async def create(
        self,
        *,
        property_id: int,
        name: str,
        email: str,
        user_id: int | None = None,
        agent_id: int | None = None,
        phone: str | None = None,
        message: str | None = None,
        inquiry_type: str = "general",
        preferred_contact_method: str = "email",
    ) -> PropertyInquiry:
        inquiry = PropertyInquiry(
            property_id=property_id,
            user_id=user_id,
            agent_id=agent_id,
            name=name,
            email=email,
            phone=phone,
            message=message,
            inquiry_type=inquiry_type,
            preferred_contact_method=preferred_contact_method,
        )
        self._session.add(inquiry)
        await self._session.flush()
        return inquiry

    async def list_for_agent(self, agent_id: int) -> Sequence[PropertyInquiry]:
        query = (
            select(PropertyInquiry)
            .where(PropertyInquiry.agent_id == agent_id)
            .order_by(PropertyInquiry.created_at.desc(), PropertyInquiry.id.desc())
        )
        result = await self._session.execute(query)
        return result.scalars().unique().all()


class SearchHistoryRepository(BaseRepository):
    async def save(
        self,
        *,
        user_id: int,
        search_query: str,
        filters: dict[str, Any],
        results_count: int,
    ) -> SearchHistory:
        entry = SearchHistory(
            user_id=user_id,
            search_query=search_query,
            filters=filters,
            results_count=results_count,
        )
        self._session.add(entry)
        await self._session.flush()
        return entry

    async def list_for_user(self, user_id: int, limit: int = 10) -> Sequence[SearchHistory]:
        query = (
            select(SearchHistory)
            .where(SearchHistory.user_id == user_id)
            .order_by(SearchHistory.created_at.desc(), SearchHistory.id.desc())
            .limit(limit)
        )
        result = await self._session.execute(query)
        return result.scalars().all()


class PriceAlertRepository(BaseRepository):
    async def create(
        self, *, user_id: int, property_id: int, target_price: int, alert_type: str
    ) -> PriceAlert:
        alert = PriceAlert(
            user_id=user_id,
            property_id=property_id,
            target_price=target_price,
            alert_type=alert_type,
            is_active=True,
        )
        self._session.add(alert)
        await self._session.flush()
        await self._session.refresh(alert, attribute_names=["property"])
        return alert

    async def list_active_for_user(self, user_id: int) -> Sequence[PriceAlert]:
        query = (
            select(PriceAlert)
            .where(PriceAlert.user_id == user_id, PriceAlert.is_active.is_(True))
            .order_by(PriceAlert.created_at.desc(), PriceAlert.id.desc())
        )
        result = await self._session.execute(query)
        return result.scalars().unique().all()

    async def list_triggered(self) -> Sequence[tuple[PriceAlert, User]]:
        """Return active alerts whose threshold the current price has crossed."""

        query = (
            select(PriceAlert, User)
            .join(Property, Property.id == PriceAlert.property_id)
            .join(User, User.id == PriceAlert.user_id)
            .where(PriceAlert.is_active.is_(True))
            .where(
                or_(
                    and_(PriceAlert.alert_type == "below", Property.price <= PriceAlert.target_price),
                    and_(PriceAlert.alert_type == "above", Property.price >= PriceAlert.target_price),
                )
            )
        )
        result = await self._session.execute(query)
        return [(alert, user) for alert, user in result.unique().all()]
