"""Price alerts; evaluation happens on demand, nothing schedules it."""

from __future__ import annotations

from realty.db.models import PriceAlert, User
from realty.db.repositories import PriceAlertRepository, PropertyRepository
from realty.exceptions import NotFound
from realty.schemas.price_alert import PriceAlertCreate, PriceAlertOut
from realty.services.presentation import price_alert_summary


class PriceAlertService:
    def __init__(
        self, *, alerts: PriceAlertRepository, properties: PropertyRepository
    ) -> None:
        self._alerts = alerts
        self._properties = properties

    async def create_alert(self, user_id: int, payload: PriceAlertCreate) -> PriceAlertOut:
        if not await self._properties.existing_ids([payload.property_id]):
            raise NotFound("Property not found")
        alert = await self._alerts.create(
            user_id=user_id,
            property_id=payload.property_id,
            target_price=payload.target_price,
            alert_type=payload.alert_type,
        )
        return price_alert_summary(alert)

    async def list_alerts(self, user_id: int) -> list[PriceAlertOut]:
        return [price_alert_summary(alert) for alert in await self._alerts.list_active_for_user(user_id)]

    async def triggered_alerts(self) -> list[tuple[PriceAlert, User]]:
        return list(await self._alerts.list_triggered())
