"""Property inquiries and tour requests, with agent/client notifications."""

from __future__ import annotations

import logging

from realty.db.repositories import AgentRepository, InquiryRepository, PropertyRepository
from realty.exceptions import NotFound, PermissionDenied
from realty.schemas.auth import SessionRecord
from realty.services.auth_service import has_role
from realty.schemas.inquiry import InquiryCreate, InquiryOut, TourRequestCreate
from realty.services.email import EmailService
from realty.services.presentation import inquiry_summary

logger = logging.getLogger(__name__)


class InquiryService:
    def __init__(
        self,
        *,
        inquiries: InquiryRepository,
        properties: PropertyRepository,
        agents: AgentRepository,
        email: EmailService,
    ) -> None:
        self._inquiries = inquiries
        self._properties = properties
        self._agents = agents
        self._email = email

    async def create_inquiry(self, payload: InquiryCreate, user_id: int | None = None) -> int:
        prop = await self._properties.get_property(payload.property_id)
        if prop is None:
            raise NotFound("Property not found")

        inquiry = await self._inquiries.create(
            property_id=prop.id,
            user_id=user_id,
            agent_id=prop.agent_id,
            name=payload.name,
            email=payload.email,
            phone=payload.phone,
            message=payload.message,
            inquiry_type=payload.inquiry_type,
            preferred_contact_method=payload.preferred_contact_method,
        )

        if prop.agent is not None:
            await self._email.send_property_inquiry(
                prop=prop,
                agent=prop.agent,
                inquirer_name=payload.name,
                inquirer_email=payload.email,
                inquirer_phone=payload.phone,
                message=payload.message,
            )
        else:
            logger.info(f"Property {prop.id} has no listing agent; inquiry {inquiry.id} not forwarded")
        return inquiry.id

    async def create_tour_request(
        self, payload: TourRequestCreate, user_id: int | None = None
    ) -> int:
        prop = await self._properties.get_property(payload.property_id)
        if prop is None:
            raise NotFound("Property not found")

        message = payload.message
        if payload.preferred_date:
            message = f"Preferred date: {payload.preferred_date}\n{message or ''}".strip()

        inquiry = await self._inquiries.create(
            property_id=prop.id,
            user_id=user_id,
            agent_id=prop.agent_id,
            name=payload.full_name,
            email=payload.email,
            phone=payload.phone,
            message=message,
            inquiry_type="tour_request",
        )

        await self._email.send_tour_confirmation(
            prop=prop,
            agent=prop.agent,
            client_name=payload.full_name,
            client_email=payload.email,
            requested_date=payload.preferred_date,
            user_id=user_id,
        )
        if prop.agent is not None:
            await self._email.send_property_inquiry(
                prop=prop,
                agent=prop.agent,
                inquirer_name=payload.full_name,
                inquirer_email=payload.email,
                inquirer_phone=payload.phone,
                message=message,
            )
        return inquiry.id

    async def list_for_agent_user(self, user: SessionRecord) -> list[InquiryOut]:
        if not has_role(user, "agent"):
            raise PermissionDenied("Agent access required")
        agent = await self._agents.get_by_user_id(user.id)
        if agent is None:
            raise NotFound("Agent profile not found")
        rows = await self._inquiries.list_for_agent(agent.id)
        return [inquiry_summary(row) for row in rows]
