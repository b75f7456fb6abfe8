"""Lead capture: inquiries, tour requests and the agent inbox."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from realty.schemas.auth import SessionRecord
from realty.schemas.inquiry import (
    InquiryCreate,
    InquiryCreatedResponse,
    InquiryListResponse,
    TourRequestCreate,
)
from realty.services.dependencies import get_inquiry_service, optional_user, require_user
from realty.services.inquiry_service import InquiryService

router = APIRouter()


@router.post(
    "/inquiries",
    response_model=InquiryCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_inquiry(
    payload: InquiryCreate,
    user: SessionRecord | None = Depends(optional_user),
    service: InquiryService = Depends(get_inquiry_service),
) -> InquiryCreatedResponse:
    """Store the inquiry and notify the listing agent."""

    inquiry_id = await service.create_inquiry(payload, user_id=user.id if user else None)
    return InquiryCreatedResponse(inquiry_id=inquiry_id)


@router.post(
    "/tour-request",
    response_model=InquiryCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_tour_request(
    payload: TourRequestCreate,
    user: SessionRecord | None = Depends(optional_user),
    service: InquiryService = Depends(get_inquiry_service),
) -> InquiryCreatedResponse:
    inquiry_id = await service.create_tour_request(payload, user_id=user.id if user else None)
    return InquiryCreatedResponse(inquiry_id=inquiry_id)


@router.get("/agent/inquiries", response_model=InquiryListResponse)
async def list_agent_inquiries(
    user: SessionRecord = Depends(require_user),
    service: InquiryService = Depends(get_inquiry_service),
) -> InquiryListResponse:
    """Inquiries routed to the signed-in agent, newest first."""

    return InquiryListResponse(inquiries=await service.list_for_agent_user(user))
