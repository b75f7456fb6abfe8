"""Inquiry and tour request schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field, field_validator

from realty.schemas.base import CamelModel

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

InquiryType = Literal["general", "showing", "offer", "financing", "tour_request"]
ContactMethod = Literal["email", "phone", "text"]


class InquiryCreate(CamelModel):
    property_id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., pattern=_EMAIL_PATTERN, max_length=255)
    phone: str | None = Field(None, max_length=32)
    message: str | None = Field(None, max_length=5000)
    inquiry_type: InquiryType = "general"
    preferred_contact_method: ContactMethod = "email"

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class TourRequestCreate(CamelModel):
    property_id: int = Field(..., ge=1)
    full_name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., pattern=_EMAIL_PATTERN, max_length=255)
    phone: str | None = Field(None, max_length=32)
    message: str | None = Field(None, max_length=5000)
    preferred_date: str | None = Field(None, max_length=64)

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class InquiryCreatedResponse(CamelModel):
    success: bool = True
    inquiry_id: int


class InquiryOut(CamelModel):
    id: int
    property_id: int
    user_id: int | None = None
    agent_id: int | None = None
    name: str
    email: str
    phone: str | None = None
    message: str | None = None
    inquiry_type: str
    status: str
    preferred_contact_method: str
    created_at: datetime
    property_title: str | None = None
    property_address: str | None = None
    property_city: str | None = None


class InquiryListResponse(CamelModel):
    inquiries: list[InquiryOut]


class SearchHistoryCreate(CamelModel):
    search_query: str = Field(..., min_length=1, max_length=255)
    filters: dict[str, object] = Field(default_factory=dict)
    results_count: int = Field(0, ge=0)


class SearchHistoryOut(CamelModel):
    id: int
    search_query: str
    filters: dict[str, object] = Field(default_factory=dict)
    results_count: int
    created_at: datetime


class SearchHistoryResponse(CamelModel):
    history: list[SearchHistoryOut]
