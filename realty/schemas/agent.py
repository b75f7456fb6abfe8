"""Agent directory schemas."""

from __future__ import annotations

from pydantic import Field

from realty.schemas.base import CamelModel


class AgentOut(CamelModel):
    id: int
    user_id: int
    license_number: str
    initials: str
    title: str
    bio: str | None = None
    experience_years: int
    active_listings: int
    homes_sold: int
    avg_days_on_market: int
    client_satisfaction: float
    profile_image_url: str | None = None
    specialties: list[str] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)
    certifications: list[str] = Field(default_factory=list)
    is_active: bool = True
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None


class AgentListResponse(CamelModel):
    agents: list[AgentOut]


class AgentDetailResponse(CamelModel):
    agent: AgentOut
