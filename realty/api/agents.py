"""Agent directory endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from realty.schemas.agent import AgentDetailResponse, AgentListResponse
from realty.services.agent_service import AgentService
from realty.services.dependencies import get_agent_service

router = APIRouter()


@router.get("", response_model=AgentListResponse)
async def list_agents(service: AgentService = Depends(get_agent_service)) -> AgentListResponse:
    """Return active agents ordered by homes sold."""

    return AgentListResponse(agents=await service.list_agents())


@router.get("/{agent_id}", response_model=AgentDetailResponse)
async def get_agent(
    agent_id: int, service: AgentService = Depends(get_agent_service)
) -> AgentDetailResponse:
    return AgentDetailResponse(agent=await service.get_agent(agent_id))
