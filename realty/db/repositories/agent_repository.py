"""Agent directory queries."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select

from realty.db.models import Agent
from realty.db.repositories.base import BaseRepository


class AgentRepository(BaseRepository):
    async def list_active(self) -> Sequence[Agent]:
        query = (
            select(Agent)
            .where(Agent.is_active.is_(True))
            .order_by(Agent.homes_sold.desc(), Agent.id)
        )
        result = await self._session.execute(query)
        return result.scalars().unique().all()

    async def get_active(self, agent_id: int) -> Agent | None:
        query = select(Agent).where(Agent.id == agent_id, Agent.is_active.is_(True))
        result = await self._session.execute(query)
        return result.scalars().unique().one_or_none()

    async def get_by_user_id(self, user_id: int) -> Agent | None:
        result = await self._session.execute(select(Agent).where(Agent.user_id == user_id))
        return result.scalars().unique().one_or_none()
