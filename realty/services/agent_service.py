"""Agent directory with a cache-aside list."""

from __future__ import annotations

from realty.cache import AGENTS_KEY, DEFAULT_CACHE_TTL_SECONDS, CacheLayer
from realty.db.repositories import AgentRepository
from realty.exceptions import NotFound
from realty.schemas.agent import AgentOut
from realty.services.presentation import agent_summary


class AgentService:
    def __init__(
        self,
        repository: AgentRepository,
        cache: CacheLayer,
        *,
        cache_ttl: int = DEFAULT_CACHE_TTL_SECONDS,
    ) -> None:
        self._repository = repository
        self._cache = cache
        self._cache_ttl = cache_ttl

    async def list_agents(self) -> list[AgentOut]:
        async def load() -> list[dict]:
            agents = await self._repository.list_active()
            return [agent_summary(agent).model_dump(by_alias=True, mode="json") for agent in agents]

        payload = await self._cache.get_or_populate(AGENTS_KEY, load, self._cache_ttl)
        return [AgentOut.model_validate(item) for item in payload]

    async def get_agent(self, agent_id: int) -> AgentOut:
        agent = await self._repository.get_active(agent_id)
        if agent is None:
            raise NotFound("Agent not found")
        return agent_summary(agent)
