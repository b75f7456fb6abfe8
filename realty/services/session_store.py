"""Session-token cache in front of the durable ``user_sessions`` table."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from realty.cache import SESSION_TTL_SECONDS, CacheLayer, session_key
from realty.schemas.auth import SessionRecord

logger = logging.getLogger(__name__)


class SessionStore:
    """Read-through accelerator for session lookups.

    The cache may be briefly absent (the durable row is consulted and the
    entry repopulated) but it must never outlive a revocation, so callers
    delete the durable row before calling :meth:`delete_session`.
    """

    def __init__(self, cache: CacheLayer, ttl_seconds: int = SESSION_TTL_SECONDS) -> None:
        self._cache = cache
        self._ttl_seconds = ttl_seconds

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    async def set_session(self, token: str, user: SessionRecord) -> None:
        await self._cache.cache_set(
            session_key(token), user.model_dump(by_alias=True), self._ttl_seconds
        )

    async def get_session(self, token: str) -> SessionRecord | None:
        payload = await self._cache.cache_get(session_key(token))
        if payload is None:
            return None
        try:
            return SessionRecord.model_validate(payload)
        except ValidationError:
            logger.warning("Discarding malformed cached session record")
            return None

    async def delete_session(self, token: str) -> None:
        await self._cache.cache_delete(session_key(token))
