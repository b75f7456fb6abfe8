"""User accounts and durable sessions."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select

from realty.db.models import User, UserSession
from realty.db.repositories.base import BaseRepository


class UserRepository(BaseRepository):
    async def get_by_email(self, email: str) -> User | None:
        result = await self._session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def create_user(
        self,
        *,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        phone: str | None = None,
        role: str = "client",
    ) -> User:
        user = User(
            email=email,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            role=role,
        )
        self._session.add(user)
        await self._session.flush()
        return user

    async def create_session(
        self, *, user_id: int, session_token: str, expires_at: datetime
    ) -> UserSession:
        record = UserSession(
            user_id=user_id, session_token=session_token, expires_at=expires_at
        )
        self._session.add(record)
        await self._session.flush()
        return record

    async def get_active_session_user(self, session_token: str, now: datetime) -> User | None:
        """Return the user owning ``session_token`` if the session has not expired."""

        query = (
            select(User)
            .join(UserSession, UserSession.user_id == User.id)
            .where(UserSession.session_token == session_token)
            .where(UserSession.expires_at > now)
        )
        result = await self._session.execute(query)
        return result.scalars().first()

    async def delete_session(self, session_token: str) -> None:
        await self._session.execute(
            delete(UserSession).where(UserSession.session_token == session_token)
        )
        await self._session.flush()
