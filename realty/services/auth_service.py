"""Account registration, login and session validation.

Sessions live in two places: the durable ``user_sessions`` row and a cached
:class:`~realty.schemas.auth.SessionRecord`.  Lookups try the cache first and
fall back to the row, repopulating the cache on success.  Logout removes the
row before the cache entry.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
import time
from collections.abc import Callable, Iterable
from datetime import UTC, datetime, timedelta

import bcrypt

from realty.db.models import User
from realty.db.repositories import UserRepository
from realty.exceptions import AuthenticationRequired, Conflict, StoreUnavailableError
from realty.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    SessionRecord,
)
from realty.services.session_store import SessionStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"
DUPLICATE_EMAIL_MESSAGE = "An account with this email already exists"


def generate_session_token() -> str:
    """Return 32 random bytes as 64 hex characters."""

    return secrets.token_hex(32)


def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def to_session_record(user: User) -> SessionRecord:
    return SessionRecord(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
    )


def has_role(user: SessionRecord, role: str) -> bool:
    return user.role == role


def has_any_role(user: SessionRecord, roles: Iterable[str]) -> bool:
    return user.role in set(roles)


class AuthService:
    def __init__(
        self,
        users: UserRepository,
        sessions: SessionStore,
        *,
        bcrypt_rounds: int = 12,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._users = users
        self._sessions = sessions
        self._bcrypt_rounds = bcrypt_rounds
        self._clock = clock

    def _now(self) -> datetime:
        return datetime.fromtimestamp(self._clock(), tz=UTC)

    async def _cache_session(self, token: str, record: SessionRecord) -> None:
        try:
            await self._sessions.set_session(token, record)
        except StoreUnavailableError as exc:
            logger.warning(f"Session cache write failed; durable session still valid: {exc}")

    async def _open_session(self, user: User) -> tuple[str, SessionRecord]:
        token = generate_session_token()
        expires_at = self._now() + timedelta(seconds=self._sessions.ttl_seconds)
        await self._users.create_session(
            user_id=user.id, session_token=token, expires_at=expires_at
        )
        record = to_session_record(user)
        await self._cache_session(token, record)
        return token, record

    async def register(self, payload: RegisterRequest) -> RegisterResponse:
        if await self._users.get_by_email(payload.email) is not None:
            raise Conflict(DUPLICATE_EMAIL_MESSAGE)

        password_hash = await asyncio.to_thread(
            hash_password, payload.password, self._bcrypt_rounds
        )
        user = await self._users.create_user(
            email=payload.email,
            password_hash=password_hash,
            first_name=payload.first_name,
            last_name=payload.last_name,
            phone=payload.phone,
            role="client",
        )
        token, record = await self._open_session(user)
        logger.info(f"Registered user {user.id}")
        return RegisterResponse(user_id=user.id, user=record, session_token=token)

    async def login(self, payload: LoginRequest) -> LoginResponse:
        user = await self._users.get_by_email(payload.email)
        if user is None:
            raise AuthenticationRequired(INVALID_CREDENTIALS_MESSAGE)

        valid = await asyncio.to_thread(verify_password, payload.password, user.password_hash)
        if not valid:
            raise AuthenticationRequired(INVALID_CREDENTIALS_MESSAGE)

        token, record = await self._open_session(user)
        return LoginResponse(session_token=token, user=record)

    async def logout(self, token: str) -> None:
        await self._users.delete_session(token)
        await self._sessions.delete_session(token)

    async def authenticate(self, token: str | None) -> SessionRecord | None:
        """Resolve ``token`` to a user, or ``None`` when it is unknown or expired."""

        if not token:
            return None

        cached = await self._sessions.get_session(token)
        if cached is not None:
            return cached

        user = await self._users.get_active_session_user(token, self._now())
        if user is None:
            return None

        record = to_session_record(user)
        await self._cache_session(token, record)
        return record


__all__ = [
    "AuthService",
    "DUPLICATE_EMAIL_MESSAGE",
    "INVALID_CREDENTIALS_MESSAGE",
    "generate_session_token",
    "has_any_role",
    "has_role",
    "hash_password",
    "to_session_record",
    "verify_password",
]
