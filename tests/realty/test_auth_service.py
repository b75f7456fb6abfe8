"""Tests for registration, login and the two-tier session lookup."""

from __future__ import annotations

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from realty.cache import CacheLayer, session_key
from realty.db.models import UserSession
from realty.db.repositories import UserRepository
from realty.exceptions import AuthenticationRequired, Conflict
from realty.kv import RedisKeyValueStore
from realty.schemas.auth import LoginRequest, RegisterRequest, SessionRecord
from realty.services.auth_service import (
    DUPLICATE_EMAIL_MESSAGE,
    INVALID_CREDENTIALS_MESSAGE,
    AuthService,
    generate_session_token,
    has_any_role,
    has_role,
    hash_password,
    verify_password,
)
from realty.services.session_store import SessionStore
from tests.realty.support.fakes import FakeClock
from tests.realty.support.in_memory_redis import InMemoryRedis


def _registration(email: str = "Jamie@Example.com") -> RegisterRequest:
    return RegisterRequest(
        first_name=" Jamie ",
        last_name="Lee",
        email=email,
        password="correct-horse",
    )


@pytest.fixture
def session_store(cache: CacheLayer) -> SessionStore:
    return SessionStore(cache, ttl_seconds=3600)


@pytest.fixture
def auth(session: AsyncSession, session_store: SessionStore, clock: FakeClock) -> AuthService:
    return AuthService(UserRepository(session), session_store, bcrypt_rounds=4, clock=clock)


def test_session_tokens_are_64_hex_characters() -> None:
    token = generate_session_token()

    assert len(token) == 64
    int(token, 16)
    assert generate_session_token() != token


def test_password_hashing_round_trip() -> None:
    hashed = hash_password("correct-horse", rounds=4)

    assert hashed != "correct-horse"
    assert verify_password("correct-horse", hashed)
    assert not verify_password("wrong-horse", hashed)
    assert not verify_password("correct-horse", "not-a-bcrypt-hash")


def test_role_helpers() -> None:
    agent = SessionRecord(id=1, email="a@b.co", first_name="A", last_name="B", role="agent")

    assert has_any_role(agent, ["agent", "admin"])
    assert not has_any_role(agent, ["admin"])
    assert has_role(agent, "agent")
    assert not has_role(agent, "client")


@pytest.mark.asyncio
async def test_register_normalises_input_and_caches_session(
    auth: AuthService, session_store: SessionStore
) -> None:
    response = await auth.register(_registration())

    assert response.user.email == "jamie@example.com"
    assert response.user.first_name == "Jamie"
    assert response.user.role == "client"
    cached = await session_store.get_session(response.session_token)
    assert cached == response.user


@pytest.mark.asyncio
async def test_register_rejects_duplicate_email(auth: AuthService) -> None:
    await auth.register(_registration())

    with pytest.raises(Conflict) as excinfo:
        await auth.register(_registration("jamie@example.com"))

    assert excinfo.value.message == DUPLICATE_EMAIL_MESSAGE


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("email", "password"),
    [("jamie@example.com", "wrong-horse"), ("nobody@example.com", "correct-horse")],
)
async def test_login_failures_share_one_message(
    auth: AuthService, email: str, password: str
) -> None:
    await auth.register(_registration())

    with pytest.raises(AuthenticationRequired) as excinfo:
        await auth.login(LoginRequest(email=email, password=password))

    assert excinfo.value.message == INVALID_CREDENTIALS_MESSAGE


@pytest.mark.asyncio
async def test_login_opens_a_fresh_session(auth: AuthService) -> None:
    registered = await auth.register(_registration())

    logged_in = await auth.login(LoginRequest(email="JAMIE@example.com", password="correct-horse"))

    assert logged_in.session_token != registered.session_token
    assert await auth.authenticate(logged_in.session_token) == registered.user


@pytest.mark.asyncio
async def test_authenticate_falls_back_to_durable_session(
    auth: AuthService, session_store: SessionStore
) -> None:
    response = await auth.register(_registration())
    await session_store.delete_session(response.session_token)

    record = await auth.authenticate(response.session_token)

    assert record == response.user
    assert await session_store.get_session(response.session_token) == response.user


@pytest.mark.asyncio
async def test_authenticate_rejects_expired_durable_session(
    auth: AuthService, clock: FakeClock
) -> None:
    response = await auth.register(_registration())

    clock.advance(3601)

    assert await auth.authenticate(response.session_token) is None


@pytest.mark.asyncio
async def test_authenticate_rejects_unknown_and_missing_tokens(auth: AuthService) -> None:
    assert await auth.authenticate(None) is None
    assert await auth.authenticate("") is None
    assert await auth.authenticate("f" * 64) is None


@pytest.mark.asyncio
async def test_logout_removes_both_session_copies(
    auth: AuthService, session: AsyncSession, cache: CacheLayer
) -> None:
    response = await auth.register(_registration())
    token = response.session_token

    await auth.logout(token)

    assert await cache.cache_get(session_key(token)) is None
    rows = await session.execute(select(UserSession).where(UserSession.session_token == token))
    assert rows.scalars().first() is None
    assert await auth.authenticate(token) is None


@pytest.mark.asyncio
async def test_session_cache_outage_does_not_block_login(session: AsyncSession) -> None:
    redis = InMemoryRedis()
    clock = FakeClock()
    store = SessionStore(CacheLayer(RedisKeyValueStore(redis), clock))
    auth = AuthService(UserRepository(session), store, bcrypt_rounds=4, clock=clock)
    redis.fail = True

    response = await auth.register(_registration())

    assert await auth.authenticate(response.session_token) == response.user
