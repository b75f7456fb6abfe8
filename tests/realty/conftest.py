"""Fixtures wiring the realty app against in-memory SQLite and a local store."""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from realty.cache import CacheLayer
from realty.db.models import Base
from realty.kv import LocalKeyValueStore
from realty.main import create_app
from realty.services.dependencies import ServiceContainer, build_container
from realty.settings import AppSettings
from tests.realty.support.fakes import FakeClock, SeededListings, seed_listings


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> LocalKeyValueStore:
    return LocalKeyValueStore(clock)


@pytest.fixture
def cache(store: LocalKeyValueStore, clock: FakeClock) -> CacheLayer:
    return CacheLayer(store, clock)


@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """Single shared in-memory database for every session in a test."""

    pytest.importorskip("aiosqlite")
    db_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield db_engine
    await db_engine.dispose()


@pytest_asyncio.fixture
async def session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Provide a session for repository and service tests."""

    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as db_session:
        yield db_session
        if db_session.in_transaction():
            await db_session.rollback()


@pytest.fixture
def sent_emails() -> list[httpx.Request]:
    return []


@pytest.fixture
def sendgrid_transport(sent_emails: list[httpx.Request]) -> httpx.MockTransport:
    """Accept every mail send and hand back a provider message id."""

    def handler(request: httpx.Request) -> httpx.Response:
        sent_emails.append(request)
        return httpx.Response(202, headers={"X-Message-Id": f"msg-{len(sent_emails)}"})

    return httpx.MockTransport(handler)


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        use_sqlite=True,
        sendgrid_api_key="SG.test-key",
        bcrypt_rounds=4,
        redis_url=None,
    )


@pytest_asyncio.fixture
async def container(
    settings: AppSettings,
    engine: AsyncEngine,
    sendgrid_transport: httpx.MockTransport,
) -> AsyncIterator[ServiceContainer]:
    built = build_container(
        settings,
        engine=engine,
        store=LocalKeyValueStore(),
        http_client=httpx.AsyncClient(transport=sendgrid_transport),
    )
    yield built
    await built.email_transport.aclose()


@pytest_asyncio.fixture
async def seeded(container: ServiceContainer) -> SeededListings:
    async with container.session_factory() as db_session:
        listings = await seed_listings(db_session)
        await db_session.commit()
    return listings


@pytest.fixture
def app(settings: AppSettings, container: ServiceContainer) -> FastAPI:
    application = create_app(settings)
    application.state.container = container
    return application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client
