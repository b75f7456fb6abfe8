"""Process-wide service container and the FastAPI dependencies built on it.

The container is created once in the application lifespan and stored on
``app.state.container``.  Request-scoped objects (sessions, repositories,
services bound to a session) are assembled here from the container, which
keeps routers free of wiring and lets tests swap the whole graph by
attaching their own container.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass

import httpx
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from realty.cache import CacheLayer
from realty.db.connection import create_engine, create_session_factory, session_scope
from realty.db.repositories import (
    AgentRepository,
    EmailRepository,
    FavoritesRepository,
    InquiryRepository,
    PriceAlertRepository,
    PropertyRepository,
    SearchHistoryRepository,
    UserRepository,
)
from realty.exceptions import AuthenticationRequired, RateLimitExceeded
from realty.kv import KeyValueStore, connect_key_value_store
from realty.schemas.auth import SessionRecord
from realty.services.agent_service import AgentService
from realty.services.analytics_service import AnalyticsTracker
from realty.services.auth_service import AuthService
from realty.services.email import EmailService, SendGridTransport
from realty.services.favorites_service import FavoritesService
from realty.services.inquiry_service import InquiryService
from realty.services.price_alert_service import PriceAlertService
from realty.services.property_service import PropertyService
from realty.services.rate_limiter import RateLimiter, RateLimitPolicy
from realty.services.session_store import SessionStore
from realty.settings import AppSettings

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    settings: AppSettings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    store: KeyValueStore
    cache: CacheLayer
    rate_limiter: RateLimiter
    session_store: SessionStore
    analytics: AnalyticsTracker
    email_transport: SendGridTransport

    async def close(self) -> None:
        await self.email_transport.aclose()
        await self.store.close()
        await self.engine.dispose()


def build_container(
    settings: AppSettings,
    *,
    engine: AsyncEngine,
    store: KeyValueStore,
    http_client: httpx.AsyncClient | None = None,
) -> ServiceContainer:
    """Wire every process-wide component around an engine and a store."""

    cache = CacheLayer(store)
    client = http_client or httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds)
    )
    return ServiceContainer(
        settings=settings,
        engine=engine,
        session_factory=create_session_factory(engine),
        store=store,
        cache=cache,
        rate_limiter=RateLimiter(cache, fail_open=settings.rate_limit_fail_open),
        session_store=SessionStore(cache, ttl_seconds=settings.session_ttl_seconds),
        analytics=AnalyticsTracker(cache),
        email_transport=SendGridTransport(
            api_key=settings.sendgrid_api_key,
            api_url=settings.sendgrid_api_url,
            from_email=settings.from_email,
            from_name=settings.from_name,
            client=client,
        ),
    )


async def create_container(settings: AppSettings) -> ServiceContainer:
    """Connect to the configured database and key-value store."""

    engine = create_engine(settings)
    store = await connect_key_value_store(settings)
    return build_container(settings, engine=engine, store=store)


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


async def get_db_session(
    container: ServiceContainer = Depends(get_container),
) -> AsyncIterator[AsyncSession]:
    """Request-scoped session committing on success, rolling back on error."""

    async for session in session_scope(container.session_factory):
        yield session


def client_ip(request: Request) -> str:
    """Client address used to key rate limits.

    Only the Cloudflare header is honoured; other proxies are expected to
    rewrite ``request.client`` via uvicorn's ``--proxy-headers``.
    """

    forwarded = request.headers.get("CF-Connecting-IP")
    if forwarded:
        return forwarded.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def rate_limited(policy: RateLimitPolicy) -> Callable[..., Awaitable[None]]:
    """Return a dependency enforcing ``policy`` per client address."""

    async def enforce(
        request: Request,
        container: ServiceContainer = Depends(get_container),
    ) -> None:
        result = await container.rate_limiter.check(
            policy.identifier(client_ip(request)), policy.limit, policy.window_seconds
        )
        if not result.allowed:
            logger.info(f"Rate limit '{policy.name}' exceeded for {client_ip(request)}")
            raise RateLimitExceeded(policy.message, reset_time=result.reset_time)

    return enforce


def get_auth_service(
    session: AsyncSession = Depends(get_db_session),
    container: ServiceContainer = Depends(get_container),
) -> AuthService:
    return AuthService(
        UserRepository(session),
        container.session_store,
        bcrypt_rounds=container.settings.bcrypt_rounds,
    )


async def optional_user(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> SessionRecord | None:
    return await auth.authenticate(bearer_token(request))


async def require_user(
    user: SessionRecord | None = Depends(optional_user),
) -> SessionRecord:
    if user is None:
        raise AuthenticationRequired("Authentication required")
    return user


def get_email_service(
    session: AsyncSession = Depends(get_db_session),
    container: ServiceContainer = Depends(get_container),
) -> EmailService:
    return EmailService(
        EmailRepository(session),
        container.email_transport,
        site_url=container.settings.public_site_url,
        cache=container.cache,
    )


def get_property_service(
    session: AsyncSession = Depends(get_db_session),
    container: ServiceContainer = Depends(get_container),
) -> PropertyService:
    return PropertyService(
        PropertyRepository(session),
        container.cache,
        container.analytics,
        cache_ttl=container.settings.property_cache_ttl_seconds,
        history=SearchHistoryRepository(session),
    )


def get_agent_service(
    session: AsyncSession = Depends(get_db_session),
    container: ServiceContainer = Depends(get_container),
) -> AgentService:
    return AgentService(
        AgentRepository(session),
        container.cache,
        cache_ttl=container.settings.agent_cache_ttl_seconds,
    )


def get_favorites_service(
    session: AsyncSession = Depends(get_db_session),
) -> FavoritesService:
    return FavoritesService(
        favorites=FavoritesRepository(session),
        properties=PropertyRepository(session),
    )


def get_inquiry_service(
    session: AsyncSession = Depends(get_db_session),
    email: EmailService = Depends(get_email_service),
) -> InquiryService:
    return InquiryService(
        inquiries=InquiryRepository(session),
        properties=PropertyRepository(session),
        agents=AgentRepository(session),
        email=email,
    )


def get_price_alert_service(
    session: AsyncSession = Depends(get_db_session),
) -> PriceAlertService:
    return PriceAlertService(
        alerts=PriceAlertRepository(session),
        properties=PropertyRepository(session),
    )


def get_search_history_repository(
    session: AsyncSession = Depends(get_db_session),
) -> SearchHistoryRepository:
    return SearchHistoryRepository(session)


def get_analytics(container: ServiceContainer = Depends(get_container)) -> AnalyticsTracker:
    return container.analytics


__all__ = [
    "ServiceContainer",
    "bearer_token",
    "build_container",
    "client_ip",
    "create_container",
    "get_agent_service",
    "get_analytics",
    "get_auth_service",
    "get_container",
    "get_db_session",
    "get_email_service",
    "get_favorites_service",
    "get_inquiry_service",
    "get_price_alert_service",
    "get_property_service",
    "get_search_history_repository",
    "optional_user",
    "rate_limited",
    "require_user",
]
