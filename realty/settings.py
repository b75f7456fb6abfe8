"""Centralized configuration management for the realty API."""

from __future__ import annotations

import logging
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field, PrivateAttr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables defined in a local .env file before instantiating the
# settings object so every consumer observes the same values.
load_dotenv()

# -- Application-wide constants -------------------------------------------------

DEFAULT_SQLITE_DATABASE_URL = "sqlite+aiosqlite:///./data/realty.db"
POSTGRES_ASYNC_PREFIX = "postgresql+psycopg://"
POSTGRES_SYNC_PREFIXES = ("postgres://", "postgresql://")
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_SESSION_TTL_SECONDS = 604800
DEFAULT_PROPERTY_CACHE_TTL_SECONDS = 1800
DEFAULT_AGENT_CACHE_TTL_SECONDS = 3600


def _normalize_origin(origin: str) -> str:
    """Return the origin stripped of whitespace and trailing slashes."""

    return origin.strip().rstrip("/")


class AppSettings(BaseSettings):
    """Typed configuration surface built on top of ``pydantic-settings``.

    Values come from the process environment (or a local ``.env`` file).  The
    class also exposes derived helpers such as the async-compatible database
    URL so downstream modules never repeat the parsing logic.
    """

    _explicit_redis_url: bool = PrivateAttr(default=False)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    database_url: str | None = Field(
        default=None,
        alias="DATABASE_URL",
        description=(
            "Full SQLAlchemy-compatible database URL. Postgres URLs supplied in"
            " sync format (postgres:// or postgresql://) are coerced into the"
            " async psycopg driver string at runtime."
        ),
    )
    use_sqlite: bool = Field(
        default=False,
        alias="USE_SQLITE",
        description="Force SQLite usage regardless of DATABASE_URL.",
    )
    redis_url: str | None = Field(
        default=None,
        alias="REDIS_URL",
        description=(
            "Redis connection string backing the key-value store. When unset the"
            " API keeps cache, sessions and rate-limit windows in process."
        ),
    )
    cors_allow_origins_raw: str = Field(
        default="*",
        alias="CORS_ALLOW_ORIGINS",
        description="Comma-separated list of allowed CORS origins ('*' for any).",
    )
    log_level: str = Field(default=DEFAULT_LOG_LEVEL, alias="LOG_LEVEL")
    slow_query_threshold: float = Field(
        default=0.1,
        alias="SLOW_QUERY_THRESHOLD",
        description="Seconds after which a SQL statement is logged as slow.",
    )
    session_ttl_seconds: int = Field(
        default=DEFAULT_SESSION_TTL_SECONDS,
        alias="SESSION_TTL_SECONDS",
        description="Lifetime of both the durable session row and its cache entry.",
    )
    property_cache_ttl_seconds: int = Field(
        default=DEFAULT_PROPERTY_CACHE_TTL_SECONDS,
        alias="PROPERTY_CACHE_TTL_SECONDS",
    )
    agent_cache_ttl_seconds: int = Field(
        default=DEFAULT_AGENT_CACHE_TTL_SECONDS,
        alias="AGENT_CACHE_TTL_SECONDS",
    )
    bcrypt_rounds: int = Field(
        default=12,
        alias="BCRYPT_ROUNDS",
        ge=4,
        le=31,
        description="bcrypt cost factor used when hashing new passwords.",
    )
    rate_limit_fail_open: bool = Field(
        default=True,
        alias="RATE_LIMIT_FAIL_OPEN",
        description=(
            "Admit requests when the key-value store cannot be reached while"
            " checking a rate limit."
        ),
    )
    sendgrid_api_key: str | None = Field(default=None, alias="SENDGRID_API_KEY")
    sendgrid_api_url: str = Field(
        default="https://api.sendgrid.com/v3/mail/send",
        alias="SENDGRID_API_URL",
    )
    from_email: str = Field(default="info@2020realtors.com", alias="FROM_EMAIL")
    from_name: str = Field(default="20/20 Realtors", alias="FROM_NAME")
    public_site_url: str = Field(
        default="http://localhost:5173",
        alias="PUBLIC_SITE_URL",
        description="Base URL used when building links inside outbound emails.",
    )
    http_timeout_seconds: float = Field(
        default=10.0,
        alias="HTTP_TIMEOUT_SECONDS",
        description="Timeout applied to every outbound HTTP call.",
    )

    def __init__(self, **values: object) -> None:
        """Capture explicit Redis overrides prior to delegating to ``BaseSettings``."""

        super().__init__(**values)
        self._explicit_redis_url = bool(self.redis_url and self.redis_url.strip())

    @property
    def resolved_database_url(self) -> str:
        """Return the async-compatible database URL after applying fallbacks."""

        if self.use_sqlite or not self.database_url:
            return DEFAULT_SQLITE_DATABASE_URL

        url = self.database_url.strip()

        for prefix in POSTGRES_SYNC_PREFIXES:
            if url.startswith(prefix):
                return url.replace(prefix, POSTGRES_ASYNC_PREFIX, 1)

        if url.startswith(POSTGRES_ASYNC_PREFIX) or url.startswith("sqlite"):
            return url

        raise RuntimeError(
            f"Expected a PostgreSQL or SQLite connection string, received: {url}"
        )

    @property
    def database_type(self) -> str:
        """Return ``sqlite`` when using SQLite otherwise ``postgresql``."""

        if self.resolved_database_url.startswith("sqlite"):
            return "sqlite"
        return "postgresql"

    @property
    def cors_allow_origins(self) -> list[str]:
        """Return normalised CORS origins; ``["*"]`` keeps the API wide open."""

        origins = [
            _normalize_origin(origin)
            for origin in self.cors_allow_origins_raw.split(",")
            if origin.strip()
        ]
        return [origin for origin in origins if origin] or ["*"]

    @property
    def log_level_numeric(self) -> int:
        """Translate ``log_level`` into the numeric constant expected by logging."""

        candidate = logging.getLevelName(self.log_level.upper())
        if isinstance(candidate, int):
            return candidate
        return logging.INFO

    def optional_config_warnings(self) -> list[str]:
        """Return human-readable warnings for unset optional configuration."""

        warnings: list[str] = []

        if not self._explicit_redis_url:
            warnings.append(
                "REDIS_URL is not set - cache, sessions and rate limits stay "
                "in process (not shared between workers)"
            )

        if not self.sendgrid_api_key:
            warnings.append(
                "SENDGRID_API_KEY is not set - email notifications are recorded "
                "as failed and never delivered"
            )

        if self.database_type == "sqlite":
            warnings.append(
                "DATABASE_URL is not set to PostgreSQL - using SQLite "
                f"({self.resolved_database_url})"
            )

        return warnings


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Return a cached instance of :class:`AppSettings`."""

    return AppSettings()


__all__ = [
    "AppSettings",
    "DEFAULT_AGENT_CACHE_TTL_SECONDS",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_PROPERTY_CACHE_TTL_SECONDS",
    "DEFAULT_SESSION_TTL_SECONDS",
    "DEFAULT_SQLITE_DATABASE_URL",
    "POSTGRES_ASYNC_PREFIX",
    "POSTGRES_SYNC_PREFIXES",
    "get_settings",
]
