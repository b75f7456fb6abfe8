import logging
import math
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import (
    DatabaseError,
    DBAPIError,
    IntegrityError,
    OperationalError,
)
from sqlalchemy.exc import (
    TimeoutError as SQLAlchemyTimeoutError,
)
from starlette.exceptions import HTTPException as StarletteHTTPException

from realty.api import (
    agents,
    analytics,
    auth,
    email,
    favorites,
    health,
    inquiries,
    price_alerts,
    properties,
    search_history,
    webhooks,
)
from realty.db.connection import create_schema
from realty.exceptions import RateLimitExceeded, RealtyError
from realty.schemas.error import ErrorType, ValidationErrorDetail
from realty.services.dependencies import ServiceContainer, create_container
from realty.settings import AppSettings, get_settings
from realty.utils.error_responses import (
    build_error_response,
    build_validation_error_response,
)
from realty.utils.request_context import get_request_id, set_request_id
from realty.warmup import warmup_all

logger = logging.getLogger(__name__)


def _configure_logging(settings: AppSettings) -> None:
    logging.basicConfig(
        level=settings.log_level_numeric,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _validate_environment(settings: AppSettings) -> None:
    """Log warnings for optional configuration that is missing."""
    warnings = settings.optional_config_warnings()
    if warnings:
        logger.warning("=" * 60)
        logger.warning("Environment Configuration Warnings:")
        for warning in warnings:
            logger.warning(f"  • {warning}")
        logger.warning("=" * 60)


def _sanitize_database_url(url: str) -> str:
    """Hide the password component of a database URL for logging."""
    if "://" not in url:
        return url
    scheme, rest = url.split("://", 1)
    if "@" in rest:
        auth_part, host_db = rest.split("@", 1)
        if ":" in auth_part:
            user, _ = auth_part.split(":", 1)
            return f"{scheme}://{user}:***@{host_db}"
    return url


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the service container on startup and release it on shutdown."""
    settings: AppSettings = app.state.settings
    _validate_environment(settings)

    logger.info("=" * 60)
    logger.info("Realty API - Database Preflight Check")
    logger.info("=" * 60)
    logger.info(f"Database Type: {settings.database_type.upper()}")
    logger.info(f"Database URL: {_sanitize_database_url(settings.resolved_database_url)}")
    logger.info("=" * 60)

    container: ServiceContainer = await create_container(settings)
    if settings.database_type == "sqlite":
        logger.info("SQLite mode - creating missing tables")
        await create_schema(container.engine)
    else:
        logger.info("PostgreSQL mode - using Alembic migrations")

    app.state.container = container
    await warmup_all(container.engine, container.cache)

    yield

    logger.info("Shutting down Realty API")
    await container.close()


def _json_error(response_model, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=response_model.model_dump(mode="json", by_alias=True),
    )


def _validation_details(errors: list[dict]) -> list[ValidationErrorDetail]:
    return [
        ValidationErrorDetail(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            value=error.get("input"),
        )
        for error in errors
    ]


async def realty_error_handler(request: Request, exc: RealtyError) -> JSONResponse:
    """Translate domain errors into their HTTP status."""
    reset_time = None
    retry_after = None
    if isinstance(exc, RateLimitExceeded):
        reset_time = exc.reset_time
        retry_after = max(0, math.ceil((exc.reset_time - time.time() * 1000) / 1000))

    logger.info(
        "%s for request %s to %s: %s",
        type(exc).__name__,
        get_request_id(),
        request.url.path,
        exc.message,
    )
    error_response = build_error_response(
        error_type=exc.error_type,
        message=exc.message,
        detail=exc.detail,
        status_code=exc.status_code,
        path=str(request.url.path),
        retry_after=retry_after,
        reset_time=reset_time,
    )
    return _json_error(error_response, exc.status_code)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request body/query validation errors."""
    errors = _validation_details(exc.errors())
    logger.warning(
        "Validation error for request %s to %s: %s errors",
        get_request_id(),
        request.url.path,
        len(errors),
    )
    error_response = build_validation_error_response(
        message="Request validation failed",
        detail=f"{len(errors)} validation error(s)",
        status_code=status.HTTP_400_BAD_REQUEST,
        path=str(request.url.path),
        errors=errors,
    )
    return _json_error(error_response, status.HTTP_400_BAD_REQUEST)


async def pydantic_validation_exception_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """Handle validation failures raised while building responses or payloads."""
    errors = _validation_details(exc.errors())
    logger.warning(
        "Pydantic validation error for request %s to %s: %s errors",
        get_request_id(),
        request.url.path,
        len(errors),
    )
    error_response = build_validation_error_response(
        message="Data validation failed",
        detail=f"{len(errors)} validation error(s)",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        path=str(request.url.path),
        errors=errors,
    )
    return _json_error(error_response, status.HTTP_422_UNPROCESSABLE_ENTITY)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Shape framework HTTP errors (unknown routes, bad methods) like the rest."""
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = "Route not found"
    else:
        message = str(exc.detail)

    error_type = (
        ErrorType.NOT_FOUND
        if exc.status_code == status.HTTP_404_NOT_FOUND
        else ErrorType.VALIDATION_ERROR
    )
    error_response = build_error_response(
        error_type=error_type,
        message=message,
        detail=None,
        status_code=exc.status_code,
        path=str(request.url.path),
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response.model_dump(mode="json", by_alias=True),
        headers=getattr(exc, "headers", None),
    )


async def database_connection_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle database connection errors."""
    logger.error(
        "Database connection error for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        str(exc),
    )
    error_response = build_error_response(
        error_type=ErrorType.DATABASE_ERROR,
        message="Database connection failed",
        detail="Unable to connect to the database. Please try again later.",
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        path=str(request.url.path),
        retry_after=5,
    )
    return _json_error(error_response, status.HTTP_503_SERVICE_UNAVAILABLE)


async def database_timeout_exception_handler(
    request: Request, exc: SQLAlchemyTimeoutError
) -> JSONResponse:
    """Handle connection pool timeouts."""
    logger.error(
        "Database timeout error for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        str(exc),
    )
    error_response = build_error_response(
        error_type=ErrorType.TIMEOUT_ERROR,
        message="Database query timeout",
        detail="The database query took too long to complete. Please try again.",
        status_code=status.HTTP_504_GATEWAY_TIMEOUT,
        path=str(request.url.path),
        retry_after=3,
    )
    return _json_error(error_response, status.HTTP_504_GATEWAY_TIMEOUT)


async def database_integrity_exception_handler(
    request: Request, exc: IntegrityError
) -> JSONResponse:
    """Handle unique/foreign-key violations that slipped past service checks."""
    logger.error(
        "Database integrity error for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        str(exc),
    )
    error_response = build_error_response(
        error_type=ErrorType.CONFLICT,
        message="Data integrity constraint violation",
        detail="The operation would violate a database constraint.",
        status_code=status.HTTP_409_CONFLICT,
        path=str(request.url.path),
    )
    return _json_error(error_response, status.HTTP_409_CONFLICT)


async def database_generic_exception_handler(
    request: Request, exc: DatabaseError
) -> JSONResponse:
    logger.error(
        "Database error for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        str(exc),
    )
    error_response = build_error_response(
        error_type=ErrorType.DATABASE_ERROR,
        message="Database operation failed",
        detail=None,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        path=str(request.url.path),
    )
    return _json_error(error_response, status.HTTP_500_INTERNAL_SERVER_ERROR)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Single catch-all boundary; details stay in the server log."""
    logger.exception(
        "Unhandled exception for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        type(exc).__name__,
    )
    error_response = build_error_response(
        error_type=ErrorType.INTERNAL_ERROR,
        message="Internal server error",
        detail=None,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        path=str(request.url.path),
    )
    return _json_error(error_response, status.HTTP_500_INTERNAL_SERVER_ERROR)


async def add_request_id(request: Request, call_next):
    """Tag each request with an id echoed in ``X-Request-ID``."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    set_request_id(request_id)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


async def healthcheck() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


def create_app(settings: AppSettings | None = None) -> FastAPI:
    settings = settings or get_settings()
    _configure_logging(settings)

    app = FastAPI(
        title="Realty API",
        version="0.1.0",
        description="Listings, agents, favorites and lead capture for the 20/20 Realtors site.",
        lifespan=lifespan,
        redirect_slashes=False,
    )
    app.state.settings = settings

    allow_origins = settings.cors_allow_origins
    logger.info("Configured CORS allow_origins: %s", ", ".join(allow_origins))
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(add_request_id)

    app.add_exception_handler(RealtyError, realty_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, pydantic_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(OperationalError, database_connection_exception_handler)
    app.add_exception_handler(DBAPIError, database_connection_exception_handler)
    app.add_exception_handler(SQLAlchemyTimeoutError, database_timeout_exception_handler)
    app.add_exception_handler(IntegrityError, database_integrity_exception_handler)
    app.add_exception_handler(DatabaseError, database_generic_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.add_api_route("/health", healthcheck, methods=["GET"], tags=["system"])

    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(properties.router, prefix="/api/properties", tags=["properties"])
    app.include_router(agents.router, prefix="/api/agents", tags=["agents"])
    app.include_router(favorites.router, prefix="/api/favorites", tags=["favorites"])
    app.include_router(inquiries.router, prefix="/api", tags=["inquiries"])
    app.include_router(search_history.router, prefix="/api/search-history", tags=["search"])
    app.include_router(email.router, prefix="/api/email", tags=["email"])
    app.include_router(price_alerts.router, prefix="/api/price-alerts", tags=["price-alerts"])
    app.include_router(analytics.router, prefix="/api/analytics", tags=["analytics"])
    app.include_router(health.router, prefix="/api/health", tags=["system"])
    app.include_router(webhooks.router, prefix="/api/webhooks", tags=["webhooks"])
    return app


app = create_app()
