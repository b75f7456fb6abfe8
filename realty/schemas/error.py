"""Error response schemas for consistent error handling."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import Field

from realty.schemas.base import CamelModel


class ErrorType(str, Enum):
    """Types of errors that can occur."""

    VALIDATION_ERROR = "validation_error"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    DATABASE_ERROR = "database_error"
    INTERNAL_ERROR = "internal_error"
    TIMEOUT_ERROR = "timeout_error"
    AUTHENTICATION_ERROR = "authentication_error"
    AUTHORIZATION_ERROR = "authorization_error"
    RATE_LIMITED = "rate_limited"


class ErrorResponse(CamelModel):
    """Standardized error response model.

    ``error`` is always present so clients can rely on a single string field
    regardless of which failure family produced the payload.
    """

    error: str = Field(..., description="Human-readable error message")
    error_type: ErrorType = Field(..., description="Category of error")
    detail: str | None = Field(None, description="Additional error details or context")
    status_code: int = Field(..., description="HTTP status code")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When error occurred",
    )
    request_id: str | None = Field(None, description="Unique request identifier for tracking")
    path: str | None = Field(None, description="Request path that caused the error")
    retry_after: int | None = Field(
        None, description="Seconds to wait before retrying (for rate limit/timeout errors)"
    )
    reset_time: int | None = Field(
        None, description="Epoch milliseconds at which a rate-limit window resets"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "error": "Too many login attempts. Please try again later.",
                "errorType": "rate_limited",
                "detail": None,
                "statusCode": 429,
                "timestamp": "2025-11-03T10:30:00Z",
                "requestId": "9f0c7a52-0d7e-4c0e-8f0e-3f1b2b0c6d7e",
                "path": "/api/auth/login",
                "resetTime": 1762166700000,
            }
        }
    }


class ValidationErrorDetail(CamelModel):
    """Details for validation errors."""

    field: str = Field(..., description="Field that failed validation")
    message: str = Field(..., description="Validation error message")
    value: Any = Field(None, description="Value that failed validation")


class ValidationErrorResponse(ErrorResponse):
    """Extended error response for validation errors."""

    error_type: ErrorType = Field(default=ErrorType.VALIDATION_ERROR)
    errors: list[ValidationErrorDetail] = Field(
        default_factory=list, description="List of validation errors"
    )
