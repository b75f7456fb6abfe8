"""Builders for the structured error payloads returned by every handler.

Each builder stamps the request identifier and a timezone-aware timestamp so
that all error bodies share one shape: ``error`` always holds the
human-readable message, the remaining fields are diagnostic.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

from realty.schemas.error import (
    ErrorResponse,
    ErrorType,
    ValidationErrorDetail,
    ValidationErrorResponse,
)
from realty.utils.request_context import get_request_id

__all__ = [
    "build_error_response",
    "build_validation_error_response",
]


def _current_timestamp() -> datetime:
    """Return the timestamp embedded in error payloads (patched in tests)."""

    return datetime.now(UTC)


def build_validation_error_response(
    *,
    errors: Sequence[ValidationErrorDetail],
    message: str,
    detail: str | None,
    status_code: int,
    path: str,
    request_id: str | None = None,
) -> ValidationErrorResponse:
    """Construct a ``ValidationErrorResponse`` listing every failing field."""

    return ValidationErrorResponse(
        error=message,
        detail=detail,
        status_code=status_code,
        timestamp=_current_timestamp(),
        request_id=request_id or get_request_id(),
        path=path,
        errors=list(errors),
    )


def build_error_response(
    *,
    error_type: ErrorType,
    message: str,
    detail: str | None,
    status_code: int,
    path: str,
    retry_after: int | None = None,
    reset_time: int | None = None,
    request_id: str | None = None,
) -> ErrorResponse:
    """Construct a generic ``ErrorResponse``.

    ``retry_after`` and ``reset_time`` are only populated for throttled
    requests; other callers leave them unset.
    """

    return ErrorResponse(
        error=message,
        error_type=error_type,
        detail=detail,
        status_code=status_code,
        timestamp=_current_timestamp(),
        request_id=request_id or get_request_id(),
        path=path,
        retry_after=retry_after,
        reset_time=reset_time,
    )
