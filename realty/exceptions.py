"""Domain exceptions translated into HTTP responses by ``realty.main``."""

from __future__ import annotations

from realty.schemas.error import ErrorType


class RealtyError(Exception):
    """Base class for errors that map onto a specific HTTP status."""

    status_code: int = 500
    error_type: ErrorType = ErrorType.INTERNAL_ERROR

    def __init__(self, message: str, *, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationFailed(RealtyError):
    status_code = 400
    error_type = ErrorType.VALIDATION_ERROR


class AuthenticationRequired(RealtyError):
    status_code = 401
    error_type = ErrorType.AUTHENTICATION_ERROR


class PermissionDenied(RealtyError):
    status_code = 403
    error_type = ErrorType.AUTHORIZATION_ERROR


class NotFound(RealtyError):
    status_code = 404
    error_type = ErrorType.NOT_FOUND


class Conflict(RealtyError):
    status_code = 409
    error_type = ErrorType.CONFLICT


class RateLimitExceeded(RealtyError):
    """Raised when a fixed-window limiter rejects a request."""

    status_code = 429
    error_type = ErrorType.RATE_LIMITED

    def __init__(self, message: str, *, reset_time: int) -> None:
        super().__init__(message)
        self.reset_time = reset_time


class StoreUnavailableError(OSError):
    """Generic I/O failure raised by key-value store adapters."""


class EmailDeliveryError(RuntimeError):
    """Raised by the mail transport when the provider rejects a message."""


__all__ = [
    "AuthenticationRequired",
    "Conflict",
    "EmailDeliveryError",
    "NotFound",
    "PermissionDenied",
    "RateLimitExceeded",
    "RealtyError",
    "StoreUnavailableError",
    "ValidationFailed",
]
