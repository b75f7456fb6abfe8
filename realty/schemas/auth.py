"""Request and response models for registration, login and sessions."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator

from realty.schemas.base import CamelModel

UserRole = Literal["client", "agent", "admin"]

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

# bcrypt only hashes the first 72 bytes and rejects longer input.
BCRYPT_MAX_PASSWORD_BYTES = 72


def _normalize_email_value(value: object) -> object:
    if isinstance(value, str):
        return value.strip().lower()
    return value


def _check_password_bytes(value: str) -> str:
    if len(value.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
        raise ValueError(
            f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes when UTF-8 encoded"
        )
    return value


class SessionRecord(CamelModel):
    """User snapshot cached under ``session:<token>``."""

    id: int
    email: str
    first_name: str
    last_name: str
    role: UserRole = "client"


class RegisterRequest(CamelModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., pattern=_EMAIL_PATTERN, max_length=255)
    phone: str | None = Field(None, max_length=32)
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: object) -> object:
        return _normalize_email_value(value)

    @field_validator("password")
    @classmethod
    def _limit_password(cls, value: str) -> str:
        return _check_password_bytes(value)

    @field_validator("first_name", "last_name")
    @classmethod
    def _strip_names(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Name must not be blank")
        return cleaned


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: object) -> object:
        return _normalize_email_value(value)

    @field_validator("password")
    @classmethod
    def _limit_password(cls, value: str) -> str:
        return _check_password_bytes(value)


class RegisterResponse(CamelModel):
    success: bool = True
    user_id: int
    user: SessionRecord
    session_token: str


class LoginResponse(CamelModel):
    success: bool = True
    session_token: str
    user: SessionRecord


class MeResponse(CamelModel):
    user: SessionRecord
