"""Registration, login, logout and current-user endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from realty.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MeResponse,
    RegisterRequest,
    RegisterResponse,
    SessionRecord,
)
from realty.schemas.base import SuccessResponse
from realty.services.analytics_service import LOGINS, REGISTRATIONS, AnalyticsTracker
from realty.services.auth_service import AuthService
from realty.services.dependencies import (
    bearer_token,
    get_analytics,
    get_auth_service,
    get_email_service,
    rate_limited,
    require_user,
)
from realty.services.email import EmailService
from realty.services.rate_limiter import LOGIN_POLICY, REGISTER_POLICY

router = APIRouter()


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limited(REGISTER_POLICY))],
)
async def register(
    payload: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
    email: EmailService = Depends(get_email_service),
    analytics: AnalyticsTracker = Depends(get_analytics),
) -> RegisterResponse:
    """Create a client account, open a session and send the welcome email."""

    response = await auth.register(payload)
    await email.send_welcome(
        user_id=response.user_id,
        email=response.user.email,
        first_name=response.user.first_name,
        last_name=response.user.last_name,
    )
    await analytics.increment_metric(REGISTRATIONS)
    return response


@router.post(
    "/login",
    response_model=LoginResponse,
    dependencies=[Depends(rate_limited(LOGIN_POLICY))],
)
async def login(
    payload: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
    analytics: AnalyticsTracker = Depends(get_analytics),
) -> LoginResponse:
    response = await auth.login(payload)
    await analytics.increment_metric(LOGINS)
    return response


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
) -> SuccessResponse:
    """Revoke the bearer session; succeeds even without one."""

    token = bearer_token(request)
    if token:
        await auth.logout(token)
    return SuccessResponse()


@router.get("/me", response_model=MeResponse)
async def me(user: SessionRecord = Depends(require_user)) -> MeResponse:
    return MeResponse(user=user)
