"""Authentication API endpoints.

Provides endpoints for passwordless sign-in:
- POST /auth/magic - send a magic link
- GET /auth/callback - exchange a magic link from the email (redirects)
- POST /auth/callback - exchange a magic link (JSON)
- POST /auth/login - direct login when enabled
- GET, POST /auth/logout - clear the session
- GET /auth/me - current user
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse, RedirectResponse

from procurement.api.dependencies import (
    CurrentUser,
    get_auth_service,
    get_sessions,
    get_settings,
)
from procurement.api.schemas import (
    EmailRequest,
    ErrorResponse,
    MagicLinkResponse,
    MeResponse,
    MessageResponse,
    SessionResponse,
    TokenRequest,
    UserResponse,
)
from procurement.application.auth_service import AuthService, SessionResult
from procurement.application.session import SessionGateway
from procurement.domain.exceptions import InvalidTokenError, UnauthorizedEmailError
from procurement.infrastructure.config import Settings

logger = structlog.get_logger()

router = APIRouter(prefix="/auth", tags=["Auth"])

LOGIN_PATH = "/login"

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
SessionsDep = Annotated[SessionGateway, Depends(get_sessions)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def _session_json(result: SessionResult, sessions: SessionGateway) -> JSONResponse:
    body = SessionResponse(
        message="Authentication successful",
        user=UserResponse(**result.user.to_public_dict()),
        redirect_to=result.redirect_to,
    )
    response = JSONResponse(content=body.model_dump(by_alias=True))
    sessions.set_session_cookie(response, result.session_token)
    return response


@router.post(
    "/magic",
    response_model=MagicLinkResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid email"},
        403: {"model": ErrorResponse, "description": "Email not authorized"},
    },
)
async def request_magic_link(
    body: EmailRequest,
    auth_service: AuthServiceDep,
    settings: SettingsDep,
) -> MagicLinkResponse:
    """Send a magic link to an allowlisted email."""
    result = await auth_service.request_magic_link(body.email)
    response = MagicLinkResponse(message="Magic link sent to your email")
    if settings.debug:
        response.email = result.email
        response.role = result.role.value
        response.magic_link = result.magic_link
    return response


@router.get("/callback", include_in_schema=False)
async def magic_link_redirect(
    auth_service: AuthServiceDep,
    sessions: SessionsDep,
    token: Annotated[str | None, Query()] = None,
) -> RedirectResponse:
    """Exchange the magic link from an email and redirect to the app."""
    if not token:
        return RedirectResponse(f"{LOGIN_PATH}?error=missing-token", status_code=status.HTTP_303_SEE_OTHER)
    try:
        result = auth_service.exchange_magic_link(token)
    except InvalidTokenError:
        return RedirectResponse(f"{LOGIN_PATH}?error=invalid-token", status_code=status.HTTP_303_SEE_OTHER)
    except UnauthorizedEmailError:
        return RedirectResponse(
            f"{LOGIN_PATH}?error=unauthorized-email", status_code=status.HTTP_303_SEE_OTHER
        )

    response = RedirectResponse(result.redirect_to, status_code=status.HTTP_303_SEE_OTHER)
    sessions.set_session_cookie(response, result.session_token)
    return response


@router.post(
    "/callback",
    response_model=SessionResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid or expired token"},
        403: {"model": ErrorResponse, "description": "Email not authorized"},
    },
)
async def exchange_magic_link(
    body: TokenRequest,
    auth_service: AuthServiceDep,
    sessions: SessionsDep,
) -> JSONResponse:
    """Exchange a magic link token for a session cookie."""
    result = auth_service.exchange_magic_link(body.token)
    return _session_json(result, sessions)


@router.post(
    "/login",
    response_model=SessionResponse,
    responses={
        403: {"model": ErrorResponse, "description": "Email not authorized"},
        404: {"model": ErrorResponse, "description": "Direct login disabled"},
    },
)
async def direct_login(
    body: EmailRequest,
    auth_service: AuthServiceDep,
    sessions: SessionsDep,
    settings: SettingsDep,
) -> JSONResponse:
    """Sign in without a magic link (development setups only)."""
    if not settings.allow_direct_login:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error_code": "NOT_FOUND", "message": "Not found"},
        )
    result = auth_service.direct_login(body.email)
    return _session_json(result, sessions)


@router.post("/logout", response_model=MessageResponse)
async def logout(sessions: SessionsDep) -> JSONResponse:
    """Clear the session cookie."""
    response = JSONResponse(content={"message": "Logged out successfully"})
    sessions.clear_session_cookie(response)
    return response


@router.get("/logout", include_in_schema=False)
async def logout_redirect(sessions: SessionsDep) -> RedirectResponse:
    """Clear the session cookie and go back to the login page."""
    response = RedirectResponse(f"{LOGIN_PATH}?message=logged-out", status_code=status.HTTP_303_SEE_OTHER)
    sessions.clear_session_cookie(response)
    return response


@router.get(
    "/me",
    response_model=MeResponse,
    responses={401: {"model": ErrorResponse, "description": "Not signed in"}},
)
async def me(user: CurrentUser) -> MeResponse:
    """Return the signed-in user."""
    return MeResponse(user=UserResponse(**user.to_public_dict()))
