# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication API endpoints.

This module provides endpoints for email and password authentication:
- POST /sign-up - Register an account and open a session
- POST /sign-in - Open a session with email and password
- GET /session - Current user and session, or null
- POST /refresh - Exchange a refresh token for a new token pair
- POST /sign-out - Revoke the current session

The first account ever registered becomes an admin. Staff accounts
created by an admin are claimed by signing up with the same email.

Example:
    POST /api/v1/auth/sign-in
    Body:
        {"email": "teacher@school.com", "password": "s3cret-pass"}
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from src.api.dependencies import get_auth_service, get_optional_user, require_auth
from src.api.middleware.auth import CurrentUser
from src.domains.auth.service import (
    AuthService,
    ClientInfo,
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    TokenRefreshError,
    WeakPasswordError,
)
from src.models.auth import (
    RefreshTokenRequest,
    SessionResponse,
    SignInRequest,
    SignInResponse,
    SignUpRequest,
    TokenResponse,
)
from src.models.common import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_client_info(request: Request) -> ClientInfo:
    """Extract client address and user agent from the request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
    else:
        ip = request.client.host if request.client else None

    user_agent = request.headers.get("User-Agent")

    return ClientInfo(
        ip_address=ip,
        user_agent=user_agent[:500] if user_agent else None,
    )


@router.post(
    "/sign-up",
    response_model=SignInResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign up",
    description="""
    Register an account and open a session.

    The first account becomes an admin; later accounts are students.
    Signing up with the email of a staff account without a password
    claims that account.
    """,
)
async def sign_up(
    data: SignUpRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> SignInResponse:
    try:
        return await auth_service.sign_up(data, _get_client_info(request))
    except EmailAlreadyRegisteredError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except WeakPasswordError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post(
    "/sign-in",
    response_model=SignInResponse,
    summary="Sign in",
)
async def sign_in(
    data: SignInRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> SignInResponse:
    try:
        return await auth_service.sign_in(data, _get_client_info(request))
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


@router.get(
    "/session",
    response_model=SessionResponse | None,
    summary="Get current session",
    description="Returns null when no token is sent or the session is expired or revoked.",
)
async def get_session(
    current_user: CurrentUser | None = Depends(get_optional_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> SessionResponse | None:
    if current_user is None:
        return None
    return await auth_service.get_session(current_user.session_id)


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Refresh tokens",
    description="Refresh tokens are single use; replaying one revokes the session.",
)
async def refresh_tokens(
    data: RefreshTokenRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    try:
        return await auth_service.refresh_tokens(data.refresh_token)
    except TokenRefreshError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )


@router.post(
    "/sign-out",
    response_model=MessageResponse,
    summary="Sign out",
)
async def sign_out(
    current_user: CurrentUser = Depends(require_auth),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    await auth_service.sign_out(current_user.session_id)

    logger.info("User signed out: %s", current_user.id)

    return MessageResponse(message="Signed out")
