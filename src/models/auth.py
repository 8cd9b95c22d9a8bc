# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication request and response models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from src.models.common import UserSummary


class SignUpRequest(BaseModel):
    """Request to register an account with email and password."""

    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)


class SignInRequest(BaseModel):
    """Email and password credentials."""

    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class RefreshTokenRequest(BaseModel):
    """Request to exchange a refresh token for a new token pair."""

    refresh_token: str


class TokenResponse(BaseModel):
    """Bearer token pair issued at sign-in or refresh."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Access token lifetime in seconds")


class SessionInfo(BaseModel):
    """Persisted session details."""

    id: UUID
    expires_at: datetime
    created_at: datetime
    ip_address: str | None = None
    user_agent: str | None = None


class SignInResponse(TokenResponse):
    """Tokens plus the signed-in user and session."""

    user: UserSummary
    session: SessionInfo


class SessionResponse(BaseModel):
    """The current user and session."""

    user: UserSummary
    session: SessionInfo
