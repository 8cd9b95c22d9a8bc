# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication service for email/password sessions.

This module provides the main AuthService that orchestrates:
- Sign-up and sign-in with email and password
- Persisted sessions with sliding expiry
- Token refresh and sign-out

Sessions last SESSION_EXPIRE_DAYS and are extended to a full period
again once they are older than SESSION_UPDATE_AGE_DAYS.

Example:
    >>> auth_service = AuthService(db_session, jwt_manager, hasher, settings.session)
    >>> result = await auth_service.sign_in(request, ClientInfo(ip_address="10.0.0.1"))
"""

import logging
from datetime import timedelta
from typing import NamedTuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import SessionSettings
from src.domains.auth.jwt import (
    InvalidTokenError,
    JWTManager,
    TokenExpiredError,
    TokenPair,
)
from src.domains.auth.password import PasswordHasher, PasswordPolicyError
from src.domains.department.service import user_summary
from src.infrastructure.database.models import User, UserSession
from src.models.auth import (
    SessionInfo,
    SessionResponse,
    SignInRequest,
    SignInResponse,
    SignUpRequest,
    TokenResponse,
)
from src.utils.datetime import ensure_utc, utc_now

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Base exception for authentication errors."""

    pass


class InvalidCredentialsError(AuthenticationError):
    """Raised when email or password is wrong."""

    pass


class EmailAlreadyRegisteredError(AuthenticationError):
    """Raised when signing up with an email that already has a password."""

    pass


class WeakPasswordError(AuthenticationError):
    """Raised when a new password fails the password policy."""

    pass


class SessionNotFoundError(AuthenticationError):
    """Raised when session is not found or invalid."""

    pass


class TokenRefreshError(AuthenticationError):
    """Raised when token refresh fails."""

    pass


class ClientInfo(NamedTuple):
    """Client details recorded on the session."""

    ip_address: str | None = None
    user_agent: str | None = None


class AuthService:
    """Authentication service for session management.

    Attributes:
        _db: Database session for queries.
        _jwt_manager: JWT token manager.
        _hasher: Password hasher.
        _session_settings: Session lifetime settings.
    """

    def __init__(
        self,
        db: AsyncSession,
        jwt_manager: JWTManager,
        hasher: PasswordHasher,
        session_settings: SessionSettings,
    ) -> None:
        self._db = db
        self._jwt_manager = jwt_manager
        self._hasher = hasher
        self._session_settings = session_settings

    async def sign_up(
        self,
        request: SignUpRequest,
        client: ClientInfo,
    ) -> SignInResponse:
        """Register an account and sign it in.

        The very first account becomes an admin; later ones are students.
        A staff account created by an admin without a password is
        claimed by signing up with its email, keeping its role.

        Raises:
            EmailAlreadyRegisteredError: If the email already has a password.
            WeakPasswordError: If the password fails the policy.
        """
        try:
            password_hash = self._hasher.hash(request.password)
        except PasswordPolicyError as e:
            raise WeakPasswordError(str(e)) from e

        user = await self._get_user_by_email(request.email)
        if user and user.password_hash:
            raise EmailAlreadyRegisteredError(f"Email {request.email} is already registered")

        if user:
            user.password_hash = password_hash
            logger.info("Staff account claimed: %s (role=%s)", user.id, user.role)
        else:
            user = User(
                name=request.name,
                email=request.email,
                role=await self._initial_role(),
                password_hash=password_hash,
            )
            self._db.add(user)
            await self._db.flush()
            logger.info("User signed up: %s (role=%s)", user.id, user.role)

        return await self._start_session(user, client)

    async def sign_in(
        self,
        request: SignInRequest,
        client: ClientInfo,
    ) -> SignInResponse:
        """Authenticate with email and password and open a session.

        Raises:
            InvalidCredentialsError: If the email or password is wrong.
        """
        user = await self._get_user_by_email(request.email)
        if not user or not self._hasher.verify(request.password, user.password_hash):
            logger.info("Failed sign-in for %s", request.email)
            raise InvalidCredentialsError("Invalid email or password")

        return await self._start_session(user, client)

    async def get_session(self, session_id: str) -> SessionResponse | None:
        """Resolve a session id to the user and session.

        Sessions older than the update age get a fresh expiry.

        Returns:
            The user and session, or None when the session is missing,
            expired or revoked.
        """
        session = await self._get_valid_session(session_id)
        if session is None:
            return None

        user = await self._db.get(User, session.user_id)
        if user is None:
            return None

        if self._should_extend(session):
            session.expires_at = utc_now() + timedelta(days=self._session_settings.expire_days)
            await self._db.commit()
            logger.debug("Session extended: %s", session.id)

        return SessionResponse(user=user_summary(user), session=self._session_info(session))

    async def is_session_active(self, session_id: str) -> bool:
        """Check that the session exists and is neither expired nor revoked."""
        return await self._get_valid_session(session_id) is not None

    async def refresh_tokens(self, refresh_token: str) -> TokenResponse:
        """Exchange a refresh token for a new token pair.

        The refresh token is single use: the session keeps only the hash
        of the latest one issued.

        Raises:
            TokenRefreshError: If the token or its session is invalid.
        """
        try:
            payload = self._jwt_manager.decode_token(refresh_token, expected_type="refresh")
        except (TokenExpiredError, InvalidTokenError) as e:
            raise TokenRefreshError(f"Invalid refresh token: {str(e)}")

        session = await self._get_valid_session(payload.sid)
        if session is None or session.user_id != payload.sub:
            raise TokenRefreshError("Session expired or revoked")

        if session.refresh_token_hash != self._jwt_manager.hash_token(refresh_token):
            session.revoke()
            await self._db.commit()
            logger.warning("Refresh token reuse detected, session revoked: %s", session.id)
            raise TokenRefreshError("Refresh token has already been used")

        user = await self._db.get(User, session.user_id)
        if user is None:
            raise TokenRefreshError("User not found")

        tokens = self._issue_tokens(user, session)
        await self._db.commit()

        logger.info("Tokens refreshed for user: %s", user.id)

        return TokenResponse(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_in=tokens.expires_in,
        )

    async def sign_out(self, session_id: str) -> None:
        """Revoke a session. Unknown or already revoked sessions are ignored."""
        stmt = select(UserSession).where(UserSession.id == session_id)
        result = await self._db.execute(stmt)
        session = result.scalar_one_or_none()

        if session and session.revoked_at is None:
            session.revoke()
            await self._db.commit()
            logger.info("Session revoked: %s", session_id)

    async def _start_session(self, user: User, client: ClientInfo) -> SignInResponse:
        session = UserSession(
            user_id=user.id,
            ip_address=client.ip_address,
            user_agent=client.user_agent,
            expires_at=utc_now() + timedelta(days=self._session_settings.expire_days),
        )
        self._db.add(session)
        await self._db.flush()

        tokens = self._issue_tokens(user, session)

        await self._db.commit()
        await self._db.refresh(session)

        logger.info("Session created: %s for user %s", session.id, user.id)

        return SignInResponse(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_in=tokens.expires_in,
            user=user_summary(user),
            session=self._session_info(session),
        )

    def _issue_tokens(self, user: User, session: UserSession) -> TokenPair:
        tokens = self._jwt_manager.create_token_pair(
            user_id=user.id,
            session_id=session.id,
            role=user.role,
        )
        session.refresh_token_hash = self._jwt_manager.hash_token(tokens.refresh_token)
        return tokens

    def _should_extend(self, session: UserSession) -> bool:
        period = timedelta(days=self._session_settings.expire_days)
        issued_at = ensure_utc(session.expires_at) - period
        return utc_now() - issued_at >= timedelta(days=self._session_settings.update_age_days)

    async def _get_valid_session(self, session_id: str) -> UserSession | None:
        stmt = select(UserSession).where(UserSession.id == session_id)
        result = await self._db.execute(stmt)
        session = result.scalar_one_or_none()

        if session is None or not session.is_valid:
            return None
        return session

    async def _get_user_by_email(self, email: str) -> User | None:
        stmt = select(User).where(func.lower(User.email) == email.lower())
        result = await self._db.execute(stmt)
        return result.scalar_one_or_none()

    async def _initial_role(self) -> str:
        stmt = select(func.count()).select_from(User).where(User.role == "admin")
        result = await self._db.execute(stmt)
        return "student" if (result.scalar() or 0) > 0 else "admin"

    @staticmethod
    def _session_info(session: UserSession) -> SessionInfo:
        return SessionInfo(
            id=session.id,
            expires_at=session.expires_at,
            created_at=session.created_at,
            ip_address=session.ip_address,
            user_agent=session.user_agent,
        )
