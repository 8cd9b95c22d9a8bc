# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""JWT token management utilities.

Tokens are issued per session: every access and refresh token carries
the id of the user_sessions row it was issued for, so revoking the
session invalidates all of its tokens.

Example:
    >>> from src.core.config import get_settings
    >>> jwt_manager = JWTManager(get_settings().jwt)
    >>> tokens = jwt_manager.create_token_pair(user_id="...", session_id="...", role="admin")
    >>> claims = jwt_manager.decode_token(tokens.access_token, expected_type="access")
"""

import hashlib
import logging
import secrets
from datetime import timedelta
from typing import Literal
from uuid import UUID

from jose import ExpiredSignatureError, JWTError as JoseJWTError, jwt
from pydantic import BaseModel, ValidationError

from src.core.config.settings import JWTSettings
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class TokenPayload(BaseModel):
    """JWT token payload structure.

    Attributes:
        sub: Subject (user ID).
        type: Token type (access or refresh).
        sid: Session ID the token belongs to.
        role: User role at issue time.
        exp: Expiration timestamp.
        iat: Issued at timestamp.
        jti: JWT ID for token tracking.
    """

    sub: str
    type: Literal["access", "refresh"]
    sid: str
    role: str | None = None
    exp: int
    iat: int
    jti: str


class TokenPair(BaseModel):
    """Access and refresh token pair."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    refresh_expires_in: int


class JWTError(Exception):
    """Base exception for JWT operations."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is invalid."""

    pass


class JWTManager:
    """JWT token creation and validation manager.

    Attributes:
        _settings: JWT configuration settings.
    """

    def __init__(self, settings: JWTSettings) -> None:
        self._settings = settings

    @property
    def refresh_token_expire_days(self) -> int:
        return self._settings.refresh_token_expire_days

    def create_token_pair(
        self,
        user_id: str | UUID,
        session_id: str | UUID,
        role: str | None = None,
    ) -> TokenPair:
        """Create an access and refresh token pair bound to a session.

        Args:
            user_id: User identifier.
            session_id: Session the tokens belong to.
            role: User role, carried in the access token.

        Returns:
            TokenPair with access and refresh tokens.
        """
        now = utc_now()
        access_exp = now + timedelta(minutes=self._settings.access_token_expire_minutes)
        refresh_exp = now + timedelta(days=self._settings.refresh_token_expire_days)

        access_token = self._encode(
            {
                "sub": str(user_id),
                "type": "access",
                "sid": str(session_id),
                "role": role,
                "exp": int(access_exp.timestamp()),
                "iat": int(now.timestamp()),
                "jti": secrets.token_urlsafe(16),
            }
        )
        refresh_token = self._encode(
            {
                "sub": str(user_id),
                "type": "refresh",
                "sid": str(session_id),
                "exp": int(refresh_exp.timestamp()),
                "iat": int(now.timestamp()),
                "jti": secrets.token_urlsafe(16),
            }
        )

        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=self._settings.access_token_expire_minutes * 60,
            refresh_expires_in=self._settings.refresh_token_expire_days * 24 * 60 * 60,
        )

    def decode_token(
        self,
        token: str,
        expected_type: Literal["access", "refresh"] | None = None,
    ) -> TokenPayload:
        """Decode and validate a JWT token.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is invalid or of the wrong type.
        """
        try:
            payload = jwt.decode(
                token,
                self._settings.secret_key.get_secret_value(),
                algorithms=[self._settings.algorithm],
            )
        except ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except JoseJWTError as e:
            logger.warning("Token decode failed: %s", str(e))
            raise InvalidTokenError(f"Invalid token: {str(e)}")

        if expected_type and payload.get("type") != expected_type:
            raise InvalidTokenError(
                f"Expected {expected_type} token, got {payload.get('type')}"
            )

        try:
            return TokenPayload.model_validate(payload)
        except ValidationError as e:
            raise InvalidTokenError(f"Invalid token claims: {e.error_count()} errors")

    @staticmethod
    def hash_token(token: str) -> str:
        """SHA-256 hex digest of a token, stored instead of the token."""
        return hashlib.sha256(token.encode()).hexdigest()

    def _encode(self, claims: dict) -> str:
        return jwt.encode(
            claims,
            self._settings.secret_key.get_secret_value(),
            algorithm=self._settings.algorithm,
        )
