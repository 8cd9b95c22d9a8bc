# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for JWT token utilities.

Tests the JWTManager class and session-bound tokens.
"""

import time
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from pydantic import SecretStr

from src.domains.auth.jwt import (
    InvalidTokenError,
    JWTManager,
    TokenExpiredError,
    TokenPair,
    TokenPayload,
)


@pytest.fixture
def jwt_settings() -> MagicMock:
    """Create mock JWT settings."""
    settings = MagicMock()
    settings.secret_key = SecretStr("test-secret-key-for-jwt-testing")
    settings.algorithm = "HS256"
    settings.access_token_expire_minutes = 30
    settings.refresh_token_expire_days = 7
    return settings


@pytest.fixture
def jwt_manager(jwt_settings: MagicMock) -> JWTManager:
    """Create JWT manager with test settings."""
    return JWTManager(jwt_settings)


class TestJWTManager:
    """Tests for JWTManager class."""

    def test_create_token_pair_returns_valid_tokens(self, jwt_manager: JWTManager) -> None:
        """Test that create_token_pair returns a bearer pair."""
        result = jwt_manager.create_token_pair(
            user_id=str(uuid4()), session_id=str(uuid4()), role="teacher"
        )

        assert isinstance(result, TokenPair)
        assert result.token_type == "bearer"
        assert result.expires_in == 30 * 60
        assert result.refresh_expires_in == 7 * 24 * 60 * 60

    def test_access_token_carries_session_and_role(self, jwt_manager: JWTManager) -> None:
        """Test the claims of an access token."""
        user_id, session_id = str(uuid4()), str(uuid4())
        tokens = jwt_manager.create_token_pair(user_id, session_id, role="admin")

        payload = jwt_manager.decode_token(tokens.access_token, expected_type="access")

        assert isinstance(payload, TokenPayload)
        assert payload.sub == user_id
        assert payload.sid == session_id
        assert payload.role == "admin"
        assert payload.type == "access"

    def test_refresh_token_has_no_role(self, jwt_manager: JWTManager) -> None:
        """Test the claims of a refresh token."""
        session_id = str(uuid4())
        tokens = jwt_manager.create_token_pair(str(uuid4()), session_id, role="admin")

        payload = jwt_manager.decode_token(tokens.refresh_token, expected_type="refresh")

        assert payload.type == "refresh"
        assert payload.sid == session_id
        assert payload.role is None

    def test_decode_token_with_wrong_type_raises_error(self, jwt_manager: JWTManager) -> None:
        """Test that an access token is not accepted as a refresh token."""
        tokens = jwt_manager.create_token_pair(str(uuid4()), str(uuid4()))

        with pytest.raises(InvalidTokenError, match="Expected refresh token"):
            jwt_manager.decode_token(tokens.access_token, expected_type="refresh")

    def test_decode_expired_token_raises_error(self, jwt_settings: MagicMock) -> None:
        """Test that decode_token raises error for expired token."""
        jwt_settings.access_token_expire_minutes = -1
        jwt_manager = JWTManager(jwt_settings)
        tokens = jwt_manager.create_token_pair(str(uuid4()), str(uuid4()))

        with pytest.raises(TokenExpiredError, match="Token has expired"):
            jwt_manager.decode_token(tokens.access_token)

    def test_decode_invalid_token_raises_error(self, jwt_manager: JWTManager) -> None:
        """Test that decode_token raises error for invalid token."""
        with pytest.raises(InvalidTokenError):
            jwt_manager.decode_token("invalid.token.here")

    def test_decode_token_with_wrong_secret_raises_error(
        self,
        jwt_manager: JWTManager,
        jwt_settings: MagicMock,
    ) -> None:
        """Test that decode fails when secret doesn't match."""
        tokens = jwt_manager.create_token_pair(str(uuid4()), str(uuid4()))

        jwt_settings.secret_key = SecretStr("different-secret-key")
        other_manager = JWTManager(jwt_settings)

        with pytest.raises(InvalidTokenError):
            other_manager.decode_token(tokens.access_token)

    def test_hash_token_returns_consistent_hash(self) -> None:
        """Test that hash_token returns consistent SHA-256 hash."""
        assert JWTManager.hash_token("token") == JWTManager.hash_token("token")
        assert len(JWTManager.hash_token("token")) == 64
        assert JWTManager.hash_token("token1") != JWTManager.hash_token("token2")

    def test_token_pair_contains_unique_jti(self, jwt_manager: JWTManager) -> None:
        """Test that tokens contain unique JTI claims."""
        session_id = str(uuid4())
        first = jwt_manager.create_token_pair("user", session_id)
        second = jwt_manager.create_token_pair("user", session_id)

        assert first.refresh_token != second.refresh_token
        assert (
            jwt_manager.decode_token(first.access_token).jti
            != jwt_manager.decode_token(second.access_token).jti
        )

    def test_token_payload_timestamps(self, jwt_manager: JWTManager) -> None:
        """Test that tokens have correct iat and exp timestamps."""
        before = int(time.time())
        tokens = jwt_manager.create_token_pair(str(uuid4()), str(uuid4()))
        after = int(time.time())

        payload = jwt_manager.decode_token(tokens.access_token)

        assert before <= payload.iat <= after
        assert abs(payload.exp - (payload.iat + 30 * 60)) <= 1

    def test_uuid_conversion(self, jwt_manager: JWTManager) -> None:
        """Test that UUID objects are converted to strings."""
        user_id, session_id = uuid4(), uuid4()
        tokens = jwt_manager.create_token_pair(user_id, session_id)

        payload = jwt_manager.decode_token(tokens.access_token)

        assert payload.sub == str(user_id)
        assert payload.sid == str(session_id)
