# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the authentication service."""

from datetime import timedelta
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from pydantic import SecretStr

from factories import make_user, scalar_result, stamp
from src.core.config.settings import SessionSettings
from src.domains.auth.jwt import JWTManager
from src.domains.auth.password import PasswordHasher
from src.domains.auth.service import (
    AuthService,
    ClientInfo,
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    TokenRefreshError,
    WeakPasswordError,
)
from src.infrastructure.database.models import User, UserSession
from src.models.auth import SignInRequest, SignUpRequest
from src.utils.datetime import utc_now

PASSWORD = "correct-horse-battery"
CLIENT = ClientInfo(ip_address="10.0.0.1", user_agent="pytest")


@pytest.fixture
def jwt_manager() -> JWTManager:
    """Create JWT manager with test settings."""
    settings = MagicMock()
    settings.secret_key = SecretStr("test-secret-key-for-jwt-testing")
    settings.algorithm = "HS256"
    settings.access_token_expire_minutes = 30
    settings.refresh_token_expire_days = 7
    return JWTManager(settings)


@pytest.fixture
def hasher() -> PasswordHasher:
    """Create a fast hasher for tests."""
    return PasswordHasher(rounds=4)


@pytest.fixture
def db(stamp_on_refresh):
    """Mock session that fills generated columns on flush and refresh."""

    async def flush() -> None:
        for call in stamp_on_refresh.add.call_args_list:
            stamp(call.args[0])

    stamp_on_refresh.flush.side_effect = flush
    return stamp_on_refresh


@pytest.fixture
def auth_service(db, jwt_manager, hasher) -> AuthService:
    """Create auth service with mock database."""
    return AuthService(db, jwt_manager, hasher, SessionSettings())


def _session(user_id: str, expires_in: timedelta = timedelta(days=7)) -> UserSession:
    now = utc_now()
    return UserSession(
        id=str(uuid4()),
        user_id=user_id,
        ip_address="10.0.0.1",
        expires_at=now + expires_in,
        created_at=now,
        updated_at=now,
    )


class TestSignUp:
    """Tests for account registration."""

    @pytest.mark.asyncio
    async def test_first_account_becomes_admin(self, auth_service, db):
        """Test that the first account is an admin."""
        db.execute.side_effect = [scalar_result(None), scalar_result(0)]

        result = await auth_service.sign_up(
            SignUpRequest(name="Principal", email="head@school.com", password=PASSWORD),
            CLIENT,
        )

        assert result.user.role == "admin"
        assert result.session.ip_address == "10.0.0.1"
        assert result.token_type == "bearer"

        user = db.add.call_args_list[0].args[0]
        assert isinstance(user, User)
        assert user.password_hash != PASSWORD
        session = db.add.call_args_list[1].args[0]
        assert isinstance(session, UserSession)
        assert session.refresh_token_hash == JWTManager.hash_token(result.refresh_token)

    @pytest.mark.asyncio
    async def test_later_accounts_are_students(self, auth_service, db):
        """Test that accounts after the first admin are students."""
        db.execute.side_effect = [scalar_result(None), scalar_result(1)]

        result = await auth_service.sign_up(
            SignUpRequest(name="Asha", email="asha@school.com", password=PASSWORD),
            CLIENT,
        )

        assert result.user.role == "student"

    @pytest.mark.asyncio
    async def test_staff_account_is_claimed(self, auth_service, db):
        """Test that a passwordless staff account keeps its role."""
        staff = make_user("teacher", email="meera@school.com")
        db.execute.side_effect = [scalar_result(staff)]

        result = await auth_service.sign_up(
            SignUpRequest(name="Meera", email="meera@school.com", password=PASSWORD),
            CLIENT,
        )

        assert result.user.role == "teacher"
        assert staff.password_hash is not None
        assert isinstance(db.add.call_args.args[0], UserSession)

    @pytest.mark.asyncio
    async def test_registered_email_rejected(self, auth_service, db, hasher):
        """Test that an email with a password cannot sign up again."""
        existing = make_user("student", password_hash=hasher.hash(PASSWORD))
        db.execute.side_effect = [scalar_result(existing)]

        with pytest.raises(EmailAlreadyRegisteredError):
            await auth_service.sign_up(
                SignUpRequest(name="Asha", email=existing.email, password=PASSWORD),
                CLIENT,
            )

    @pytest.mark.asyncio
    async def test_weak_password_rejected(self, db, jwt_manager):
        """Test that the hasher policy surfaces as WeakPasswordError."""
        hasher = PasswordHasher(rounds=4, min_length=30)
        service = AuthService(db, jwt_manager, hasher, SessionSettings())

        with pytest.raises(WeakPasswordError):
            await service.sign_up(
                SignUpRequest(name="Asha", email="asha@school.com", password=PASSWORD),
                CLIENT,
            )

        db.execute.assert_not_awaited()


class TestSignIn:
    """Tests for email and password sign-in."""

    @pytest.mark.asyncio
    async def test_sign_in_success(self, auth_service, db, hasher, jwt_manager):
        """Test that valid credentials open a session."""
        user = make_user("teacher", password_hash=hasher.hash(PASSWORD))
        db.execute.side_effect = [scalar_result(user)]

        result = await auth_service.sign_in(
            SignInRequest(email=user.email, password=PASSWORD), CLIENT
        )

        payload = jwt_manager.decode_token(result.access_token, expected_type="access")
        assert payload.sub == user.id
        assert payload.sid == str(result.session.id)
        assert payload.role == "teacher"

    @pytest.mark.asyncio
    async def test_sign_in_wrong_password(self, auth_service, db, hasher):
        """Test that a wrong password is rejected."""
        user = make_user("teacher", password_hash=hasher.hash(PASSWORD))
        db.execute.side_effect = [scalar_result(user)]

        with pytest.raises(InvalidCredentialsError):
            await auth_service.sign_in(
                SignInRequest(email=user.email, password="not-the-password"), CLIENT
            )

        db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_sign_in_unknown_email(self, auth_service, db):
        """Test that an unknown email gives the same error."""
        db.execute.side_effect = [scalar_result(None)]

        with pytest.raises(InvalidCredentialsError, match="Invalid email or password"):
            await auth_service.sign_in(
                SignInRequest(email="nobody@school.com", password=PASSWORD), CLIENT
            )


class TestSessions:
    """Tests for session lookup, extension and sign-out."""

    @pytest.mark.asyncio
    async def test_get_session_fresh(self, auth_service, db):
        """Test that a fresh session is not extended."""
        user = make_user("admin")
        session = _session(user.id)
        expires_at = session.expires_at
        db.execute.side_effect = [scalar_result(session)]
        db.get.return_value = user

        result = await auth_service.get_session(session.id)

        assert result.user.role == "admin"
        assert session.expires_at == expires_at
        db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_session_extends_old_session(self, auth_service, db):
        """Test that a session older than the update age is extended."""
        user = make_user("admin")
        session = _session(user.id, expires_in=timedelta(days=5))
        db.execute.side_effect = [scalar_result(session)]
        db.get.return_value = user

        await auth_service.get_session(session.id)

        assert session.expires_at > utc_now() + timedelta(days=6)
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_expired_session_is_none(self, auth_service, db):
        """Test that an expired session resolves to None."""
        session = _session(str(uuid4()), expires_in=timedelta(minutes=-1))
        db.execute.side_effect = [scalar_result(session)]

        assert await auth_service.get_session(session.id) is None

    @pytest.mark.asyncio
    async def test_revoked_session_is_inactive(self, auth_service, db):
        """Test that a revoked session is not active."""
        session = _session(str(uuid4()))
        session.revoke()
        db.execute.side_effect = [scalar_result(session)]

        assert await auth_service.is_session_active(session.id) is False

    @pytest.mark.asyncio
    async def test_sign_out_revokes(self, auth_service, db):
        """Test that sign-out revokes the session."""
        session = _session(str(uuid4()))
        db.execute.side_effect = [scalar_result(session)]

        await auth_service.sign_out(session.id)

        assert session.revoked_at is not None
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_sign_out_unknown_session(self, auth_service, db):
        """Test that signing out an unknown session is a no-op."""
        db.execute.side_effect = [scalar_result(None)]

        await auth_service.sign_out(str(uuid4()))

        db.commit.assert_not_awaited()


class TestRefresh:
    """Tests for refresh token rotation."""

    @pytest.mark.asyncio
    async def test_refresh_rotates_tokens(self, auth_service, db, jwt_manager):
        """Test that a refresh issues a new pair and stores its hash."""
        user = make_user("teacher")
        session = _session(user.id)
        tokens = jwt_manager.create_token_pair(user.id, session.id, role="teacher")
        session.refresh_token_hash = JWTManager.hash_token(tokens.refresh_token)
        db.execute.side_effect = [scalar_result(session)]
        db.get.return_value = user

        result = await auth_service.refresh_tokens(tokens.refresh_token)

        assert result.refresh_token != tokens.refresh_token
        assert session.refresh_token_hash == JWTManager.hash_token(result.refresh_token)

    @pytest.mark.asyncio
    async def test_reused_refresh_token_revokes_session(self, auth_service, db, jwt_manager):
        """Test that replaying an old refresh token revokes the session."""
        user = make_user("teacher")
        session = _session(user.id)
        old = jwt_manager.create_token_pair(user.id, session.id)
        newer = jwt_manager.create_token_pair(user.id, session.id)
        session.refresh_token_hash = JWTManager.hash_token(newer.refresh_token)
        db.execute.side_effect = [scalar_result(session)]

        with pytest.raises(TokenRefreshError, match="already been used"):
            await auth_service.refresh_tokens(old.refresh_token)

        assert session.revoked_at is not None

    @pytest.mark.asyncio
    async def test_refresh_with_access_token(self, auth_service, jwt_manager):
        """Test that an access token cannot be used to refresh."""
        tokens = jwt_manager.create_token_pair(str(uuid4()), str(uuid4()))

        with pytest.raises(TokenRefreshError, match="Invalid refresh token"):
            await auth_service.refresh_tokens(tokens.access_token)

    @pytest.mark.asyncio
    async def test_refresh_for_revoked_session(self, auth_service, db, jwt_manager):
        """Test that a revoked session cannot be refreshed."""
        user_id = str(uuid4())
        session = _session(user_id)
        session.revoke()
        tokens = jwt_manager.create_token_pair(user_id, session.id)
        db.execute.side_effect = [scalar_result(session)]

        with pytest.raises(TokenRefreshError, match="expired or revoked"):
            await auth_service.refresh_tokens(tokens.refresh_token)
