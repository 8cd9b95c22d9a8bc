# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for the PostgreSQL connection.

Tests that reach the database require a running PostgreSQL instance
configured through the DB_* environment variables, and are skipped
unless TEST_DATABASE is set.
Run with: TEST_DATABASE=1 pytest tests/integration/test_postgres_connection.py -v
"""

import os

import pytest
from sqlalchemy import text

from src.core.config.settings import Settings, clear_settings_cache
from src.infrastructure.database.connection import (
    DatabaseError,
    check_database_connection,
    close_database,
    get_engine,
    get_session,
    get_sessionmaker,
    init_database,
)

requires_database = pytest.mark.skipif(
    not os.environ.get("TEST_DATABASE"),
    reason="TEST_DATABASE not set",
)


@pytest.fixture
def settings() -> Settings:
    """Provide fresh settings for each test."""
    clear_settings_cache()
    return Settings()


class TestDatabaseInitialization:
    """Tests for database initialization."""

    def test_engine_before_init_raises(self) -> None:
        """Test that the engine is unavailable before initialization."""
        with pytest.raises(DatabaseError, match="not initialized"):
            get_engine()

    def test_sessionmaker_before_init_raises(self) -> None:
        """Test that the sessionmaker is unavailable before initialization."""
        with pytest.raises(DatabaseError, match="not initialized"):
            get_sessionmaker()

    @pytest.mark.asyncio
    async def test_check_without_engine_is_false(self) -> None:
        """Test that an uninitialized database is reported unreachable."""
        assert await check_database_connection() is False

    @pytest.mark.asyncio
    async def test_init_and_close(self, settings: Settings) -> None:
        """Test that initialization creates the engine and close clears it."""
        await init_database(settings)

        try:
            assert get_engine() is not None
            assert get_sessionmaker() is not None
        finally:
            await close_database()

        with pytest.raises(DatabaseError):
            get_engine()

    def test_database_error_str(self) -> None:
        """Test that the original error is included in the message."""
        error = DatabaseError("Database operation failed", ValueError("boom"))

        assert str(error) == "Database operation failed: boom"


@pytest.mark.integration
@requires_database
class TestDatabaseQueries:
    """Tests against a live database."""

    @pytest.mark.asyncio
    async def test_check_connection(self, settings: Settings) -> None:
        """Test that a live database is reachable."""
        await init_database(settings)

        try:
            assert await check_database_connection() is True
        finally:
            await close_database()

    @pytest.mark.asyncio
    async def test_session_executes_query(self, settings: Settings) -> None:
        """Test a trivial query through get_session."""
        await init_database(settings)

        try:
            async with get_session() as session:
                result = await session.execute(text("SELECT 1"))
                assert result.scalar() == 1
        finally:
            await close_database()

    @pytest.mark.asyncio
    async def test_failed_statement_raises_database_error(self, settings: Settings) -> None:
        """Test that SQL errors are wrapped in DatabaseError."""
        await init_database(settings)

        try:
            with pytest.raises(DatabaseError):
                async with get_session() as session:
                    await session.execute(text("SELECT * FROM no_such_table"))
        finally:
            await close_database()
