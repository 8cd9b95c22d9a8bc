# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests (services against a mocked AsyncSession)
- Integration tests (routers through FastAPI TestClient)
"""

import os
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from factories import make_class, make_department, make_student, make_subject, make_user, stamp


# Settings are cached on first use; select the test environment before
# any application module reads them.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-testing-only")


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an API test using dependency overrides"
    )


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def mock_db() -> AsyncMock:
    """Create mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.add_all = MagicMock()
    db.delete = AsyncMock()
    db.flush = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.execute = AsyncMock()
    db.get = AsyncMock()
    return db


@pytest.fixture
def stamp_on_refresh(mock_db: AsyncMock) -> AsyncMock:
    """Make db.refresh fill generated columns like a real insert."""

    async def _refresh(obj: Any, *args: Any, **kwargs: Any) -> None:
        stamp(obj)

    mock_db.refresh.side_effect = _refresh
    return mock_db


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def department() -> MagicMock:
    """Create a sample Class 8 department."""
    return make_department("Class 8", 11)


@pytest.fixture
def teacher() -> MagicMock:
    """Create a sample teacher."""
    return make_user("teacher", name="Meera Iyer", email="meera@school.com")


@pytest.fixture
def subject(department: MagicMock) -> MagicMock:
    """Create a sample subject."""
    return make_subject(department)


@pytest.fixture
def school_class(department: MagicMock, subject: MagicMock) -> MagicMock:
    """Create a sample class."""
    return make_class(department, subject)


@pytest.fixture
def student(department: MagicMock) -> MagicMock:
    """Create a sample student."""
    return make_student(department)
