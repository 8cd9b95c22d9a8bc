# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared response fragments and pagination helpers."""

import math
from uuid import UUID

from pydantic import BaseModel, Field

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def page_offset(page: int, limit: int) -> int:
    """Row offset for a 1-based page number."""
    return (max(page, 1) - 1) * limit


def count_pages(total: int, limit: int) -> int:
    """Number of pages needed to show total rows, limit per page."""
    if limit <= 0:
        return 0
    return math.ceil(total / limit)


class PaginatedResponse(BaseModel):
    """Pagination envelope fields shared by list responses."""

    total: int = Field(description="Total number of matching records")
    page: int = Field(description="Current 1-based page")
    limit: int = Field(description="Page size")
    total_pages: int = Field(description="Number of pages")


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str


class UserSummary(BaseModel):
    """Minimal user information embedded in other resources."""

    id: UUID
    name: str
    email: str
    role: str
    image: str | None = None


class DepartmentSummary(BaseModel):
    """Minimal department information embedded in other resources."""

    id: UUID
    name: str
    code: str
    level: int | None = None


class SubjectSummary(BaseModel):
    """Minimal subject information embedded in other resources."""

    id: UUID
    name: str
    code: str


class ClassSummary(BaseModel):
    """Minimal class information embedded in other resources."""

    id: UUID
    name: str


class StudentSummary(BaseModel):
    """Minimal student information embedded in other resources."""

    id: UUID
    name: str
    roll_number: str | None = None
