# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class request and response models."""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, Field

from src.models.common import (
    DepartmentSummary,
    PaginatedResponse,
    SubjectSummary,
    UserSummary,
)

ClassStatus = Literal["active", "inactive", "archived"]


class ClassCreateRequest(BaseModel):
    """Request to create a class. The invite code is generated."""

    name: str = Field(min_length=1, max_length=255)
    department_id: UUID
    subject_id: UUID
    teacher_id: UUID | None = None
    description: str | None = None
    banner_url: str | None = None
    banner_cld_pub_id: str | None = None
    capacity: int = Field(default=50, ge=1)
    status: ClassStatus = "active"
    schedules: list[dict[str, Any]] = Field(default_factory=list)


class ClassUpdateRequest(BaseModel):
    """Partial class update.

    Supplying teacher_id (including null) replaces the class's teacher
    allocation.
    """

    name: str | None = Field(default=None, min_length=1, max_length=255)
    department_id: UUID | None = None
    subject_id: UUID | None = None
    teacher_id: UUID | None = None
    description: str | None = None
    banner_url: str | None = None
    banner_cld_pub_id: str | None = None
    capacity: int | None = Field(default=None, ge=1)
    status: ClassStatus | None = None
    schedules: list[dict[str, Any]] | None = None


class ClassResponse(BaseModel):
    """Class details with subject, department and teacher."""

    id: UUID
    name: str
    invite_code: str
    description: str | None = None
    banner_url: str | None = None
    banner_cld_pub_id: str | None = None
    capacity: int
    status: str
    schedules: list[dict[str, Any]] = Field(default_factory=list)
    department_id: UUID
    subject_id: UUID
    teacher_id: UUID | None = None
    department: DepartmentSummary | None = None
    subject: SubjectSummary | None = None
    teacher: UserSummary | None = None
    student_count: int = 0
    created_at: datetime
    updated_at: datetime


class ClassListResponse(PaginatedResponse):
    """Paginated classes."""

    items: list[ClassResponse]
