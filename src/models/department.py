# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Department request and response models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from src.models.common import DepartmentSummary, UserSummary


class DepartmentCreateRequest(BaseModel):
    """Request to create a department.

    The department code and academic level are derived from the name.
    """

    name: str = Field(min_length=1, max_length=255, description="e.g. 'Class 8' or 'KG-1'")
    description: str = Field(min_length=1, max_length=255)
    banner_url: str = Field(min_length=1)
    banner_cld_pub_id: str = Field(min_length=1)
    head_teacher_id: UUID
    parent_department_id: UUID | None = Field(
        default=None,
        description="Parent department when this department is a section",
    )


class DepartmentUpdateRequest(BaseModel):
    """Partial department update. Renaming recomputes code and level."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=255)
    banner_url: str | None = None
    banner_cld_pub_id: str | None = None
    head_teacher_id: UUID | None = None
    parent_department_id: UUID | None = None


class DepartmentResponse(BaseModel):
    """Department details."""

    id: UUID
    code: str
    name: str
    description: str | None = None
    banner_url: str | None = None
    banner_cld_pub_id: str | None = None
    level: int | None = None
    head_teacher_id: UUID | None = None
    head_teacher: UserSummary | None = None
    parent_department_id: UUID | None = None
    sections: list[DepartmentSummary] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class DepartmentListResponse(BaseModel):
    """All departments, ordered by level then name."""

    items: list[DepartmentResponse]
    total: int


class DepartmentLevel(BaseModel):
    """A canonical department label and its academic level."""

    name: str
    level: int


class DepartmentLevelsResponse(BaseModel):
    """The canonical level table."""

    levels: list[DepartmentLevel]
