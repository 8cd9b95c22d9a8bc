# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject request and response models."""

from datetime import datetime
from typing import Self
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from src.models.common import DepartmentSummary, PaginatedResponse


class SubjectCreateRequest(BaseModel):
    """Request to create a subject.

    The department is given either by id or by (case-insensitive) name.
    """

    name: str = Field(min_length=1, max_length=255)
    code: str = Field(min_length=1, max_length=50)
    description: str = Field(min_length=1, max_length=255)
    department_id: UUID | None = None
    department: str | None = Field(default=None, description="Department name")

    @model_validator(mode="after")
    def check_department(self) -> Self:
        if self.department_id is None and not self.department:
            raise ValueError("Either department_id or department is required")
        return self


class SubjectUpdateRequest(BaseModel):
    """Partial subject update."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    code: str | None = Field(default=None, min_length=1, max_length=50)
    description: str | None = Field(default=None, max_length=255)
    department_id: UUID | None = None


class SubjectResponse(BaseModel):
    """Subject details with its department."""

    id: UUID
    name: str
    code: str
    description: str | None = None
    department_id: UUID
    department: DepartmentSummary | None = None
    created_at: datetime
    updated_at: datetime


class SubjectListResponse(PaginatedResponse):
    """Paginated subjects."""

    items: list[SubjectResponse]
