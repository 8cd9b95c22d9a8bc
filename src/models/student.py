# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student request and response models."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from src.models.common import DepartmentSummary, PaginatedResponse


class StudentCreateRequest(BaseModel):
    """Request to admit a student into a department."""

    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    age: int = Field(ge=1, le=100)
    gender: str = Field(min_length=1, max_length=50)
    admission_date: date
    department_id: UUID
    fathers_name: str | None = Field(default=None, max_length=255)
    mothers_name: str | None = Field(default=None, max_length=255)
    address: str | None = None
    phone_number: str | None = Field(default=None, max_length=20)
    whatsapp_number: str | None = Field(default=None, max_length=20)
    roll_number: str | None = Field(default=None, max_length=50)
    image: str | None = None
    image_cld_pub_id: str | None = None


class StudentUpdateRequest(BaseModel):
    """Partial student update.

    A new department_id must exist but is not level-checked; use the
    promotion endpoint to move a student up a grade.
    """

    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: EmailStr | None = None
    age: int | None = Field(default=None, ge=1, le=100)
    gender: str | None = Field(default=None, min_length=1, max_length=50)
    admission_date: date | None = None
    department_id: UUID | None = None
    fathers_name: str | None = Field(default=None, max_length=255)
    mothers_name: str | None = Field(default=None, max_length=255)
    address: str | None = None
    phone_number: str | None = Field(default=None, max_length=20)
    whatsapp_number: str | None = Field(default=None, max_length=20)
    roll_number: str | None = Field(default=None, max_length=50)
    image: str | None = None
    image_cld_pub_id: str | None = None


class StudentResponse(BaseModel):
    """Student details with department."""

    id: UUID
    name: str
    email: str | None = None
    age: int
    gender: str
    fathers_name: str | None = None
    mothers_name: str | None = None
    address: str | None = None
    phone_number: str | None = None
    whatsapp_number: str | None = None
    admission_date: date
    department_id: UUID
    department: DepartmentSummary | None = None
    roll_number: str | None = None
    image: str | None = None
    image_cld_pub_id: str | None = None
    created_at: datetime
    updated_at: datetime


class StudentListResponse(PaginatedResponse):
    """Paginated students."""

    items: list[StudentResponse]
