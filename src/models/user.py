# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User (staff) request and response models."""

from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from src.models.common import ClassSummary, DepartmentSummary, PaginatedResponse

UserRole = Literal["admin", "teacher", "student"]


class UserCreateRequest(BaseModel):
    """Request to create a staff account.

    allocated_departments are department names; allocated_classes are
    class ids. Both are applied only to teachers.
    """

    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    role: UserRole = "teacher"
    image: str | None = None
    image_cld_pub_id: str | None = None
    address: str | None = None
    age: int | None = Field(default=None, ge=1, le=120)
    gender: str | None = Field(default=None, max_length=50)
    joining_date: date | None = None
    bio: str | None = None
    phone_number: str | None = Field(default=None, max_length=20)
    allocated_departments: list[str] = Field(default_factory=list)
    allocated_classes: list[UUID] = Field(default_factory=list)


class UserUpdateRequest(BaseModel):
    """Partial user update."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: EmailStr | None = None
    image: str | None = None
    image_cld_pub_id: str | None = None
    address: str | None = None
    age: int | None = Field(default=None, ge=1, le=120)
    gender: str | None = Field(default=None, max_length=50)
    joining_date: date | None = None
    bio: str | None = None
    phone_number: str | None = Field(default=None, max_length=20)


class UserResponse(BaseModel):
    """User details. Teachers carry their allocations."""

    id: UUID
    name: str
    email: str
    role: str
    email_verified: bool = False
    image: str | None = None
    image_cld_pub_id: str | None = None
    address: str | None = None
    age: int | None = None
    gender: str | None = None
    joining_date: date | None = None
    bio: str | None = None
    phone_number: str | None = None
    departments: list[DepartmentSummary] = Field(default_factory=list)
    classes: list[ClassSummary] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class UserListResponse(PaginatedResponse):
    """Paginated users."""

    items: list[UserResponse]
