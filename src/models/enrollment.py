# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment request and response models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.models.common import ClassSummary, StudentSummary


class EnrollStudentRequest(BaseModel):
    """Request to enroll a student in a class."""

    student_id: UUID


class JoinClassRequest(BaseModel):
    """Request to enroll a student using a class invite code."""

    student_id: UUID
    invite_code: str = Field(min_length=1, max_length=20)


class EnrollmentResponse(BaseModel):
    """A student's membership in a class."""

    student_id: UUID
    class_id: UUID
    enrolled_at: datetime
    student: StudentSummary | None = None
    class_: ClassSummary | None = Field(default=None, alias="class")

    model_config = ConfigDict(populate_by_name=True)


class EnrollmentListResponse(BaseModel):
    """Students enrolled in a class."""

    items: list[EnrollmentResponse]
    total: int
    capacity: int
