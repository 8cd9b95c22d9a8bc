# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Promotion request and response models."""

from uuid import UUID

from pydantic import BaseModel

from src.models.common import DepartmentSummary
from src.models.student import StudentResponse


class PromoteStudentRequest(BaseModel):
    """Request to move a student to a higher department."""

    department_id: UUID


class AvailablePromotionsResponse(BaseModel):
    """Departments a student may currently be promoted into."""

    student_id: UUID
    current_department: DepartmentSummary
    departments: list[DepartmentSummary]


class PromotionResponse(BaseModel):
    """Outcome of a successful promotion."""

    student: StudentResponse
    previous_level: int
    new_level: int


class InvalidTransitionDetail(BaseModel):
    """Error body for a rejected promotion."""

    message: str
    current_level: int | None
    target_level: int | None
