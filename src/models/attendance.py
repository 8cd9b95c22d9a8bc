# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance request and response models."""

from datetime import date, datetime
from typing import Literal, Self
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.models.common import ClassSummary, PaginatedResponse, StudentSummary

AttendanceStatus = Literal["present", "absent", "late"]


class AttendanceCreateRequest(BaseModel):
    """Request to record attendance for one student."""

    class_id: UUID
    student_id: UUID
    date: date
    status: AttendanceStatus
    remarks: str | None = None


class BulkAttendanceRequest(BaseModel):
    """Request to record several attendance marks at once."""

    records: list[AttendanceCreateRequest] = Field(min_length=1)


class AttendanceUpdateRequest(BaseModel):
    """Update status and/or remarks. At least one is required."""

    status: AttendanceStatus | None = None
    remarks: str | None = None

    @model_validator(mode="after")
    def check_not_empty(self) -> Self:
        if self.status is None and "remarks" not in self.model_fields_set:
            raise ValueError("Provide at least one field to update: status, remarks")
        return self


class AttendanceResponse(BaseModel):
    """Attendance record with class and student summaries."""

    id: UUID
    class_id: UUID
    student_id: UUID
    date: date
    status: str
    remarks: str | None = None
    class_: ClassSummary | None = Field(default=None, alias="class")
    student: StudentSummary | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(populate_by_name=True)


class AttendanceListResponse(PaginatedResponse):
    """Paginated attendance records."""

    items: list[AttendanceResponse]


class BulkAttendanceResponse(BaseModel):
    """Records created by a bulk request."""

    items: list[AttendanceResponse]
    count: int


class ClassAttendanceReport(BaseModel):
    """Attendance of one class on one day, ordered by student name."""

    class_id: UUID
    date: date
    items: list[AttendanceResponse]


class AttendanceCounts(BaseModel):
    """Attendance counters and present percentage."""

    total: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0
    percentage: int = 0


class ClassAttendanceBreakdown(AttendanceCounts):
    """Counters for one class in a student report."""

    class_id: UUID | None
    class_name: str


class StudentAttendanceReport(BaseModel):
    """A student's attendance summary and per-class breakdown."""

    student_id: UUID
    summary: AttendanceCounts
    by_class: list[ClassAttendanceBreakdown]
