# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance service for recording and reporting class attendance.

This module provides the AttendanceService class for:
- Recording attendance, one student at a time or in bulk
- Filtering attendance records
- Class-day and per-student attendance reports

A student has at most one mark per class per day.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from datetime import date
from uuid import UUID

from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager

from src.infrastructure.database.models import Attendance, Class, Student
from src.models.attendance import (
    AttendanceCounts,
    AttendanceCreateRequest,
    AttendanceResponse,
    AttendanceUpdateRequest,
    BulkAttendanceRequest,
    ClassAttendanceBreakdown,
    ClassAttendanceReport,
    StudentAttendanceReport,
)
from src.models.common import ClassSummary, StudentSummary, page_offset

logger = logging.getLogger(__name__)


class AttendanceServiceError(Exception):
    """Base exception for attendance service errors."""

    pass


class AttendanceNotFoundError(AttendanceServiceError):
    """Raised when an attendance record is not found."""

    pass


class AttendanceExistsError(AttendanceServiceError):
    """Raised when the student already has a mark for the class and day."""

    pass


class ClassNotFoundError(AttendanceServiceError):
    """Raised when the class is not found."""

    pass


class StudentNotFoundError(AttendanceServiceError):
    """Raised when the student is not found."""

    pass


def attendance_percentage(present: int, total: int) -> int:
    """Share of present marks as a whole percentage, halves rounded up."""
    if total <= 0:
        return 0
    return math.floor(present * 100 / total + 0.5)


def _counts(statuses: dict[str, int]) -> dict[str, int]:
    total = sum(statuses.values())
    present = statuses.get("present", 0)
    return {
        "total": total,
        "present": present,
        "absent": statuses.get("absent", 0),
        "late": statuses.get("late", 0),
        "percentage": attendance_percentage(present, total),
    }


class AttendanceService:
    """Service for managing attendance.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_attendance(
        self,
        class_id: UUID | None = None,
        student_id: UUID | None = None,
        on_date: date | None = None,
        status: str | None = None,
        department_id: UUID | None = None,
        search: str | None = None,
        roll_number: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[AttendanceResponse], int]:
        """List attendance records, most recent day first.

        Args:
            class_id: Filter by class.
            student_id: Filter by student.
            on_date: Filter by calendar day.
            status: Filter by status.
            department_id: Filter by the class's department.
            search: Case-insensitive substring of the student name.
            roll_number: Substring of the student roll number.
            page: 1-based page number.
            limit: Page size.

        Returns:
            Tuple of (records, total count).
        """
        query = (
            select(Attendance)
            .join(Student, Attendance.student_id == Student.id)
            .join(Class, Attendance.class_id == Class.id)
            .options(contains_eager(Attendance.student), contains_eager(Attendance.class_))
        )

        if class_id:
            query = query.where(Attendance.class_id == str(class_id))
        if student_id:
            query = query.where(Attendance.student_id == str(student_id))
        if on_date:
            query = query.where(Attendance.date == on_date)
        if status:
            query = query.where(Attendance.status == status)
        if department_id:
            query = query.where(Class.department_id == str(department_id))
        if search:
            query = query.where(Student.name.ilike(f"%{search}%"))
        if roll_number:
            query = query.where(Student.roll_number.ilike(f"%{roll_number}%"))

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        query = (
            query.order_by(Attendance.date.desc(), Attendance.created_at.desc())
            .limit(limit)
            .offset(page_offset(page, limit))
        )
        result = await self.db.execute(query)
        records = result.scalars().all()

        return [self._to_response(r, r.class_, r.student) for r in records], total

    async def get_attendance(self, attendance_id: UUID) -> AttendanceResponse:
        """Get an attendance record by ID.

        Raises:
            AttendanceNotFoundError: If not found.
        """
        query = (
            select(Attendance)
            .join(Student, Attendance.student_id == Student.id)
            .join(Class, Attendance.class_id == Class.id)
            .where(Attendance.id == str(attendance_id))
            .options(contains_eager(Attendance.student), contains_eager(Attendance.class_))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        record = result.scalar_one_or_none()

        if not record:
            raise AttendanceNotFoundError(f"Attendance record {attendance_id} not found")

        return self._to_response(record, record.class_, record.student)

    async def create_attendance(
        self,
        request: AttendanceCreateRequest,
        recorded_by: str,
    ) -> AttendanceResponse:
        """Record attendance for one student.

        Raises:
            ClassNotFoundError: If the class does not exist.
            StudentNotFoundError: If the student does not exist.
            AttendanceExistsError: If a mark already exists for that day.
        """
        class_ = await self._get_class(request.class_id)
        student = await self._get_student(request.student_id)

        query = select(Attendance.id).where(
            Attendance.class_id == class_.id,
            Attendance.student_id == student.id,
            Attendance.date == request.date,
        )
        result = await self.db.execute(query)
        if result.scalar_one_or_none() is not None:
            raise AttendanceExistsError(
                f"Attendance already recorded for student {student.id} "
                f"in class {class_.id} on {request.date.isoformat()}"
            )

        record = Attendance(
            class_id=class_.id,
            student_id=student.id,
            date=request.date,
            status=request.status,
            remarks=request.remarks,
        )
        self.db.add(record)
        await self._commit()
        await self.db.refresh(record)

        logger.info(
            "Recorded attendance: student=%s, class=%s, date=%s, status=%s, by=%s",
            student.id,
            class_.id,
            request.date,
            request.status,
            recorded_by,
        )

        return self._to_response(record, class_, student)

    async def bulk_create_attendance(
        self,
        request: BulkAttendanceRequest,
        recorded_by: str,
    ) -> list[AttendanceResponse]:
        """Record several attendance marks in one transaction.

        Every record is validated before anything is written; one bad
        record rejects the whole request.

        Raises:
            ClassNotFoundError: If any class does not exist.
            StudentNotFoundError: If any student does not exist.
            AttendanceExistsError: If any mark is repeated in the request
                or already stored.
        """
        keys = [(str(r.student_id), str(r.class_id), r.date) for r in request.records]
        if len(set(keys)) != len(keys):
            raise AttendanceExistsError("Duplicate attendance records in request")

        class_ids = {class_id for _, class_id, _ in keys}
        student_ids = {student_id for student_id, _, _ in keys}

        classes_result = await self.db.execute(select(Class).where(Class.id.in_(class_ids)))
        classes = {c.id: c for c in classes_result.scalars().all()}
        missing_classes = class_ids - classes.keys()
        if missing_classes:
            raise ClassNotFoundError(f"Classes not found: {', '.join(sorted(missing_classes))}")

        students_result = await self.db.execute(
            select(Student).where(Student.id.in_(student_ids))
        )
        students = {s.id: s for s in students_result.scalars().all()}
        missing_students = student_ids - students.keys()
        if missing_students:
            raise StudentNotFoundError(
                f"Students not found: {', '.join(sorted(missing_students))}"
            )

        existing_query = select(Attendance.id).where(
            or_(
                *(
                    and_(
                        Attendance.student_id == student_id,
                        Attendance.class_id == class_id,
                        Attendance.date == day,
                    )
                    for student_id, class_id, day in keys
                )
            )
        )
        existing_result = await self.db.execute(existing_query.limit(1))
        if existing_result.scalar_one_or_none() is not None:
            raise AttendanceExistsError("Attendance already recorded for one or more records")

        records = [
            Attendance(
                class_id=str(r.class_id),
                student_id=str(r.student_id),
                date=r.date,
                status=r.status,
                remarks=r.remarks,
            )
            for r in request.records
        ]
        self.db.add_all(records)
        await self._commit()

        for record in records:
            await self.db.refresh(record)

        logger.info("Recorded %d attendance marks by %s", len(records), recorded_by)

        return [
            self._to_response(r, classes[r.class_id], students[r.student_id])
            for r in records
        ]

    async def update_attendance(
        self,
        attendance_id: UUID,
        request: AttendanceUpdateRequest,
    ) -> AttendanceResponse:
        """Update the status and/or remarks of a record.

        Raises:
            AttendanceNotFoundError: If not found.
        """
        record = await self._get_by_id(attendance_id)

        if request.status is not None:
            record.status = request.status
        if "remarks" in request.model_fields_set:
            record.remarks = request.remarks

        await self.db.commit()

        logger.info("Updated attendance: %s", attendance_id)

        return await self.get_attendance(attendance_id)

    async def delete_attendance(self, attendance_id: UUID) -> None:
        """Delete an attendance record.

        Raises:
            AttendanceNotFoundError: If not found.
        """
        record = await self._get_by_id(attendance_id)

        await self.db.delete(record)
        await self.db.commit()

        logger.info("Deleted attendance: %s", attendance_id)

    async def class_report(self, class_id: UUID, on_date: date) -> ClassAttendanceReport:
        """Attendance of a class on one day, ordered by student name.

        Raises:
            ClassNotFoundError: If the class does not exist.
        """
        class_ = await self._get_class(class_id)

        query = (
            select(Attendance)
            .join(Student, Attendance.student_id == Student.id)
            .where(Attendance.class_id == class_.id, Attendance.date == on_date)
            .options(contains_eager(Attendance.student))
            .order_by(Student.name)
        )
        result = await self.db.execute(query)
        records = result.scalars().all()

        return ClassAttendanceReport(
            class_id=class_.id,
            date=on_date,
            items=[self._to_response(r, class_, r.student) for r in records],
        )

    async def student_report(self, student_id: UUID) -> StudentAttendanceReport:
        """Attendance summary of a student, overall and per class.

        Raises:
            StudentNotFoundError: If the student does not exist.
        """
        student = await self._get_student(student_id)

        query = (
            select(Attendance.class_id, Class.name, Attendance.status, func.count())
            .join(Class, Attendance.class_id == Class.id)
            .where(Attendance.student_id == student.id)
            .group_by(Attendance.class_id, Class.name, Attendance.status)
        )
        result = await self.db.execute(query)

        overall: dict[str, int] = defaultdict(int)
        per_class: dict[tuple[str, str], dict[str, int]] = defaultdict(lambda: defaultdict(int))
        for class_id, class_name, status, count in result.all():
            overall[status] += count
            per_class[(class_id, class_name)][status] += count

        by_class = [
            ClassAttendanceBreakdown(class_id=class_id, class_name=class_name, **_counts(statuses))
            for (class_id, class_name), statuses in sorted(
                per_class.items(), key=lambda item: item[0][1]
            )
        ]

        return StudentAttendanceReport(
            student_id=student.id,
            summary=AttendanceCounts(**_counts(overall)),
            by_class=by_class,
        )

    async def _commit(self) -> None:
        """Commit, mapping a unique violation to AttendanceExistsError."""
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise AttendanceExistsError("Attendance already recorded") from e

    async def _get_by_id(self, attendance_id: UUID) -> Attendance:
        query = select(Attendance).where(Attendance.id == str(attendance_id))
        result = await self.db.execute(query)
        record = result.scalar_one_or_none()

        if not record:
            raise AttendanceNotFoundError(f"Attendance record {attendance_id} not found")

        return record

    async def _get_class(self, class_id: UUID) -> Class:
        query = select(Class).where(Class.id == str(class_id))
        result = await self.db.execute(query)
        class_ = result.scalar_one_or_none()

        if not class_:
            raise ClassNotFoundError(f"Class {class_id} not found")

        return class_

    async def _get_student(self, student_id: UUID) -> Student:
        query = select(Student).where(Student.id == str(student_id))
        result = await self.db.execute(query)
        student = result.scalar_one_or_none()

        if not student:
            raise StudentNotFoundError(f"Student {student_id} not found")

        return student

    def _to_response(
        self,
        record: Attendance,
        class_: Class | None,
        student: Student | None,
    ) -> AttendanceResponse:
        return AttendanceResponse(
            id=record.id,
            class_id=record.class_id,
            student_id=record.student_id,
            date=record.date,
            status=record.status,
            remarks=record.remarks,
            class_=ClassSummary(id=class_.id, name=class_.name) if class_ else None,
            student=(
                StudentSummary(id=student.id, name=student.name, roll_number=student.roll_number)
                if student
                else None
            ),
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
