# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment service for managing student class enrollments.

This module provides the EnrollmentService class for:
- Student enrollment in classes, directly or by invite code
- Capacity enforcement
- Enrollment withdrawal
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.infrastructure.database.models import Class, Enrollment, Student
from src.models.common import ClassSummary, StudentSummary
from src.models.enrollment import (
    EnrollmentResponse,
    EnrollStudentRequest,
    JoinClassRequest,
)

logger = logging.getLogger(__name__)


class EnrollmentServiceError(Exception):
    """Base exception for enrollment service errors."""

    pass


class ClassNotFoundError(EnrollmentServiceError):
    """Raised when class is not found."""

    pass


class StudentNotFoundError(EnrollmentServiceError):
    """Raised when student is not found."""

    pass


class AlreadyEnrolledError(EnrollmentServiceError):
    """Raised when student is already enrolled in class."""

    pass


class ClassFullError(EnrollmentServiceError):
    """Raised when the class has reached its capacity."""

    pass


class NotEnrolledError(EnrollmentServiceError):
    """Raised when student is not enrolled in class."""

    pass


class EnrollmentService:
    """Service for managing student enrollments.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def enroll_student(
        self,
        class_id: UUID,
        request: EnrollStudentRequest,
        enrolled_by: str,
    ) -> EnrollmentResponse:
        """Enroll a student in a class.

        The class row is locked while its enrollments are counted so
        concurrent enrollments cannot exceed the capacity.

        Args:
            class_id: Class identifier.
            request: Enrollment request data.
            enrolled_by: ID of user performing enrollment.

        Returns:
            Enrollment response.

        Raises:
            ClassNotFoundError: If class not found.
            StudentNotFoundError: If student not found.
            AlreadyEnrolledError: If student already enrolled.
            ClassFullError: If the class is at capacity.
        """
        class_ = await self._get_class(class_id, lock=True)
        return await self._enroll(class_, request.student_id, enrolled_by)

    async def enroll_by_invite_code(
        self,
        request: JoinClassRequest,
        enrolled_by: str,
    ) -> EnrollmentResponse:
        """Enroll a student in the class identified by an invite code.

        Raises:
            ClassNotFoundError: If no class has the invite code.
            StudentNotFoundError: If student not found.
            AlreadyEnrolledError: If student already enrolled.
            ClassFullError: If the class is at capacity.
        """
        query = (
            select(Class)
            .where(Class.invite_code == request.invite_code.strip())
            .with_for_update()
        )
        result = await self.db.execute(query)
        class_ = result.scalar_one_or_none()

        if not class_:
            raise ClassNotFoundError(f"No class with invite code '{request.invite_code}'")

        return await self._enroll(class_, request.student_id, enrolled_by)

    async def list_enrollments(
        self,
        class_id: UUID,
    ) -> tuple[list[EnrollmentResponse], int, int]:
        """List students enrolled in a class, most recent first.

        Returns:
            Tuple of (enrollments, total count, class capacity).

        Raises:
            ClassNotFoundError: If class not found.
        """
        class_ = await self._get_class(class_id)

        query = (
            select(Enrollment)
            .where(Enrollment.class_id == class_.id)
            .options(selectinload(Enrollment.student))
            .order_by(Enrollment.enrolled_at.desc())
        )
        result = await self.db.execute(query)
        enrollments = result.scalars().all()

        items = [self._to_response(e, e.student, class_) for e in enrollments]
        return items, len(items), class_.capacity

    async def withdraw_student(
        self,
        class_id: UUID,
        student_id: UUID,
        withdrawn_by: str | None = None,
    ) -> None:
        """Remove a student from a class.

        Raises:
            NotEnrolledError: If student not enrolled.
        """
        enrollment = await self._get_enrollment(str(class_id), str(student_id))
        if not enrollment:
            raise NotEnrolledError("Student is not enrolled in this class")

        await self.db.delete(enrollment)
        await self.db.commit()

        logger.info(
            "Withdrew student: student=%s, class=%s, by=%s",
            student_id,
            class_id,
            withdrawn_by,
        )

    async def _enroll(
        self,
        class_: Class,
        student_id: UUID,
        enrolled_by: str,
    ) -> EnrollmentResponse:
        student = await self._get_student(student_id)

        existing = await self._get_enrollment(class_.id, student.id)
        if existing:
            raise AlreadyEnrolledError("Student is already enrolled in this class")

        count_query = select(func.count()).where(Enrollment.class_id == class_.id)
        count_result = await self.db.execute(count_query)
        enrolled = count_result.scalar() or 0

        if enrolled >= class_.capacity:
            raise ClassFullError(
                f"Class '{class_.name}' is full ({enrolled}/{class_.capacity})"
            )

        enrollment = Enrollment(class_id=class_.id, student_id=student.id)

        self.db.add(enrollment)
        await self.db.commit()
        await self.db.refresh(enrollment)

        logger.info(
            "Enrolled student: student=%s, class=%s, by=%s",
            student.id,
            class_.id,
            enrolled_by,
        )

        return self._to_response(enrollment, student, class_)

    async def _get_class(self, class_id: UUID, lock: bool = False) -> Class:
        """Get class by ID, optionally locking the row.

        Raises:
            ClassNotFoundError: If not found.
        """
        query = select(Class).where(Class.id == str(class_id))
        if lock:
            query = query.with_for_update()
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

    async def _get_enrollment(self, class_id: str, student_id: str) -> Enrollment | None:
        query = select(Enrollment).where(
            Enrollment.class_id == class_id,
            Enrollment.student_id == student_id,
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    def _to_response(
        self,
        enrollment: Enrollment,
        student: Student | None,
        class_: Class | None,
    ) -> EnrollmentResponse:
        return EnrollmentResponse(
            student_id=enrollment.student_id,
            class_id=enrollment.class_id,
            enrolled_at=enrollment.enrolled_at,
            student=(
                StudentSummary(id=student.id, name=student.name, roll_number=student.roll_number)
                if student
                else None
            ),
            class_=ClassSummary(id=class_.id, name=class_.name) if class_ else None,
        )
