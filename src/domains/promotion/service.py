# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Promotion service for moving students between departments.

A student may only be moved to a department whose academic level is
strictly greater than the level of the department they are in now.
Equal levels (including moving to the same department) and lower
levels are rejected.

The check and the write happen in one transaction. The student row is
locked while the levels are compared, and the write is conditional on
the student still being in the department that was checked, so two
concurrent promotions cannot both apply.

Example:
    >>> can_promote(11, 12)
    True
    >>> can_promote(11, 11)
    False
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.department.service import department_summary
from src.domains.student.service import student_to_response
from src.infrastructure.database.models import Department, Student
from src.models.promotion import AvailablePromotionsResponse, PromotionResponse
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class PromotionServiceError(Exception):
    """Base exception for promotion service errors."""

    pass


class StudentNotFoundError(PromotionServiceError):
    """Raised when the student is not found."""

    pass


class DepartmentNotFoundError(PromotionServiceError):
    """Raised when the current or target department is not found."""

    pass


class InvalidTransitionError(PromotionServiceError):
    """Raised when the target level is not strictly above the current one.

    Attributes:
        current_level: Level of the student's current department.
        target_level: Level of the requested department.
    """

    def __init__(self, current_level: int | None, target_level: int | None) -> None:
        super().__init__(
            "Students can only be promoted to a higher level department "
            f"(current level {current_level}, target level {target_level})"
        )
        self.current_level = current_level
        self.target_level = target_level


class PromotionConflictError(PromotionServiceError):
    """Raised when the student's department changed during the promotion."""

    pass


def can_promote(current_level: int | None, target_level: int | None) -> bool:
    """Check whether a move from current_level to target_level is a promotion.

    A department without a level never takes part in a promotion.
    """
    if current_level is None or target_level is None:
        return False
    return target_level > current_level


class PromotionService:
    """Service for validating and applying student promotions.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_available_promotions(
        self,
        student_id: UUID,
    ) -> AvailablePromotionsResponse:
        """List departments the student may be promoted into.

        The list is advisory; promote_student re-validates.

        Returns:
            Departments with a level strictly above the current one,
            ascending by level, then name.

        Raises:
            StudentNotFoundError: If the student is not found.
            DepartmentNotFoundError: If the current department is missing.
        """
        student = await self._get_student(student_id)
        current = await self._get_department(student.department_id)

        departments: list[Department] = []
        if current.level is not None:
            query = (
                select(Department)
                .where(Department.level > current.level)
                .order_by(Department.level, Department.name)
            )
            result = await self.db.execute(query)
            departments = list(result.scalars().all())

        return AvailablePromotionsResponse(
            student_id=student.id,
            current_department=department_summary(current),
            departments=[department_summary(d) for d in departments],
        )

    async def promote_student(
        self,
        student_id: UUID,
        target_department_id: UUID,
        promoted_by: str | None = None,
    ) -> PromotionResponse:
        """Move a student into a higher-level department.

        Args:
            student_id: Student to promote.
            target_department_id: Department to move the student into.
            promoted_by: ID of the user performing the promotion.

        Returns:
            The updated student with the previous and new levels.

        Raises:
            StudentNotFoundError: If the student is not found.
            DepartmentNotFoundError: If either department is not found.
            InvalidTransitionError: If the target level is not higher.
            PromotionConflictError: If the student moved concurrently.
        """
        try:
            student = await self._get_student(student_id, lock=True)
            current = await self._get_department(student.department_id)
            target = await self._get_department(target_department_id)

            if not can_promote(current.level, target.level):
                raise InvalidTransitionError(current.level, target.level)

            stmt = (
                update(Student)
                .where(
                    Student.id == student.id,
                    Student.department_id == current.id,
                )
                .values(department_id=target.id, updated_at=utc_now())
                .returning(Student.id)
            )
            result = await self.db.execute(stmt)
            if result.scalar_one_or_none() is None:
                raise PromotionConflictError(
                    f"Student {student_id} changed department during promotion"
                )
        except PromotionServiceError:
            await self.db.rollback()
            raise

        await self.db.commit()

        logger.info(
            "Promoted student %s from %s (level %s) to %s (level %s) by %s",
            student.id,
            current.name,
            current.level,
            target.name,
            target.level,
            promoted_by,
        )

        return PromotionResponse(
            student=student_to_response(student, target),
            previous_level=current.level,
            new_level=target.level,
        )

    async def _get_student(self, student_id: UUID | str, lock: bool = False) -> Student:
        """Get student by ID, optionally locking the row.

        Raises:
            StudentNotFoundError: If not found.
        """
        query = select(Student).where(Student.id == str(student_id))
        if lock:
            query = query.with_for_update()
        result = await self.db.execute(query)
        student = result.scalar_one_or_none()

        if not student:
            raise StudentNotFoundError(f"Student {student_id} not found")

        return student

    async def _get_department(self, department_id: UUID | str) -> Department:
        """Get department by ID.

        Raises:
            DepartmentNotFoundError: If not found.
        """
        query = select(Department).where(Department.id == str(department_id))
        result = await self.db.execute(query)
        department = result.scalar_one_or_none()

        if not department:
            raise DepartmentNotFoundError(f"Department {department_id} not found")

        return department
