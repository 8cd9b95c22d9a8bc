# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student service for managing enrolled pupils.

This module provides the StudentService class for:
- Student CRUD operations
- Search by name or email and filtering by department name
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager, selectinload

from src.domains.department.service import department_summary
from src.infrastructure.database.models import Department, Student
from src.models.common import page_offset
from src.models.student import (
    StudentCreateRequest,
    StudentResponse,
    StudentUpdateRequest,
)

logger = logging.getLogger(__name__)


class StudentServiceError(Exception):
    """Base exception for student service errors."""

    pass


class StudentNotFoundError(StudentServiceError):
    """Raised when a student is not found."""

    pass


class StudentEmailExistsError(StudentServiceError):
    """Raised when another student already uses the email."""

    pass


class DepartmentNotFoundError(StudentServiceError):
    """Raised when the student's department does not exist."""

    pass


def student_to_response(
    student: Student,
    department: Department | None,
) -> StudentResponse:
    """Build the API representation of a student."""
    return StudentResponse(
        id=student.id,
        name=student.name,
        email=student.email,
        age=student.age,
        gender=student.gender,
        fathers_name=student.fathers_name,
        mothers_name=student.mothers_name,
        address=student.address,
        phone_number=student.phone_number,
        whatsapp_number=student.whatsapp_number,
        admission_date=student.admission_date,
        department_id=department.id if department else student.department_id,
        department=department_summary(department) if department else None,
        roll_number=student.roll_number,
        image=student.image,
        image_cld_pub_id=student.image_cld_pub_id,
        created_at=student.created_at,
        updated_at=student.updated_at,
    )


class StudentService:
    """Service for managing students.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_students(
        self,
        search: str | None = None,
        department: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[StudentResponse], int]:
        """List students, newest first.

        Args:
            search: Case-insensitive substring of name or email.
            department: Exact department name.
            page: 1-based page number.
            limit: Page size.

        Returns:
            Tuple of (students, total count).
        """
        query = (
            select(Student)
            .join(Department, Student.department_id == Department.id)
            .options(contains_eager(Student.department))
        )

        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(Student.name.ilike(pattern), Student.email.ilike(pattern))
            )

        if department:
            query = query.where(Department.name == department)

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        query = (
            query.order_by(Student.created_at.desc())
            .limit(limit)
            .offset(page_offset(page, limit))
        )
        result = await self.db.execute(query)
        students = result.scalars().all()

        return [student_to_response(s, s.department) for s in students], total

    async def get_student(self, student_id: UUID) -> StudentResponse:
        """Get student by ID.

        Raises:
            StudentNotFoundError: If student not found.
        """
        query = (
            select(Student)
            .where(Student.id == str(student_id))
            .options(selectinload(Student.department))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        student = result.scalar_one_or_none()

        if not student:
            raise StudentNotFoundError(f"Student {student_id} not found")

        return student_to_response(student, student.department)

    async def create_student(
        self,
        request: StudentCreateRequest,
        created_by: str,
    ) -> StudentResponse:
        """Admit a new student.

        Raises:
            DepartmentNotFoundError: If the department does not exist.
            StudentEmailExistsError: If the email is already used.
        """
        department = await self._get_department(request.department_id)

        if await self._get_by_email(request.email):
            raise StudentEmailExistsError(f"Email '{request.email}' already exists")

        student = Student(
            **request.model_dump(exclude={"department_id"}),
            department_id=department.id,
        )

        self.db.add(student)
        await self.db.commit()
        await self.db.refresh(student)

        logger.info(
            "Created student: %s (%s) in %s by %s",
            student.name,
            student.id,
            department.name,
            created_by,
        )

        return student_to_response(student, department)

    async def update_student(
        self,
        student_id: UUID,
        request: StudentUpdateRequest,
    ) -> StudentResponse:
        """Update a student.

        Changing department here is an administrative correction and is
        not level-checked.

        Raises:
            StudentNotFoundError: If student not found.
            StudentEmailExistsError: If the new email belongs to another student.
            DepartmentNotFoundError: If the new department does not exist.
        """
        student = await self._get_by_id(student_id)
        updates = request.model_dump(exclude_unset=True)

        new_email = updates.get("email")
        if new_email and new_email != student.email:
            existing = await self._get_by_email(new_email)
            if existing and existing.id != student.id:
                raise StudentEmailExistsError(f"Email '{new_email}' already exists")

        department_id = updates.pop("department_id", None)
        if department_id is not None:
            department = await self._get_department(department_id)
            student.department_id = department.id

        for field, value in updates.items():
            setattr(student, field, value)

        await self.db.commit()

        logger.info("Updated student: %s", student_id)

        return await self.get_student(student_id)

    async def delete_student(self, student_id: UUID) -> None:
        """Delete a student. Enrollments and attendance cascade.

        Raises:
            StudentNotFoundError: If student not found.
        """
        student = await self._get_by_id(student_id)

        await self.db.delete(student)
        await self.db.commit()

        logger.info("Deleted student: %s", student_id)

    async def _get_by_id(self, student_id: UUID) -> Student:
        """Get student model by ID.

        Raises:
            StudentNotFoundError: If not found.
        """
        query = select(Student).where(Student.id == str(student_id))
        result = await self.db.execute(query)
        student = result.scalar_one_or_none()

        if not student:
            raise StudentNotFoundError(f"Student {student_id} not found")

        return student

    async def _get_by_email(self, email: str) -> Student | None:
        query = select(Student).where(Student.email == email)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _get_department(self, department_id: UUID) -> Department:
        query = select(Department).where(Department.id == str(department_id))
        result = await self.db.execute(query)
        department = result.scalar_one_or_none()

        if not department:
            raise DepartmentNotFoundError(f"Department {department_id} not found")

        return department
