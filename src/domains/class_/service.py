# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class service for managing teaching groups.

This module provides the ClassService class for:
- Class CRUD operations
- Invite code generation
- Keeping the teacher_classes allocation in step with the class teacher
- Student count tracking
"""

from __future__ import annotations

import logging
import secrets
import string
from uuid import UUID

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager, selectinload

from src.domains.department.service import department_summary, user_summary
from src.infrastructure.database.models import (
    Class,
    Department,
    Enrollment,
    Subject,
    TeacherClass,
    User,
    generate_uuid,
)
from src.models.class_ import (
    ClassCreateRequest,
    ClassResponse,
    ClassUpdateRequest,
)
from src.models.common import SubjectSummary, page_offset

logger = logging.getLogger(__name__)

INVITE_CODE_LENGTH = 7
INVITE_CODE_ALPHABET = string.ascii_lowercase + string.digits
INVITE_CODE_ATTEMPTS = 5


class ClassServiceError(Exception):
    """Base exception for class service errors."""

    pass


class ClassNotFoundError(ClassServiceError):
    """Raised when class is not found."""

    pass


class SubjectNotFoundError(ClassServiceError):
    """Raised when the class subject is not found."""

    pass


class DepartmentNotFoundError(ClassServiceError):
    """Raised when the class department is not found."""

    pass


class TeacherNotFoundError(ClassServiceError):
    """Raised when the class teacher is not found."""

    pass


def generate_invite_code() -> str:
    """Generate a random lowercase alphanumeric invite code."""
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))


def escape_like(value: str) -> str:
    """Escape LIKE metacharacters so value matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ClassService:
    """Service for managing classes.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create_class(
        self,
        request: ClassCreateRequest,
        created_by: str,
    ) -> ClassResponse:
        """Create a new class.

        A teacher, when given, is also recorded in teacher_classes.

        Args:
            request: Class creation data.
            created_by: ID of user creating the class.

        Returns:
            Created class response.

        Raises:
            SubjectNotFoundError: If subject not found.
            DepartmentNotFoundError: If department not found.
            TeacherNotFoundError: If teacher not found.
        """
        subject = await self._get_subject(request.subject_id)
        department = await self._get_department(request.department_id)

        teacher = None
        if request.teacher_id is not None:
            teacher = await self._get_teacher(request.teacher_id)

        class_ = Class(
            id=generate_uuid(),
            name=request.name,
            department_id=department.id,
            subject_id=subject.id,
            teacher_id=teacher.id if teacher else None,
            invite_code=await self._unique_invite_code(),
            description=request.description,
            banner_url=request.banner_url,
            banner_cld_pub_id=request.banner_cld_pub_id,
            capacity=request.capacity,
            status=request.status,
            schedules=request.schedules,
        )
        self.db.add(class_)

        if teacher:
            self.db.add(TeacherClass(teacher_id=teacher.id, class_id=class_.id))

        await self.db.commit()
        await self.db.refresh(class_)

        logger.info("Created class: %s (%s) by %s", class_.name, class_.id, created_by)

        return self._to_response(class_, subject, department, teacher, 0)

    async def list_classes(
        self,
        search: str | None = None,
        department_id: UUID | None = None,
        subject: str | None = None,
        teacher_id: UUID | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[ClassResponse], int]:
        """List classes with filtering, newest first.

        Args:
            search: Search in name or invite code.
            department_id: Filter by department.
            subject: Substring of the subject name, matched literally.
            teacher_id: Filter by class teacher.
            page: 1-based page number.
            limit: Page size.

        Returns:
            Tuple of (list of classes, total count).
        """
        query = (
            select(Class)
            .join(Subject, Class.subject_id == Subject.id)
            .options(
                contains_eager(Class.subject),
                selectinload(Class.department),
                selectinload(Class.teacher),
            )
        )

        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(Class.name.ilike(pattern), Class.invite_code.ilike(pattern))
            )

        if department_id:
            query = query.where(Class.department_id == str(department_id))

        if subject:
            query = query.where(
                Subject.name.ilike(f"%{escape_like(subject)}%", escape="\\")
            )

        if teacher_id:
            query = query.where(Class.teacher_id == str(teacher_id))

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        query = (
            query.order_by(Class.created_at.desc())
            .limit(limit)
            .offset(page_offset(page, limit))
        )
        result = await self.db.execute(query)
        classes = result.scalars().all()

        counts = await self._get_student_counts([c.id for c in classes])

        items = [
            self._to_response(c, c.subject, c.department, c.teacher, counts.get(c.id, 0))
            for c in classes
        ]
        return items, total

    async def get_class(self, class_id: UUID) -> ClassResponse:
        """Get class by ID with subject, department and teacher.

        Raises:
            ClassNotFoundError: If class not found.
        """
        query = (
            select(Class)
            .where(Class.id == str(class_id))
            .options(
                selectinload(Class.subject),
                selectinload(Class.department),
                selectinload(Class.teacher),
            )
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        class_ = result.scalar_one_or_none()

        if not class_:
            raise ClassNotFoundError(f"Class {class_id} not found")

        counts = await self._get_student_counts([class_.id])

        return self._to_response(
            class_,
            class_.subject,
            class_.department,
            class_.teacher,
            counts.get(class_.id, 0),
        )

    async def update_class(
        self,
        class_id: UUID,
        request: ClassUpdateRequest,
    ) -> ClassResponse:
        """Update a class.

        When teacher_id is present in the request, the class's
        teacher_classes rows are replaced with the new teacher (or
        cleared when it is null).

        Raises:
            ClassNotFoundError: If class not found.
            SubjectNotFoundError: If the new subject is not found.
            DepartmentNotFoundError: If the new department is not found.
            TeacherNotFoundError: If the new teacher is not found.
        """
        class_ = await self._get_by_id(class_id)
        updates = request.model_dump(exclude_unset=True)

        subject_id = updates.pop("subject_id", None)
        if subject_id is not None:
            subject = await self._get_subject(subject_id)
            class_.subject_id = subject.id

        department_id = updates.pop("department_id", None)
        if department_id is not None:
            department = await self._get_department(department_id)
            class_.department_id = department.id

        if "teacher_id" in updates:
            teacher_id = updates.pop("teacher_id")
            teacher = await self._get_teacher(teacher_id) if teacher_id else None

            await self.db.execute(
                delete(TeacherClass).where(TeacherClass.class_id == class_.id)
            )
            class_.teacher_id = teacher.id if teacher else None
            if teacher:
                self.db.add(TeacherClass(teacher_id=teacher.id, class_id=class_.id))

        for field, value in updates.items():
            if value is not None or field in ("description", "banner_url", "banner_cld_pub_id"):
                setattr(class_, field, value)

        await self.db.commit()

        logger.info("Updated class: %s", class_id)

        return await self.get_class(class_id)

    async def delete_class(self, class_id: UUID) -> None:
        """Delete a class and its enrollments.

        Raises:
            ClassNotFoundError: If class not found.
        """
        class_ = await self._get_by_id(class_id)

        await self.db.execute(delete(Enrollment).where(Enrollment.class_id == class_.id))
        await self.db.execute(delete(Class).where(Class.id == class_.id))
        await self.db.commit()

        logger.info("Deleted class: %s (%s)", class_.name, class_.id)

    async def _get_by_id(self, class_id: UUID) -> Class:
        """Get class by ID.

        Raises:
            ClassNotFoundError: If not found.
        """
        query = select(Class).where(Class.id == str(class_id))
        result = await self.db.execute(query)
        class_ = result.scalar_one_or_none()

        if not class_:
            raise ClassNotFoundError(f"Class {class_id} not found")

        return class_

    async def _get_subject(self, subject_id: UUID) -> Subject:
        query = select(Subject).where(Subject.id == str(subject_id))
        result = await self.db.execute(query)
        subject = result.scalar_one_or_none()

        if not subject:
            raise SubjectNotFoundError(f"Subject {subject_id} not found")

        return subject

    async def _get_department(self, department_id: UUID) -> Department:
        query = select(Department).where(Department.id == str(department_id))
        result = await self.db.execute(query)
        department = result.scalar_one_or_none()

        if not department:
            raise DepartmentNotFoundError(f"Department {department_id} not found")

        return department

    async def _get_teacher(self, teacher_id: UUID) -> User:
        query = select(User).where(User.id == str(teacher_id))
        result = await self.db.execute(query)
        teacher = result.scalar_one_or_none()

        if not teacher:
            raise TeacherNotFoundError(f"Teacher {teacher_id} not found")

        return teacher

    async def _unique_invite_code(self) -> str:
        """Generate an invite code not used by any existing class.

        Raises:
            ClassServiceError: If no free code is found.
        """
        for _ in range(INVITE_CODE_ATTEMPTS):
            code = generate_invite_code()
            query = select(Class.id).where(Class.invite_code == code)
            result = await self.db.execute(query)
            if result.scalar_one_or_none() is None:
                return code

        raise ClassServiceError("Could not generate a unique invite code")

    async def _get_student_counts(self, class_ids: list[str]) -> dict[str, int]:
        """Count enrolled students per class."""
        if not class_ids:
            return {}

        query = (
            select(Enrollment.class_id, func.count())
            .where(Enrollment.class_id.in_(class_ids))
            .group_by(Enrollment.class_id)
        )
        result = await self.db.execute(query)
        return {class_id: count for class_id, count in result.all()}

    def _to_response(
        self,
        class_: Class,
        subject: Subject | None,
        department: Department | None,
        teacher: User | None,
        student_count: int,
    ) -> ClassResponse:
        """Convert class model to response DTO."""
        return ClassResponse(
            id=class_.id,
            name=class_.name,
            invite_code=class_.invite_code,
            description=class_.description,
            banner_url=class_.banner_url,
            banner_cld_pub_id=class_.banner_cld_pub_id,
            capacity=class_.capacity,
            status=class_.status,
            schedules=class_.schedules or [],
            department_id=class_.department_id,
            subject_id=class_.subject_id,
            teacher_id=class_.teacher_id,
            department=department_summary(department) if department else None,
            subject=(
                SubjectSummary(id=subject.id, name=subject.name, code=subject.code)
                if subject
                else None
            ),
            teacher=user_summary(teacher) if teacher else None,
            student_count=student_count,
            created_at=class_.created_at,
            updated_at=class_.updated_at,
        )
