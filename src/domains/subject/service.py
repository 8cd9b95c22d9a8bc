# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject service for managing department subjects.

This module provides the SubjectService class for:
- Subject CRUD operations
- Search by name or code and filtering by department
- Cascading removal of a subject's classes and their enrollments
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.domains.department.service import department_summary
from src.infrastructure.database.models import Class, Department, Enrollment, Subject
from src.models.common import page_offset
from src.models.subject import (
    SubjectCreateRequest,
    SubjectResponse,
    SubjectUpdateRequest,
)

logger = logging.getLogger(__name__)


class SubjectServiceError(Exception):
    """Base exception for subject service errors."""

    pass


class SubjectNotFoundError(SubjectServiceError):
    """Raised when a subject is not found."""

    pass


class SubjectCodeExistsError(SubjectServiceError):
    """Raised when the subject code is already taken."""

    pass


class DepartmentNotFoundError(SubjectServiceError):
    """Raised when the subject's department does not exist."""

    pass


class SubjectService:
    """Service for managing subjects.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def list_subjects(
        self,
        search: str | None = None,
        department_id: UUID | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[SubjectResponse], int]:
        """List subjects, newest first.

        Args:
            search: Case-insensitive substring of name or code.
            department_id: Filter by department.
            page: 1-based page number.
            limit: Page size.

        Returns:
            Tuple of (subjects, total count).
        """
        query = select(Subject).options(selectinload(Subject.department))

        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(Subject.name.ilike(pattern), Subject.code.ilike(pattern))
            )

        if department_id:
            query = query.where(Subject.department_id == str(department_id))

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        query = (
            query.order_by(Subject.created_at.desc())
            .limit(limit)
            .offset(page_offset(page, limit))
        )
        result = await self.db.execute(query)
        subjects = result.scalars().all()

        return [self._to_response(s, s.department) for s in subjects], total

    async def get_subject(self, subject_id: UUID) -> SubjectResponse:
        """Get subject by ID.

        Raises:
            SubjectNotFoundError: If subject not found.
        """
        query = (
            select(Subject)
            .where(Subject.id == str(subject_id))
            .options(selectinload(Subject.department))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        subject = result.scalar_one_or_none()

        if not subject:
            raise SubjectNotFoundError(f"Subject {subject_id} not found")

        return self._to_response(subject, subject.department)

    async def create_subject(
        self,
        request: SubjectCreateRequest,
        created_by: str,
    ) -> SubjectResponse:
        """Create a new subject.

        Raises:
            DepartmentNotFoundError: If the department does not exist.
            SubjectCodeExistsError: If the code is already taken.
        """
        if request.department_id is not None:
            department = await self._get_department(request.department_id)
        else:
            department = await self._get_department_by_name(request.department)

        if await self._get_by_code(request.code):
            raise SubjectCodeExistsError(f"Subject with code '{request.code}' already exists")

        subject = Subject(
            name=request.name,
            code=request.code,
            description=request.description,
            department_id=department.id,
        )

        self.db.add(subject)
        await self.db.commit()
        await self.db.refresh(subject)

        logger.info(
            "Created subject: %s (%s) in %s by %s",
            subject.code,
            subject.id,
            department.name,
            created_by,
        )

        return self._to_response(subject, department)

    async def update_subject(
        self,
        subject_id: UUID,
        request: SubjectUpdateRequest,
    ) -> SubjectResponse:
        """Update a subject.

        Raises:
            SubjectNotFoundError: If subject not found.
            SubjectCodeExistsError: If the new code is taken.
            DepartmentNotFoundError: If the new department does not exist.
        """
        subject = await self._get_by_id(subject_id)
        updates = request.model_dump(exclude_unset=True)

        new_code = updates.get("code")
        if new_code and new_code != subject.code:
            if await self._get_by_code(new_code):
                raise SubjectCodeExistsError(f"Subject with code '{new_code}' already exists")

        department_id = updates.pop("department_id", None)
        if department_id is not None:
            department = await self._get_department(department_id)
            subject.department_id = department.id

        for field, value in updates.items():
            if value is not None or field == "description":
                setattr(subject, field, value)

        await self.db.commit()

        logger.info("Updated subject: %s", subject_id)

        return await self.get_subject(subject_id)

    async def delete_subject(self, subject_id: UUID) -> None:
        """Delete a subject with its classes and their enrollments.

        Raises:
            SubjectNotFoundError: If subject not found.
        """
        subject = await self._get_by_id(subject_id)

        class_ids = select(Class.id).where(Class.subject_id == subject.id)
        await self.db.execute(delete(Enrollment).where(Enrollment.class_id.in_(class_ids)))
        await self.db.execute(delete(Class).where(Class.subject_id == subject.id))
        await self.db.execute(delete(Subject).where(Subject.id == subject.id))
        await self.db.commit()

        logger.info("Deleted subject: %s (%s)", subject.code, subject.id)

    async def _get_by_id(self, subject_id: UUID) -> Subject:
        """Get subject model by ID.

        Raises:
            SubjectNotFoundError: If not found.
        """
        query = select(Subject).where(Subject.id == str(subject_id))
        result = await self.db.execute(query)
        subject = result.scalar_one_or_none()

        if not subject:
            raise SubjectNotFoundError(f"Subject {subject_id} not found")

        return subject

    async def _get_by_code(self, code: str) -> Subject | None:
        query = select(Subject).where(Subject.code == code)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _get_department(self, department_id: UUID) -> Department:
        query = select(Department).where(Department.id == str(department_id))
        result = await self.db.execute(query)
        department = result.scalar_one_or_none()

        if not department:
            raise DepartmentNotFoundError(f"Department {department_id} not found")

        return department

    async def _get_department_by_name(self, name: str | None) -> Department:
        query = select(Department).where(Department.name.ilike(name or "")).limit(1)
        result = await self.db.execute(query)
        department = result.scalar_one_or_none()

        if not department:
            raise DepartmentNotFoundError(f"Department '{name}' not found")

        return department

    def _to_response(
        self,
        subject: Subject,
        department: Department | None,
    ) -> SubjectResponse:
        return SubjectResponse(
            id=subject.id,
            name=subject.name,
            code=subject.code,
            description=subject.description,
            department_id=subject.department_id,
            department=department_summary(department) if department else None,
            created_at=subject.created_at,
            updated_at=subject.updated_at,
        )
