# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Department service for managing grade departments.

This module provides the DepartmentService class for:
- Department CRUD operations
- Level derivation from department names on create and rename
- Cascading removal of a department's subjects, classes and enrollments
"""

from __future__ import annotations

import logging
import re
from uuid import UUID

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.domains.department.levels import extract_level, get_valid_department_levels
from src.infrastructure.database.models import (
    Class,
    Department,
    Enrollment,
    Subject,
    User,
)
from src.models.common import DepartmentSummary, UserSummary
from src.models.department import (
    DepartmentCreateRequest,
    DepartmentLevel,
    DepartmentLevelsResponse,
    DepartmentResponse,
    DepartmentUpdateRequest,
)

logger = logging.getLogger(__name__)

CODE_MAX_LENGTH = 50

_WHITESPACE = re.compile(r"\s+")


class DepartmentServiceError(Exception):
    """Base exception for department service errors."""

    pass


class DepartmentNotFoundError(DepartmentServiceError):
    """Raised when a department is not found."""

    pass


class DepartmentCodeExistsError(DepartmentServiceError):
    """Raised when the generated department code is already taken."""

    pass


class HeadTeacherNotFoundError(DepartmentServiceError):
    """Raised when the head teacher user does not exist."""

    pass


class NoLevelMatchError(DepartmentServiceError):
    """Raised when a department name carries no recognised level token."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Department name '{name}' does not contain a recognised level "
            "(e.g. 'Class 8', 'Class VIII', 'KG-1', 'Lower Nursery')"
        )
        self.name = name


def generate_department_code(name: str) -> str:
    """Derive the unique department code from its name.

    >>> generate_department_code("Class 8  Section A")
    'CLASS_8_SECTION_A'
    """
    return _WHITESPACE.sub("_", name.strip().upper())[:CODE_MAX_LENGTH]


def department_summary(department: Department) -> DepartmentSummary:
    """Build the embedded summary for a department."""
    return DepartmentSummary(
        id=department.id,
        name=department.name,
        code=department.code,
        level=department.level,
    )


def user_summary(user: User) -> UserSummary:
    """Build the embedded summary for a user."""
    return UserSummary(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        image=user.image,
    )


class DepartmentService:
    """Service for managing departments.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    @staticmethod
    def get_levels() -> DepartmentLevelsResponse:
        """Get the canonical department labels and their levels."""
        return DepartmentLevelsResponse(
            levels=[
                DepartmentLevel(name=name, level=level)
                for name, level in get_valid_department_levels().items()
            ]
        )

    async def list_departments(self) -> tuple[list[DepartmentResponse], int]:
        """List all departments ordered by level, then name.

        Returns:
            Tuple of (departments, total count).
        """
        query = (
            select(Department)
            .options(
                selectinload(Department.head_teacher),
                selectinload(Department.sections),
            )
            .order_by(Department.level.asc().nulls_last(), Department.name)
        )
        result = await self.db.execute(query)
        departments = result.scalars().all()

        items = [
            self._to_response(d, d.head_teacher, d.sections) for d in departments
        ]
        return items, len(items)

    async def get_department(self, department_id: UUID) -> DepartmentResponse:
        """Get department by ID.

        Raises:
            DepartmentNotFoundError: If department not found.
        """
        query = (
            select(Department)
            .where(Department.id == str(department_id))
            .options(
                selectinload(Department.head_teacher),
                selectinload(Department.sections),
            )
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        department = result.scalar_one_or_none()

        if not department:
            raise DepartmentNotFoundError(f"Department {department_id} not found")

        return self._to_response(department, department.head_teacher, department.sections)

    async def create_department(
        self,
        request: DepartmentCreateRequest,
        created_by: str,
    ) -> DepartmentResponse:
        """Create a new department.

        The level is extracted from the name; nothing is written when the
        name has no recognised level.

        Args:
            request: Department creation data.
            created_by: ID of the user creating the department.

        Returns:
            Created department.

        Raises:
            NoLevelMatchError: If the name has no level token.
            HeadTeacherNotFoundError: If the head teacher does not exist.
            DepartmentNotFoundError: If the parent department does not exist.
            DepartmentCodeExistsError: If the derived code is taken.
        """
        level = extract_level(request.name)
        if level is None:
            raise NoLevelMatchError(request.name)

        head_teacher = await self._get_user(request.head_teacher_id)

        if request.parent_department_id is not None:
            await self._get_by_id(request.parent_department_id)

        code = generate_department_code(request.name)
        if await self._get_by_code(code):
            raise DepartmentCodeExistsError(f"Department with code '{code}' already exists")

        department = Department(
            code=code,
            name=request.name.strip(),
            description=request.description,
            banner_url=request.banner_url,
            banner_cld_pub_id=request.banner_cld_pub_id,
            head_teacher_id=str(request.head_teacher_id),
            level=level,
            parent_department_id=(
                str(request.parent_department_id)
                if request.parent_department_id
                else None
            ),
        )

        self.db.add(department)
        await self.db.commit()
        await self.db.refresh(department)

        logger.info(
            "Created department: %s (%s) level=%d by %s",
            department.name,
            department.id,
            level,
            created_by,
        )

        return self._to_response(department, head_teacher, [])

    async def update_department(
        self,
        department_id: UUID,
        request: DepartmentUpdateRequest,
    ) -> DepartmentResponse:
        """Update a department.

        Renaming recomputes both code and level; a rename to a name with
        no level token is rejected and nothing is changed.

        Raises:
            DepartmentNotFoundError: If department (or new parent) not found.
            NoLevelMatchError: If the new name has no level token.
            HeadTeacherNotFoundError: If the new head teacher does not exist.
            DepartmentCodeExistsError: If the new code is taken.
            DepartmentServiceError: If the department would be its own parent.
        """
        department = await self._get_by_id(department_id)
        updates = request.model_dump(exclude_unset=True)

        if updates.get("name") is not None:
            name = updates["name"].strip()
            level = extract_level(name)
            if level is None:
                raise NoLevelMatchError(name)

            code = generate_department_code(name)
            existing = await self._get_by_code(code)
            if existing and existing.id != department.id:
                raise DepartmentCodeExistsError(
                    f"Department with code '{code}' already exists"
                )

            department.name = name
            department.code = code
            department.level = level

        if updates.get("head_teacher_id") is not None:
            await self._get_user(request.head_teacher_id)
            department.head_teacher_id = str(request.head_teacher_id)
        elif "head_teacher_id" in updates:
            department.head_teacher_id = None

        if "parent_department_id" in updates:
            parent_id = request.parent_department_id
            if parent_id is not None:
                if str(parent_id) == department.id:
                    raise DepartmentServiceError("A department cannot be its own parent")
                await self._get_by_id(parent_id)
            department.parent_department_id = str(parent_id) if parent_id else None

        for field in ("description", "banner_url", "banner_cld_pub_id"):
            if field in updates:
                setattr(department, field, updates[field])

        await self.db.commit()

        logger.info("Updated department: %s", department_id)

        return await self.get_department(department_id)

    async def delete_department(self, department_id: UUID) -> None:
        """Delete a department with its subjects, classes and enrollments.

        Enrollments of the affected classes go first, then the classes,
        then the subjects, then the department, all in one transaction.
        Students of the department are removed by the foreign key cascade.

        Raises:
            DepartmentNotFoundError: If department not found.
        """
        department = await self._get_by_id(department_id)
        dept_id = department.id

        subject_ids = select(Subject.id).where(Subject.department_id == dept_id)
        class_ids = select(Class.id).where(
            or_(Class.department_id == dept_id, Class.subject_id.in_(subject_ids))
        )

        await self.db.execute(delete(Enrollment).where(Enrollment.class_id.in_(class_ids)))
        await self.db.execute(
            delete(Class).where(
                or_(Class.department_id == dept_id, Class.subject_id.in_(subject_ids))
            )
        )
        await self.db.execute(delete(Subject).where(Subject.department_id == dept_id))
        await self.db.execute(delete(Department).where(Department.id == dept_id))
        await self.db.commit()

        logger.info("Deleted department: %s (%s)", department.name, dept_id)

    async def _get_by_id(self, department_id: UUID | str) -> Department:
        """Get department model by ID.

        Raises:
            DepartmentNotFoundError: If not found.
        """
        query = select(Department).where(Department.id == str(department_id))
        result = await self.db.execute(query)
        department = result.scalar_one_or_none()

        if not department:
            raise DepartmentNotFoundError(f"Department {department_id} not found")

        return department

    async def _get_by_code(self, code: str) -> Department | None:
        query = select(Department).where(Department.code == code)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _get_user(self, user_id: UUID) -> User:
        query = select(User).where(User.id == str(user_id))
        result = await self.db.execute(query)
        user = result.scalar_one_or_none()

        if not user:
            raise HeadTeacherNotFoundError(f"User {user_id} not found")

        return user

    def _to_response(
        self,
        department: Department,
        head_teacher: User | None,
        sections: list[Department],
    ) -> DepartmentResponse:
        return DepartmentResponse(
            id=department.id,
            code=department.code,
            name=department.name,
            description=department.description,
            banner_url=department.banner_url,
            banner_cld_pub_id=department.banner_cld_pub_id,
            level=department.level,
            head_teacher_id=department.head_teacher_id,
            head_teacher=user_summary(head_teacher) if head_teacher else None,
            parent_department_id=department.parent_department_id,
            sections=[department_summary(s) for s in sections],
            created_at=department.created_at,
            updated_at=department.updated_at,
        )
