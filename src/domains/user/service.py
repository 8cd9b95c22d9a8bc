# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User service for managing staff accounts.

This module provides the UserService class for:
- User CRUD operations
- Teacher allocation to departments and classes
- Filtering teachers by allocated department
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.domains.department.service import department_summary
from src.infrastructure.database.models import (
    Class,
    Department,
    TeacherClass,
    TeacherDepartment,
    User,
    generate_uuid,
)
from src.models.common import ClassSummary, page_offset
from src.models.user import UserCreateRequest, UserResponse, UserUpdateRequest

logger = logging.getLogger(__name__)


class UserServiceError(Exception):
    """Base exception for user service errors."""

    pass


class UserNotFoundError(UserServiceError):
    """Raised when user is not found."""

    pass


class UserAlreadyExistsError(UserServiceError):
    """Raised when a user with the email already exists."""

    pass


class AllocationNotFoundError(UserServiceError):
    """Raised when an allocated department or class does not exist."""

    pass


class UserService:
    """Service for managing users.

    Teachers are allocated to departments by department name and to
    classes by class id. Allocating a class makes the user its teacher.

    Attributes:
        _db: Async database session.

    Example:
        >>> service = UserService(db)
        >>> user = await service.create_user(create_request, created_by=admin_id)
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def create_user(
        self,
        request: UserCreateRequest,
        created_by: str | None = None,
    ) -> UserResponse:
        """Create a new user.

        Staff accounts are created without a password; the user sets one
        through sign-up with the same email.

        Args:
            request: User creation request.
            created_by: ID of user who is creating this user.

        Returns:
            Created user response.

        Raises:
            UserAlreadyExistsError: If email already exists.
            AllocationNotFoundError: If an allocated department or class
                does not exist.
        """
        existing = await self._get_by_email(request.email)
        if existing:
            raise UserAlreadyExistsError(f"User with email {request.email} already exists")

        departments: list[Department] = []
        classes: list[Class] = []
        if request.role == "teacher":
            departments = await self._get_departments_by_name(request.allocated_departments)
            classes = await self._get_classes(request.allocated_classes)

        user = User(
            id=generate_uuid(),
            **request.model_dump(exclude={"allocated_departments", "allocated_classes"}),
        )
        self._db.add(user)

        for department in departments:
            self._db.add(TeacherDepartment(teacher_id=user.id, department_id=department.id))

        if classes:
            class_ids = [c.id for c in classes]
            await self._db.execute(
                delete(TeacherClass).where(TeacherClass.class_id.in_(class_ids))
            )
            for class_ in classes:
                class_.teacher_id = user.id
                self._db.add(TeacherClass(teacher_id=user.id, class_id=class_.id))

        await self._db.commit()
        await self._db.refresh(user)

        logger.info(
            "User created: %s (role=%s, departments=%d, classes=%d) by %s",
            user.id,
            user.role,
            len(departments),
            len(classes),
            created_by,
        )

        return self._to_response(user, departments, classes)

    async def get_user(self, user_id: str | UUID) -> UserResponse:
        """Get a user by ID. Teachers include their allocations.

        Raises:
            UserNotFoundError: If user not found.
        """
        stmt = (
            select(User)
            .where(User.id == str(user_id))
            .options(selectinload(User.departments))
            .execution_options(populate_existing=True)
        )
        result = await self._db.execute(stmt)
        user = result.scalar_one_or_none()

        if not user:
            raise UserNotFoundError(f"User {user_id} not found")

        if not user.is_teacher:
            return self._to_response(user, [], [])

        classes_stmt = (
            select(Class)
            .join(TeacherClass, TeacherClass.class_id == Class.id)
            .where(TeacherClass.teacher_id == user.id)
            .order_by(Class.name)
        )
        classes_result = await self._db.execute(classes_stmt)

        return self._to_response(user, user.departments, classes_result.scalars().all())

    async def list_users(
        self,
        search: str | None = None,
        role: str | None = None,
        department_id: UUID | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[UserResponse], int]:
        """List users with optional filtering, newest first.

        Args:
            search: Search by name or email.
            role: Filter by role.
            department_id: Only teachers allocated to this department.
            page: 1-based page number.
            limit: Page size.

        Returns:
            Tuple of (users, total count).
        """
        stmt = select(User).options(selectinload(User.departments))

        if role:
            stmt = stmt.where(User.role == role)

        if department_id:
            stmt = stmt.join(TeacherDepartment, TeacherDepartment.teacher_id == User.id).where(
                TeacherDepartment.department_id == str(department_id)
            )

        if search:
            search_pattern = f"%{search}%"
            stmt = stmt.where(
                or_(
                    User.name.ilike(search_pattern),
                    User.email.ilike(search_pattern),
                )
            )

        count_stmt = select(func.count()).select_from(stmt.subquery())
        count_result = await self._db.execute(count_stmt)
        total = count_result.scalar() or 0

        stmt = stmt.order_by(User.created_at.desc())
        stmt = stmt.limit(limit).offset(page_offset(page, limit))

        result = await self._db.execute(stmt)
        users = result.scalars().all()

        items = [
            self._to_response(u, u.departments if u.is_teacher else [], [])
            for u in users
        ]
        return items, total

    async def update_user(
        self,
        user_id: str | UUID,
        request: UserUpdateRequest,
    ) -> UserResponse:
        """Update a user.

        Raises:
            UserNotFoundError: If user not found.
            UserAlreadyExistsError: If the new email belongs to another user.
        """
        user = await self._get_by_id(str(user_id))
        if not user:
            raise UserNotFoundError(f"User {user_id} not found")

        updates = request.model_dump(exclude_unset=True)

        new_email = updates.get("email")
        if new_email and new_email != user.email:
            existing = await self._get_by_email(new_email)
            if existing and existing.id != user.id:
                raise UserAlreadyExistsError(f"User with email {new_email} already exists")

        for field, value in updates.items():
            if value is not None or field not in ("name", "email"):
                setattr(user, field, value)

        await self._db.commit()

        logger.info("User updated: %s", user.id)

        return await self.get_user(user.id)

    async def delete_user(self, user_id: str | UUID) -> None:
        """Delete a user.

        Sessions and allocations are removed with the user; classes and
        departments they led keep existing without a teacher.

        Raises:
            UserNotFoundError: If user not found.
        """
        user = await self._get_by_id(str(user_id))
        if not user:
            raise UserNotFoundError(f"User {user_id} not found")

        await self._db.execute(
            update(Class).where(Class.teacher_id == user.id).values(teacher_id=None)
        )
        await self._db.execute(delete(User).where(User.id == user.id))
        await self._db.commit()

        logger.info("User deleted: %s", user.id)

    async def _get_by_id(self, user_id: str) -> User | None:
        stmt = select(User).where(User.id == user_id)
        result = await self._db.execute(stmt)
        return result.scalar_one_or_none()

    async def _get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email)
        result = await self._db.execute(stmt)
        return result.scalar_one_or_none()

    async def _get_departments_by_name(self, names: list[str]) -> list[Department]:
        """Resolve department names to departments.

        Raises:
            AllocationNotFoundError: If any name matches no department.
        """
        wanted = {name.strip() for name in names if name.strip()}
        if not wanted:
            return []

        stmt = select(Department).where(Department.name.in_(wanted))
        result = await self._db.execute(stmt)
        departments = list(result.scalars().all())

        missing = wanted - {d.name for d in departments}
        if missing:
            raise AllocationNotFoundError(
                f"Departments not found: {', '.join(sorted(missing))}"
            )

        return departments

    async def _get_classes(self, class_ids: list[UUID]) -> list[Class]:
        """Resolve class ids to classes.

        Raises:
            AllocationNotFoundError: If any id matches no class.
        """
        wanted = {str(class_id) for class_id in class_ids}
        if not wanted:
            return []

        stmt = select(Class).where(Class.id.in_(wanted))
        result = await self._db.execute(stmt)
        classes = list(result.scalars().all())

        missing = wanted - {c.id for c in classes}
        if missing:
            raise AllocationNotFoundError(f"Classes not found: {', '.join(sorted(missing))}")

        return classes

    def _to_response(
        self,
        user: User,
        departments: list[Department],
        classes: list[Class],
    ) -> UserResponse:
        """Convert User model to response."""
        return UserResponse(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            email_verified=bool(user.email_verified),
            image=user.image,
            image_cld_pub_id=user.image_cld_pub_id,
            address=user.address,
            age=user.age,
            gender=user.gender,
            joining_date=user.joining_date,
            bio=user.bio,
            phone_number=user.phone_number,
            departments=[department_summary(d) for d in departments],
            classes=[ClassSummary(id=c.id, name=c.name) for c in classes],
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
