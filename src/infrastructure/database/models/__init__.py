# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy ORM models.

Importing this package registers every table on Base.metadata.
"""

from src.infrastructure.database.models.base import Base, TimestampMixin, generate_uuid
from src.infrastructure.database.models.school import (
    ATTENDANCE_STATUSES,
    CLASS_STATUSES,
    Attendance,
    Class,
    Department,
    Enrollment,
    Student,
    Subject,
    TeacherClass,
    TeacherDepartment,
)
from src.infrastructure.database.models.user import USER_ROLES, User, UserSession

__all__ = [
    "Base",
    "TimestampMixin",
    "generate_uuid",
    "User",
    "UserSession",
    "USER_ROLES",
    "Department",
    "Subject",
    "Class",
    "CLASS_STATUSES",
    "Enrollment",
    "TeacherDepartment",
    "TeacherClass",
    "Student",
    "Attendance",
    "ATTENDANCE_STATUSES",
]
