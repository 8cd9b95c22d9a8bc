# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class domain package.

This package provides class management functionality including:
- Class CRUD operations
- Invite codes
- Teacher allocation and student count tracking
"""

from src.domains.class_.service import (
    ClassNotFoundError,
    ClassService,
    ClassServiceError,
    DepartmentNotFoundError,
    SubjectNotFoundError,
    TeacherNotFoundError,
    escape_like,
    generate_invite_code,
)

__all__ = [
    "ClassService",
    "ClassServiceError",
    "ClassNotFoundError",
    "SubjectNotFoundError",
    "DepartmentNotFoundError",
    "TeacherNotFoundError",
    "escape_like",
    "generate_invite_code",
]
