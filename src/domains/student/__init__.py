# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student domain package.

This package provides student management functionality:
- Student CRUD operations
- Search and department filtering
"""

from src.domains.student.service import (
    DepartmentNotFoundError,
    StudentEmailExistsError,
    StudentNotFoundError,
    StudentService,
    StudentServiceError,
    student_to_response,
)

__all__ = [
    "StudentService",
    "StudentServiceError",
    "StudentNotFoundError",
    "StudentEmailExistsError",
    "DepartmentNotFoundError",
    "student_to_response",
]
