# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject domain package.

This package provides subject management functionality:
- Subject CRUD operations
- Search and department filtering
"""

from src.domains.subject.service import (
    DepartmentNotFoundError,
    SubjectCodeExistsError,
    SubjectNotFoundError,
    SubjectService,
    SubjectServiceError,
)

__all__ = [
    "SubjectService",
    "SubjectServiceError",
    "SubjectNotFoundError",
    "SubjectCodeExistsError",
    "DepartmentNotFoundError",
]
