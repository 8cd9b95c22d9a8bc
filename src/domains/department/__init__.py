# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Department domain package.

This package provides:
- Academic level extraction from department names
- Department CRUD with derived codes and levels
"""

from src.domains.department.levels import (
    LEVEL_PATTERNS,
    MAX_LEVEL,
    MIN_LEVEL,
    ROMAN_DEPARTMENT_LEVELS,
    VALID_DEPARTMENT_LEVELS,
    extract_level,
    get_valid_department_levels,
)
from src.domains.department.service import (
    DepartmentCodeExistsError,
    DepartmentNotFoundError,
    DepartmentService,
    DepartmentServiceError,
    HeadTeacherNotFoundError,
    NoLevelMatchError,
    generate_department_code,
)

__all__ = [
    # Levels
    "LEVEL_PATTERNS",
    "MAX_LEVEL",
    "MIN_LEVEL",
    "ROMAN_DEPARTMENT_LEVELS",
    "VALID_DEPARTMENT_LEVELS",
    "extract_level",
    "get_valid_department_levels",
    # Service
    "DepartmentService",
    "DepartmentServiceError",
    "DepartmentNotFoundError",
    "DepartmentCodeExistsError",
    "HeadTeacherNotFoundError",
    "NoLevelMatchError",
    "generate_department_code",
]
