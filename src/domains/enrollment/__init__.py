# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment domain package.

This package provides class enrollment functionality:
- Enrolling students directly or with an invite code
- Capacity checks
- Withdrawal
"""

from src.domains.enrollment.service import (
    AlreadyEnrolledError,
    ClassFullError,
    ClassNotFoundError,
    EnrollmentService,
    EnrollmentServiceError,
    NotEnrolledError,
    StudentNotFoundError,
)

__all__ = [
    "EnrollmentService",
    "EnrollmentServiceError",
    "ClassNotFoundError",
    "StudentNotFoundError",
    "AlreadyEnrolledError",
    "ClassFullError",
    "NotEnrolledError",
]
