# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance domain package.

This package provides attendance functionality:
- Recording marks individually or in bulk
- Class-day and student reports
"""

from src.domains.attendance.service import (
    AttendanceExistsError,
    AttendanceNotFoundError,
    AttendanceService,
    AttendanceServiceError,
    ClassNotFoundError,
    StudentNotFoundError,
    attendance_percentage,
)

__all__ = [
    "AttendanceService",
    "AttendanceServiceError",
    "AttendanceNotFoundError",
    "AttendanceExistsError",
    "ClassNotFoundError",
    "StudentNotFoundError",
    "attendance_percentage",
]
