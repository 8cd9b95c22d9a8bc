# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

This package contains all v1 API endpoint definitions.
Each module provides a FastAPI router for a specific domain.

Modules:
    auth: Authentication endpoints (sign-up, sign-in, session, sign-out).
    departments: Department management and the level table.
    subjects: Subject management endpoints.
    classes: Class management and student enrollment endpoints.
    students: Student management and promotion endpoints.
    users: Staff account management endpoints.
    attendance: Attendance records and reports.
"""

from fastapi import APIRouter

from src.api.v1 import attendance, auth, classes, departments, students, subjects, users

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(departments.router, prefix="/departments", tags=["Departments"])
router.include_router(subjects.router, prefix="/subjects", tags=["Subjects"])
router.include_router(classes.router, prefix="/classes", tags=["Classes"])
router.include_router(students.router, prefix="/students", tags=["Students"])
router.include_router(users.router, prefix="/users", tags=["Users"])
router.include_router(attendance.router, prefix="/attendance", tags=["Attendance"])

__all__ = ["router"]
