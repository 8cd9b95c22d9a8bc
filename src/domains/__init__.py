# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer.

This package contains domain services that encapsulate business logic.
Each service works on an AsyncSession and raises its own exception
hierarchy; the API layer maps those errors to HTTP responses.

Domains:
    auth: Password hashing, session-bound JWTs and sign-in.
    department: Level extraction and department management.
    promotion: Forward-only grade promotion.
    subject: Subject management.
    class_: Classes, invite codes and teacher allocation.
    enrollment: Student enrollment into classes.
    student: Student records.
    user: Staff accounts and teacher allocations.
    attendance: Attendance marks and reports.
"""
