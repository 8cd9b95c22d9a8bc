"""School management backend.

REST API for departments, subjects, classes, students, staff, attendance
and grade promotion.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
