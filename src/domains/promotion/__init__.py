# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Promotion domain package.

This package provides:
- The promotion predicate (strictly higher academic level)
- Listing and applying promotions for a student
"""

from src.domains.promotion.service import (
    DepartmentNotFoundError,
    InvalidTransitionError,
    PromotionConflictError,
    PromotionService,
    PromotionServiceError,
    StudentNotFoundError,
    can_promote,
)

__all__ = [
    "can_promote",
    "PromotionService",
    "PromotionServiceError",
    "StudentNotFoundError",
    "DepartmentNotFoundError",
    "InvalidTransitionError",
    "PromotionConflictError",
]
