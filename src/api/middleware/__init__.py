# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware components.

This package provides middleware for request processing:
- AuthMiddleware: JWT authentication and request log context.
- RateLimitMiddleware: Per-role rate limiting.

Exports:
    AuthMiddleware: JWT authentication middleware.
    CurrentUser: Authenticated caller.
    RateLimitMiddleware: Rate limiting middleware.
    build_limiter: slowapi limiter factory.
"""

from src.api.middleware.auth import AuthMiddleware, CurrentUser
from src.api.middleware.rate_limit import RateLimitMiddleware, build_limiter

__all__ = [
    "AuthMiddleware",
    "CurrentUser",
    "RateLimitMiddleware",
    "build_limiter",
]
