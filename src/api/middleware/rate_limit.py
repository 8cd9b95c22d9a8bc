# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Per-role rate limiting using slowapi.

Every API request is counted against a per-minute budget that depends
on the caller's role (admin, teacher, student, or guest when not
signed in). Authenticated callers are keyed by user id, guests by IP.
Auth and health endpoints are not limited.

The slowapi Limiter owns the counter storage (any `limits` storage URI,
RATE_LIMIT_STORAGE_URI); RateLimitMiddleware applies the role budget
to every request before it reaches a route. Storage calls are blocking
for network backends, so they run in the threadpool.
"""

import logging
import math
import time
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from limits import RateLimitItem, parse
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from src.core.config.settings import Settings

logger = logging.getLogger(__name__)

EXEMPT_PREFIXES = (
    "/api/v1/auth/",
    "/health",
    "/docs",
    "/redoc",
    "/openapi.json",
)


def get_client_identifier(request: Request) -> str:
    """Get a unique identifier for the client.

    Uses user ID if authenticated, otherwise the IP address.
    """
    user = getattr(request.state, "user", None)
    if user:
        return f"user:{user.id}"
    return f"ip:{get_remote_address(request)}"


def get_client_role(request: Request) -> str:
    """Role whose budget applies to the request."""
    user = getattr(request.state, "user", None)
    return (user.role if user and user.role else None) or "guest"


def build_limiter(settings: Settings) -> Limiter:
    """Create the application limiter.

    Limiting is switched off in the test environment.
    """
    return Limiter(
        key_func=get_client_identifier,
        storage_uri=settings.rate_limit.storage_uri,
        enabled=settings.rate_limit.enabled and not settings.is_test,
    )


def rate_limit_exceeded_response(limit: str, retry_after: int) -> Response:
    """429 Too Many Requests response with retry information."""
    return JSONResponse(
        status_code=429,
        content={
            "detail": "Too many requests. Please try again later.",
            "limit": limit,
        },
        headers={
            "Retry-After": str(retry_after),
            "X-RateLimit-Limit": limit,
        },
    )


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Apply the caller's role budget to each request.

    Must run after AuthMiddleware so the role is known.
    """

    def __init__(self, app, limiter: Limiter, settings: Settings) -> None:
        super().__init__(app)
        self._limiter = limiter
        self._settings = settings

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Response],
    ) -> Response:
        if not self._limiter.enabled or request.url.path.startswith(EXEMPT_PREFIXES):
            return await call_next(request)

        role = get_client_role(request)
        limit = self._settings.rate_limit.limit_for_role(role)
        item = parse(limit)
        key = get_client_identifier(request)

        retry_after = await run_in_threadpool(self._consume, item, role, key)
        if retry_after is not None:
            logger.warning("Rate limit exceeded: %s for %s (%s)", limit, key, role)
            return rate_limit_exceeded_response(limit, retry_after)

        return await call_next(request)

    def _consume(self, item: RateLimitItem, role: str, key: str) -> int | None:
        """Count one request; seconds until the window resets once over budget."""
        if self._limiter.limiter.hit(item, role, key):
            return None
        reset_time = self._limiter.limiter.get_window_stats(item, role, key)[0]
        return max(1, math.ceil(reset_time - time.time()))
