# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User management API endpoints.

This module provides endpoints for staff account management:
- POST / - Create a user
- GET / - List users with filtering
- GET /{user_id} - Get user details
- PUT, PATCH /{user_id} - Update user
- DELETE /{user_id} - Delete user

All endpoints require admin access.
"""

import logging
from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db, require_admin
from src.api.middleware.auth import CurrentUser
from src.domains.user.service import (
    AllocationNotFoundError,
    UserAlreadyExistsError,
    UserNotFoundError,
    UserService,
    UserServiceError,
)
from src.models.common import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, count_pages
from src.models.user import (
    UserCreateRequest,
    UserListResponse,
    UserResponse,
    UserUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession) -> UserService:
    return UserService(db=db)


def _to_http_error(error: UserServiceError) -> HTTPException:
    if isinstance(error, UserNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if isinstance(error, AllocationNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, UserAlreadyExistsError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
    description="""
    Create a staff account without a password.

    Teachers may be allocated to departments (by name) and classes (by id).
    The user claims the account by signing up with the same email.
    """,
)
async def create_user(
    data: UserCreateRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    logger.info("Creating user: %s (%s) by %s", data.email, data.role, current_user.id)

    try:
        return await _get_service(db).create_user(data, created_by=current_user.id)
    except UserServiceError as e:
        raise _to_http_error(e)


@router.get(
    "",
    response_model=UserListResponse,
    summary="List users",
    description="List users with optional filtering, newest first.",
)
async def list_users(
    search: Annotated[str | None, Query(description="Search by name or email")] = None,
    role: Annotated[
        Literal["admin", "teacher", "student"] | None, Query(description="Filter by role")
    ] = None,
    department: Annotated[
        UUID | None, Query(description="Teachers allocated to this department")
    ] = None,
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    limit: Annotated[
        int, Query(ge=1, le=MAX_PAGE_SIZE, description="Page size")
    ] = DEFAULT_PAGE_SIZE,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserListResponse:
    items, total = await _get_service(db).list_users(
        search=search,
        role=role,
        department_id=department,
        page=page,
        limit=limit,
    )

    return UserListResponse(
        items=items,
        total=total,
        page=page,
        limit=limit,
        total_pages=count_pages(total, limit),
    )


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get user",
    description="Teachers include their allocated departments and classes.",
)
async def get_user(
    user_id: UUID,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    try:
        return await _get_service(db).get_user(user_id)
    except UserServiceError as e:
        raise _to_http_error(e)


@router.api_route(
    "/{user_id}",
    methods=["PUT", "PATCH"],
    response_model=UserResponse,
    summary="Update user",
)
async def update_user(
    user_id: UUID,
    data: UserUpdateRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    logger.info("Updating user: %s by %s", user_id, current_user.id)

    try:
        return await _get_service(db).update_user(user_id, data)
    except UserServiceError as e:
        raise _to_http_error(e)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete user",
    description="Delete a user. Classes they teach are left without a teacher.",
)
async def delete_user(
    user_id: UUID,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    logger.info("Deleting user: %s by %s", user_id, current_user.id)

    try:
        await _get_service(db).delete_user(user_id)
    except UserServiceError as e:
        raise _to_http_error(e)
