# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Department management API endpoints.

This module provides endpoints for department management:
- GET /levels - Canonical department names and levels
- POST / - Create a department (level derived from the name)
- GET / - List departments ordered by level
- GET /{department_id} - Get department details
- PUT, PATCH /{department_id} - Update department
- DELETE /{department_id} - Delete department with its subjects and classes

Writes require admin access.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db, require_admin, require_auth
from src.api.middleware.auth import CurrentUser
from src.domains.department.service import (
    DepartmentCodeExistsError,
    DepartmentNotFoundError,
    DepartmentService,
    DepartmentServiceError,
    HeadTeacherNotFoundError,
    NoLevelMatchError,
)
from src.models.department import (
    DepartmentCreateRequest,
    DepartmentLevelsResponse,
    DepartmentListResponse,
    DepartmentResponse,
    DepartmentUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession) -> DepartmentService:
    return DepartmentService(db=db)


def _to_http_error(error: DepartmentServiceError) -> HTTPException:
    """Map a department service error to an HTTP error."""
    if isinstance(error, (DepartmentNotFoundError, HeadTeacherNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, DepartmentCodeExistsError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, NoLevelMatchError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": str(error), "name": error.name},
        )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


@router.get(
    "/levels",
    response_model=DepartmentLevelsResponse,
    summary="List department levels",
    description="Canonical department names and the academic level each maps to.",
)
async def list_levels() -> DepartmentLevelsResponse:
    return DepartmentService.get_levels()


@router.post(
    "",
    response_model=DepartmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create department",
    description="Create a department. The name must contain a recognised level.",
)
async def create_department(
    data: DepartmentCreateRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> DepartmentResponse:
    """Create a new department.

    Raises:
        HTTPException: 400 if the name has no level, 404 if the head
            teacher or parent is missing, 409 if the code exists.
    """
    logger.info("Creating department: %s by %s", data.name, current_user.id)

    service = _get_service(db)

    try:
        return await service.create_department(data, created_by=current_user.id)
    except DepartmentServiceError as e:
        raise _to_http_error(e)


@router.get(
    "",
    response_model=DepartmentListResponse,
    summary="List departments",
    description="List all departments ordered by level, then name.",
)
async def list_departments(
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> DepartmentListResponse:
    service = _get_service(db)
    items, total = await service.list_departments()
    return DepartmentListResponse(items=items, total=total)


@router.get(
    "/{department_id}",
    response_model=DepartmentResponse,
    summary="Get department",
)
async def get_department(
    department_id: UUID,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> DepartmentResponse:
    service = _get_service(db)

    try:
        return await service.get_department(department_id)
    except DepartmentNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Department not found",
        )


@router.api_route(
    "/{department_id}",
    methods=["PUT", "PATCH"],
    response_model=DepartmentResponse,
    summary="Update department",
    description="Partial update. Renaming recomputes the code and level.",
)
async def update_department(
    department_id: UUID,
    data: DepartmentUpdateRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> DepartmentResponse:
    logger.info("Updating department: %s by %s", department_id, current_user.id)

    service = _get_service(db)

    try:
        return await service.update_department(department_id, data)
    except DepartmentServiceError as e:
        raise _to_http_error(e)


@router.delete(
    "/{department_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete department",
    description="Delete a department together with its subjects, classes and enrollments.",
)
async def delete_department(
    department_id: UUID,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    logger.info("Deleting department: %s by %s", department_id, current_user.id)

    service = _get_service(db)

    try:
        await service.delete_department(department_id)
    except DepartmentNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Department not found",
        )
