# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student management API endpoints.

This module provides endpoints for student management:
- POST / - Admit a student
- GET / - List students with search and department filter
- GET /{student_id} - Get student details
- PUT, PATCH /{student_id} - Update student
- DELETE /{student_id} - Delete student

Promotion endpoints:
- GET /{student_id}/promotions - Departments the student may move into
- POST /{student_id}/promote - Promote the student to a higher level
"""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db, require_admin, require_auth
from src.api.middleware.auth import CurrentUser
from src.domains.promotion.service import (
    InvalidTransitionError,
    PromotionConflictError,
    PromotionService,
    PromotionServiceError,
)
from src.domains.student.service import (
    StudentEmailExistsError,
    StudentNotFoundError,
    StudentService,
    StudentServiceError,
)
from src.models.common import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, count_pages
from src.models.promotion import (
    AvailablePromotionsResponse,
    InvalidTransitionDetail,
    PromoteStudentRequest,
    PromotionResponse,
)
from src.models.student import (
    StudentCreateRequest,
    StudentListResponse,
    StudentResponse,
    StudentUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession) -> StudentService:
    return StudentService(db=db)


def _to_http_error(error: StudentServiceError) -> HTTPException:
    if isinstance(error, StudentNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    if isinstance(error, StudentEmailExistsError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    # Missing department
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))


def _promotion_error(error: PromotionServiceError) -> HTTPException:
    if isinstance(error, InvalidTransitionError):
        detail = InvalidTransitionDetail(
            message=str(error),
            current_level=error.current_level,
            target_level=error.target_level,
        )
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail.model_dump())
    if isinstance(error, PromotionConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))


@router.post(
    "",
    response_model=StudentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create student",
    description="Admit a student into an existing department.",
)
async def create_student(
    data: StudentCreateRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> StudentResponse:
    try:
        return await _get_service(db).create_student(data, created_by=current_user.id)
    except StudentServiceError as e:
        raise _to_http_error(e)


@router.get(
    "",
    response_model=StudentListResponse,
    summary="List students",
)
async def list_students(
    search: Annotated[str | None, Query(description="Search by name or email")] = None,
    department: Annotated[str | None, Query(description="Exact department name")] = None,
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    limit: Annotated[
        int, Query(ge=1, le=MAX_PAGE_SIZE, description="Page size")
    ] = DEFAULT_PAGE_SIZE,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> StudentListResponse:
    items, total = await _get_service(db).list_students(
        search=search,
        department=department,
        page=page,
        limit=limit,
    )

    return StudentListResponse(
        items=items,
        total=total,
        page=page,
        limit=limit,
        total_pages=count_pages(total, limit),
    )


@router.get(
    "/{student_id}",
    response_model=StudentResponse,
    summary="Get student",
)
async def get_student(
    student_id: UUID,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> StudentResponse:
    try:
        return await _get_service(db).get_student(student_id)
    except StudentServiceError as e:
        raise _to_http_error(e)


@router.api_route(
    "/{student_id}",
    methods=["PUT", "PATCH"],
    response_model=StudentResponse,
    summary="Update student",
    description=(
        "Partial update. A new department must exist but is not level-checked; "
        "use the promote endpoint to move a student up a grade."
    ),
)
async def update_student(
    student_id: UUID,
    data: StudentUpdateRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> StudentResponse:
    logger.info("Updating student: %s by %s", student_id, current_user.id)

    try:
        return await _get_service(db).update_student(student_id, data)
    except StudentServiceError as e:
        raise _to_http_error(e)


@router.delete(
    "/{student_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete student",
)
async def delete_student(
    student_id: UUID,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    logger.info("Deleting student: %s by %s", student_id, current_user.id)

    try:
        await _get_service(db).delete_student(student_id)
    except StudentServiceError as e:
        raise _to_http_error(e)


@router.get(
    "/{student_id}/promotions",
    response_model=AvailablePromotionsResponse,
    summary="List available promotions",
    description="Departments with a level above the student's current department.",
)
async def list_available_promotions(
    student_id: UUID,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> AvailablePromotionsResponse:
    try:
        return await PromotionService(db=db).list_available_promotions(student_id)
    except PromotionServiceError as e:
        raise _promotion_error(e)


@router.post(
    "/{student_id}/promote",
    response_model=PromotionResponse,
    summary="Promote student",
    description="""
    Move a student into a department of strictly higher level.

    Returns 400 with the current and target levels when the target is
    not higher, and 409 when the student changed department concurrently.
    """,
)
async def promote_student(
    student_id: UUID,
    data: PromoteStudentRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> PromotionResponse:
    logger.info(
        "Promoting student %s to department %s by %s",
        student_id,
        data.department_id,
        current_user.id,
    )

    try:
        return await PromotionService(db=db).promote_student(
            student_id,
            data.department_id,
            promoted_by=current_user.id,
        )
    except PromotionServiceError as e:
        raise _promotion_error(e)
