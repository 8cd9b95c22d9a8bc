# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class management API endpoints.

This module provides endpoints for class management:
- POST / - Create a new class
- GET / - List classes with filtering
- GET /{class_id} - Get class details
- PUT, PATCH /{class_id} - Update class
- DELETE /{class_id} - Delete class

Student enrollment endpoints:
- POST /join - Enroll a student with an invite code
- POST /{class_id}/students - Enroll a student
- GET /{class_id}/students - List enrolled students
- DELETE /{class_id}/students/{student_id} - Withdraw a student

Class writes require admin access; enrollment is open to teachers too.
"""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import (
    get_db,
    require_admin,
    require_auth,
    require_teacher_or_admin,
)
from src.api.middleware.auth import CurrentUser
from src.domains.class_.service import (
    ClassNotFoundError,
    ClassService,
    ClassServiceError,
    DepartmentNotFoundError,
    SubjectNotFoundError,
    TeacherNotFoundError,
)
from src.domains.enrollment.service import (
    AlreadyEnrolledError,
    ClassFullError,
    EnrollmentService,
    EnrollmentServiceError,
    NotEnrolledError,
)
from src.models.class_ import (
    ClassCreateRequest,
    ClassListResponse,
    ClassResponse,
    ClassUpdateRequest,
)
from src.models.common import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, count_pages
from src.models.enrollment import (
    EnrollmentListResponse,
    EnrollmentResponse,
    EnrollStudentRequest,
    JoinClassRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession) -> ClassService:
    return ClassService(db=db)


def _get_enrollment_service(db: AsyncSession) -> EnrollmentService:
    return EnrollmentService(db=db)


def _class_error(error: ClassServiceError) -> HTTPException:
    if isinstance(error, ClassNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Class not found")
    if isinstance(error, (SubjectNotFoundError, DepartmentNotFoundError, TeacherNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


def _enrollment_error(error: EnrollmentServiceError) -> HTTPException:
    if isinstance(error, (AlreadyEnrolledError, ClassFullError)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, NotEnrolledError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    # Class and student lookups
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))


@router.post(
    "",
    response_model=ClassResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create class",
    description="Create a new class with a generated invite code. Requires admin access.",
)
async def create_class(
    data: ClassCreateRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ClassResponse:
    """Create a new class.

    Raises:
        HTTPException: 404 if the subject, department or teacher is missing.
    """
    logger.info(
        "Creating class: %s for subject %s by %s",
        data.name,
        data.subject_id,
        current_user.id,
    )

    try:
        return await _get_service(db).create_class(data, created_by=current_user.id)
    except ClassServiceError as e:
        raise _class_error(e)


@router.get(
    "",
    response_model=ClassListResponse,
    summary="List classes",
    description="List classes with optional filtering, newest first.",
)
async def list_classes(
    search: Annotated[str | None, Query(description="Search by name or invite code")] = None,
    department: Annotated[UUID | None, Query(description="Filter by department id")] = None,
    subject: Annotated[str | None, Query(description="Filter by subject name")] = None,
    teacher: Annotated[UUID | None, Query(description="Filter by teacher id")] = None,
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    limit: Annotated[
        int, Query(ge=1, le=MAX_PAGE_SIZE, description="Page size")
    ] = DEFAULT_PAGE_SIZE,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> ClassListResponse:
    items, total = await _get_service(db).list_classes(
        search=search,
        department_id=department,
        subject=subject,
        teacher_id=teacher,
        page=page,
        limit=limit,
    )

    return ClassListResponse(
        items=items,
        total=total,
        page=page,
        limit=limit,
        total_pages=count_pages(total, limit),
    )


@router.post(
    "/join",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Join class by invite code",
)
async def join_class(
    data: JoinClassRequest,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> EnrollmentResponse:
    try:
        return await _get_enrollment_service(db).enroll_by_invite_code(
            data, enrolled_by=current_user.id
        )
    except EnrollmentServiceError as e:
        raise _enrollment_error(e)


@router.get(
    "/{class_id}",
    response_model=ClassResponse,
    summary="Get class",
)
async def get_class(
    class_id: UUID,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> ClassResponse:
    try:
        return await _get_service(db).get_class(class_id)
    except ClassServiceError as e:
        raise _class_error(e)


@router.api_route(
    "/{class_id}",
    methods=["PUT", "PATCH"],
    response_model=ClassResponse,
    summary="Update class",
    description="Partial update. Supplying teacher_id replaces the teacher allocation.",
)
async def update_class(
    class_id: UUID,
    data: ClassUpdateRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> ClassResponse:
    logger.info("Updating class: %s by %s", class_id, current_user.id)

    try:
        return await _get_service(db).update_class(class_id, data)
    except ClassServiceError as e:
        raise _class_error(e)


@router.delete(
    "/{class_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete class",
)
async def delete_class(
    class_id: UUID,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    logger.info("Deleting class: %s by %s", class_id, current_user.id)

    try:
        await _get_service(db).delete_class(class_id)
    except ClassServiceError as e:
        raise _class_error(e)


@router.post(
    "/{class_id}/students",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll student",
    description="Enroll a student. Fails with 409 when enrolled already or the class is full.",
)
async def enroll_student(
    class_id: UUID,
    data: EnrollStudentRequest,
    current_user: CurrentUser = Depends(require_teacher_or_admin),
    db: AsyncSession = Depends(get_db),
) -> EnrollmentResponse:
    try:
        return await _get_enrollment_service(db).enroll_student(
            class_id, data, enrolled_by=current_user.id
        )
    except EnrollmentServiceError as e:
        raise _enrollment_error(e)


@router.get(
    "/{class_id}/students",
    response_model=EnrollmentListResponse,
    summary="List enrolled students",
)
async def list_enrollments(
    class_id: UUID,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> EnrollmentListResponse:
    try:
        items, total, capacity = await _get_enrollment_service(db).list_enrollments(class_id)
    except EnrollmentServiceError as e:
        raise _enrollment_error(e)

    return EnrollmentListResponse(items=items, total=total, capacity=capacity)


@router.delete(
    "/{class_id}/students/{student_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Withdraw student",
)
async def withdraw_student(
    class_id: UUID,
    student_id: UUID,
    current_user: CurrentUser = Depends(require_teacher_or_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    try:
        await _get_enrollment_service(db).withdraw_student(
            class_id, student_id, withdrawn_by=current_user.id
        )
    except EnrollmentServiceError as e:
        raise _enrollment_error(e)
