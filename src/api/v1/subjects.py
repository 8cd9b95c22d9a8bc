# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject management API endpoints.

- POST / - Create a subject
- GET / - List subjects with search and department filter
- GET /{subject_id} - Get subject details
- PUT, PATCH /{subject_id} - Update subject
- DELETE /{subject_id} - Delete subject with its classes
"""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db, require_admin, require_auth
from src.api.middleware.auth import CurrentUser
from src.domains.subject.service import (
    DepartmentNotFoundError,
    SubjectCodeExistsError,
    SubjectNotFoundError,
    SubjectService,
    SubjectServiceError,
)
from src.models.common import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, count_pages
from src.models.subject import (
    SubjectCreateRequest,
    SubjectListResponse,
    SubjectResponse,
    SubjectUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession) -> SubjectService:
    return SubjectService(db=db)


def _to_http_error(error: SubjectServiceError) -> HTTPException:
    if isinstance(error, SubjectNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found")
    if isinstance(error, DepartmentNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, SubjectCodeExistsError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


@router.post(
    "",
    response_model=SubjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create subject",
    description="Create a subject in a department, given by id or by name.",
)
async def create_subject(
    data: SubjectCreateRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> SubjectResponse:
    logger.info("Creating subject: %s by %s", data.code, current_user.id)

    try:
        return await _get_service(db).create_subject(data, created_by=current_user.id)
    except SubjectServiceError as e:
        raise _to_http_error(e)


@router.get(
    "",
    response_model=SubjectListResponse,
    summary="List subjects",
)
async def list_subjects(
    search: Annotated[str | None, Query(description="Search by name or code")] = None,
    department: Annotated[UUID | None, Query(description="Filter by department id")] = None,
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    limit: Annotated[
        int, Query(ge=1, le=MAX_PAGE_SIZE, description="Page size")
    ] = DEFAULT_PAGE_SIZE,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> SubjectListResponse:
    items, total = await _get_service(db).list_subjects(
        search=search,
        department_id=department,
        page=page,
        limit=limit,
    )

    return SubjectListResponse(
        items=items,
        total=total,
        page=page,
        limit=limit,
        total_pages=count_pages(total, limit),
    )


@router.get(
    "/{subject_id}",
    response_model=SubjectResponse,
    summary="Get subject",
)
async def get_subject(
    subject_id: UUID,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> SubjectResponse:
    try:
        return await _get_service(db).get_subject(subject_id)
    except SubjectServiceError as e:
        raise _to_http_error(e)


@router.api_route(
    "/{subject_id}",
    methods=["PUT", "PATCH"],
    response_model=SubjectResponse,
    summary="Update subject",
)
async def update_subject(
    subject_id: UUID,
    data: SubjectUpdateRequest,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> SubjectResponse:
    logger.info("Updating subject: %s by %s", subject_id, current_user.id)

    try:
        return await _get_service(db).update_subject(subject_id, data)
    except SubjectServiceError as e:
        raise _to_http_error(e)


@router.delete(
    "/{subject_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete subject",
    description="Delete a subject together with its classes and their enrollments.",
)
async def delete_subject(
    subject_id: UUID,
    current_user: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    logger.info("Deleting subject: %s by %s", subject_id, current_user.id)

    try:
        await _get_service(db).delete_subject(subject_id)
    except SubjectServiceError as e:
        raise _to_http_error(e)
