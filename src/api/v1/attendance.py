# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance API endpoints.

This module provides endpoints for attendance records:
- POST / - Record attendance for one student
- POST /bulk - Record attendance for many students at once
- GET / - List attendance with filtering
- GET /class/{class_id} - Class attendance for one day
- GET /student/{student_id} - Student attendance report
- GET /{attendance_id} - Get a record
- PUT, PATCH /{attendance_id} - Update status or remarks
- DELETE /{attendance_id} - Delete a record

Recording and editing attendance requires teacher or admin access.
"""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db, require_auth, require_teacher_or_admin
from src.api.middleware.auth import CurrentUser
from src.domains.attendance.service import (
    AttendanceExistsError,
    AttendanceNotFoundError,
    AttendanceService,
    AttendanceServiceError,
)
from src.models.attendance import (
    AttendanceCreateRequest,
    AttendanceListResponse,
    AttendanceResponse,
    AttendanceStatus,
    AttendanceUpdateRequest,
    BulkAttendanceRequest,
    BulkAttendanceResponse,
    ClassAttendanceReport,
    StudentAttendanceReport,
)
from src.models.common import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, count_pages
from src.utils.datetime import parse_date

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession) -> AttendanceService:
    return AttendanceService(db=db)


def _to_http_error(error: AttendanceServiceError) -> HTTPException:
    if isinstance(error, AttendanceNotFoundError):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Attendance record not found",
        )
    if isinstance(error, AttendanceExistsError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    # Missing class or student
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))


def _parse_day(value: str):
    try:
        return parse_date(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid date '{value}', expected YYYY-MM-DD",
        )


@router.post(
    "",
    response_model=AttendanceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record attendance",
)
async def create_attendance(
    data: AttendanceCreateRequest,
    current_user: CurrentUser = Depends(require_teacher_or_admin),
    db: AsyncSession = Depends(get_db),
) -> AttendanceResponse:
    try:
        return await _get_service(db).create_attendance(data, recorded_by=current_user.id)
    except AttendanceServiceError as e:
        raise _to_http_error(e)


@router.post(
    "/bulk",
    response_model=BulkAttendanceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record attendance in bulk",
    description="All records are validated first; one bad record rejects the request.",
)
async def bulk_create_attendance(
    data: BulkAttendanceRequest,
    current_user: CurrentUser = Depends(require_teacher_or_admin),
    db: AsyncSession = Depends(get_db),
) -> BulkAttendanceResponse:
    logger.info("Bulk attendance: %d records by %s", len(data.records), current_user.id)

    try:
        items = await _get_service(db).bulk_create_attendance(data, recorded_by=current_user.id)
    except AttendanceServiceError as e:
        raise _to_http_error(e)

    return BulkAttendanceResponse(items=items, count=len(items))


@router.get(
    "",
    response_model=AttendanceListResponse,
    summary="List attendance",
    description="List attendance records with filtering, most recent day first.",
)
async def list_attendance(
    class_id: Annotated[UUID | None, Query(description="Filter by class")] = None,
    student_id: Annotated[UUID | None, Query(description="Filter by student")] = None,
    date: Annotated[str | None, Query(description="Calendar day, YYYY-MM-DD")] = None,
    attendance_status: Annotated[
        AttendanceStatus | None, Query(alias="status", description="Filter by status")
    ] = None,
    department_id: Annotated[
        UUID | None, Query(description="Filter by the class department")
    ] = None,
    search: Annotated[str | None, Query(description="Search by student name")] = None,
    roll_number: Annotated[str | None, Query(description="Roll number substring")] = None,
    page: Annotated[int, Query(ge=1, description="Page number")] = 1,
    limit: Annotated[
        int, Query(ge=1, le=MAX_PAGE_SIZE, description="Page size")
    ] = DEFAULT_PAGE_SIZE,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> AttendanceListResponse:
    on_date = _parse_day(date) if date else None

    items, total = await _get_service(db).list_attendance(
        class_id=class_id,
        student_id=student_id,
        on_date=on_date,
        status=attendance_status,
        department_id=department_id,
        search=search,
        roll_number=roll_number,
        page=page,
        limit=limit,
    )

    return AttendanceListResponse(
        items=items,
        total=total,
        page=page,
        limit=limit,
        total_pages=count_pages(total, limit),
    )


@router.get(
    "/class/{class_id}",
    response_model=ClassAttendanceReport,
    summary="Class attendance for a day",
)
async def class_report(
    class_id: UUID,
    date: Annotated[str, Query(description="Calendar day, YYYY-MM-DD")],
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> ClassAttendanceReport:
    on_date = _parse_day(date)

    try:
        return await _get_service(db).class_report(class_id, on_date)
    except AttendanceServiceError as e:
        raise _to_http_error(e)


@router.get(
    "/student/{student_id}",
    response_model=StudentAttendanceReport,
    summary="Student attendance report",
    description="Overall counters and percentage plus a per-class breakdown.",
)
async def student_report(
    student_id: UUID,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> StudentAttendanceReport:
    try:
        return await _get_service(db).student_report(student_id)
    except AttendanceServiceError as e:
        raise _to_http_error(e)


@router.get(
    "/{attendance_id}",
    response_model=AttendanceResponse,
    summary="Get attendance record",
)
async def get_attendance(
    attendance_id: UUID,
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
) -> AttendanceResponse:
    try:
        return await _get_service(db).get_attendance(attendance_id)
    except AttendanceServiceError as e:
        raise _to_http_error(e)


@router.api_route(
    "/{attendance_id}",
    methods=["PUT", "PATCH"],
    response_model=AttendanceResponse,
    summary="Update attendance record",
)
async def update_attendance(
    attendance_id: UUID,
    data: AttendanceUpdateRequest,
    current_user: CurrentUser = Depends(require_teacher_or_admin),
    db: AsyncSession = Depends(get_db),
) -> AttendanceResponse:
    try:
        return await _get_service(db).update_attendance(attendance_id, data)
    except AttendanceServiceError as e:
        raise _to_http_error(e)


@router.delete(
    "/{attendance_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete attendance record",
)
async def delete_attendance(
    attendance_id: UUID,
    current_user: CurrentUser = Depends(require_teacher_or_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    logger.info("Deleting attendance: %s by %s", attendance_id, current_user.id)

    try:
        await _get_service(db).delete_attendance(attendance_id)
    except AttendanceServiceError as e:
        raise _to_http_error(e)
