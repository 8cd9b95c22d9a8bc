# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Attendance service."""

from datetime import date, datetime, timezone
from unittest.mock import MagicMock
from uuid import UUID, uuid4

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from factories import make_student, rows_result, scalar_result, scalars_result
from src.domains.attendance.service import (
    AttendanceExistsError,
    AttendanceNotFoundError,
    AttendanceService,
    ClassNotFoundError,
    StudentNotFoundError,
    attendance_percentage,
)
from src.models.attendance import (
    AttendanceCreateRequest,
    AttendanceUpdateRequest,
    BulkAttendanceRequest,
)

DAY = date(2025, 1, 15)


@pytest.fixture
def attendance_service(mock_db):
    """Create attendance service with mock database."""
    return AttendanceService(db=mock_db)


def _record(school_class, student, status: str = "present") -> MagicMock:
    now = datetime.now(timezone.utc)
    record = MagicMock()
    record.id = str(uuid4())
    record.class_id = school_class.id
    record.class_ = school_class
    record.student_id = student.id
    record.student = student
    record.date = DAY
    record.status = status
    record.remarks = None
    record.created_at = now
    record.updated_at = now
    return record


class TestAttendancePercentage:
    """Tests for the present percentage."""

    @pytest.mark.parametrize(
        ("present", "total", "expected"),
        [
            (0, 0, 0),
            (1, 2, 50),
            (1, 3, 33),
            (2, 3, 67),
            (1, 8, 13),
            (3, 3, 100),
        ],
    )
    def test_rounding(self, present, total, expected) -> None:
        """Test that halves are rounded up and an empty total is zero."""
        assert attendance_percentage(present, total) == expected


class TestAttendanceCreate:
    """Tests for recording single marks."""

    @pytest.mark.asyncio
    async def test_create_attendance(
        self, attendance_service, stamp_on_refresh, school_class, student
    ):
        """Test recording a mark for an existing class and student."""
        mock_db = stamp_on_refresh
        mock_db.execute.side_effect = [
            scalar_result(school_class),
            scalar_result(student),
            scalar_result(None),
        ]

        result = await attendance_service.create_attendance(
            AttendanceCreateRequest(
                class_id=UUID(school_class.id),
                student_id=UUID(student.id),
                date=DAY,
                status="late",
                remarks="Bus delay",
            ),
            recorded_by=str(uuid4()),
        )

        assert result.status == "late"
        assert result.class_.name == "Class 8 Maths"
        assert result.student.roll_number == "R-17"
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_attendance_twice_same_day(
        self, attendance_service, mock_db, school_class, student
    ):
        """Test that a second mark for the same day is rejected."""
        mock_db.execute.side_effect = [
            scalar_result(school_class),
            scalar_result(student),
            scalar_result(str(uuid4())),
        ]

        with pytest.raises(AttendanceExistsError):
            await attendance_service.create_attendance(
                AttendanceCreateRequest(
                    class_id=UUID(school_class.id),
                    student_id=UUID(student.id),
                    date=DAY,
                    status="present",
                ),
                recorded_by=str(uuid4()),
            )

        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_attendance_race_maps_unique_violation(
        self, attendance_service, mock_db, school_class, student
    ):
        """Test that a concurrent insert surfaces as AttendanceExistsError."""
        mock_db.execute.side_effect = [
            scalar_result(school_class),
            scalar_result(student),
            scalar_result(None),
        ]
        mock_db.commit.side_effect = IntegrityError("INSERT", {}, Exception("duplicate"))

        with pytest.raises(AttendanceExistsError):
            await attendance_service.create_attendance(
                AttendanceCreateRequest(
                    class_id=UUID(school_class.id),
                    student_id=UUID(student.id),
                    date=DAY,
                    status="present",
                ),
                recorded_by=str(uuid4()),
            )

        mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_attendance_class_not_found(self, attendance_service, mock_db):
        """Test recording a mark for a missing class."""
        mock_db.execute.side_effect = [scalar_result(None)]

        with pytest.raises(ClassNotFoundError):
            await attendance_service.create_attendance(
                AttendanceCreateRequest(
                    class_id=uuid4(), student_id=uuid4(), date=DAY, status="present"
                ),
                recorded_by=str(uuid4()),
            )

    def test_invalid_status_is_rejected(self) -> None:
        """Test that only present, absent and late are accepted."""
        with pytest.raises(ValidationError):
            AttendanceCreateRequest(
                class_id=uuid4(), student_id=uuid4(), date=DAY, status="excused"
            )


class TestAttendanceBulk:
    """Tests for bulk recording."""

    @pytest.mark.asyncio
    async def test_bulk_create(
        self, attendance_service, stamp_on_refresh, school_class, department
    ):
        """Test that all records are written together."""
        mock_db = stamp_on_refresh
        first = make_student(department, name="Asha Rao")
        second = make_student(department, name="Ravi Kumar")
        mock_db.execute.side_effect = [
            scalars_result([school_class]),
            scalars_result([first, second]),
            scalar_result(None),
        ]

        result = await attendance_service.bulk_create_attendance(
            BulkAttendanceRequest(
                records=[
                    AttendanceCreateRequest(
                        class_id=UUID(school_class.id),
                        student_id=UUID(s.id),
                        date=DAY,
                        status=status,
                    )
                    for s, status in ((first, "present"), (second, "absent"))
                ]
            ),
            recorded_by=str(uuid4()),
        )

        assert [r.student.name for r in result] == ["Asha Rao", "Ravi Kumar"]
        assert [r.status for r in result] == ["present", "absent"]
        assert len(mock_db.add_all.call_args.args[0]) == 2
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_bulk_duplicate_in_request(self, attendance_service, mock_db):
        """Test that a repeated key inside the request rejects everything."""
        record = AttendanceCreateRequest(
            class_id=uuid4(), student_id=uuid4(), date=DAY, status="present"
        )

        with pytest.raises(AttendanceExistsError):
            await attendance_service.bulk_create_attendance(
                BulkAttendanceRequest(records=[record, record]),
                recorded_by=str(uuid4()),
            )

        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_bulk_missing_student(self, attendance_service, mock_db, school_class):
        """Test that one unknown student rejects the whole request."""
        missing = uuid4()
        mock_db.execute.side_effect = [
            scalars_result([school_class]),
            scalars_result([]),
        ]

        with pytest.raises(StudentNotFoundError, match=str(missing)):
            await attendance_service.bulk_create_attendance(
                BulkAttendanceRequest(
                    records=[
                        AttendanceCreateRequest(
                            class_id=UUID(school_class.id),
                            student_id=missing,
                            date=DAY,
                            status="present",
                        )
                    ]
                ),
                recorded_by=str(uuid4()),
            )

        mock_db.add_all.assert_not_called()

    @pytest.mark.asyncio
    async def test_bulk_existing_mark(self, attendance_service, mock_db, school_class, student):
        """Test that an already stored mark rejects the whole request."""
        mock_db.execute.side_effect = [
            scalars_result([school_class]),
            scalars_result([student]),
            scalar_result(str(uuid4())),
        ]

        with pytest.raises(AttendanceExistsError):
            await attendance_service.bulk_create_attendance(
                BulkAttendanceRequest(
                    records=[
                        AttendanceCreateRequest(
                            class_id=UUID(school_class.id),
                            student_id=UUID(student.id),
                            date=DAY,
                            status="present",
                        )
                    ]
                ),
                recorded_by=str(uuid4()),
            )

        mock_db.add_all.assert_not_called()


class TestAttendanceUpdateDelete:
    """Tests for updating and deleting marks."""

    def test_update_requires_a_field(self) -> None:
        """Test that an empty update is a validation error."""
        with pytest.raises(ValidationError):
            AttendanceUpdateRequest()

    @pytest.mark.asyncio
    async def test_update_clears_remarks(
        self, attendance_service, mock_db, school_class, student
    ):
        """Test that an explicit null clears the remarks."""
        record = _record(school_class, student)
        record.remarks = "Left early"
        mock_db.execute.side_effect = [
            scalar_result(record),
            scalar_result(record),
        ]

        result = await attendance_service.update_attendance(
            UUID(record.id), AttendanceUpdateRequest(remarks=None)
        )

        assert result.remarks is None
        assert result.status == "present"

    @pytest.mark.asyncio
    async def test_delete_not_found(self, attendance_service, mock_db):
        """Test deleting a missing record."""
        mock_db.execute.return_value = scalar_result(None)

        with pytest.raises(AttendanceNotFoundError):
            await attendance_service.delete_attendance(uuid4())


class TestAttendanceReports:
    """Tests for class and student reports."""

    @pytest.mark.asyncio
    async def test_class_report(self, attendance_service, mock_db, school_class, student):
        """Test the day report of a class."""
        record = _record(school_class, student, status="absent")
        mock_db.execute.side_effect = [
            scalar_result(school_class),
            scalars_result([record]),
        ]

        report = await attendance_service.class_report(UUID(school_class.id), DAY)

        assert report.date == DAY
        assert [r.status for r in report.items] == ["absent"]
        assert report.items[0].class_.name == "Class 8 Maths"

    @pytest.mark.asyncio
    async def test_student_report(self, attendance_service, mock_db, student):
        """Test overall and per-class counters of a student."""
        maths, science = str(uuid4()), str(uuid4())
        mock_db.execute.side_effect = [
            scalar_result(student),
            rows_result(
                [
                    (science, "Science", "present", 1),
                    (maths, "Maths", "present", 2),
                    (maths, "Maths", "absent", 1),
                    (science, "Science", "late", 1),
                ]
            ),
        ]

        report = await attendance_service.student_report(UUID(student.id))

        assert report.summary.total == 5
        assert report.summary.present == 3
        assert report.summary.percentage == 60
        assert [c.class_name for c in report.by_class] == ["Maths", "Science"]
        assert report.by_class[0].percentage == 67
        assert report.by_class[1].late == 1

    @pytest.mark.asyncio
    async def test_student_report_without_marks(self, attendance_service, mock_db, student):
        """Test that a student with no marks reports zeroes."""
        mock_db.execute.side_effect = [scalar_result(student), rows_result([])]

        report = await attendance_service.student_report(UUID(student.id))

        assert report.summary.total == 0
        assert report.summary.percentage == 0
        assert report.by_class == []
