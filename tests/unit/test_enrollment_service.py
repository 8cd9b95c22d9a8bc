# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Enrollment service."""

from datetime import datetime, timezone
from unittest.mock import MagicMock
from uuid import UUID, uuid4

import pytest

from factories import make_class, make_student, scalar_result, scalars_result
from src.domains.enrollment.service import (
    AlreadyEnrolledError,
    ClassFullError,
    ClassNotFoundError,
    EnrollmentService,
    NotEnrolledError,
    StudentNotFoundError,
)
from src.infrastructure.database.models import Enrollment
from src.models.enrollment import EnrollStudentRequest, JoinClassRequest


@pytest.fixture
def enrollment_service(mock_db):
    """Create enrollment service with mock database."""
    return EnrollmentService(db=mock_db)


class TestEnrollStudent:
    """Tests for enrolling students."""

    @pytest.mark.asyncio
    async def test_enroll_student_success(
        self, enrollment_service, stamp_on_refresh, school_class, student
    ):
        """Test enrolling a student with room in the class."""
        mock_db = stamp_on_refresh
        mock_db.execute.side_effect = [
            scalar_result(school_class),
            scalar_result(student),
            scalar_result(None),
            scalar_result(3),
        ]

        result = await enrollment_service.enroll_student(
            UUID(school_class.id),
            EnrollStudentRequest(student_id=UUID(student.id)),
            enrolled_by=str(uuid4()),
        )

        assert str(result.student_id) == student.id
        assert str(result.class_id) == school_class.id
        assert result.student.name == "Asha Rao"
        assert result.class_.name == "Class 8 Maths"
        added = mock_db.add.call_args.args[0]
        assert isinstance(added, Enrollment)
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_enroll_student_already_enrolled(
        self, enrollment_service, mock_db, school_class, student
    ):
        """Test enrolling a student twice."""
        mock_db.execute.side_effect = [
            scalar_result(school_class),
            scalar_result(student),
            scalar_result(MagicMock()),
        ]

        with pytest.raises(AlreadyEnrolledError):
            await enrollment_service.enroll_student(
                UUID(school_class.id),
                EnrollStudentRequest(student_id=UUID(student.id)),
                enrolled_by=str(uuid4()),
            )

        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_enroll_student_class_full(
        self, enrollment_service, mock_db, department, subject, student
    ):
        """Test enrolling into a class at capacity."""
        full_class = make_class(department, subject, capacity=2)
        mock_db.execute.side_effect = [
            scalar_result(full_class),
            scalar_result(student),
            scalar_result(None),
            scalar_result(2),
        ]

        with pytest.raises(ClassFullError):
            await enrollment_service.enroll_student(
                UUID(full_class.id),
                EnrollStudentRequest(student_id=UUID(student.id)),
                enrolled_by=str(uuid4()),
            )

        mock_db.add.assert_not_called()
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_enroll_student_class_not_found(self, enrollment_service, mock_db):
        """Test enrolling into a missing class."""
        mock_db.execute.side_effect = [scalar_result(None)]

        with pytest.raises(ClassNotFoundError):
            await enrollment_service.enroll_student(
                uuid4(),
                EnrollStudentRequest(student_id=uuid4()),
                enrolled_by=str(uuid4()),
            )

    @pytest.mark.asyncio
    async def test_enroll_student_not_found(self, enrollment_service, mock_db, school_class):
        """Test enrolling a missing student."""
        mock_db.execute.side_effect = [
            scalar_result(school_class),
            scalar_result(None),
        ]

        with pytest.raises(StudentNotFoundError):
            await enrollment_service.enroll_student(
                UUID(school_class.id),
                EnrollStudentRequest(student_id=uuid4()),
                enrolled_by=str(uuid4()),
            )


class TestJoinByInviteCode:
    """Tests for enrollment through invite codes."""

    @pytest.mark.asyncio
    async def test_join_by_invite_code(
        self, enrollment_service, stamp_on_refresh, school_class, student
    ):
        """Test joining a class with its invite code."""
        mock_db = stamp_on_refresh
        mock_db.execute.side_effect = [
            scalar_result(school_class),
            scalar_result(student),
            scalar_result(None),
            scalar_result(0),
        ]

        result = await enrollment_service.enroll_by_invite_code(
            JoinClassRequest(student_id=UUID(student.id), invite_code=" ab12cd3 "),
            enrolled_by=str(uuid4()),
        )

        assert str(result.class_id) == school_class.id

    @pytest.mark.asyncio
    async def test_join_with_unknown_code(self, enrollment_service, mock_db):
        """Test joining with a code no class has."""
        mock_db.execute.side_effect = [scalar_result(None)]

        with pytest.raises(ClassNotFoundError, match="zzzzzzz"):
            await enrollment_service.enroll_by_invite_code(
                JoinClassRequest(student_id=uuid4(), invite_code="zzzzzzz"),
                enrolled_by=str(uuid4()),
            )


class TestListAndWithdraw:
    """Tests for listing and withdrawing enrollments."""

    @pytest.mark.asyncio
    async def test_list_enrollments(self, enrollment_service, mock_db, school_class, department):
        """Test listing the students of a class with its capacity."""
        enrollments = []
        for name in ("Asha Rao", "Ravi Kumar"):
            student = make_student(department, name=name)
            enrollment = MagicMock()
            enrollment.student_id = student.id
            enrollment.class_id = school_class.id
            enrollment.enrolled_at = datetime.now(timezone.utc)
            enrollment.student = student
            enrollments.append(enrollment)

        mock_db.execute.side_effect = [
            scalar_result(school_class),
            scalars_result(enrollments),
        ]

        items, total, capacity = await enrollment_service.list_enrollments(UUID(school_class.id))

        assert total == 2
        assert capacity == 50
        assert [e.student.name for e in items] == ["Asha Rao", "Ravi Kumar"]

    @pytest.mark.asyncio
    async def test_withdraw_student(self, enrollment_service, mock_db):
        """Test withdrawing an enrolled student."""
        enrollment = MagicMock()
        mock_db.execute.return_value = scalar_result(enrollment)

        await enrollment_service.withdraw_student(uuid4(), uuid4())

        mock_db.delete.assert_awaited_once_with(enrollment)
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_withdraw_student_not_enrolled(self, enrollment_service, mock_db):
        """Test withdrawing a student who is not enrolled."""
        mock_db.execute.return_value = scalar_result(None)

        with pytest.raises(NotEnrolledError):
            await enrollment_service.withdraw_student(uuid4(), uuid4())

        mock_db.delete.assert_not_awaited()
