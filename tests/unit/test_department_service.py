# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Department service."""

from unittest.mock import MagicMock
from uuid import UUID, uuid4

import pytest

from factories import make_department, scalar_result, scalars_result
from src.domains.department.service import (
    DepartmentCodeExistsError,
    DepartmentNotFoundError,
    DepartmentService,
    HeadTeacherNotFoundError,
    NoLevelMatchError,
    generate_department_code,
)
from src.models.department import DepartmentCreateRequest, DepartmentUpdateRequest


@pytest.fixture
def department_service(mock_db):
    """Create department service with mock database."""
    return DepartmentService(db=mock_db)


def _create_request(name: str, head_teacher_id: UUID) -> DepartmentCreateRequest:
    return DepartmentCreateRequest(
        name=name,
        description="Middle school",
        banner_url="https://cdn.example.com/banner.png",
        banner_cld_pub_id="banner-1",
        head_teacher_id=head_teacher_id,
    )


class TestGenerateDepartmentCode:
    """Tests for department code generation."""

    def test_upper_cases_and_joins_whitespace(self) -> None:
        assert generate_department_code("  Class 8   Section a ") == "CLASS_8_SECTION_A"

    def test_truncates_to_fifty_characters(self) -> None:
        assert len(generate_department_code("Class 8 " + "x" * 80)) == 50


class TestDepartmentServiceLevels:
    """Tests for the level table."""

    def test_get_levels_lists_canonical_labels(self) -> None:
        """Test that the level table is exposed in level order."""
        result = DepartmentService.get_levels()

        assert result.levels[0].name == "Lower Nursery"
        assert result.levels[0].level == 0
        assert result.levels[-1].name == "Class 12"
        assert result.levels[-1].level == 15
        assert len(result.levels) == 16


class TestDepartmentServiceCreate:
    """Tests for department creation."""

    @pytest.mark.asyncio
    async def test_create_department_derives_level_and_code(
        self, department_service, stamp_on_refresh, teacher
    ):
        """Test that the level and code come from the name."""
        mock_db = stamp_on_refresh
        mock_db.execute.side_effect = [
            scalar_result(teacher),
            scalar_result(None),
        ]

        result = await department_service.create_department(
            _create_request("Class 8 - Section A", UUID(teacher.id)),
            created_by=teacher.id,
        )

        assert result.level == 11
        assert result.code == "CLASS_8_-_SECTION_A"
        assert result.head_teacher.name == "Meera Iyer"
        mock_db.add.assert_called_once()
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_department_without_level_writes_nothing(
        self, department_service, mock_db
    ):
        """Test that a name with no level token is rejected up front."""
        with pytest.raises(NoLevelMatchError) as exc_info:
            await department_service.create_department(
                _create_request("Grade 5", uuid4()),
                created_by=str(uuid4()),
            )

        assert exc_info.value.name == "Grade 5"
        mock_db.execute.assert_not_awaited()
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_department_head_teacher_missing(self, department_service, mock_db):
        """Test creating a department with an unknown head teacher."""
        mock_db.execute.side_effect = [scalar_result(None)]

        with pytest.raises(HeadTeacherNotFoundError):
            await department_service.create_department(
                _create_request("KG-1", uuid4()),
                created_by=str(uuid4()),
            )

    @pytest.mark.asyncio
    async def test_create_department_code_exists(self, department_service, mock_db, teacher):
        """Test that a duplicate derived code is rejected."""
        mock_db.execute.side_effect = [
            scalar_result(teacher),
            scalar_result(make_department("KG-1", 2)),
        ]

        with pytest.raises(DepartmentCodeExistsError):
            await department_service.create_department(
                _create_request("KG-1", UUID(teacher.id)),
                created_by=teacher.id,
            )

        mock_db.add.assert_not_called()


class TestDepartmentServiceRead:
    """Tests for listing and fetching departments."""

    @pytest.mark.asyncio
    async def test_list_departments(self, department_service, mock_db):
        """Test listing departments."""
        departments = [make_department("KG-1", 2), make_department("Class 8", 11)]
        mock_db.execute.return_value = scalars_result(departments)

        items, total = await department_service.list_departments()

        assert total == 2
        assert [d.level for d in items] == [2, 11]

    @pytest.mark.asyncio
    async def test_get_department_not_found(self, department_service, mock_db):
        """Test getting a missing department."""
        mock_db.execute.return_value = scalar_result(None)

        with pytest.raises(DepartmentNotFoundError):
            await department_service.get_department(uuid4())


class TestDepartmentServiceUpdate:
    """Tests for department updates."""

    @pytest.mark.asyncio
    async def test_rename_recomputes_level_and_code(self, department_service, mock_db):
        """Test that renaming to Class IX moves the department to level 12."""
        department = make_department("Class 8", 11)
        mock_db.execute.side_effect = [
            scalar_result(department),
            scalar_result(None),
            scalar_result(department),
        ]

        result = await department_service.update_department(
            UUID(department.id),
            DepartmentUpdateRequest(name="Class IX"),
        )

        assert result.level == 12
        assert result.code == "CLASS_IX"
        assert result.name == "Class IX"
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_rename_without_level_is_rejected(self, department_service, mock_db):
        """Test that a rename to an unrecognised name changes nothing."""
        department = make_department("Class 8", 11)
        mock_db.execute.side_effect = [scalar_result(department)]

        with pytest.raises(NoLevelMatchError):
            await department_service.update_department(
                UUID(department.id),
                DepartmentUpdateRequest(name="Senior Wing"),
            )

        assert department.level == 11
        assert department.name == "Class 8"
        mock_db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_description_keeps_level(self, department_service, mock_db):
        """Test that a partial update leaves the level alone."""
        department = make_department("Class 8", 11)
        mock_db.execute.side_effect = [
            scalar_result(department),
            scalar_result(department),
        ]

        result = await department_service.update_department(
            UUID(department.id),
            DepartmentUpdateRequest(description="Renovated"),
        )

        assert result.level == 11
        assert result.description == "Renovated"


class TestDepartmentServiceDelete:
    """Tests for department deletion."""

    @pytest.mark.asyncio
    async def test_delete_cascades_in_one_transaction(self, department_service, mock_db):
        """Test that enrollments, classes, subjects and department are removed."""
        department = make_department("Class 8", 11)
        mock_db.execute.side_effect = [
            scalar_result(department),
            MagicMock(),
            MagicMock(),
            MagicMock(),
            MagicMock(),
        ]

        await department_service.delete_department(UUID(department.id))

        assert mock_db.execute.await_count == 5
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_department_not_found(self, department_service, mock_db):
        """Test deleting a missing department."""
        mock_db.execute.return_value = scalar_result(None)

        with pytest.raises(DepartmentNotFoundError):
            await department_service.delete_department(uuid4())

        mock_db.commit.assert_not_awaited()
