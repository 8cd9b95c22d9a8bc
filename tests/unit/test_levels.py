# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for department level extraction."""

import pytest

from src.domains.department.levels import (
    MAX_LEVEL,
    MIN_LEVEL,
    ROMAN_DEPARTMENT_LEVELS,
    VALID_DEPARTMENT_LEVELS,
    extract_level,
    get_valid_department_levels,
)


class TestCanonicalLabels:
    """Tests for the canonical label table."""

    def test_table_covers_every_level_once(self) -> None:
        """Test that levels 0..15 each have exactly one canonical label."""
        assert sorted(VALID_DEPARTMENT_LEVELS.values()) == list(range(MIN_LEVEL, MAX_LEVEL + 1))

    @pytest.mark.parametrize("label,level", list(VALID_DEPARTMENT_LEVELS.items()))
    def test_canonical_label_extracts_its_level(self, label: str, level: int) -> None:
        """Test that each canonical label maps to its own level."""
        assert extract_level(label) == level

    @pytest.mark.parametrize("label,level", list(ROMAN_DEPARTMENT_LEVELS.items()))
    def test_roman_label_extracts_its_level(self, label: str, level: int) -> None:
        """Test that each Roman-numeral class label maps to its level."""
        assert extract_level(label) == level

    def test_get_valid_department_levels_returns_copy(self) -> None:
        """Test that callers cannot mutate the shared table."""
        levels = get_valid_department_levels()
        levels["Class 1"] = 99

        assert get_valid_department_levels()["Class 1"] == 4

    def test_get_valid_department_levels_ordered_by_level(self) -> None:
        """Test that labels come back in level order."""
        values = list(get_valid_department_levels().values())
        assert values == sorted(values)


class TestExtractLevel:
    """Tests for extract_level."""

    @pytest.mark.parametrize(
        "name",
        ["Class 8", "class 8", "CLASS 8", "  Class 8  ", "\tclass 8\n"],
    )
    def test_case_and_whitespace_insensitive(self, name: str) -> None:
        """Test that case and surrounding whitespace are ignored."""
        assert extract_level(name) == 11

    def test_section_suffix_is_tolerated(self) -> None:
        """Test that decorations around the level token are ignored."""
        assert extract_level("Class 8 - Section A") == 11

    @pytest.mark.parametrize(
        "name,level",
        [
            ("Class 1", 4),
            ("Class 10", 13),
            ("Class 11", 14),
            ("Class 12", 15),
            ("Class 12 Science", 15),
        ],
    )
    def test_multi_digit_classes_not_read_as_class_one(self, name: str, level: int) -> None:
        """Test that 'class 1' does not shadow 'class 10'..'class 12'."""
        assert extract_level(name) == level

    @pytest.mark.parametrize(
        "name,level",
        [
            ("Class I", 4),
            ("Class II", 5),
            ("Class III", 6),
            ("Class IV", 7),
            ("Class IX", 12),
            ("Class XI", 14),
            ("Class XII", 15),
        ],
    )
    def test_roman_numerals_prefer_longest_token(self, name: str, level: int) -> None:
        """Test that 'Class II' is not read as 'Class I'."""
        assert extract_level(name) == level

    @pytest.mark.parametrize(
        "name,level",
        [
            ("Std-10", 13),
            ("std 5", 8),
            ("Class-3", 6),
            ("class7", 10),
            ("KG 1", 2),
            ("kg2", 3),
            ("KG-1 Morning", 2),
            ("Lower Nursery", 0),
            ("Upper Nursery B", 1),
        ],
    )
    def test_alternative_spellings(self, name: str, level: int) -> None:
        """Test hyphenated, spaced and compact spellings."""
        assert extract_level(name) == level

    @pytest.mark.parametrize("name", ["Grade 5", "Nursery", "Science Wing", "", "   ", None])
    def test_unrecognised_names_return_none(self, name: str | None) -> None:
        """Test that names without a level token have no level."""
        assert extract_level(name) is None
