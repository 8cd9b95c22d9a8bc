# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic level extraction from department names.

Department names are free text ("Class 8 - Section A", "KG-1 Morning",
"Std-10"). Each department is placed on a fixed ordinal scale so that
students can only ever be promoted forward:

    Lower Nursery = 0
    Upper Nursery = 1
    KG-1          = 2
    KG-2          = 3
    Class 1 / I   = 4
    ...
    Class 12 / XII = 15

Matching is substring containment on the trimmed, lower-cased name, so
section suffixes and decorations around the level token are tolerated.

Example:
    >>> extract_level("Class 8 - Section A")
    11
    >>> extract_level("Grade 5") is None
    True
"""

from types import MappingProxyType
from typing import Mapping

MIN_LEVEL = 0
MAX_LEVEL = 15

# Class N sits at level CLASS_LEVEL_OFFSET + N.
CLASS_LEVEL_OFFSET = 3

_ROMAN_NUMERALS = (
    "i", "ii", "iii", "iv", "v", "vi",
    "vii", "viii", "ix", "x", "xi", "xii",
)

_CLASS_FORMS = (
    "class {}",
    "class-{}",
    "class{}",
    "std {}",
    "std-{}",
    "std{}",
)


def _class_patterns(token: str) -> tuple[str, ...]:
    """Expand a class number token into every accepted spelling."""
    return tuple(form.format(token) for form in _CLASS_FORMS)


def _build_level_patterns() -> tuple[tuple[int, tuple[str, ...]], ...]:
    """Build the ordered (level, patterns) table.

    The first entry whose pattern occurs in the name wins, so order is
    significant wherever one pattern is a substring of another.
    """
    table: list[tuple[int, tuple[str, ...]]] = [
        (0, ("lower nursery",)),
        (1, ("upper nursery",)),
        (2, ("kg-1", "kg 1", "kg1")),
        (3, ("kg-2", "kg 2", "kg2")),
    ]

    # Arabic numerals, 12 down to 1: "class 1" is a substring of
    # "class 10", "class 11" and "class 12".
    for number in range(12, 0, -1):
        table.append((CLASS_LEVEL_OFFSET + number, _class_patterns(str(number))))

    # Roman numerals, XII down to I. Every numeral that contains a shorter
    # one as a prefix ("ii" / "i", "vi" / "v", "xi" / "x") has the larger
    # value, so descending order always tries the longer token first.
    # Ascending order would read "Class II" as "Class I".
    for number in range(12, 0, -1):
        numeral = _ROMAN_NUMERALS[number - 1]
        table.append((CLASS_LEVEL_OFFSET + number, _class_patterns(numeral)))

    return tuple(table)


LEVEL_PATTERNS: tuple[tuple[int, tuple[str, ...]], ...] = _build_level_patterns()

VALID_DEPARTMENT_LEVELS: Mapping[str, int] = MappingProxyType({
    "Lower Nursery": 0,
    "Upper Nursery": 1,
    "KG-1": 2,
    "KG-2": 3,
    **{f"Class {n}": CLASS_LEVEL_OFFSET + n for n in range(1, 13)},
})

ROMAN_DEPARTMENT_LEVELS: Mapping[str, int] = MappingProxyType({
    f"Class {numeral.upper()}": CLASS_LEVEL_OFFSET + index
    for index, numeral in enumerate(_ROMAN_NUMERALS, start=1)
})


def extract_level(name: str | None) -> int | None:
    """Extract the academic level from a department name.

    Args:
        name: Department display name.

    Returns:
        Level in the range 0..15, or None when no recognised level
        token occurs in the name.
    """
    if not name:
        return None

    normalized = name.strip().lower()
    if not normalized:
        return None

    for level, patterns in LEVEL_PATTERNS:
        if any(pattern in normalized for pattern in patterns):
            return level

    return None


def get_valid_department_levels() -> dict[str, int]:
    """Get the canonical department labels and their levels.

    Returns:
        A fresh dict of label to level, ordered by level.
    """
    return dict(VALID_DEPARTMENT_LEVELS)
