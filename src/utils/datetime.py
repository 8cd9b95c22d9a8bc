# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Date and time helpers.

Timestamps are stored as TIMESTAMPTZ and handled as aware UTC datetimes.
Attendance and admission dates are plain calendar dates.
"""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Normalise a datetime to aware UTC.

    Naive values read back from the database are taken to be UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD calendar date.

    Full ISO timestamps are accepted and truncated to their date part,
    so "2024-03-01T10:00:00Z" and "2024-03-01" name the same day.

    Raises:
        ValueError: If the value is not a valid ISO date.
    """
    return date.fromisoformat(value.strip()[:10])
