# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User and session models.

Users are staff accounts (admins and teachers) plus any student logins.
Sessions back the bearer tokens handed out at sign-in.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, TimestampMixin, generate_uuid
from src.utils.datetime import ensure_utc, utc_now

if TYPE_CHECKING:
    from src.infrastructure.database.models.school import Department, TeacherClass


USER_ROLES = ("admin", "teacher", "student")


class User(Base, TimestampMixin):
    """Application user (admin, teacher or student account)."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), primary_key=True, default=generate_uuid
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="teacher")
    email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_cld_pub_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    gender: Mapped[str | None] = mapped_column(String(50), nullable=True)
    joining_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(20), nullable=True)

    sessions: Mapped[list[UserSession]] = relationship(
        "UserSession",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    departments: Mapped[list[Department]] = relationship(
        "Department",
        secondary="teacher_departments",
        viewonly=True,
    )
    class_assignments: Mapped[list[TeacherClass]] = relationship(
        "TeacherClass",
        back_populates="teacher",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_teacher(self) -> bool:
        """Check if the user is a teacher."""
        return self.role == "teacher"


class UserSession(Base, TimestampMixin):
    """Persisted sign-in session.

    The session id travels in the JWT claims; revoking or expiring the
    row invalidates every token issued for it.
    """

    __tablename__ = "user_sessions"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), primary_key=True, default=generate_uuid
    )
    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    refresh_token_hash: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped[User] = relationship("User", back_populates="sessions")

    @property
    def is_valid(self) -> bool:
        """Check if the session is neither revoked nor expired."""
        return self.revoked_at is None and ensure_utc(self.expires_at) > utc_now()

    def revoke(self) -> None:
        """Mark the session as revoked."""
        self.revoked_at = utc_now()
