# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2025-01-15
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=False),
        server_default=sa.text("gen_random_uuid()"),
        primary_key=True,
    )


def _timestamp_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def upgrade() -> None:
    """Create all tables."""
    # =========================================================================
    # USERS AND SESSIONS
    # =========================================================================

    op.create_table(
        "users",
        _id_column(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="teacher"),
        sa.Column("email_verified", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("image", sa.Text, nullable=True),
        sa.Column("image_cld_pub_id", sa.Text, nullable=True),
        sa.Column("address", sa.Text, nullable=True),
        sa.Column("age", sa.Integer, nullable=True),
        sa.Column("gender", sa.String(50), nullable=True),
        sa.Column("joining_date", sa.Date, nullable=True),
        sa.Column("bio", sa.Text, nullable=True),
        sa.Column("phone_number", sa.String(20), nullable=True),
        *_timestamp_columns(),
        sa.CheckConstraint(
            "role IN ('admin', 'teacher', 'student')", name="ck_users_role"
        ),
    )
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "user_sessions",
        _id_column(),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("refresh_token_hash", sa.String(64), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.Text, nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamp_columns(),
    )
    op.create_index("ix_user_sessions_user_id", "user_sessions", ["user_id"])
    op.create_index(
        "ix_user_sessions_refresh_token_hash", "user_sessions", ["refresh_token_hash"]
    )

    # =========================================================================
    # SCHOOL STRUCTURE
    # =========================================================================

    op.create_table(
        "departments",
        _id_column(),
        sa.Column("code", sa.String(50), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column("banner_url", sa.Text, nullable=True),
        sa.Column("banner_cld_pub_id", sa.Text, nullable=True),
        sa.Column(
            "head_teacher_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("level", sa.Integer, nullable=True),
        sa.Column(
            "parent_department_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("departments.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamp_columns(),
        sa.CheckConstraint(
            "level IS NULL OR (level >= 0 AND level <= 15)",
            name="ck_departments_level_range",
        ),
    )
    op.create_index("ix_departments_level", "departments", ["level"])

    op.create_table(
        "subjects",
        _id_column(),
        sa.Column(
            "department_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("departments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("code", sa.String(50), nullable=False, unique=True),
        sa.Column("description", sa.String(255), nullable=True),
        *_timestamp_columns(),
    )
    op.create_index("ix_subjects_department_id", "subjects", ["department_id"])

    op.create_table(
        "classes",
        _id_column(),
        sa.Column(
            "department_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("departments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "subject_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("subjects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "teacher_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("invite_code", sa.String(20), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("banner_url", sa.Text, nullable=True),
        sa.Column("banner_cld_pub_id", sa.Text, nullable=True),
        sa.Column("capacity", sa.Integer, nullable=False, server_default="50"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column(
            "schedules",
            postgresql.JSONB,
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        *_timestamp_columns(),
        sa.CheckConstraint(
            "status IN ('active', 'inactive', 'archived')", name="ck_classes_status"
        ),
    )
    op.create_index("ix_classes_department_id", "classes", ["department_id"])
    op.create_index("ix_classes_subject_id", "classes", ["subject_id"])
    op.create_index("ix_classes_teacher_id", "classes", ["teacher_id"])

    op.create_table(
        "students",
        _id_column(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True, unique=True),
        sa.Column("age", sa.Integer, nullable=False),
        sa.Column("gender", sa.String(50), nullable=False),
        sa.Column("fathers_name", sa.String(255), nullable=True),
        sa.Column("mothers_name", sa.String(255), nullable=True),
        sa.Column("address", sa.Text, nullable=True),
        sa.Column("phone_number", sa.String(20), nullable=True),
        sa.Column("whatsapp_number", sa.String(20), nullable=True),
        sa.Column("admission_date", sa.Date, nullable=False),
        sa.Column(
            "department_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("departments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("roll_number", sa.String(50), nullable=True),
        sa.Column("image", sa.Text, nullable=True),
        sa.Column("image_cld_pub_id", sa.Text, nullable=True),
        *_timestamp_columns(),
    )
    op.create_index("ix_students_email", "students", ["email"])
    op.create_index("ix_students_department_id", "students", ["department_id"])

    op.create_table(
        "enrollments",
        sa.Column(
            "student_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("students.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "class_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("classes.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "enrolled_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )
    op.create_index("ix_enrollments_student_id", "enrollments", ["student_id"])
    op.create_index("ix_enrollments_class_id", "enrollments", ["class_id"])

    # =========================================================================
    # TEACHER ALLOCATION
    # =========================================================================

    op.create_table(
        "teacher_departments",
        sa.Column(
            "teacher_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "department_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("departments.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )
    op.create_index(
        "ix_teacher_departments_teacher_id", "teacher_departments", ["teacher_id"]
    )
    op.create_index(
        "ix_teacher_departments_department_id", "teacher_departments", ["department_id"]
    )

    op.create_table(
        "teacher_classes",
        sa.Column(
            "teacher_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "class_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("classes.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )
    op.create_index("ix_teacher_classes_teacher_id", "teacher_classes", ["teacher_id"])
    op.create_index("ix_teacher_classes_class_id", "teacher_classes", ["class_id"])

    # =========================================================================
    # ATTENDANCE
    # =========================================================================

    op.create_table(
        "attendance",
        _id_column(),
        sa.Column(
            "class_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("classes.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "student_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("students.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.Date, nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("remarks", sa.Text, nullable=True),
        *_timestamp_columns(),
        sa.UniqueConstraint(
            "student_id", "class_id", "date", name="uq_attendance_student_class_date"
        ),
        sa.CheckConstraint(
            "status IN ('present', 'absent', 'late')", name="ck_attendance_status"
        ),
    )
    op.create_index("ix_attendance_class_id", "attendance", ["class_id"])
    op.create_index("ix_attendance_student_id", "attendance", ["student_id"])
    op.create_index("ix_attendance_date", "attendance", ["date"])


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_table("attendance")
    op.drop_table("teacher_classes")
    op.drop_table("teacher_departments")
    op.drop_table("enrollments")
    op.drop_table("students")
    op.drop_table("classes")
    op.drop_table("subjects")
    op.drop_table("departments")
    op.drop_table("user_sessions")
    op.drop_table("users")
