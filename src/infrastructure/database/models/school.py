# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School structure models.

Tables:
- departments: grade departments ("Class 8", "KG-1") with a derived level
- subjects: subjects taught within a department
- classes: teaching groups for a subject, optionally led by a teacher
- enrollments: student <-> class membership
- teacher_departments / teacher_classes: teacher allocations
- students: enrolled pupils, each in exactly one department
- attendance: per-day attendance marks
"""

from __future__ import annotations

import datetime as dt
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, TimestampMixin, generate_uuid
from src.utils.datetime import utc_now

if TYPE_CHECKING:
    from src.infrastructure.database.models.user import User


CLASS_STATUSES = ("active", "inactive", "archived")
ATTENDANCE_STATUSES = ("present", "absent", "late")


class Department(Base, TimestampMixin):
    """Grade department.

    The level column is derived from the name when the department is
    created or renamed and is read-only everywhere else.
    """

    __tablename__ = "departments"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), primary_key=True, default=generate_uuid
    )
    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    banner_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    banner_cld_pub_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    head_teacher_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    level: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    parent_department_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("departments.id", ondelete="SET NULL"),
        nullable=True,
    )

    head_teacher: Mapped[User | None] = relationship("User", foreign_keys=[head_teacher_id])
    parent_department: Mapped[Department | None] = relationship(
        "Department",
        remote_side=[id],
        back_populates="sections",
    )
    sections: Mapped[list[Department]] = relationship(
        "Department", back_populates="parent_department", passive_deletes=True
    )
    subjects: Mapped[list[Subject]] = relationship(
        "Subject", back_populates="department", passive_deletes=True
    )


class Subject(Base, TimestampMixin):
    """Subject taught within a department."""

    __tablename__ = "subjects"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), primary_key=True, default=generate_uuid
    )
    department_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("departments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)

    department: Mapped[Department] = relationship("Department", back_populates="subjects")
    classes: Mapped[list[Class]] = relationship(
        "Class", back_populates="subject", passive_deletes=True
    )


class Class(Base, TimestampMixin):
    """Teaching group for a subject."""

    __tablename__ = "classes"
    __table_args__ = (
        Index("ix_classes_department_id", "department_id"),
        Index("ix_classes_subject_id", "subject_id"),
        Index("ix_classes_teacher_id", "teacher_id"),
    )

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), primary_key=True, default=generate_uuid
    )
    department_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("departments.id", ondelete="CASCADE"),
        nullable=False,
    )
    subject_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("subjects.id", ondelete="CASCADE"),
        nullable=False,
    )
    teacher_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    invite_code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    banner_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    banner_cld_pub_id: Mapped[str | None] = mapped_column(Text, nullable=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    schedules: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONB, nullable=False, default=list
    )

    department: Mapped[Department] = relationship("Department")
    subject: Mapped[Subject] = relationship("Subject", back_populates="classes")
    teacher: Mapped[User | None] = relationship("User", foreign_keys=[teacher_id])
    enrollments: Mapped[list[Enrollment]] = relationship(
        "Enrollment", back_populates="class_", passive_deletes=True
    )


class Enrollment(Base):
    """Student membership in a class."""

    __tablename__ = "enrollments"

    student_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("students.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    class_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("classes.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    enrolled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
    )

    student: Mapped[Student] = relationship("Student", back_populates="enrollments")
    class_: Mapped[Class] = relationship("Class", back_populates="enrollments")


class TeacherDepartment(Base):
    """Teacher allocation to a department."""

    __tablename__ = "teacher_departments"

    teacher_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    department_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("departments.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )


class TeacherClass(Base):
    """Teacher allocation to a class."""

    __tablename__ = "teacher_classes"

    teacher_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    class_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("classes.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )

    teacher: Mapped[User] = relationship("User", back_populates="class_assignments")
    class_: Mapped[Class] = relationship("Class")


class Student(Base, TimestampMixin):
    """Enrolled pupil. Belongs to exactly one department at a time."""

    __tablename__ = "students"

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), primary_key=True, default=generate_uuid
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True, index=True)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    gender: Mapped[str] = mapped_column(String(50), nullable=False)
    fathers_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    mothers_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    whatsapp_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    admission_date: Mapped[date] = mapped_column(Date, nullable=False)
    department_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("departments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    roll_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_cld_pub_id: Mapped[str | None] = mapped_column(Text, nullable=True)

    department: Mapped[Department] = relationship("Department")
    enrollments: Mapped[list[Enrollment]] = relationship(
        "Enrollment", back_populates="student", passive_deletes=True
    )


class Attendance(Base, TimestampMixin):
    """Attendance mark for one student in one class on one day."""

    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint(
            "student_id", "class_id", "date", name="uq_attendance_student_class_date"
        ),
    )

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False), primary_key=True, default=generate_uuid
    )
    class_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("classes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    class_: Mapped[Class] = relationship("Class")
    student: Mapped[Student] = relationship("Student")
