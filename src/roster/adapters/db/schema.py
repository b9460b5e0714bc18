"""Relational schema for ROSTER records.

| Table                | Holds                                         |
|----------------------|-----------------------------------------------|
| ``classes``          | one row per SchoolClass                       |
| ``students``         | one row per Student                           |
| ``exams``            | one row per Exam; ``class_id`` → classes      |
| ``enrollments``      | Student ↔ SchoolClass links                   |
| ``exam_registrations`` | Student ↔ Exam links                        |

Link rows cascade when either side is deleted; ``exams.class_id`` is set to
NULL when its class goes away. Schema changes ship as Alembic migrations
under ``roster/adapters/db/alembic``.
"""

from __future__ import annotations

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
)

from .metadata import metadata
from .sa_types import UTCDateTime

__all__ = ["classes", "students", "exams", "enrollments", "exam_registrations"]

ID_LENGTH = 36  # ULIDs are 26 chars, UUIDs 36

classes = Table(
    "classes",
    metadata,
    Column("id", String(ID_LENGTH), primary_key=True),
    Column("title", String(200), nullable=False),
    Column("subject", String(120), nullable=False),
    Column("room", String(60), nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Index(None, "subject"),
    Index(None, "title"),
    comment="One row per class.",
)

students = Table(
    "students",
    metadata,
    Column("id", String(ID_LENGTH), primary_key=True),
    Column("name", String(200), nullable=False),
    Column("email", String(320), nullable=False),
    Column("grade", Integer, nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Index(None, "grade"),
    Index(None, "name"),
    comment="One row per student.",
)

exams = Table(
    "exams",
    metadata,
    Column("id", String(ID_LENGTH), primary_key=True),
    Column("title", String(200), nullable=False),
    Column("subject", String(120), nullable=False),
    Column("date", UTCDateTime(), nullable=False),
    Column("max_score", Integer, nullable=False),
    Column(
        "class_id",
        String(ID_LENGTH),
        ForeignKey("classes.id", ondelete="SET NULL"),
        nullable=True,
    ),
    Column("created_at", UTCDateTime(), nullable=False),
    CheckConstraint("max_score > 0", name="positive_max_score"),
    Index(None, "date"),
    Index(None, "class_id"),
    comment="One row per exam.",
)

enrollments = Table(
    "enrollments",
    metadata,
    Column(
        "student_id",
        String(ID_LENGTH),
        ForeignKey("students.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "class_id",
        String(ID_LENGTH),
        ForeignKey("classes.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Index(None, "class_id"),
    comment="Student <-> class links.",
)

exam_registrations = Table(
    "exam_registrations",
    metadata,
    Column(
        "student_id",
        String(ID_LENGTH),
        ForeignKey("students.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "exam_id",
        String(ID_LENGTH),
        ForeignKey("exams.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Index(None, "exam_id"),
    comment="Student <-> exam links.",
)
