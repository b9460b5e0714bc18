"""Create roster tables

Revision ID: 4c1f0e2a9b7d
Revises:
Create Date: 2026-10-19

"""

# pylint: disable=invalid-name

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from roster.adapters.db.sa_types import UTCDateTime

# deal with alembic stuff
# pylint: disable=no-member

# revision identifiers, used by Alembic.
revision: str = "4c1f0e2a9b7d"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

ID = sa.String(length=36)


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        "classes",
        sa.Column("id", ID, nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("subject", sa.String(length=120), nullable=False),
        sa.Column("room", sa.String(length=60), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_classes")),
        comment="One row per class.",
    )
    op.create_index(op.f("ix_classes_subject"), "classes", ["subject"])
    op.create_index(op.f("ix_classes_title"), "classes", ["title"])

    op.create_table(
        "students",
        sa.Column("id", ID, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("grade", sa.Integer(), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_students")),
        comment="One row per student.",
    )
    op.create_index(op.f("ix_students_grade"), "students", ["grade"])
    op.create_index(op.f("ix_students_name"), "students", ["name"])

    op.create_table(
        "exams",
        sa.Column("id", ID, nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("subject", sa.String(length=120), nullable=False),
        sa.Column("date", UTCDateTime(), nullable=False),
        sa.Column("max_score", sa.Integer(), nullable=False),
        sa.Column("class_id", ID, nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.CheckConstraint(
            "max_score > 0", name=op.f("ck_exams_positive_max_score")
        ),
        sa.ForeignKeyConstraint(
            ["class_id"],
            ["classes.id"],
            name=op.f("fk_exams_class_id_classes"),
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_exams")),
        comment="One row per exam.",
    )
    op.create_index(op.f("ix_exams_date"), "exams", ["date"])
    op.create_index(op.f("ix_exams_class_id"), "exams", ["class_id"])

    op.create_table(
        "enrollments",
        sa.Column("student_id", ID, nullable=False),
        sa.Column("class_id", ID, nullable=False),
        sa.ForeignKeyConstraint(
            ["student_id"],
            ["students.id"],
            name=op.f("fk_enrollments_student_id_students"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["class_id"],
            ["classes.id"],
            name=op.f("fk_enrollments_class_id_classes"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("student_id", "class_id", name=op.f("pk_enrollments")),
        comment="Student <-> class links.",
    )
    op.create_index(op.f("ix_enrollments_class_id"), "enrollments", ["class_id"])

    op.create_table(
        "exam_registrations",
        sa.Column("student_id", ID, nullable=False),
        sa.Column("exam_id", ID, nullable=False),
        sa.ForeignKeyConstraint(
            ["student_id"],
            ["students.id"],
            name=op.f("fk_exam_registrations_student_id_students"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["exam_id"],
            ["exams.id"],
            name=op.f("fk_exam_registrations_exam_id_exams"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint(
            "student_id", "exam_id", name=op.f("pk_exam_registrations")
        ),
        comment="Student <-> exam links.",
    )
    op.create_index(
        op.f("ix_exam_registrations_exam_id"), "exam_registrations", ["exam_id"]
    )


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_table("exam_registrations")
    op.drop_table("enrollments")
    op.drop_table("exams")
    op.drop_table("students")
    op.drop_table("classes")
