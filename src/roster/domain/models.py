"""Domain records.

Records are plain mutable objects compared by identity: a persistence context
keeps exactly one in-memory object per stored row, so two references to the
same student are the same Python object. The ``record_id`` is assigned by the
context on the first successful save and never changes afterwards.

Relationship attributes hold the related record objects themselves. Both
sides of a relationship are kept in step by :mod:`roster.domain.relationships`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import ClassVar


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(eq=False)
class Record:
    """Base class for persisted records."""

    #: Scalar attributes that must not be ``None`` when saved.
    required: ClassVar[tuple[str, ...]] = ()

    record_id: str | None = field(default=None, init=False)

    @property
    def is_persisted(self) -> bool:
        """True once a context has assigned an identity."""
        return self.record_id is not None


@dataclass(eq=False)
class Student(Record):
    """A student. Enrolled in classes and registered for exams."""

    required: ClassVar[tuple[str, ...]] = ("name", "email", "grade", "created_at")

    name: str
    email: str
    grade: int
    created_at: datetime = field(default_factory=utcnow)
    classes: list[SchoolClass] = field(default_factory=list, repr=False)
    exams: list[Exam] = field(default_factory=list, repr=False)


@dataclass(eq=False)
class SchoolClass(Record):
    """A class students enrol in. Owns the exams scheduled for it."""

    required: ClassVar[tuple[str, ...]] = ("title", "subject", "room", "created_at")

    title: str
    subject: str
    room: str
    created_at: datetime = field(default_factory=utcnow)
    students: list[Student] = field(default_factory=list, repr=False)
    exams: list[Exam] = field(default_factory=list, repr=False)


@dataclass(eq=False)
class Exam(Record):
    """An exam, optionally belonging to a class."""

    required: ClassVar[tuple[str, ...]] = (
        "title",
        "subject",
        "date",
        "max_score",
        "created_at",
    )

    title: str
    subject: str
    date: datetime = field(default_factory=utcnow)
    max_score: int = 100
    class_item: SchoolClass | None = field(default=None, repr=False)
    created_at: datetime = field(default_factory=utcnow)
    students: list[Student] = field(default_factory=list, repr=False)

    @property
    def student_count(self) -> int:
        """Number of students registered for this exam."""
        return len(self.students)

    def is_upcoming(self, now: datetime | None = None) -> bool:
        """True if the exam takes place after ``now``."""
        return self.date > (now or utcnow())

    def is_past(self, now: datetime | None = None) -> bool:
        """True if the exam took place before ``now``."""
        return self.date < (now or utcnow())
