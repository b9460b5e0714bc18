"""Module defining Commands."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Command:
    """Base class for all commands."""


# --- students ---


@dataclass(frozen=True)
class CreateStudent(Command):
    """Command to add a student to the roster."""

    name: str
    email: str
    grade: int


@dataclass(frozen=True)
class DeleteStudent(Command):
    """Command to remove a student (and all their enrolments/registrations)."""

    student_id: str


@dataclass(frozen=True)
class EnrollStudent(Command):
    """Command to enrol a student in a class."""

    student_id: str
    class_id: str


@dataclass(frozen=True)
class WithdrawStudent(Command):
    """Command to withdraw a student from a class."""

    student_id: str
    class_id: str


# --- classes ---


@dataclass(frozen=True)
class CreateClass(Command):
    """Command to open a new class."""

    title: str
    subject: str
    room: str


@dataclass(frozen=True)
class DeleteClass(Command):
    """Command to remove a class together with its exams."""

    class_id: str


# --- exams ---


@dataclass(frozen=True)
class CreateExam(Command):
    """Command to schedule an exam, optionally for a class."""

    title: str
    subject: str
    date: datetime
    max_score: int = 100
    class_id: str | None = None


@dataclass(frozen=True)
class DeleteExam(Command):
    """Command to remove an exam."""

    exam_id: str


@dataclass(frozen=True)
class RegisterForExam(Command):
    """Command to register a student for an exam."""

    student_id: str
    exam_id: str


@dataclass(frozen=True)
class UnregisterFromExam(Command):
    """Command to take a student off an upcoming exam."""

    student_id: str
    exam_id: str
