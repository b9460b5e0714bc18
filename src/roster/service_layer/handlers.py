"""Service layer handlers.

Handlers receive their dependencies by parameter name (see
`roster.bootstrap.inject_dependencies`):

- `repositories`: the `RepositoryBundle` sharing one persistence context.
- `settings`: `roster.config.Settings` (class capacity).

Unknown ids raise `RecordNotFoundError`; broken business rules raise a
`DomainError`. Either way nothing is saved and no change event is published.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import timedelta, timezone
from typing import TYPE_CHECKING, Any, TypeVar

from roster.domain import relationships
from roster.domain.errors import (
    AlreadyEnrolledError,
    AlreadyRegisteredError,
    ClassFullError,
    ExamHasPassedError,
    InvalidFieldError,
    NotEnrolledError,
    NotRegisteredError,
)
from roster.domain.models import Exam, SchoolClass, Student, utcnow
from roster.interfaces.persistence import PersistenceError, RecordNotFoundError

from . import commands
from .queries import is_class_full

if TYPE_CHECKING:
    from roster.config import Settings
    from roster.domain.models import Record

    from .repositories import ObservableRepository, RepositoryBundle

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="Record")

MAX_EXAM_AGE = timedelta(days=365)


def _require(repository: ObservableRepository[T], record_id: str) -> T:
    if (record := repository.fetch_by_id(record_id)) is None:
        raise RecordNotFoundError(repository.model.__name__, record_id)
    return record


def _require_text(field: str, value: str) -> str:
    if not value or not value.strip():
        raise InvalidFieldError(field, "must not be blank")
    return value.strip()


# ============================================================================
#                              Student handlers
# ============================================================================


def create_student(cmd: commands.CreateStudent, repositories: RepositoryBundle) -> str:
    """Add a student; returns the new student id."""
    student = Student(
        name=_require_text("name", cmd.name),
        email=_require_text("email", cmd.email),
        grade=cmd.grade,
    )
    repositories.students.create(student)
    return student.record_id  # type: ignore[return-value]


def delete_student(cmd: commands.DeleteStudent, repositories: RepositoryBundle) -> None:
    """Remove a student; classes and exams lose the link, not the record."""
    repositories.students.delete(_require(repositories.students, cmd.student_id))


def enroll_student(
    cmd: commands.EnrollStudent, repositories: RepositoryBundle, settings: Settings
) -> None:
    """Enrol a student in a class, enforcing duplicates and capacity."""
    student = _require(repositories.students, cmd.student_id)
    school_class = _require(repositories.classes, cmd.class_id)

    if relationships.is_enrolled(student, school_class):
        raise AlreadyEnrolledError(student.name, school_class.title)
    if is_class_full(school_class, settings.class_capacity):
        raise ClassFullError(school_class.title, settings.class_capacity)

    relationships.enroll(student, school_class)
    repositories.students.update(student)
    repositories.classes.update(school_class)


def withdraw_student(
    cmd: commands.WithdrawStudent, repositories: RepositoryBundle
) -> None:
    """Withdraw a student from a class they are enrolled in."""
    student = _require(repositories.students, cmd.student_id)
    school_class = _require(repositories.classes, cmd.class_id)

    if not relationships.is_enrolled(student, school_class):
        raise NotEnrolledError(student.name, school_class.title)

    relationships.withdraw(student, school_class)
    repositories.students.update(student)
    repositories.classes.update(school_class)


# ============================================================================
#                               Class handlers
# ============================================================================


def create_class(cmd: commands.CreateClass, repositories: RepositoryBundle) -> str:
    """Open a class; returns the new class id."""
    school_class = SchoolClass(
        title=_require_text("title", cmd.title),
        subject=cmd.subject.strip(),
        room=_require_text("room", cmd.room),
    )
    repositories.classes.create(school_class)
    return school_class.record_id  # type: ignore[return-value]


def delete_class(cmd: commands.DeleteClass, repositories: RepositoryBundle) -> None:
    """Remove a class and, in the same save, its exams; students only lose the link."""
    school_class = _require(repositories.classes, cmd.class_id)
    logger.debug(
        "Deleting class %s with %d exam(s)",
        school_class.record_id,
        len(school_class.exams),
    )
    repositories.classes.delete(school_class)


# ============================================================================
#                                Exam handlers
# ============================================================================


def create_exam(cmd: commands.CreateExam, repositories: RepositoryBundle) -> str:
    """Schedule an exam; returns the new exam id."""
    title = _require_text("title", cmd.title)
    subject = _require_text("subject", cmd.subject)
    if cmd.max_score <= 0:
        raise InvalidFieldError("max_score", "must be greater than zero")

    date = cmd.date if cmd.date.tzinfo else cmd.date.replace(tzinfo=timezone.utc)
    if date < utcnow() - MAX_EXAM_AGE:
        raise InvalidFieldError("date", "must not be more than a year in the past")

    school_class = (
        _require(repositories.classes, cmd.class_id)
        if cmd.class_id is not None
        else None
    )

    exam = Exam(title=title, subject=subject, date=date, max_score=cmd.max_score)
    relationships.assign_exam(exam, school_class)
    try:
        repositories.exams.create(exam)
    except PersistenceError:
        relationships.assign_exam(exam, None)
        raise
    return exam.record_id  # type: ignore[return-value]


def delete_exam(cmd: commands.DeleteExam, repositories: RepositoryBundle) -> None:
    """Remove an exam; registered students only lose the link."""
    repositories.exams.delete(_require(repositories.exams, cmd.exam_id))


def register_for_exam(
    cmd: commands.RegisterForExam, repositories: RepositoryBundle
) -> None:
    """Register a student for an exam that has not taken place yet."""
    student = _require(repositories.students, cmd.student_id)
    exam = _require(repositories.exams, cmd.exam_id)

    if relationships.is_registered(student, exam):
        raise AlreadyRegisteredError(student.name, exam.title)
    if exam.is_past():
        raise ExamHasPassedError(exam.title)

    relationships.register(student, exam)
    repositories.exams.update(exam)
    repositories.students.update(student)


def unregister_from_exam(
    cmd: commands.UnregisterFromExam, repositories: RepositoryBundle
) -> None:
    """Take a student off an exam that has not taken place yet."""
    student = _require(repositories.students, cmd.student_id)
    exam = _require(repositories.exams, cmd.exam_id)

    if exam.is_past():
        raise ExamHasPassedError(exam.title)
    if not relationships.is_registered(student, exam):
        raise NotRegisteredError(student.name, exam.title)

    relationships.unregister(student, exam)
    repositories.exams.update(exam)
    repositories.students.update(student)


COMMAND_HANDLERS: dict[type[commands.Command], Callable[..., Any]] = {
    commands.CreateStudent: create_student,
    commands.DeleteStudent: delete_student,
    commands.EnrollStudent: enroll_student,
    commands.WithdrawStudent: withdraw_student,
    commands.CreateClass: create_class,
    commands.DeleteClass: delete_class,
    commands.CreateExam: create_exam,
    commands.DeleteExam: delete_exam,
    commands.RegisterForExam: register_for_exam,
    commands.UnregisterFromExam: unregister_from_exam,
}
