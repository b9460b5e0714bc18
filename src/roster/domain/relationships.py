"""Bidirectional relationship maintenance.

The persistence adapters store relationships but do not maintain inverses, so
every mutation that touches one side of a relationship goes through this
module, which updates both sides together:

| Relationship              | Sides                                   | Delete rule |
|---------------------------|-----------------------------------------|-------------|
| enrolment (many-to-many)  | ``Student.classes`` / ``SchoolClass.students`` | nullify |
| registration (many-to-many) | ``Student.exams`` / ``Exam.students``  | nullify     |
| scheduling (one-to-many)  | ``SchoolClass.exams`` / ``Exam.class_item`` | nullify |

``detach`` applies the delete rules for a record that is about to be deleted
and hands back a :class:`Detachment` that can put every link back if the
deleting save fails.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from .models import Exam, Record, SchoolClass, Student


def _add(items: list, item: object) -> None:
    if not any(existing is item for existing in items):
        items.append(item)


def _discard(items: list, item: object) -> None:
    for index, existing in enumerate(items):
        if existing is item:
            del items[index]
            return


def _contains(items: list, item: object) -> bool:
    return any(existing is item for existing in items)


# --- enrolment ---


def is_enrolled(student: Student, school_class: SchoolClass) -> bool:
    """True if the student is enrolled in the class."""
    return _contains(student.classes, school_class)


def enroll(student: Student, school_class: SchoolClass) -> None:
    """Link a student and a class on both sides (idempotent)."""
    _add(student.classes, school_class)
    _add(school_class.students, student)


def withdraw(student: Student, school_class: SchoolClass) -> None:
    """Unlink a student and a class on both sides (idempotent)."""
    _discard(student.classes, school_class)
    _discard(school_class.students, student)


# --- exam registration ---


def is_registered(student: Student, exam: Exam) -> bool:
    """True if the student is registered for the exam."""
    return _contains(student.exams, exam)


def register(student: Student, exam: Exam) -> None:
    """Link a student and an exam on both sides (idempotent)."""
    _add(student.exams, exam)
    _add(exam.students, student)


def unregister(student: Student, exam: Exam) -> None:
    """Unlink a student and an exam on both sides (idempotent)."""
    _discard(student.exams, exam)
    _discard(exam.students, student)


# --- scheduling ---


def assign_exam(exam: Exam, school_class: SchoolClass | None) -> None:
    """Move an exam to ``school_class`` (or to no class when ``None``)."""
    if exam.class_item is not None:
        _discard(exam.class_item.exams, exam)
    exam.class_item = school_class
    if school_class is not None:
        _add(school_class.exams, exam)


# --- delete rules ---


@dataclass
class Detachment:
    """Undo log for a :func:`detach` call."""

    _undo: list[Callable[[], None]] = field(default_factory=list)

    def restore(self) -> None:
        """Re-create every link removed by the detach, newest first."""
        while self._undo:
            self._undo.pop()()


def detach(record: Record) -> Detachment:
    """Nullify every relationship ``record`` takes part in.

    Args:
        record: The record about to be deleted.

    Returns:
        A Detachment whose ``restore()`` re-links everything.
    """
    detachment = Detachment()
    undo = detachment._undo  # pylint: disable=protected-access

    if isinstance(record, Student):
        for school_class in list(record.classes):
            withdraw(record, school_class)
            undo.append(lambda c=school_class: enroll(record, c))
        for exam in list(record.exams):
            unregister(record, exam)
            undo.append(lambda e=exam: register(record, e))

    elif isinstance(record, SchoolClass):
        for student in list(record.students):
            withdraw(student, record)
            undo.append(lambda s=student: enroll(s, record))
        for exam in list(record.exams):
            assign_exam(exam, None)
            undo.append(lambda e=exam: assign_exam(e, record))

    elif isinstance(record, Exam):
        for student in list(record.students):
            unregister(student, record)
            undo.append(lambda s=student: register(s, record))
        if (school_class := record.class_item) is not None:
            assign_exam(record, None)
            undo.append(lambda: assign_exam(record, school_class))

    return detachment


def related_records(record: Record) -> list[Record]:
    """Return every record directly linked to ``record``."""
    if isinstance(record, Student):
        return [*record.classes, *record.exams]
    if isinstance(record, SchoolClass):
        return [*record.students, *record.exams]
    if isinstance(record, Exam):
        linked: list[Record] = list(record.students)
        if record.class_item is not None:
            linked.append(record.class_item)
        return linked
    return []
