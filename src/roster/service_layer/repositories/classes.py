"""Class repository.

A class owns the exams scheduled for it: deleting a class, one at a time or
through `delete_all`, deletes its exams in the same save.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from roster.domain.models import SchoolClass, Student
from roster.interfaces.persistence import asc, field

from .observable import DEFAULT_REFRESH_WINDOW, ObservableRepository

if TYPE_CHECKING:
    from roster.domain.models import Record
    from roster.interfaces.persistence import PersistenceContext
    from roster.interfaces.scheduler import Scheduler

    from .exams import ExamRepository


class ClassRepository(ObservableRepository[SchoolClass]):
    """Observable repository for classes.

    Args:
        exams: Repository that announces the exams removed with a class.
            Without one, deleted classes only let go of their exams.
    """

    def __init__(
        self,
        context: PersistenceContext,
        scheduler: Scheduler,
        refresh_window: float = DEFAULT_REFRESH_WINDOW,
        exams: ExamRepository | None = None,
    ) -> None:
        super().__init__(context, SchoolClass, scheduler, refresh_window)
        self.exams = exams

    def fetch_by_subject(self, subject: str) -> list[SchoolClass]:
        """Classes teaching `subject`, sorted by title."""
        return self.fetch(field("subject").eq(subject), order=(asc("title"),))

    def fetch_by_title(self, title: str) -> SchoolClass | None:
        """First class with exactly this title, or None."""
        found = self.fetch(field("title").eq(title))
        return found[0] if found else None

    @staticmethod
    def fetch_classes_for_student(student: Student) -> list[SchoolClass]:
        """Classes `student` is enrolled in, sorted by title."""
        return sorted(student.classes, key=lambda c: c.title)

    def _dependents(
        self, records: Sequence[SchoolClass]
    ) -> list[tuple[ObservableRepository[Any], list[Record]]]:
        if self.exams is None:
            return []
        owned: list[Record] = [exam for c in records for exam in c.exams]
        return [(self.exams, owned)] if owned else []
