"""Student repository."""

from __future__ import annotations

from typing import TYPE_CHECKING

from roster.domain.models import SchoolClass, Student
from roster.interfaces.persistence import asc, field

from .observable import DEFAULT_REFRESH_WINDOW, ObservableRepository

if TYPE_CHECKING:
    from roster.interfaces.persistence import PersistenceContext
    from roster.interfaces.scheduler import Scheduler


class StudentRepository(ObservableRepository[Student]):
    """Observable repository for students with roster lookups."""

    def __init__(
        self,
        context: PersistenceContext,
        scheduler: Scheduler,
        refresh_window: float = DEFAULT_REFRESH_WINDOW,
    ) -> None:
        super().__init__(context, Student, scheduler, refresh_window)

    def fetch_by_grade(self, grade: int) -> list[Student]:
        """Students in `grade`, sorted by name."""
        return self.fetch(field("grade").eq(grade), order=(asc("name"),))

    def fetch_by_name(self, name: str) -> Student | None:
        """First student with exactly this name, or None."""
        found = self.fetch(field("name").eq(name))
        return found[0] if found else None

    @staticmethod
    def fetch_students_in_class(school_class: SchoolClass) -> list[Student]:
        """Students enrolled in `school_class`, sorted by name."""
        return sorted(school_class.students, key=lambda s: s.name)
