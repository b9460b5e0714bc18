"""Exam repository.

Date queries take an optional `now` so callers (and tests) can pin the clock;
it defaults to the current UTC time.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from roster.domain.models import Exam, SchoolClass, utcnow
from roster.interfaces.persistence import asc, desc, field

from .observable import DEFAULT_REFRESH_WINDOW, ObservableRepository

if TYPE_CHECKING:
    from roster.interfaces.persistence import PersistenceContext
    from roster.interfaces.scheduler import Scheduler


class ExamRepository(ObservableRepository[Exam]):
    """Observable repository for exams."""

    def __init__(
        self,
        context: PersistenceContext,
        scheduler: Scheduler,
        refresh_window: float = DEFAULT_REFRESH_WINDOW,
    ) -> None:
        super().__init__(context, Exam, scheduler, refresh_window)

    @staticmethod
    def fetch_by_class(school_class: SchoolClass) -> list[Exam]:
        """Exams scheduled for `school_class`, earliest first."""
        return sorted(school_class.exams, key=lambda e: e.date)

    def fetch_upcoming(self, now: datetime | None = None) -> list[Exam]:
        """Exams after `now`, earliest first."""
        return self.fetch(field("date").gt(now or utcnow()), order=(asc("date"),))

    def fetch_past(self, now: datetime | None = None) -> list[Exam]:
        """Exams before `now`, most recent first."""
        return self.fetch(field("date").lt(now or utcnow()), order=(desc("date"),))

    def fetch_between(self, start: datetime, end: datetime) -> list[Exam]:
        """Exams with `start <= date <= end`, earliest first."""
        return self.fetch(
            field("date").ge(start) & field("date").le(end), order=(asc("date"),)
        )
