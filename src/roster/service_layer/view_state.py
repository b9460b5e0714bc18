"""View-state holders over live queries.

A `ListViewState` is the read-optimized projection a screen (or the CLI)
binds to: it subscribes to `observe_all`, keeps `items` sorted and exposes
`filtered`, the items matching the current `search_text`. `is_loading` is
True until the first delivery; `error` holds the last fetch failure until a
later delivery succeeds.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .queries import search_students

if TYPE_CHECKING:
    from roster.domain.models import Exam, Record, SchoolClass, Student
    from roster.interfaces.persistence import PersistenceError

    from .repositories import (
        ClassRepository,
        ExamRepository,
        ObservableRepository,
        StudentRepository,
    )

T = TypeVar("T", bound="Record")

Matcher = Callable[[str, Iterable[T]], list[T]]


def text_matcher(*attributes: str) -> Matcher:
    """Build a case-insensitive substring matcher over `attributes`."""

    def match(query: str, records: Iterable[T]) -> list[T]:
        needle = query.strip().casefold()
        if not needle:
            return list(records)
        return [
            r
            for r in records
            if any(needle in str(getattr(r, a)).casefold() for a in attributes)
        ]

    return match


class ListViewState(Generic[T]):
    """Sorted, searchable list of every record in a repository.

    Args:
        repository: Repository to observe.
        sort_key: Key `items` are sorted by.
        matcher: Filters `items` by the search text.
        on_change: Called with this object after every change to `filtered`.
    """

    def __init__(
        self,
        repository: ObservableRepository[T],
        sort_key: Callable[[T], Any],
        matcher: Matcher,
        on_change: Callable[[ListViewState[T]], None] | None = None,
    ) -> None:
        self._sort_key = sort_key
        self._matcher = matcher
        self._on_change = on_change
        self._search_text = ""
        self.items: list[T] = []
        self.filtered: list[T] = []
        self.is_loading = True
        self.error: PersistenceError | None = None
        self._query = repository.observe_all(self._receive, on_error=self._fail)

    @property
    def search_text(self) -> str:
        return self._search_text

    @search_text.setter
    def search_text(self, value: str) -> None:
        self._search_text = value
        self._apply_filter()

    def close(self) -> None:
        """Stop observing the repository."""
        self._query.dispose()

    def _receive(self, records: list[T]) -> None:
        self.items = sorted(records, key=self._sort_key)
        self.is_loading = False
        self.error = None
        self._apply_filter()

    def _fail(self, error: PersistenceError) -> None:
        self.is_loading = False
        self.error = error
        if self._on_change is not None:
            self._on_change(self)

    def _apply_filter(self) -> None:
        self.filtered = self._matcher(self._search_text, self.items)
        if self._on_change is not None:
            self._on_change(self)


def student_list_state(repository: StudentRepository) -> ListViewState[Student]:
    """Students by name, searchable by name or email."""
    return ListViewState(repository, lambda s: s.name, search_students)


def class_list_state(repository: ClassRepository) -> ListViewState[SchoolClass]:
    """Classes by title, searchable by title or subject."""
    return ListViewState(repository, lambda c: c.title, text_matcher("title", "subject"))


def exam_list_state(repository: ExamRepository) -> ListViewState[Exam]:
    """Exams by date, searchable by title or subject."""
    return ListViewState(repository, lambda e: e.date, text_matcher("title", "subject"))
