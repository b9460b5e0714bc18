"""Live, deduplicated views over a repository.

A `LiveQuery` is what `ObservableRepository.observe_all` hands back. It
delivers lists of every record of the repository's type to one listener:

- The first value is a full fetch taken when the query is created.
- `Created`, `Deleted` and `BatchChange` events schedule one re-fetch after
  the refresh window. Further structural events inside the window ride on
  that same re-fetch.
- `Updated(record)` swaps the held record with the same `record_id` in place,
  keeps the order and delivers at once, without a re-fetch. Records the query
  does not hold are ignored.
- A re-fetch is delivered only if its ordered `record_id` sequence differs
  from the last delivered value.
- A failing fetch never reaches the listener. The initial fetch falls back to
  an empty list; a failed re-fetch is logged at WARNING and skipped. Either
  way the optional `on_error` callback receives the `PersistenceError`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Generic, TypeVar

from roster.interfaces.persistence import PersistenceError

from ..change_bus import RepositoryChange, Updated

if TYPE_CHECKING:
    from roster.domain.models import Record
    from roster.interfaces.scheduler import ScheduledCall, Scheduler

    from .observable import ObservableRepository

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="Record")


class LiveQuery(Generic[T]):
    """Subscription to "all records of type T".

    Args:
        repository: The repository to observe.
        listener: Called with a fresh list on every delivery.
        scheduler: Runs the delayed re-fetch on the owning context.
        refresh_window: Seconds to wait before re-fetching after a
            structural change.
        on_error: Called with the error of a failed fetch, after the
            fallback (if any) was delivered.
    """

    def __init__(
        self,
        repository: ObservableRepository[T],
        listener: Callable[[list[T]], None],
        scheduler: Scheduler,
        refresh_window: float,
        on_error: Callable[[PersistenceError], None] | None = None,
    ) -> None:
        self._repository: ObservableRepository[T] | None = repository
        self._listener: Callable[[list[T]], None] | None = listener
        self._on_error = on_error
        self._scheduler = scheduler
        self._refresh_window = refresh_window
        self._pending: ScheduledCall | None = None
        self._current: list[T] = []
        self._delivered: tuple[str | None, ...] | None = None
        self._disposed = False

        #: Number of re-fetches run so far (the initial fetch is not counted).
        self.refresh_count = 0

        self._unsubscribe = repository.bus.subscribe(self._on_change)
        self._initial_fetch(repository)

    # --- public surface ---

    @property
    def value(self) -> list[T]:
        """The last delivered list."""
        return list(self._current)

    @property
    def is_disposed(self) -> bool:
        """True once `dispose` has run."""
        return self._disposed

    def dispose(self) -> None:
        """Stop delivery. Idempotent; nothing is delivered after it returns."""
        if self._disposed:
            return
        self._disposed = True
        self._unsubscribe()
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        self._repository = None
        self._listener = None
        self._on_error = None
        logger.debug("Live query disposed")

    def __enter__(self) -> LiveQuery[T]:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()

    # --- event handling ---

    def _on_change(self, event: RepositoryChange) -> None:
        if self._disposed:
            return
        if isinstance(event, Updated):
            self._merge(event.record)
        elif event.is_structural:
            self._schedule_refresh()

    def _merge(self, record: Record) -> None:
        if record.record_id is None:
            return
        for index, held in enumerate(self._current):
            if held.record_id == record.record_id:
                merged = list(self._current)
                merged[index] = record  # type: ignore[call-overload]
                self._deliver(merged, force=True)
                return

    def _schedule_refresh(self) -> None:
        if self._pending is None:
            self._pending = self._scheduler.call_later(
                self._refresh_window, self._refresh
            )

    def _refresh(self) -> None:
        self._pending = None
        if self._disposed or self._repository is None:
            return
        self.refresh_count += 1
        try:
            records = self._repository.fetch_all()
        except PersistenceError as e:
            logger.warning(
                "Re-fetch of %s failed; keeping the last delivered value",
                self._repository.model.__name__,
                exc_info=True,
            )
            self._report(e)
            return
        self._deliver(records)

    # --- delivery ---

    def _initial_fetch(self, repository: ObservableRepository[T]) -> None:
        try:
            records = repository.fetch_all()
        except PersistenceError as e:
            logger.warning(
                "Initial fetch of %s failed; starting from an empty list",
                repository.model.__name__,
                exc_info=True,
            )
            self._deliver([], force=True)
            self._report(e)
            return
        self._deliver(records, force=True)

    def _report(self, error: PersistenceError) -> None:
        if self._on_error is not None:
            self._on_error(error)

    def _deliver(self, records: list[T], force: bool = False) -> None:
        identities = tuple(r.record_id for r in records)
        self._current = records
        if not force and identities == self._delivered:
            return
        self._delivered = identities
        if self._listener is not None:
            self._listener(list(records))
