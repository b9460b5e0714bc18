"""Generic observable repository.

`ObservableRepository[T]` wraps a `PersistenceContext` for one record type,
exposes synchronous CRUD and publishes one change event per successful
mutation on its own `ChangeBus`. `observe_all` turns those events into a
live list (see `LiveQuery`).

Failure rule for every mutation: on `PersistenceError` the context is rolled
back, nothing is published and the error propagates.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from roster.domain import relationships
from roster.interfaces.persistence import PersistenceError, RecordNotFoundError

from ..change_bus import BatchChange, ChangeBus, Created, Deleted, Updated
from .live_query import LiveQuery

if TYPE_CHECKING:
    from roster.domain.models import Record
    from roster.interfaces.persistence import (
        PersistenceContext,
        Predicate,
        SortKey,
    )
    from roster.interfaces.scheduler import Scheduler

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="Record")

DEFAULT_REFRESH_WINDOW = 0.1  # seconds


class ObservableRepository(Generic[T]):
    """CRUD plus live queries for one record type.

    Args:
        context: Persistence context shared with the other repositories.
        model: The record class this repository serves.
        scheduler: Runs the delayed re-fetches of live queries.
        refresh_window: Seconds live queries wait before re-fetching.
    """

    def __init__(
        self,
        context: PersistenceContext,
        model: type[T],
        scheduler: Scheduler,
        refresh_window: float = DEFAULT_REFRESH_WINDOW,
    ) -> None:
        if refresh_window < 0:
            raise ValueError("refresh_window must be >= 0")
        self.context = context
        self.model = model
        self.scheduler = scheduler
        self.refresh_window = refresh_window
        self.bus = ChangeBus()

    # --- writes ---

    def create(self, record: T) -> T:
        """Insert and save `record`, then publish `Created`.

        Returns:
            The same record, now carrying its `record_id`.

        Raises:
            PersistenceError: If the save fails; `record_id` stays `None`.
        """
        self._check_type(record)
        try:
            self.context.insert(record)
            self.context.save()
        except PersistenceError:
            logger.debug("Create %s failed; rolling back", self.model.__name__)
            self.context.rollback()
            raise
        logger.debug("Created %s %s", self.model.__name__, record.record_id)
        self.bus.publish(Created(record))
        return record

    def update(self, record: T) -> T:
        """Save the in-place mutations of a stored record, then publish `Updated`.

        A failed save rolls the context back, which also reverts the record's
        unsaved mutations.

        Raises:
            RecordNotFoundError: If the context does not hold `record`.
            PersistenceError: If the save fails.
        """
        self._require_stored(record)
        try:
            self.context.save()
        except PersistenceError:
            logger.debug(
                "Update %s %s failed; rolling back",
                self.model.__name__,
                record.record_id,
            )
            self.context.rollback()
            raise
        logger.debug("Updated %s %s", self.model.__name__, record.record_id)
        self.bus.publish(Updated(record))
        return record

    def delete(self, record: T) -> None:
        """Detach `record` from its relationships, remove it and publish `Deleted`.

        Dependent records (see `_dependents`) go in the same save; their own
        repositories publish a `Deleted` for each.

        Raises:
            RecordNotFoundError: If the context does not hold `record`.
            PersistenceError: If the save fails; every link is restored and
                nothing is removed.
        """
        self._require_stored(record)
        record_id = record.record_id
        dependents = self._dependents([record])
        self._remove([*(r for _, group in dependents for r in group), record])
        logger.debug("Deleted %s %s", self.model.__name__, record_id)
        for repository, group in dependents:
            for dependent in group:
                repository.bus.publish(Deleted(dependent.record_id))  # type: ignore[arg-type]
        self.bus.publish(Deleted(record_id))  # type: ignore[arg-type]

    def delete_all(self) -> int:
        """Remove every record of this type in one save; publish one `BatchChange`.

        A repository that lost dependent records publishes one `BatchChange`
        as well.

        Returns:
            The number of records removed.
        """
        records = self.context.fetch(self.model)
        dependents = self._dependents(records)
        self._remove([*(r for _, group in dependents for r in group), *records])
        logger.debug("Deleted all %d %s record(s)", len(records), self.model.__name__)
        for repository, _ in dependents:
            repository.bus.publish(BatchChange())
        self.bus.publish(BatchChange())
        return len(records)

    def _dependents(  # pylint: disable=unused-argument
        self, records: Sequence[T]
    ) -> list[tuple[ObservableRepository[Any], list[Record]]]:
        """Records that must be deleted together with `records`, per repository.

        Only non-empty groups are returned. No record type has dependents
        unless a subclass says so.
        """
        return []

    def _remove(self, records: list[Record]) -> None:
        detachments = [relationships.detach(record) for record in records]
        try:
            for record in records:
                self.context.delete(record)
            self.context.save()
        except PersistenceError:
            logger.debug(
                "Deleting %d record(s) through %s failed; restoring links",
                len(records),
                type(self).__name__,
            )
            for detachment in reversed(detachments):
                detachment.restore()
            self.context.rollback()
            raise

    # --- reads ---

    def fetch(
        self, predicate: Predicate | None = None, order: Sequence[SortKey] = ()
    ) -> list[T]:
        """Return stored records matching `predicate`. Publishes nothing."""
        return self.context.fetch(self.model, predicate, order)

    def fetch_all(self) -> list[T]:
        """Return every stored record of this type."""
        return self.fetch()

    def fetch_by_id(self, record_id: str) -> T | None:
        """Return the record with `record_id`, or None."""
        return self.context.get(self.model, record_id)

    def count(self, predicate: Predicate | None = None) -> int:
        """Count stored records matching `predicate`."""
        return self.context.count(self.model, predicate)

    def observe_all(
        self,
        listener: Callable[[list[T]], None],
        on_error: Callable[[PersistenceError], None] | None = None,
    ) -> LiveQuery[T]:
        """Subscribe `listener` to the live list of every record of this type.

        The listener is called once right away with the current records and
        again whenever the list changes. Fetch failures go to `on_error`, never
        to the listener. Dispose the returned handle to stop.
        """
        return LiveQuery(
            self, listener, self.scheduler, self.refresh_window, on_error=on_error
        )

    # --- helpers ---

    def _check_type(self, record: Record) -> None:
        if not isinstance(record, self.model):
            raise TypeError(
                f"{type(self).__name__} stores {self.model.__name__}, "
                f"not {type(record).__name__}"
            )

    def _require_stored(self, record: T) -> None:
        self._check_type(record)
        if not record.is_persisted or not self.context.is_tracked(record):
            raise RecordNotFoundError(self.model.__name__, record.record_id)
