"""In-memory PersistenceContext implementation.

Used by unit tests and by `bootstrap` when no database URL is configured.
Committed records live in per-model dictionaries keyed by `record_id`; the
objects themselves are the store, so in-place mutations are visible at once
and `save` only validates them and refreshes the change-tracking snapshots.

Note: This implementation is not thread-safe and is intended for a single
owning context.
"""

from __future__ import annotations

import logging
import operator
from collections import defaultdict
from collections.abc import Callable, Sequence
from typing import Any

from roster.adapters.id_generators import ULIDGenerator
from roster.domain.models import Record
from roster.interfaces.id_generator import IdGenerator
from roster.interfaces.persistence import (
    AllOf,
    Condition,
    ConstraintViolationError,
    Operator,
    PersistenceContext,
    Predicate,
    R,
    RecordNotFoundError,
    SortKey,
)

from . import tracking

logger = logging.getLogger(__name__)


def _icontains(value: Any, needle: Any) -> bool:
    return value is not None and str(needle).lower() in str(value).lower()


_OPERATORS: dict[Operator, Callable[[Any, Any], bool]] = {
    Operator.EQ: operator.eq,
    Operator.NE: operator.ne,
    Operator.LT: operator.lt,
    Operator.LE: operator.le,
    Operator.GT: operator.gt,
    Operator.GE: operator.ge,
    Operator.ICONTAINS: _icontains,
}


def matches(record: Record, predicate: Predicate | None) -> bool:
    """Evaluate a predicate value against a record."""
    if predicate is None:
        return True
    if isinstance(predicate, AllOf):
        return all(matches(record, p) for p in predicate.predicates)
    if isinstance(predicate, Condition):
        value = getattr(record, predicate.field)
        if value is None and predicate.op not in (Operator.EQ, Operator.NE):
            return False
        return _OPERATORS[predicate.op](value, predicate.value)
    raise TypeError(f"Unsupported predicate: {predicate!r}")


def sort_records(records: list[R], order: Sequence[SortKey]) -> list[R]:
    """Sort by record_id, then apply `order` (last key is least significant)."""
    result = sorted(records, key=lambda r: r.record_id or "")
    for key in reversed(order):
        result.sort(key=lambda r, k=key: getattr(r, k.field), reverse=key.descending)
    return result


class InMemoryPersistenceContext(PersistenceContext):
    """Dictionary-backed persistence context."""

    def __init__(self, id_generator: IdGenerator | None = None) -> None:
        self.id_generator = id_generator if id_generator is not None else ULIDGenerator()
        self._committed: dict[type[Record], dict[str, Record]] = defaultdict(dict)
        self._snapshots: dict[str, tracking.RecordState] = {}
        self._staged_inserts: list[Record] = []
        self._staged_deletes: list[Record] = []

    # --- staging ---

    def insert(self, record: Record) -> None:
        if self.is_tracked(record):
            return
        self._staged_inserts.append(record)

    def delete(self, record: Record) -> None:
        for index, staged in enumerate(self._staged_inserts):
            if staged is record:
                del self._staged_inserts[index]
                return
        if not self._is_committed(record):
            raise RecordNotFoundError(type(record).__name__, record.record_id)
        if not any(staged is record for staged in self._staged_deletes):
            self._staged_deletes.append(record)

    def is_tracked(self, record: Record) -> bool:
        return self._is_committed(record) or any(
            staged is record for staged in self._staged_inserts
        )

    def _is_committed(self, record: Record) -> bool:
        if record.record_id is None:
            return False
        stored = self._committed[tracking.model_of(record)].get(record.record_id)
        return stored is record

    # --- reads ---

    def fetch(
        self,
        model: type[R],
        predicate: Predicate | None = None,
        order: Sequence[SortKey] = (),
    ) -> list[R]:
        tracking.check_query_fields(model, predicate, order)
        found = [r for r in self._committed[model].values() if matches(r, predicate)]
        return sort_records(found, order)  # type: ignore[arg-type]

    def count(self, model: type[Record], predicate: Predicate | None = None) -> int:
        tracking.check_query_fields(model, predicate)
        return sum(1 for r in self._committed[model].values() if matches(r, predicate))

    def get(self, model: type[R], record_id: str) -> R | None:
        return self._committed[model].get(record_id)  # type: ignore[return-value]

    # --- transactions ---

    @property
    def has_changes(self) -> bool:
        return bool(
            self._staged_inserts or self._staged_deletes or self._dirty_records()
        )

    def _dirty_records(self) -> list[Record]:
        return [
            record
            for records in self._committed.values()
            for record in records.values()
            if tracking.capture(record).differs_from(self._snapshots[record.record_id])  # type: ignore[index]
        ]

    def save(self) -> None:
        deleting = {id(r) for r in self._staged_deletes}
        to_write = [
            *self._staged_inserts,
            *(r for r in self._dirty_records() if id(r) not in deleting),
        ]
        if not to_write and not self._staged_deletes:
            return

        inserting = {id(r) for r in self._staged_inserts}
        for record in to_write:
            tracking.check_required(record)
            for other in tracking.linked(record):
                if id(other) in deleting or not (
                    id(other) in inserting or self._is_committed(other)
                ):
                    raise ConstraintViolationError(
                        f"{type(record).__name__} references a "
                        f"{type(other).__name__} that is not stored."
                    )

        for record in self._staged_inserts:
            record.record_id = self.id_generator.new_id()
            self._committed[tracking.model_of(record)][record.record_id] = record
        for record in self._staged_deletes:
            del self._committed[tracking.model_of(record)][record.record_id]  # type: ignore[arg-type]
            self._snapshots.pop(record.record_id, None)  # type: ignore[arg-type]
        for record in to_write:
            self._snapshots[record.record_id] = tracking.capture(record)  # type: ignore[index]

        logger.debug(
            "Saved %d insert(s), %d delete(s), %d update(s)",
            len(self._staged_inserts),
            len(self._staged_deletes),
            len(to_write) - len(self._staged_inserts),
        )
        self._staged_inserts.clear()
        self._staged_deletes.clear()

    def rollback(self) -> None:
        self._staged_inserts.clear()
        self._staged_deletes.clear()
        for records in self._committed.values():
            for record in records.values():
                tracking.restore(record, self._snapshots[record.record_id])  # type: ignore[index]

    def close(self) -> None:
        self.rollback()
        self._committed.clear()
        self._snapshots.clear()
