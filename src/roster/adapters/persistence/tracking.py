"""Change tracking shared by the persistence adapters.

A context captures a :class:`RecordState` for every record it has committed.
Comparing a fresh capture against the stored one tells the context whether a
record was mutated in place since the last save, and the stored state is what
``rollback`` puts back.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from roster.domain.models import Exam, Record, SchoolClass, Student
from roster.interfaces.persistence import (
    AllOf,
    Condition,
    ConstraintViolationError,
    Predicate,
    SortKey,
)

#: Models in dependency order (a model only references models listed before it,
#: except for many-to-many links which are written after all rows).
MODELS: tuple[type[Record], ...] = (SchoolClass, Student, Exam)

SCALAR_FIELDS: dict[type[Record], tuple[str, ...]] = {
    Student: ("name", "email", "grade", "created_at"),
    SchoolClass: ("title", "subject", "room", "created_at"),
    Exam: ("title", "subject", "date", "max_score", "created_at"),
}

#: Collection relationships per model.
LIST_LINKS: dict[type[Record], tuple[str, ...]] = {
    Student: ("classes", "exams"),
    SchoolClass: ("students", "exams"),
    Exam: ("students",),
}

#: Single-valued relationships per model.
REF_LINKS: dict[type[Record], tuple[str, ...]] = {
    Student: (),
    SchoolClass: (),
    Exam: ("class_item",),
}


def model_of(record: Record) -> type[Record]:
    """Return the registered model class for `record`."""
    for model in MODELS:
        if isinstance(record, model):
            return model
    raise TypeError(f"Unsupported record type: {type(record).__name__}")


@dataclass(frozen=True)
class RecordState:
    """Scalar values and related objects of a record at one point in time."""

    scalars: tuple[tuple[str, Any], ...]
    lists: tuple[tuple[str, tuple[Record, ...]], ...]
    refs: tuple[tuple[str, Record | None], ...]

    def differs_from(self, other: RecordState) -> bool:
        """True if any scalar or link differs (links compared by identity)."""
        if self.scalars != other.scalars:
            return True
        for (_, mine), (_, theirs) in zip(self.lists, other.lists):
            if len(mine) != len(theirs) or any(
                a is not b for a, b in zip(mine, theirs)
            ):
                return True
        return any(a is not b for (_, a), (_, b) in zip(self.refs, other.refs))


def capture(record: Record) -> RecordState:
    """Snapshot `record`."""
    model = model_of(record)
    return RecordState(
        scalars=tuple((name, getattr(record, name)) for name in SCALAR_FIELDS[model]),
        lists=tuple(
            (name, tuple(getattr(record, name))) for name in LIST_LINKS[model]
        ),
        refs=tuple((name, getattr(record, name)) for name in REF_LINKS[model]),
    )


def restore(record: Record, state: RecordState) -> None:
    """Put `record` back into `state`."""
    for name, value in state.scalars:
        setattr(record, name, value)
    for name, related in state.lists:
        getattr(record, name)[:] = list(related)
    for name, ref in state.refs:
        setattr(record, name, ref)


def linked(record: Record) -> Iterator[Record]:
    """Yield every record `record` links to."""
    model = model_of(record)
    for name in LIST_LINKS[model]:
        yield from getattr(record, name)
    for name in REF_LINKS[model]:
        if (ref := getattr(record, name)) is not None:
            yield ref


def check_required(record: Record) -> None:
    """Raise if a required scalar is missing.

    Raises:
        ConstraintViolationError: naming the first missing field.
    """
    for name in record.required:
        if getattr(record, name, None) is None:
            raise ConstraintViolationError(
                f"{type(record).__name__}.{name} is required."
            )


def _predicate_fields(predicate: Predicate) -> Iterator[str]:
    if isinstance(predicate, AllOf):
        for part in predicate.predicates:
            yield from _predicate_fields(part)
    elif isinstance(predicate, Condition):
        yield predicate.field


def check_query_fields(
    model: type[Record], predicate: Predicate | None, order: Sequence[SortKey] = ()
) -> None:
    """Reject filters and sort keys on anything but a stored scalar of `model`.

    Raises:
        ValueError: naming the first unknown field.
    """
    names = list(_predicate_fields(predicate)) if predicate is not None else []
    names.extend(key.field for key in order)
    for name in names:
        if name not in SCALAR_FIELDS[model]:
            raise ValueError(f"{model.__name__} has no queryable field {name!r}")
