"""Persistence context interface for ROSTER.

This module defines:
- The `PersistenceContext` port (framework-free ABC) the repositories wrap.
- Opaque predicate and ordering values handed to a context.
- A small, adapter-agnostic exception hierarchy for precise error handling.

Layering & dependency rules:
- Lives under `roster.interfaces`. Do NOT import from adapters, bootstrap, or entrypoints.
- Safe to import from service layer and adapters.

Contract overview
-----------------
Writes:
- `insert` and `delete` only stage changes; nothing is visible to `fetch`
  or `count` until `save` succeeds.
- `save` is atomic. On success, every staged insert receives its `record_id`
  and every in-place mutation of a tracked record is persisted.
- On failure `save` raises a `PersistenceError`, assigns no identities and
  leaves the staged changes in place; callers decide whether to `rollback`.

Reads:
- `fetch(model, predicate, order)` returns committed records. Without an
  explicit order, records come back ascending by `record_id`.
- A context returns the same object for the same stored row for as long as
  it lives (identity map).

Predicates:
- Built with `field(name)` comparisons combined with `&`; ordering with
  `asc(name)` / `desc(name)`. Only adapters interpret them.
"""

from __future__ import annotations

import abc
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from roster.domain.models import Record

R = TypeVar("R", bound="Record")

# --- Exceptions to standardize adapter behavior ---


class PersistenceError(Exception):
    """Base class for ROSTER persistence errors."""


class RecordNotFoundError(PersistenceError):
    """The record is not tracked by the context (or no longer exists)."""

    def __init__(self, model_name: str, record_id: str | None) -> None:
        super().__init__(f"{model_name} with ID {record_id} not found.")
        self.model_name = model_name
        self.record_id = record_id


class ConstraintViolationError(PersistenceError):
    """A required value is missing or a relationship points nowhere."""


class StoreUnavailableError(PersistenceError):
    """Operational/timeout/connection errors; callers may retry."""


# --- Predicates ---


class Operator(str, Enum):
    """Comparison operators understood by every adapter."""

    EQ = "eq"
    NE = "ne"
    LT = "lt"
    LE = "le"
    GT = "gt"
    GE = "ge"
    ICONTAINS = "icontains"


class Predicate:
    """Base class for predicate values."""

    def __and__(self, other: Predicate) -> Predicate:
        return AllOf((self, other))


@dataclass(frozen=True)
class Condition(Predicate):
    """Compare one record attribute against a value."""

    field: str
    op: Operator
    value: Any


@dataclass(frozen=True)
class AllOf(Predicate):
    """Conjunction of predicates."""

    predicates: tuple[Predicate, ...]

    def __and__(self, other: Predicate) -> Predicate:
        return AllOf((*self.predicates, other))


@dataclass(frozen=True)
class Field:
    """Predicate builder for one record attribute."""

    name: str

    def eq(self, value: Any) -> Condition:
        """`attribute == value`"""
        return Condition(self.name, Operator.EQ, value)

    def ne(self, value: Any) -> Condition:
        """`attribute != value`"""
        return Condition(self.name, Operator.NE, value)

    def lt(self, value: Any) -> Condition:
        """`attribute < value`"""
        return Condition(self.name, Operator.LT, value)

    def le(self, value: Any) -> Condition:
        """`attribute <= value`"""
        return Condition(self.name, Operator.LE, value)

    def gt(self, value: Any) -> Condition:
        """`attribute > value`"""
        return Condition(self.name, Operator.GT, value)

    def ge(self, value: Any) -> Condition:
        """`attribute >= value`"""
        return Condition(self.name, Operator.GE, value)

    def icontains(self, value: str) -> Condition:
        """Case-insensitive substring match."""
        return Condition(self.name, Operator.ICONTAINS, value)


def field(name: str) -> Field:
    """Start a predicate on the attribute called `name`."""
    return Field(name)


@dataclass(frozen=True)
class SortKey:
    """One ordering term."""

    field: str
    descending: bool = False


def asc(name: str) -> SortKey:
    """Ascending order on `name`."""
    return SortKey(name)


def desc(name: str) -> SortKey:
    """Descending order on `name`."""
    return SortKey(name, descending=True)


# --- Persistence Context Interface ---


class PersistenceContext(abc.ABC):
    """An abstract transactional record store."""

    @abc.abstractmethod
    def insert(self, record: Record) -> None:
        """Stage a new record. Inserting an already tracked record is a no-op."""

    @abc.abstractmethod
    def delete(self, record: Record) -> None:
        """Stage the removal of a tracked record.

        Raises:
            RecordNotFoundError: If the record is not tracked by this context.
        """

    @abc.abstractmethod
    def is_tracked(self, record: Record) -> bool:
        """True if this very object is staged in or loaded by this context."""

    @abc.abstractmethod
    def fetch(
        self,
        model: type[R],
        predicate: Predicate | None = None,
        order: Sequence[SortKey] = (),
    ) -> list[R]:
        """Return committed records of `model` matching `predicate`.

        Raises:
            StoreUnavailableError: For operational errors in the backing store.
        """

    @abc.abstractmethod
    def count(self, model: type[Record], predicate: Predicate | None = None) -> int:
        """Count committed records of `model` matching `predicate`."""

    @abc.abstractmethod
    def get(self, model: type[R], record_id: str) -> R | None:
        """Return the record with `record_id`, or None."""

    @abc.abstractmethod
    def save(self) -> None:
        """Commit staged inserts, deletes and in-place mutations atomically.

        Raises:
            ConstraintViolationError: If a required value is missing or a
                relationship references a record the context does not track.
            StoreUnavailableError: For operational errors; callers may retry.
        """

    @abc.abstractmethod
    def rollback(self) -> None:
        """Discard staged inserts and deletes."""

    @property
    @abc.abstractmethod
    def has_changes(self) -> bool:
        """True if `save` has something to write."""

    def close(self) -> None:
        """Release resources held by the context."""
