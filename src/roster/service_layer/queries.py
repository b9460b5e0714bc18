"""Read-side helpers that do not touch storage."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from roster.config import DEFAULT_CLASS_CAPACITY

if TYPE_CHECKING:
    from roster.domain.models import SchoolClass, Student


def search_students(query: str, students: Iterable[Student]) -> list[Student]:
    """Students whose name or email contains `query`, ignoring case.

    A blank query returns every student unchanged.
    """
    needle = query.strip().casefold()
    if not needle:
        return list(students)
    return [
        s
        for s in students
        if needle in s.name.casefold() or needle in s.email.casefold()
    ]


def capacity_usage(
    school_class: SchoolClass, capacity: int = DEFAULT_CLASS_CAPACITY
) -> float:
    """Fraction of `capacity` taken by enrolled students (may exceed 1.0)."""
    return len(school_class.students) / capacity


def is_class_full(
    school_class: SchoolClass, capacity: int = DEFAULT_CLASS_CAPACITY
) -> bool:
    """True if no more students may enrol."""
    return len(school_class.students) >= capacity
