"""Contract tests for PersistenceContext implementations.

Every adapter must stage writes until `save`, assign identities atomically,
track in-place mutations, keep one object per stored row and interpret the
predicate values the same way.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

import pytest

from roster.domain import relationships as rel
from roster.domain.models import Exam, SchoolClass, Student
from roster.interfaces.persistence import (
    ConstraintViolationError,
    RecordNotFoundError,
    asc,
    desc,
    field,
)
from tests.fixtures.datagen import NOW

if TYPE_CHECKING:
    from roster.interfaces.persistence import PersistenceContext

# --- staging and identities ---


def test_save_assigns_distinct_ids(context: PersistenceContext, make_student):
    """Every inserted record gets its own id on save."""
    students = [make_student() for _ in range(3)]
    for s in students:
        context.insert(s)
    assert all(s.record_id is None for s in students)

    context.save()

    ids = [s.record_id for s in students]
    assert None not in ids
    assert len(set(ids)) == 3


def test_inserts_are_invisible_until_saved(context: PersistenceContext, make_student):
    """fetch and count only see committed records."""
    context.insert(make_student())
    assert context.has_changes
    assert context.fetch(Student) == []
    assert context.count(Student) == 0

    context.save()
    assert context.count(Student) == 1
    assert not context.has_changes


def test_double_insert_is_idempotent(context: PersistenceContext, make_student):
    """Inserting the same object twice stores it once."""
    student = make_student()
    context.insert(student)
    context.insert(student)
    context.save()
    context.insert(student)
    context.save()
    assert context.count(Student) == 1


def test_fetch_returns_the_same_objects(context: PersistenceContext, make_student):
    """A stored row is always the same Python object."""
    student = make_student()
    context.insert(student)
    context.save()

    first = context.fetch(Student)
    second = context.fetch(Student)
    assert first[0] is student
    assert second[0] is student
    assert context.get(Student, student.record_id) is student


def test_get_unknown_id(context: PersistenceContext):
    """get returns None for ids it does not know."""
    assert context.get(Student, "missing") is None


def test_is_tracked(context: PersistenceContext, make_student):
    """Staged and stored records are tracked; strangers are not."""
    student, stranger = make_student(), make_student()
    context.insert(student)
    assert context.is_tracked(student)
    context.save()
    assert context.is_tracked(student)
    assert not context.is_tracked(stranger)


# --- deletes ---


def test_delete_removes_after_save(context: PersistenceContext, make_student):
    """Deletes are staged like inserts."""
    keep, drop = make_student(), make_student()
    context.insert(keep)
    context.insert(drop)
    context.save()

    context.delete(drop)
    assert context.count(Student) == 2
    context.save()

    assert context.fetch(Student) == [keep]
    assert context.get(Student, drop.record_id) is None
    assert not context.is_tracked(drop)


def test_delete_of_staged_insert_unstages(context: PersistenceContext, make_student):
    """Deleting an unsaved insert just forgets it."""
    student = make_student()
    context.insert(student)
    context.delete(student)
    context.save()
    assert student.record_id is None
    assert context.count(Student) == 0


def test_delete_untracked_raises(context: PersistenceContext, make_student):
    """Deleting a record the context never held is RecordNotFoundError."""
    with pytest.raises(RecordNotFoundError):
        context.delete(make_student())


# --- failures and rollback ---


def test_missing_required_field_fails_atomically(context: PersistenceContext, make_student):
    """A constraint violation assigns no ids and commits nothing."""
    good, bad = make_student(), make_student(email=None)
    context.insert(good)
    context.insert(bad)

    with pytest.raises(ConstraintViolationError):
        context.save()

    assert good.record_id is None and bad.record_id is None
    assert context.count(Student) == 0
    assert context.has_changes

    context.rollback()
    assert not context.has_changes


def test_dangling_relationship_is_rejected(context: PersistenceContext, make_student, make_class):
    """Linking to a record the context does not hold fails the save."""
    student, loose_class = make_student(), make_class()
    rel.enroll(student, loose_class)
    context.insert(student)

    with pytest.raises(ConstraintViolationError):
        context.save()
    assert student.record_id is None


def test_link_to_record_being_deleted_is_rejected(
    context: PersistenceContext, make_student, make_class
):
    """A record may not keep pointing at something deleted in the same save."""
    student, school_class = make_student(), make_class()
    context.insert(student)
    context.insert(school_class)
    context.save()

    rel.enroll(student, school_class)
    context.delete(school_class)
    with pytest.raises(ConstraintViolationError):
        context.save()


def test_mutations_are_tracked_and_saved(context: PersistenceContext, make_student):
    """In-place edits of stored records show up in has_changes and persist."""
    student = make_student(grade=10)
    context.insert(student)
    context.save()

    student.grade = 11
    assert context.has_changes
    context.save()
    assert not context.has_changes
    assert context.fetch(Student, field("grade").eq(11)) == [student]


def test_rollback_reverts_unsaved_mutations(context: PersistenceContext, make_student):
    """rollback puts stored records back to their last saved state."""
    student = make_student(name="Before")
    context.insert(student)
    context.save()

    student.name = "After"
    context.rollback()

    assert student.name == "Before"
    assert not context.has_changes


# --- queries ---


@pytest.fixture
def grades(context: PersistenceContext, make_student) -> list[Student]:
    """Four stored students across two grades."""
    students = [
        make_student(name="Charlie Brown", email="charlie@school.edu", grade=10),
        make_student(name="Alice Johnson", email="alice@school.edu", grade=10),
        make_student(name="Diana Prince", email="diana@school.edu", grade=12),
        make_student(name="Bob Smith", email="bob@school.edu", grade=11),
    ]
    for s in students:
        context.insert(s)
    context.save()
    return students


def test_default_order_is_record_id(context: PersistenceContext, grades):
    """Without an order, records come back by ascending record_id."""
    fetched = context.fetch(Student)
    assert [s.record_id for s in fetched] == sorted(s.record_id for s in grades)


def test_predicates_and_order(context: PersistenceContext, grades):
    """Comparison, conjunction and ordering agree across adapters."""
    names = lambda rs: [s.name for s in rs]  # noqa: E731

    assert names(context.fetch(Student, field("grade").eq(10), (asc("name"),))) == [
        "Alice Johnson",
        "Charlie Brown",
    ]
    assert names(context.fetch(Student, field("grade").ge(11), (desc("grade"),))) == [
        "Diana Prince",
        "Bob Smith",
    ]
    assert names(
        context.fetch(Student, field("grade").lt(12) & field("name").ne("Bob Smith"))
    ) == ["Charlie Brown", "Alice Johnson"]
    assert context.count(Student, field("grade").le(11)) == 3
    assert context.count(Student, field("grade").gt(12)) == 0


@pytest.mark.parametrize(
    "query",
    [
        lambda ctx: ctx.fetch(Student, field("nickname").eq("x")),
        lambda ctx: ctx.count(Student, field("nickname").eq("x")),
        lambda ctx: ctx.count(Student, field("grade").eq(10) & field("nickname").eq(1)),
        lambda ctx: ctx.fetch(Student, order=(asc("nickname"),)),
        lambda ctx: ctx.fetch(Student, field("classes").eq("x")),
    ],
    ids=["fetch", "count", "conjunction", "order", "relationship"],
)
def test_unknown_fields_are_rejected(context: PersistenceContext, query):
    """Both adapters refuse fields that are not stored scalars, stored rows or not."""
    with pytest.raises(ValueError, match="Student has no queryable field"):
        query(context)


def test_icontains_ignores_case(context: PersistenceContext, grades):
    """icontains is a case-insensitive substring match."""
    found = context.fetch(Student, field("email").icontains("ALICE@"))
    assert [s.name for s in found] == ["Alice Johnson"]
    assert context.count(Student, field("name").icontains("o")) == 3


def test_dates_compare_chronologically(context: PersistenceContext, make_exam):
    """Date predicates and ordering follow time, not text."""
    early = make_exam(date=NOW - timedelta(days=1))
    late = make_exam(date=NOW + timedelta(days=30))
    middle = make_exam(date=NOW + timedelta(hours=1))
    for e in (late, early, middle):
        context.insert(e)
    context.save()

    upcoming = context.fetch(Exam, field("date").gt(NOW), (asc("date"),))
    assert upcoming == [middle, late]
    window = context.fetch(
        Exam, field("date").ge(NOW - timedelta(days=1)) & field("date").le(NOW)
    )
    assert window == [early]


# --- relationships ---


def test_relationships_are_stored(context: PersistenceContext, make_student, make_class, make_exam):
    """Links saved through one side are visible from the other."""
    student, school_class, exam = make_student(), make_class(), make_exam()
    rel.enroll(student, school_class)
    rel.register(student, exam)
    rel.assign_exam(exam, school_class)
    for record in (school_class, student, exam):
        context.insert(record)
    context.save()

    (stored_class,) = context.fetch(SchoolClass)
    assert stored_class.students == [student]
    assert stored_class.exams == [exam]
    assert exam.class_item is stored_class
    assert exam.students == [student]


def test_nullified_links_are_saved(context: PersistenceContext, make_student, make_class):
    """Deleting with detached links leaves the other side stored and unlinked."""
    student, school_class = make_student(), make_class()
    rel.enroll(student, school_class)
    context.insert(student)
    context.insert(school_class)
    context.save()

    rel.detach(school_class)
    context.delete(school_class)
    context.save()

    assert context.fetch(Student) == [student]
    assert student.classes == []
    assert context.count(SchoolClass) == 0
