"""Unit tests for list view states."""

from __future__ import annotations

from datetime import timedelta

from roster.interfaces.persistence import StoreUnavailableError
from roster.service_layer.view_state import (
    ListViewState,
    class_list_state,
    exam_list_state,
    student_list_state,
    text_matcher,
)
from tests.fixtures.datagen import NOW


def test_student_list_is_sorted_and_searchable(repos, scheduler, make_student):
    repos.students.create(make_student(name="Charlie Brown"))
    state = student_list_state(repos.students)
    assert not state.is_loading
    assert [s.name for s in state.items] == ["Charlie Brown"]

    repos.students.create(make_student(name="Alice Johnson", email="alice@school.edu"))
    scheduler.run_pending()
    assert [s.name for s in state.items] == ["Alice Johnson", "Charlie Brown"]

    state.search_text = "ALICE"
    assert [s.name for s in state.filtered] == ["Alice Johnson"]
    state.search_text = ""
    assert state.filtered == state.items


def test_filter_survives_refresh(repos, scheduler, make_student):
    state = student_list_state(repos.students)
    state.search_text = "bob"

    repos.students.create(make_student(name="Bob Smith"))
    repos.students.create(make_student(name="Diana Prince"))
    scheduler.run_pending()

    assert [s.name for s in state.filtered] == ["Bob Smith"]
    assert len(state.items) == 2


def test_on_change_and_close(repos, scheduler, make_class):
    changes = []
    state = ListViewState(
        repos.classes, lambda c: c.title, text_matcher("title"), on_change=changes.append
    )
    assert changes == [state]

    repos.classes.create(make_class(title="Algebra", subject="Mathematics"))
    scheduler.run_pending()
    assert changes == [state, state]

    state.close()
    repos.classes.create(make_class())
    scheduler.run_pending()
    assert len(state.items) == 1


def test_class_search_by_subject(repos, make_class):
    repos.classes.create(make_class(title="Physics I", subject="Physics"))
    repos.classes.create(make_class(title="Poetry", subject="English"))
    state = class_list_state(repos.classes)

    state.search_text = "english"
    assert [c.title for c in state.filtered] == ["Poetry"]


def test_exams_sorted_by_date(repos, make_exam):
    late = repos.exams.create(make_exam(title="Final", date=NOW + timedelta(days=60)))
    early = repos.exams.create(make_exam(title="Quiz", date=NOW + timedelta(days=1)))

    state = exam_list_state(repos.exams)
    assert state.items == [early, late]


def test_text_matcher_handles_blank(make_class):
    records = [make_class(title="A"), make_class(title="B")]
    match = text_matcher("title")
    assert match("", records) == records
    assert match("b", records) == [records[1]]


def test_error_flag_tracks_fetch_failures(repos, scheduler, make_student, monkeypatch):
    def unavailable():
        raise StoreUnavailableError("database is gone")

    monkeypatch.setattr(repos.students, "fetch_all", unavailable)
    changes: list = []
    state = ListViewState(
        repos.students, lambda s: s.name, text_matcher("name"), changes.append
    )
    assert not state.is_loading
    assert isinstance(state.error, StoreUnavailableError)
    assert state.items == []
    assert changes[-1] is state

    monkeypatch.undo()
    student = repos.students.create(make_student())
    scheduler.run_pending()

    assert state.error is None
    assert state.items == [student]
    state.close()
