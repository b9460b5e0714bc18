"""Unit tests for LiveQuery: snapshot, coalescing, merge, dedup and disposal."""

from __future__ import annotations

import logging

import pytest

from roster.interfaces.persistence import StoreUnavailableError
from tests.fixtures.datagen import WINDOW

# pylint: disable=redefined-outer-name


@pytest.fixture
def deliveries() -> list[list]:
    """Lists handed to the live-query listener, in delivery order."""
    return []


def ids(records) -> list:
    return [r.record_id for r in records]


def test_first_delivery_is_current_snapshot(repos, make_student, deliveries):
    a = repos.students.create(make_student())
    b = repos.students.create(make_student())

    query = repos.students.observe_all(deliveries.append)

    assert deliveries == [[a, b]]
    assert query.value == [a, b]
    assert query.refresh_count == 0


def test_empty_repository_delivers_empty_list(repos, deliveries):
    repos.students.observe_all(deliveries.append)
    assert deliveries == [[]]


def test_create_refreshes_after_window(repos, scheduler, make_student, deliveries):
    repos.students.observe_all(deliveries.append)
    student = repos.students.create(make_student())

    assert len(deliveries) == 1  # nothing before the window elapses
    scheduler.advance(WINDOW / 2)
    assert len(deliveries) == 1

    scheduler.advance(WINDOW / 2)
    assert deliveries[-1] == [student]


def test_burst_of_creates_is_coalesced(repos, scheduler, make_student, deliveries):
    query = repos.students.observe_all(deliveries.append)
    created = [repos.students.create(make_student()) for _ in range(5)]

    scheduler.run_pending()

    assert 1 <= query.refresh_count <= 5
    final = deliveries[-1]
    assert len(final) == 5
    assert len({r.record_id for r in final}) == 5
    assert set(ids(final)) == set(ids(created))
    assert all(delivery != deliveries[i] for i, delivery in enumerate(deliveries[1:]))


def test_refresh_with_same_ids_is_not_delivered(repos, scheduler, make_student, deliveries):
    """A re-fetch that yields the same ordered ids is dropped."""
    repos.students.create(make_student())
    query = repos.students.observe_all(deliveries.append)

    stray = make_student()
    repos.students.create(stray)
    repos.students.delete(stray)
    scheduler.run_pending()

    assert query.refresh_count == 1
    assert len(deliveries) == 1


def test_update_merges_in_place_without_fetch(repos, scheduler, make_student, deliveries):
    a, b, c = (repos.students.create(make_student()) for _ in range(3))
    query = repos.students.observe_all(deliveries.append)

    b.name = "Renamed"
    repos.students.update(b)

    assert query.refresh_count == 0
    assert scheduler.pending == 0
    assert len(deliveries) == 2
    assert ids(deliveries[-1]) == ids([a, b, c])
    assert deliveries[-1][1].name == "Renamed"


def test_update_of_unknown_record_is_ignored(repos, make_student, deliveries):
    """Updates for records the query never delivered do nothing."""
    query = repos.students.observe_all(deliveries.append)
    late = repos.students.create(make_student())  # refresh not yet run

    late.grade = 12
    repos.students.update(late)

    assert len(deliveries) == 1
    assert query.value == []


def test_delete_removes_after_window(repos, scheduler, make_student, deliveries):
    a = repos.students.create(make_student())
    b = repos.students.create(make_student())
    repos.students.observe_all(deliveries.append)

    repos.students.delete(a)
    scheduler.advance(WINDOW)

    assert deliveries[-1] == [b]


def test_delete_all_emits_one_refresh(repos, scheduler, make_student, deliveries):
    for _ in range(3):
        repos.students.create(make_student())
    query = repos.students.observe_all(deliveries.append)

    repos.students.delete_all()
    scheduler.run_pending()

    assert query.refresh_count == 1
    assert deliveries[-1] == []


def test_dispose_stops_delivery_and_cancels_refresh(
    repos, scheduler, make_student, deliveries
):
    query = repos.students.observe_all(deliveries.append)
    repos.students.create(make_student())
    assert scheduler.pending == 1

    query.dispose()
    query.dispose()  # idempotent

    assert query.is_disposed
    assert scheduler.pending == 0
    assert repos.students.bus.listener_count == 0
    scheduler.run_pending()
    repos.students.create(make_student())
    assert deliveries == [[]]


def test_context_manager_disposes(repos, deliveries):
    with repos.students.observe_all(deliveries.append) as query:
        assert not query.is_disposed
    assert query.is_disposed


def test_failed_refresh_is_logged_and_skipped(
    repos, scheduler, make_student, deliveries, monkeypatch, caplog
):
    a = repos.students.create(make_student())
    query = repos.students.observe_all(deliveries.append)

    def unavailable():
        raise StoreUnavailableError("database is gone")

    monkeypatch.setattr(repos.students, "fetch_all", unavailable)
    repos.students.create(make_student())
    with caplog.at_level(logging.WARNING):
        scheduler.run_pending()

    assert query.refresh_count == 1
    assert deliveries == [[a]]
    assert query.value == [a]
    assert "Re-fetch of Student failed" in caplog.text


def test_failed_initial_fetch_starts_empty(repos, monkeypatch, deliveries):
    def unavailable():
        raise StoreUnavailableError("database is gone")

    monkeypatch.setattr(repos.students, "fetch_all", unavailable)
    query = repos.students.observe_all(deliveries.append)

    assert deliveries == [[]]
    assert query.value == []


def test_fetch_failures_go_to_on_error_not_the_listener(
    repos, scheduler, make_student, deliveries, monkeypatch
):
    errors: list = []
    outage = StoreUnavailableError("database is gone")

    def unavailable():
        raise outage

    monkeypatch.setattr(repos.students, "fetch_all", unavailable)
    query = repos.students.observe_all(deliveries.append, on_error=errors.append)
    assert deliveries == [[]]
    assert errors == [outage]

    repos.students.create(make_student())
    scheduler.run_pending()
    assert deliveries == [[]]
    assert errors == [outage, outage]

    query.dispose()
    repos.students.create(make_student())
    scheduler.run_pending()
    assert len(errors) == 2


def test_queries_are_independent(repos, scheduler, make_student):
    """Disposing one query leaves others on the same repository running."""
    first, second = [], []
    q1 = repos.students.observe_all(first.append)
    repos.students.observe_all(second.append)

    q1.dispose()
    student = repos.students.create(make_student())
    scheduler.run_pending()

    assert first == [[]]
    assert second == [[], [student]]


def test_repositories_only_notify_their_own_queries(
    repos, scheduler, make_class, deliveries
):
    query = repos.students.observe_all(deliveries.append)
    repos.classes.create(make_class())
    scheduler.run_pending()

    assert query.refresh_count == 0
    assert deliveries == [[]]
