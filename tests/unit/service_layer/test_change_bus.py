"""Unit tests for ChangeBus delivery rules."""

from __future__ import annotations

import logging

import pytest

from roster.domain.models import Student
from roster.service_layer.change_bus import (
    BatchChange,
    ChangeBus,
    Created,
    Deleted,
    Updated,
)


def test_structural_flags():
    """Only Updated leaves the stored set alone."""
    student = Student(name="A", email="a@school.edu", grade=9)
    assert Created(student).is_structural
    assert Deleted("01").is_structural
    assert BatchChange().is_structural
    assert not Updated(student).is_structural


def test_every_listener_receives_each_event():
    bus = ChangeBus()
    first, second = [], []
    bus.subscribe(first.append)
    bus.subscribe(second.append)

    bus.publish(Deleted("01"))

    assert first == [Deleted("01")]
    assert second == [Deleted("01")]


def test_unsubscribe_is_idempotent():
    bus = ChangeBus()
    seen = []
    unsubscribe = bus.subscribe(seen.append)
    assert bus.listener_count == 1

    unsubscribe()
    unsubscribe()
    bus.publish(BatchChange())

    assert bus.listener_count == 0
    assert seen == []


def test_reentrant_publish_is_queued_in_order():
    """Events published from inside a listener reach everyone after the current one."""
    bus = ChangeBus()
    first_seen, second_seen = [], []

    def republish(event):
        first_seen.append(event)
        if event == Deleted("01"):
            bus.publish(Deleted("02"))

    bus.subscribe(republish)
    bus.subscribe(second_seen.append)

    bus.publish(Deleted("01"))

    assert first_seen == [Deleted("01"), Deleted("02")]
    assert second_seen == [Deleted("01"), Deleted("02")]


def test_failing_listener_does_not_stop_delivery(caplog: pytest.LogCaptureFixture):
    bus = ChangeBus()
    seen = []

    def boom(_event):
        raise RuntimeError("listener bug")

    bus.subscribe(boom)
    bus.subscribe(seen.append)

    with caplog.at_level(logging.ERROR, logger="roster.service_layer.change_bus"):
        bus.publish(BatchChange())

    assert seen == [BatchChange()]
    assert "Change listener" in caplog.text


def test_listener_added_during_delivery_waits_for_next_event():
    bus = ChangeBus()
    late = []

    def add_late(_event):
        bus.subscribe(late.append)

    unsubscribe = bus.subscribe(add_late)
    bus.publish(Deleted("01"))
    unsubscribe()
    assert late == []

    bus.publish(Deleted("02"))
    assert late == [Deleted("02")]
