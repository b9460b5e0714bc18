"""Unit tests for the composition root."""

from __future__ import annotations

import pytest

from roster.adapters.persistence import (
    InMemoryPersistenceContext,
    SqlAlchemyPersistenceContext,
)
from roster.adapters.scheduling import ManualScheduler
from roster.bootstrap import bootstrap, build_context, inject_dependencies
from roster.config import Settings
from roster.domain.errors import ClassFullError
from roster.service_layer import commands


def test_inject_dependencies_passes_only_requested_names():
    def handler(cmd, settings):
        return cmd, settings

    injected = inject_dependencies(handler, {"settings": "S", "repositories": "R"})
    assert injected("cmd") == ("cmd", "S")


def test_build_context_defaults_to_memory():
    assert isinstance(build_context(None), InMemoryPersistenceContext)


def test_build_context_for_url():
    ctx = build_context("sqlite://")
    try:
        assert isinstance(ctx, SqlAlchemyPersistenceContext)
    finally:
        ctx.close()


def test_bootstrap_shares_one_context():
    settings = Settings(refresh_window_ms=250)
    with bootstrap(settings=settings) as app:
        assert isinstance(app.scheduler, ManualScheduler)
        repos = app.repositories
        assert repos.students.context is repos.classes.context is repos.exams.context
        assert repos.students.context is app.context
        assert repos.exams.refresh_window == 0.25
        assert app.message_bus.repositories is repos


def test_handlers_receive_settings(scheduler):
    with bootstrap(scheduler=scheduler, settings=Settings(class_capacity=1)) as app:
        bus = app.message_bus
        class_id = bus.handle(commands.CreateClass("Solo", "Music", "1"))
        first = bus.handle(commands.CreateStudent("A", "a@school.edu", 9))
        second = bus.handle(commands.CreateStudent("B", "b@school.edu", 9))
        bus.handle(commands.EnrollStudent(first, class_id))
        with pytest.raises(ClassFullError):
            bus.handle(commands.EnrollStudent(second, class_id))
