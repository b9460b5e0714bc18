"""Fixtures for PersistenceContext contract tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from roster.adapters.id_generators import SimpleIdGenerator
from roster.adapters.persistence import (
    InMemoryPersistenceContext,
    SqlAlchemyPersistenceContext,
)
from roster.interfaces.persistence import PersistenceContext


@pytest.fixture(params=["memory", "sqlite"])
def context(request: pytest.FixtureRequest) -> Iterator[PersistenceContext]:
    """A fresh, empty context for each adapter.

    Supported params:
      - `"memory"` → InMemoryPersistenceContext
      - `"sqlite"` → SqlAlchemyPersistenceContext on in-memory SQLite
    """
    match request.param:
        case "memory":
            ctx: PersistenceContext = InMemoryPersistenceContext(SimpleIdGenerator())
        case "sqlite":
            engine = request.getfixturevalue("sqlite_engine_memory")
            ctx = SqlAlchemyPersistenceContext(engine, SimpleIdGenerator())
        case _:
            raise ValueError(f"unknown context type: {request.param}")
    yield ctx
    ctx.rollback()
