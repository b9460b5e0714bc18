"""Fixtures for IdGenerator contract tests."""

from collections.abc import Iterator

import pytest

from roster.adapters.id_generators import (
    SimpleIdGenerator,
    ULIDGenerator,
    UUIDv4Generator,
)
from roster.interfaces.id_generator import IdGenerator


@pytest.fixture(params=["ulid", "uuid4", "simple"])
def id_generator(request: pytest.FixtureRequest) -> Iterator[IdGenerator]:
    """A fresh generator of each kind."""
    match request.param:
        case "ulid":
            yield ULIDGenerator()
        case "uuid4":
            yield UUIDv4Generator()
        case "simple":
            yield SimpleIdGenerator()
        case _:
            raise ValueError(f"unknown id generator type: {request.param}")


@pytest.fixture(params=["ulid", "simple"])
def ordered_id_generator(request: pytest.FixtureRequest) -> Iterator[IdGenerator]:
    """Generators whose ids sort in creation order."""
    match request.param:
        case "ulid":
            yield ULIDGenerator()
        case "simple":
            yield SimpleIdGenerator()
        case _:
            raise ValueError(f"unknown id generator type: {request.param}")
