"""Unit tests for domain error messages and attributes."""

import pytest

from roster.domain.errors import (
    AlreadyEnrolledError,
    AlreadyRegisteredError,
    ClassFullError,
    DomainError,
    ExamHasPassedError,
    InvalidFieldError,
    NotEnrolledError,
    NotRegisteredError,
)


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (InvalidFieldError("title", "must not be blank"), "Invalid title: must not be blank"),
        (ClassFullError("Physics I", 30), "maximum capacity of 30"),
        (AlreadyEnrolledError("Ada", "Physics I"), "already enrolled in 'Physics I'"),
        (NotEnrolledError("Ada", "Physics I"), "is not enrolled in 'Physics I'"),
        (AlreadyRegisteredError("Ada", "Final"), "already registered for 'Final'"),
        (NotRegisteredError("Ada", "Final"), "is not registered for 'Final'"),
        (ExamHasPassedError("Final"), "'Final' has already taken place"),
    ],
)
def test_messages(error, expected):
    """Every domain error is a DomainError with a readable message."""
    assert isinstance(error, DomainError)
    assert expected in str(error)


def test_class_full_keeps_details():
    """ClassFullError exposes the class and capacity."""
    err = ClassFullError("Physics I", 2)
    assert (err.class_title, err.capacity) == ("Physics I", 2)
