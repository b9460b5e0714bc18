"""Global pytest fixtures for ROSTER.

Tests are marked by the directory they live in (`unit`, `contract`,
`integration`, `functional`), so ``pytest -m unit`` selects the fast suite.
"""

from __future__ import annotations

from pathlib import Path

import pytest

# pylint: disable=unused-argument

pytest_plugins = [
    "tests.fixtures.sqlite",
    "tests.fixtures.datagen",
]

TESTS_ROOT = Path(__file__).parent.resolve()
DIRECTORY_MARKERS = ("unit", "contract", "integration", "functional")


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Add the marker named after an item's top-level test directory."""
    for item in items:
        path = item.path.resolve()
        for name in DIRECTORY_MARKERS:
            if TESTS_ROOT / name in path.parents:
                if not any(m.name == name for m in item.iter_markers()):
                    item.add_marker(getattr(pytest.mark, name))
                break
