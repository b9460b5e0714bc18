"""Fixtures for CLI functional tests."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner, Result
from sqlalchemy.engine import URL

from roster.entrypoints.cli.main import roster as roster_cli

# pylint: disable=redefined-outer-name


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Iterator[None]:
    """The CLI rewires the root logger; put it back after each test."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    """URL of an empty (unmigrated) SQLite file."""
    return str(URL.create("sqlite+pysqlite", database=str(tmp_path / "cli.db")))


@pytest.fixture
def run_cli(tmp_path: Path, db_url: str) -> Callable[..., Result]:
    """Invoke ``roster`` with the test database and a temp log path.

    Extra keyword arguments are added to (or override) the environment.
    """

    def _run(*args: str, **env: str) -> Result:
        runner = CliRunner(
            env={
                "ROSTER_DB_URL": db_url,
                "ROSTER_LOG_PATH": str(tmp_path / "logs" / "latest.log"),
                "COLUMNS": "200",
                **env,
            }
        )
        return runner.invoke(roster_cli, list(args))

    return _run


@pytest.fixture
def seeded(run_cli: Callable[..., Result]) -> Callable[..., Result]:
    """`run_cli` over a migrated database holding the sample roster."""
    assert run_cli("db", "upgrade", "--force").exit_code == 0
    result = run_cli("seed")
    assert result.exit_code == 0, result.output
    assert "Sample data created." in result.output
    return run_cli
