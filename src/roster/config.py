"""Configuration utilities for ROSTER.

This module centralizes small helpers and constants related to application
configuration. Everything is read from the environment:

| Variable                   | Meaning                                  | Default |
|----------------------------|------------------------------------------|---------|
| `ROSTER_DB_URL`            | SQLAlchemy database URL                  | (none)  |
| `ROSTER_REFRESH_WINDOW_MS` | live-query coalescing window, ms (>= 0)  | 100     |
| `ROSTER_CLASS_CAPACITY`    | maximum students per class (>= 1)        | 30      |
"""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from importlib.resources import files
from typing import TextIO

from alembic.config import Config

DB_URL_ENV = "ROSTER_DB_URL"  # pragma: no mutate
REFRESH_WINDOW_ENV = "ROSTER_REFRESH_WINDOW_MS"  # pragma: no mutate
CLASS_CAPACITY_ENV = "ROSTER_CLASS_CAPACITY"  # pragma: no mutate

DEFAULT_REFRESH_WINDOW_MS = 100
DEFAULT_CLASS_CAPACITY = 30

ALEMBIC_URL_KEY = "sqlalchemy.url"  # pragma: no mutate
ALEMBIC_SCRIPT_LOCATION_KEY = "script_location"  # pragma: no mutate


class DatabaseUrlNotSetError(Exception):
    """Raised when the ROSTER_DB_URL environment variable is not set."""


class InvalidSettingError(ValueError):
    """Raised when an environment setting cannot be used."""

    def __init__(self, name: str, value: str, reason: str) -> None:
        super().__init__(f"{name}={value!r}: {reason}")
        self.name = name
        self.value = value
        self.reason = reason


def get_db_url() -> str:
    """Get the database URL from the environment.

    Returns:
        The value of the `ROSTER_DB_URL` environment variable.

    Raises:
        DatabaseUrlNotSetError: If `ROSTER_DB_URL` is not set.
    """
    if not (url := os.environ.get(DB_URL_ENV)):
        raise DatabaseUrlNotSetError
    return url


@dataclass(frozen=True)
class Settings:
    """Runtime knobs for the service layer."""

    refresh_window_ms: int = DEFAULT_REFRESH_WINDOW_MS
    class_capacity: int = DEFAULT_CLASS_CAPACITY

    @property
    def refresh_window(self) -> float:
        """The refresh window in seconds."""
        return self.refresh_window_ms / 1000


def _int_setting(env: Mapping[str, str], name: str, default: int, minimum: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise InvalidSettingError(name, raw, "not an integer") from e
    if value < minimum:
        raise InvalidSettingError(name, raw, f"must be >= {minimum}")
    return value


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Read `Settings` from `env` (defaults to `os.environ`).

    Raises:
        InvalidSettingError: If a variable is set but unusable.
    """
    env = os.environ if env is None else env
    return Settings(
        refresh_window_ms=_int_setting(
            env, REFRESH_WINDOW_ENV, DEFAULT_REFRESH_WINDOW_MS, minimum=0
        ),
        class_capacity=_int_setting(
            env, CLASS_CAPACITY_ENV, DEFAULT_CLASS_CAPACITY, minimum=1
        ),
    )


def build_alembic_config(
    db_url: str | None = None, stdout: TextIO = sys.stdout
) -> Config:
    """Build an Alembic `Config` object for ROSTER's migrations.

    Sets only Alembic "main" options:
    - `sqlalchemy.url` → the database URL you pass
    - `script_location` → ROSTER's packaged Alembic scripts

    Args:
        db_url: SQLAlchemy database URL (e.g., `sqlite:///roster.db`). Can be
            `None` (default) only where Alembic won't need to connect.
        stdout: Text stream Alembic will write status lines to. Defaults to
            `sys.stdout`; override in tests to capture output.

    Returns:
        An `alembic.config.Config` pointing to ROSTER's migration scripts.
    """
    cfg = Config(stdout=stdout)
    if db_url is not None:
        cfg.set_main_option(ALEMBIC_URL_KEY, db_url)
    cfg.set_main_option(
        ALEMBIC_SCRIPT_LOCATION_KEY,
        str(files("roster.adapters.db.alembic")),
    )
    return cfg
