"""Database backends the roster schema is maintained for.

Only two backends ship migrations: SQLite (the default for local rosters and
tests) and PostgreSQL. Anything else is rejected up front rather than failing
halfway through a migration.
"""

from __future__ import annotations

from enum import Enum

from sqlalchemy.engine import URL, make_url


class UnsupportedDialect(Exception):
    """The database URL names a backend roster has no migrations for."""


class DialectName(str, Enum):
    """Backends roster stores records in, by SQLAlchemy dialect name."""

    POSTGRES = "postgresql"
    SQLITE = "sqlite"

    @classmethod
    def from_string(cls, dialect_str: str) -> DialectName:
        """Map a backend name such as ``"sqlite+pysqlite"`` or ``"pg"``.

        Raises:
            UnsupportedDialect: for any backend outside `_ALIASES`.
        """
        backend, _, _driver = (dialect_str or "").strip().lower().partition("+")
        try:
            return _ALIASES[backend]
        except KeyError:
            raise UnsupportedDialect(
                f"roster does not support the {dialect_str!r} backend"
            ) from None

    @classmethod
    def from_url(cls, url: str | URL) -> DialectName:
        """Backend of a database URL."""
        return cls.from_string(make_url(str(url)).get_backend_name())


_ALIASES: dict[str, DialectName] = {
    "sqlite": DialectName.SQLITE,
    "postgresql": DialectName.POSTGRES,
    "postgres": DialectName.POSTGRES,
    "pg": DialectName.POSTGRES,
}
