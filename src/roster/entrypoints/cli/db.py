"""``roster db``: create and inspect the roster schema.

The schema lives in Alembic migrations shipped inside the package, so there
is no ``alembic.ini`` to maintain: `config.build_alembic_config` points
Alembic at them. Alembic's own output goes to stdout; roster's notices
(warnings, confirmations, failures) go to stderr.

Every subcommand needs ``ROSTER_DB_URL`` to name a reachable database.
``status`` reports a missing or broken URL instead of failing.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import click
import click_extra as clickx
from alembic import command
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import func, select, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError, OperationalError

from roster import config
from roster.adapters.db.engine import make_engine
from roster.adapters.db.schema import classes, exams, students

from .helpers import error, sanitize_url, success, warn

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection

MISSING_DB_URL_MSG = (
    "ROSTER_DB_URL is not set.\n\n"
    "Point it at the roster database first, for example:\n"
    "  export ROSTER_DB_URL='sqlite:///roster.db'\n"
    "  or in PowerShell:\n"
    "  $env:ROSTER_DB_URL='sqlite:///roster.db'"
)

INVALID_URL_FORMAT_MSG = "ROSTER_DB_URL does not parse as a SQLAlchemy database URL."

CANNOT_CONNECT_MSG = (
    "Could not open the database named by ROSTER_DB_URL.\n"
    "Check that the server is running (or the SQLite directory exists) "
    "and that the URL is right."
)

UPGRADE_SCHEMA_WARNING = (
    "The roster tables are about to be created or migrated to the newest schema.\n"
    "Back up the database first if it already holds records."
)

UPGRADE_SCHEMA_INSTRUCTIONS = "Run 'roster db upgrade' to bring the schema up to date."


class MigrationStatus(Enum):
    """Where the database schema stands relative to the packaged migrations."""

    UP_TO_DATE = "up to date"
    OUT_OF_DATE = "out of date"
    UNINITIALIZED = "uninitialized"


@dataclass(frozen=True)
class SchemaState:
    """Revision found in the database and the newest packaged revision."""

    current: str | None
    head: str | None

    @property
    def status(self) -> MigrationStatus:
        if self.current == self.head:
            return MigrationStatus.UP_TO_DATE
        if self.current is None:
            return MigrationStatus.UNINITIALIZED
        return MigrationStatus.OUT_OF_DATE

    def describe(self) -> str:
        if self.current is None:
            return self.status.value
        return f"{self.current} ({self.status.value})"


def resolve_db_url() -> str:
    """Return ``ROSTER_DB_URL`` once the database has answered a ``SELECT 1``.

    Raises:
        click.ClickException: explaining what to fix when the variable is
            missing, malformed or points at an unreachable database.
    """
    try:
        url = config.get_db_url()
    except config.DatabaseUrlNotSetError as e:
        raise click.ClickException(MISSING_DB_URL_MSG) from e

    try:
        engine = make_engine(url)
    except ArgumentError as e:
        raise click.ClickException(INVALID_URL_FORMAT_MSG) from e
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))  # pragma: no mutate
    except OperationalError as e:
        raise click.ClickException(CANNOT_CONNECT_MSG) from e
    finally:
        engine.dispose()
    return url


def schema_state(url: str) -> SchemaState:
    """Compare the revision stamped in `url` with the packaged head."""
    engine = make_engine(url)
    try:
        with engine.connect() as conn:
            current = MigrationContext.configure(conn).get_current_revision()
    finally:
        engine.dispose()
    script = ScriptDirectory.from_config(config.build_alembic_config(db_url=url))
    return SchemaState(current=current, head=script.get_current_head())


def _record_counts(conn: Connection) -> str:
    parts = []
    for label, table in (("students", students), ("classes", classes), ("exams", exams)):
        total = conn.execute(select(func.count()).select_from(table)).scalar_one()
        parts.append(f"{total} {label}")
    return ", ".join(parts)


@click.group(cls=clickx.ExtraGroup)
def db() -> None:
    """Create and inspect the roster database schema."""


@db.command()
@click.option(
    "--verbose",
    "-v",
    "verbose",
    is_flag=True,
    help="Include the revision details Alembic knows about.",
)
def current(verbose: bool) -> None:
    """Print the schema revision stamped in the database."""
    cfg = config.build_alembic_config(db_url=resolve_db_url(), stdout=sys.stdout)
    command.current(cfg, verbose=verbose)


@db.command()
@click.option("--sql", is_flag=True, help="Print the migration SQL instead of running it.")
@click.option("--force", is_flag=True, help="Skip the confirmation prompt.")
def upgrade(sql: bool, force: bool) -> None:
    """Create the roster tables, or migrate them to the newest schema."""
    url = resolve_db_url()
    if not (force or sql):
        warn(UPGRADE_SCHEMA_WARNING)
        click.secho(f"db: {click.style(sanitize_url(url), underline=True)}")
        click.confirm("Are you sure you want to proceed?", abort=True)
    command.upgrade(
        config.build_alembic_config(db_url=url, stdout=sys.stdout), "head", sql=sql
    )
    success("Upgrade complete!")


@db.command()
def status() -> None:
    """Report whether the database is reachable and its schema is current."""
    try:
        url = resolve_db_url()
    except click.ClickException as e:
        error("Cannot connect to database")
        click.echo(e.format_message())
        return

    success("Database reachable")
    click.echo(f"Backend : {make_url(url).get_backend_name()}")
    click.echo(f"URL     : {sanitize_url(url)}")
    state = schema_state(url)
    click.echo(f"Schema  : {state.describe()}")
    if state.status is not MigrationStatus.UP_TO_DATE:
        warn(UPGRADE_SCHEMA_INSTRUCTIONS)
        return

    engine = make_engine(url)
    try:
        with engine.connect() as conn:
            click.echo(f"Records : {_record_counts(conn)}")
    finally:
        engine.dispose()
