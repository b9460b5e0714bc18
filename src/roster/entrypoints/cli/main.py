"""ROSTER CLI entry point.

Defines the top-level ``roster`` command (via Click-Extra) and registers the
subcommands:

- ``roster db`` - schema management (upgrade/current/status).
- ``roster seed`` - sample data for an empty database.
- ``roster list students|classes|exams`` - tables of stored records.
- ``roster enroll STUDENT CLASS`` - enrol a student in a class.

Examples
    $ roster --version
    $ roster db upgrade --force
    $ roster seed && roster list classes
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import click
import click_extra as clickx
from platformdirs import user_log_dir

from roster import __version__, config
from roster.logging import (
    config_console_handler,
    config_flight_recorder,
    configure_root_logger,
    log_startup,
)

from .db import db as db_group
from .helpers import hyperlink, parse_log_level
from .records import enroll, list_group, seed

if TYPE_CHECKING:
    from logging import Handler

logger = logging.getLogger(__name__)


HELP = """ROSTER command-line interface.

    ROSTER keeps students, classes and exams in one store and serves live,
    always-current lists of them. Use it to manage the database schema, load
    sample data and inspect or change enrolments.
    """

EPILOG = "\b\n" + "\n".join(
    [
        f"{click.style('See Also:', fg='blue', bold=True, underline=True)}",
        "  SQLAlchemy URLs: "
        + hyperlink("https://docs.sqlalchemy.org/en/20/core/engines.html#database-urls"),
    ]
)


def console_level(verbose_count: int, quiet_count: int) -> int:
    """WARNING, one level lower per ``-v`` and higher per ``-q``, clamped."""
    level = logging.WARNING + 10 * (quiet_count - verbose_count)
    return max(logging.DEBUG, min(logging.CRITICAL, level))


@clickx.extra_group(
    version=__version__,
    help=HELP,
    params=[
        clickx.ColorOption(show_envvar=True),
        clickx.TimerOption(show_envvar=True),
        clickx.ExtraVersionOption(),
    ],
    epilog=EPILOG,
)
@click.option(
    "--verbose",
    "-v",
    "verbose_count",
    count=True,
    help="Raise console verbosity one level above WARNING per repetition.",
    default=0,
)
@click.option(
    "--quiet",
    "-q",
    "quiet_count",
    count=True,
    help="Lower console verbosity one level below WARNING per repetition.",
    default=0,
)
@click.option(
    "--debug/--no-debug",
    is_flag=True,
    help="Enable debug mode (timestamps, logger names and source paths).",
    default=False,
)
@click.option(
    "--log-path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Where the flight recorder writes its log.",
    default=Path(user_log_dir("roster", appauthor=False)) / "latest.log",
    envvar="ROSTER_LOG_PATH",
    show_default=True,
    show_envvar=True,
)
@click.option(
    "--flight-recorder-capacity",
    type=int,
    default=2000,
    hidden=True,
    envvar="ROSTER_FLIGHT_RECORDER_CAPACITY",
    show_envvar=True,
    help="Capacity of the flight recorder (in number of log records).",
)
@click.option(
    "--flight-recorder/--no-flight-recorder",
    "flight_recorder",
    is_flag=True,
    help=(
        "Keep the last N log records at DEBUG in memory and write them to "
        "--log-path when a WARNING or ERROR occurs (or on exit with --force-flush)."
    ),
    default=True,
    show_envvar=True,
)
@click.option(
    "--force-flush/--no-force-flush",
    "force_flush_flight_recorder",
    is_flag=True,
    help="Always write the flight recorder buffer to --log-path on exit.",
    default=False,
    show_default=True,
    show_envvar=True,
)
@click.option(
    "-L",
    "--logger-level",
    "logger_levels",
    multiple=True,
    callback=parse_log_level,
    help=(
        "Set the minimum level of specific loggers (NAME=LEVEL). Applies to both "
        "console and flight recorder. Repeatable (e.g. -L sqlalchemy=INFO) or via "
        "ROSTER_LOGGER_LEVELS (comma/space list)."
    ),
    default=("sqlalchemy=WARNING", "alembic=WARNING"),
    show_default=True,
    show_envvar=True,
)
@clickx.pass_context
def roster(  # pylint: disable=too-many-arguments, too-many-positional-arguments
    ctx: click.Context,
    verbose_count: int,
    quiet_count: int,
    debug: bool,
    log_path: Path,
    flight_recorder_capacity: int,
    flight_recorder: bool,
    force_flush_flight_recorder: bool,
    logger_levels: dict[str, int],
) -> None:
    """Configure logging, load settings and hand them to the subcommands."""
    level = console_level(verbose_count, quiet_count)
    use_color = ctx.color is not False  # None means auto
    handlers: list[Handler] = [
        config_console_handler(level=level, debug_mode=debug, color=use_color)
    ]
    if flight_recorder:
        handlers.append(
            config_flight_recorder(
                path=log_path,
                capacity=flight_recorder_capacity,
                flush_on_close=force_flush_flight_recorder,
            )
        )

    configure_root_logger(handlers, logger_levels)

    try:
        settings = config.load_settings()
    except config.InvalidSettingError as e:
        raise click.ClickException(str(e)) from e
    ctx.obj = settings

    log_startup(
        logger,
        app_version=__version__,
        level=level,
        handlers=handlers,
        log_path=log_path,
        flight_recorder=flight_recorder,
        flight_capacity=flight_recorder_capacity if flight_recorder else None,
        force_flush_fr=force_flush_flight_recorder,
        logger_levels=logger_levels,
        settings=settings,
    )

    ctx.call_on_close(logging.shutdown)


roster.add_command(db_group)
roster.add_command(seed)
roster.add_command(list_group)
roster.add_command(enroll)
