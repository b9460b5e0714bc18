"""Logging setup for ROSTER.

Two sinks are used:

- the console, through a Rich handler on stderr; records from other
  libraries get a short ``[library]`` prefix so they stand out;
- an optional "flight recorder", a memory buffer at DEBUG granularity that
  is dumped to a file only when something goes wrong (WARNING or worse).

Library code only ever calls ``logging.getLogger(__name__)``; the functions
here are used by the CLI to wire the handlers onto the root logger.
"""

from __future__ import annotations

import logging
import os
import platform
import sys
from collections.abc import Mapping, Sequence
from logging.handlers import MemoryHandler
from pathlib import Path
from typing import TYPE_CHECKING, Literal, TypeAlias

import alembic
import sqlalchemy
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from logging import Logger

    from roster.config import Settings

# pylint: disable=too-few-public-methods

PROJECT_PREFIX = "roster"

ColorSystem: TypeAlias = Literal["auto", "standard", "256", "truecolor", "windows"]

CONSOLE_FORMAT = "%(prefix)s %(message)s"
DEBUG_CONSOLE_FORMAT = "%(asctime)s %(name)s: %(message)s"
RECORDER_FORMAT = (
    "[%(asctime)s] [%(process)d:%(threadName)s] "
    "%(levelname)s %(name)s:%(lineno)d: %(message)s"
)


class ThirdPartyPrefixFilter(logging.Filter):
    """Set ``record.prefix`` to ``[library]`` for non-ROSTER loggers.

    ROSTER's own records get an empty prefix. Never drops a record.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == PROJECT_PREFIX or record.name.startswith(
            PROJECT_PREFIX + "."
        ):
            record.prefix = ""
        else:
            # "sqlalchemy.engine.Engine" -> "[sqlalchemy]"
            record.prefix = f"[{record.name.split('.')[0]}]"
        return True


def config_console_handler(
    level: int = logging.INFO, debug_mode: bool = False, color: bool = True
) -> RichHandler:
    """Build the Rich console handler.

    Args:
        level: Minimum level shown (forced to DEBUG in debug mode).
        debug_mode: Show timestamps, logger names and source links.
        color: False disables styling, matching click-extra's ``--no-color``.

    Returns:
        A handler writing to stderr.
    """
    color_system: ColorSystem | None = "auto" if color else None
    handler = RichHandler(
        level=logging.DEBUG if debug_mode else level,
        console=Console(color_system=color_system, stderr=True),
        rich_tracebacks=True,
        show_time=False,
        show_path=debug_mode,
        enable_link_path=debug_mode,
    )
    if debug_mode:
        handler.setFormatter(logging.Formatter(fmt=DEBUG_CONSOLE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT))
        handler.addFilter(ThirdPartyPrefixFilter())
    return handler


def config_flight_recorder(
    path: Path,
    capacity: int = 2000,
    flush_level: int = logging.WARNING,
    flush_on_close: bool = False,
) -> MemoryHandler:
    """Build the flight recorder.

    Keeps up to `capacity` records in memory and writes them to `path` when a
    record at `flush_level` or above arrives (or on close if
    `flush_on_close`). The file is truncated when the recorder is created.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(path, mode="w", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(RECORDER_FORMAT))

    return MemoryHandler(
        capacity=capacity,
        flushLevel=flush_level,
        target=file_handler,
        flushOnClose=flush_on_close,
    )


def configure_root_logger(
    handlers: Sequence[logging.Handler], logger_levels: Mapping[str, int]
) -> None:
    """Replace the root logger's handlers and apply per-logger levels.

    The root logger passes everything through; each handler filters by its
    own level. Per-logger levels apply to every handler.
    """
    logging.basicConfig(level=logging.DEBUG, handlers=list(handlers), force=True)
    for name, lvl in logger_levels.items():
        logging.getLogger(name).setLevel(lvl)


def log_startup(  # pylint: disable=too-many-arguments
    logger: Logger,
    *,
    app_version: str,
    level: int,
    handlers: Sequence[logging.Handler],
    log_path: Path | None,
    flight_recorder: bool,
    flight_capacity: int | None,
    force_flush_fr: bool,
    logger_levels: Mapping[str, int],
    settings: Settings | None = None,
) -> None:
    """Log a one-line summary at INFO and environment diagnostics at DEBUG."""

    logger.info(
        "ROSTER %s: console=%s, flight-recorder=%s",
        app_version,
        logging.getLevelName(level),
        "ON" if flight_recorder else "OFF",
    )

    logger.debug("Python: %s", sys.version.split()[0])
    logger.debug("Platform: %s %s", platform.system(), platform.release())
    logger.debug("PID: %s", os.getpid())
    logger.debug("CWD: %s", Path.cwd())
    logger.debug("Alembic: %s", alembic.__version__)
    logger.debug("SQLAlchemy: %s", sqlalchemy.__version__)
    logger.debug("Handlers: %s", [type(h).__name__ for h in handlers])
    if settings is not None:
        logger.debug(
            "Settings: refresh_window=%dms, class_capacity=%d",
            settings.refresh_window_ms,
            settings.class_capacity,
        )
    if flight_recorder:
        logger.debug(
            "Flight recorder: path=%s, capacity=%s, flush_on_close=%s",
            str(log_path) if log_path else "<none>",
            flight_capacity,
            force_flush_fr,
        )
    logger.debug(
        "Per-logger overrides: %s",
        {name: logging.getLevelName(lvl) for name, lvl in logger_levels.items()}
        or "<none>",
    )
