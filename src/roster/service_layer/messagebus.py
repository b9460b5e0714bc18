"""Dispatch of roster commands (create, enroll, delete, ...) to their handlers."""

import functools
import logging
from collections.abc import Callable, Mapping
from typing import Any

from .commands import Command

logger = logging.getLogger(__name__)

# pylint: disable=too-few-public-methods

Handler = Callable[[Command], Any]


class NoHandlerForCommand(LookupError):
    """No handler is registered for the command's type."""

    def __init__(self, cmd: Command) -> None:
        self.command = cmd
        super().__init__(f"No handler found for command {type(cmd).__name__}")


class MessageBus:
    """Single entry point for every write made by the CLI and the tests.

    Each command type maps to exactly one handler. `bootstrap` builds the
    handlers with their dependencies already bound, so the bus only needs the
    command. Reads and live queries go straight to `repositories`.

    Args:
        repositories: The `Repositories` bundle the handlers were bound to.
        command_handlers: Handler per command type.
    """

    def __init__(
        self,
        repositories: Any,
        command_handlers: Mapping[type[Command], Handler],
    ) -> None:
        self.repositories = repositories
        self._command_handlers = dict(command_handlers)

    def handle(self, cmd: Command) -> Any:
        """Run the handler for `cmd` and return its result.

        A handler that raises (for example ``ClassFullError`` on a full class)
        is logged with its traceback and the exception propagates unchanged.

        Raises:
            NoHandlerForCommand: if the command type was never registered.
        """
        handler = self._command_handlers.get(type(cmd))
        if handler is None:
            logger.error("No handler found for command %s", type(cmd).__name__)
            raise NoHandlerForCommand(cmd)

        name = self._get_handler_name(handler)
        logger.debug("Handling command %s with handler %s", cmd, name)
        try:
            return handler(cmd)
        except Exception:
            logger.exception("Exception handling command %s with handler %s", cmd, name)
            raise

    @staticmethod
    def _get_handler_name(fn: Callable[..., Any]) -> str:
        while isinstance(fn, functools.partial):
            fn = fn.func
        return getattr(fn, "__name__", repr(fn))
