"""Composition root: build the context, repositories and message bus.

Everything is wired by explicit construction functions; nothing is a
process-wide singleton. The `AppContainer` owns the persistence context and
the repositories built over it, and `close()` releases the context.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from roster import config
from roster.adapters.db.engine import make_engine
from roster.adapters.persistence import (
    InMemoryPersistenceContext,
    SqlAlchemyPersistenceContext,
)
from roster.adapters.scheduling import ManualScheduler
from roster.service_layer.handlers import COMMAND_HANDLERS
from roster.service_layer.messagebus import MessageBus
from roster.service_layer.repositories import (
    ClassRepository,
    ExamRepository,
    RepositoryBundle,
    StudentRepository,
)

if TYPE_CHECKING:
    from roster.interfaces.persistence import PersistenceContext
    from roster.interfaces.scheduler import Scheduler
    from roster.service_layer.commands import Command

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppContainer:
    """Application wiring. Owns the persistence context."""

    context: PersistenceContext
    repositories: RepositoryBundle
    message_bus: MessageBus
    scheduler: Scheduler
    settings: config.Settings

    def close(self) -> None:
        """Release the persistence context (and its engine, if any)."""
        self.context.close()

    def __enter__(self) -> AppContainer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def build_context(url: str | None) -> PersistenceContext:
    """Build a SQL-backed context for `url`, or an in-memory one for None."""
    if url is None:
        logger.debug("Using in-memory persistence")
        return InMemoryPersistenceContext()
    return SqlAlchemyPersistenceContext(make_engine(url))


def build_repositories(
    context: PersistenceContext, scheduler: Scheduler, settings: config.Settings
) -> RepositoryBundle:
    """Build the three repositories over one shared context."""
    window = settings.refresh_window
    exams = ExamRepository(context, scheduler, window)
    return RepositoryBundle(
        students=StudentRepository(context, scheduler, window),
        classes=ClassRepository(context, scheduler, window, exams=exams),
        exams=exams,
    )


def build_message_bus(
    repositories: RepositoryBundle,
    settings: config.Settings,
    command_handlers: Mapping[type[Command], Callable[..., Any]],
) -> MessageBus:
    """Build a message bus with injected dependencies."""
    dependencies = {"repositories": repositories, "settings": settings}
    injected_command_handlers = {
        command_type: inject_dependencies(handler, dependencies)
        for command_type, handler in command_handlers.items()
    }

    return MessageBus(
        repositories,
        command_handlers=injected_command_handlers,
    )


def bootstrap(
    url: str | None = None,
    *,
    scheduler: Scheduler | None = None,
    settings: config.Settings | None = None,
    context: PersistenceContext | None = None,
) -> AppContainer:
    """Wire the application.

    Args:
        url: Database URL; None keeps everything in memory. Ignored when
            `context` is given.
        scheduler: Drives live-query refreshes. Defaults to a
            `ManualScheduler`; pass an `AsyncioScheduler` on an event loop.
        settings: Defaults to `config.load_settings()`.
        context: Use this context instead of building one.
    """
    settings = settings if settings is not None else config.load_settings()
    scheduler = scheduler if scheduler is not None else ManualScheduler()
    context = context if context is not None else build_context(url)

    repositories = build_repositories(context, scheduler, settings)
    message_bus = build_message_bus(repositories, settings, COMMAND_HANDLERS)

    return AppContainer(
        context=context,
        repositories=repositories,
        message_bus=message_bus,
        scheduler=scheduler,
        settings=settings,
    )


def inject_dependencies(
    handler: Callable, dependencies: Mapping[str, object]
) -> Callable:
    """Inject dependencies into a handler function based on its parameters."""
    params = inspect.signature(handler).parameters
    deps = {
        name: dependency for name, dependency in dependencies.items() if name in params
    }
    return lambda message: handler(message, **deps)
