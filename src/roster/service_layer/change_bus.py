"""In-process change notifications for one repository.

Each repository owns a `ChangeBus`. A successful mutation publishes exactly
one `RepositoryChange`; every live subscription receives it synchronously.
Nothing is buffered for absent subscribers and nothing is persisted.

Delivery is sequential. If a listener mutates the repository while an event
is being delivered, the new event is queued and delivered after the current
one has reached every listener, so all listeners see events in publish order.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from roster.domain.models import Record

logger = logging.getLogger(__name__)

# pylint: disable=too-few-public-methods

# ============================================================================
#                               Change events
# ============================================================================


@dataclass(frozen=True, slots=True)
class RepositoryChange:
    """Base class for change events."""

    @property
    def is_structural(self) -> bool:
        """True if the set of stored records may have changed."""
        return True


@dataclass(frozen=True, slots=True)
class Created(RepositoryChange):
    """A record was inserted and saved."""

    record: Record


@dataclass(frozen=True, slots=True)
class Updated(RepositoryChange):
    """A tracked record's mutations were saved."""

    record: Record

    @property
    def is_structural(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class Deleted(RepositoryChange):
    """A record was removed."""

    record_id: str


@dataclass(frozen=True, slots=True)
class BatchChange(RepositoryChange):
    """Many records changed at once; consumers should re-fetch."""


Listener = Callable[[RepositoryChange], None]

# ============================================================================
#                                    Bus
# ============================================================================


class ChangeBus:
    """Multicast channel for `RepositoryChange` events."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []
        self._pending: deque[RepositoryChange] = deque()
        self._publishing = False

    @property
    def listener_count(self) -> int:
        """Number of subscribed listeners."""
        return len(self._listeners)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Add a listener.

        Returns:
            A callable that removes the listener again (idempotent).
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            for index, existing in enumerate(self._listeners):
                if existing is listener:
                    del self._listeners[index]
                    return

        return unsubscribe

    def publish(self, event: RepositoryChange) -> None:
        """Deliver `event` to every listener subscribed at delivery time."""
        self._pending.append(event)
        if self._publishing:
            return  # delivered by the outer publish loop

        self._publishing = True
        try:
            while self._pending:
                current = self._pending.popleft()
                for listener in list(self._listeners):
                    try:
                        listener(current)
                    except Exception:  # pylint: disable=broad-except
                        logger.exception(
                            "Change listener %r failed on %s", listener, current
                        )
        finally:
            self._publishing = False
