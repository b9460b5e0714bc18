"""Scheduler interface used to delay live-query refreshes.

A scheduler runs callbacks on the single sequential context that owns the
repositories (an event loop, a UI thread, a test's virtual clock). All
callbacks scheduled through one scheduler run on that context, one at a time.
"""

from __future__ import annotations

import abc
from collections.abc import Callable

# pylint: disable=too-few-public-methods


class ScheduledCall(abc.ABC):
    """Handle to a callback waiting to run."""

    @abc.abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from running. Idempotent."""


class Scheduler(abc.ABC):
    """Contract for delaying work on the owning context."""

    @abc.abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        """Run `callback` once, `delay` seconds from now.

        Args:
            delay: Seconds to wait; 0 runs on the next turn of the context.
            callback: Zero-argument callable.

        Returns:
            A handle that can cancel the call.
        """
