"""Bootstrap (composition root) for ROSTER.

Assembles the application at runtime: picks a persistence context, builds the
repositories over it, injects them into the service-layer handlers and hands
the result back as an `AppContainer`.

Import rules:
- Entry points import *this* package to obtain a wired application.
- This package may import: `roster.adapters`, `roster.service_layer`,
  `roster.interfaces`, `roster.domain`, and `roster.config`.
- Inner layers must not import `roster.bootstrap`.
"""

from .bootstrap import (
    AppContainer,
    bootstrap,
    build_context,
    build_message_bus,
    build_repositories,
    inject_dependencies,
)

__all__ = [
    "AppContainer",
    "bootstrap",
    "build_context",
    "build_message_bus",
    "build_repositories",
    "inject_dependencies",
]
