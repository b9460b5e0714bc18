"""Service layer for ROSTER.

Implements application use-cases: observable repositories, command handlers,
the message bus and read helpers. Calls domain objects and the ports defined
under `roster.interfaces`.

Dependency rule: may import `roster.domain` and `roster.interfaces`, but not
`roster.adapters` or `roster.entrypoints`.
"""
