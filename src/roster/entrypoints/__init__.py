"""Entrypoints (inbound adapters) for ROSTER.

The command-line interface lives here. Entrypoints parse input, obtain a wired
application from `roster.bootstrap`, dispatch commands through its message bus
and present the results.
"""
