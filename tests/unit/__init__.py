"""Unit tests.

- No real database or filesystem; use the in-memory context and the
  manual scheduler.
- Keep tests small, fast, and deterministic.
"""
