"""Integration tests.

Exercise the SQLAlchemy adapter and Alembic migrations against real SQLite
databases (in-memory or temp files). Each test gets its own database.
"""
