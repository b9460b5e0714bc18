"""Alembic migration scripts for the ROSTER schema."""
