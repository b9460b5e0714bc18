"""PersistenceContext adapters."""

from .memory import InMemoryPersistenceContext
from .sqlalchemy_context import SqlAlchemyPersistenceContext

__all__ = ["InMemoryPersistenceContext", "SqlAlchemyPersistenceContext"]
