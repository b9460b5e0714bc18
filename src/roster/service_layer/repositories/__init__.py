"""Observable repositories."""

from .bundle import RepositoryBundle
from .classes import ClassRepository
from .exams import ExamRepository
from .live_query import LiveQuery
from .observable import DEFAULT_REFRESH_WINDOW, ObservableRepository
from .students import StudentRepository

__all__ = [
    "DEFAULT_REFRESH_WINDOW",
    "ClassRepository",
    "ExamRepository",
    "LiveQuery",
    "ObservableRepository",
    "RepositoryBundle",
    "StudentRepository",
]
