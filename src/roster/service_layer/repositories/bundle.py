"""The set of repositories that share one persistence context."""

from __future__ import annotations

from dataclasses import dataclass

from .classes import ClassRepository
from .exams import ExamRepository
from .students import StudentRepository


@dataclass(frozen=True)
class RepositoryBundle:
    """Student, class and exam repositories over the same context."""

    students: StudentRepository
    classes: ClassRepository
    exams: ExamRepository
