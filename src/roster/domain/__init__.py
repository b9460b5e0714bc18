"""Domain layer: records, relationship rules and domain errors."""

from .models import Exam, Record, SchoolClass, Student

__all__ = ["Exam", "Record", "SchoolClass", "Student"]
