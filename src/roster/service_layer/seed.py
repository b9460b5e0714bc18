"""Sample data for demos and first runs.

Four classes, four students enrolled across them, and one upcoming exam per
class with the enrolled students registered.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from roster.domain.models import utcnow

from . import commands

if TYPE_CHECKING:
    from .messagebus import MessageBus

logger = logging.getLogger(__name__)

SAMPLE_CLASSES: dict[str, tuple[str, str]] = {
    "Advanced Mathematics": ("Mathematics", "101"),
    "Physics I": ("Physics", "202"),
    "Chemistry Fundamentals": ("Chemistry", "303"),
    "English Literature": ("English", "104"),
}

SAMPLE_STUDENTS: dict[str, tuple[str, int, tuple[str, ...]]] = {
    "Alice Johnson": (
        "alice@school.edu",
        10,
        ("Advanced Mathematics", "Physics I", "English Literature"),
    ),
    "Bob Smith": (
        "bob@school.edu",
        11,
        ("Advanced Mathematics", "Chemistry Fundamentals"),
    ),
    "Charlie Brown": (
        "charlie@school.edu",
        10,
        ("Physics I", "Chemistry Fundamentals", "English Literature"),
    ),
    "Diana Prince": (
        "diana@school.edu",
        12,
        (
            "Advanced Mathematics",
            "Physics I",
            "Chemistry Fundamentals",
            "English Literature",
        ),
    ),
}


def seed_sample_data(bus: MessageBus) -> bool:
    """Create the sample roster through `bus`.

    Returns:
        False (and does nothing) if any student already exists.
    """
    if bus.repositories.students.count() > 0:
        logger.info("Students already exist; skipping sample data")
        return False

    class_ids = {
        title: bus.handle(commands.CreateClass(title=title, subject=subject, room=room))
        for title, (subject, room) in SAMPLE_CLASSES.items()
    }

    today = utcnow().replace(hour=9, minute=0, second=0, microsecond=0)
    exam_ids = {
        title: bus.handle(
            commands.CreateExam(
                title=f"{title} Midterm",
                subject=subject,
                date=today + timedelta(weeks=2 + offset),
                class_id=class_ids[title],
            )
        )
        for offset, (title, (subject, _)) in enumerate(SAMPLE_CLASSES.items())
    }

    for name, (email, grade, titles) in SAMPLE_STUDENTS.items():
        student_id = bus.handle(
            commands.CreateStudent(name=name, email=email, grade=grade)
        )
        for title in titles:
            bus.handle(
                commands.EnrollStudent(student_id=student_id, class_id=class_ids[title])
            )
            bus.handle(
                commands.RegisterForExam(student_id=student_id, exam_id=exam_ids[title])
            )

    logger.info(
        "Seeded %d classes, %d students and %d exams",
        len(class_ids),
        len(SAMPLE_STUDENTS),
        len(exam_ids),
    )
    return True
