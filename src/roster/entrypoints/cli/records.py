"""Roster commands: seed sample data, list records, enrol students.

All commands work on the database named by ``ROSTER_DB_URL``, which must be
migrated (``roster db upgrade``). Tables are printed to stdout with Rich;
status lines go to stderr.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.table import Table

from roster import config
from roster.bootstrap import bootstrap
from roster.domain.errors import DomainError
from roster.interfaces.persistence import PersistenceError
from roster.service_layer import commands
from roster.service_layer.seed import seed_sample_data
from roster.service_layer.view_state import (
    class_list_state,
    exam_list_state,
    student_list_state,
)

from .db import UPGRADE_SCHEMA_INSTRUCTIONS, resolve_db_url
from .helpers import success, warn

if TYPE_CHECKING:
    from collections.abc import Iterator

    from roster.bootstrap import AppContainer


@contextmanager
def open_app() -> Iterator[AppContainer]:
    """Bootstrap against ``ROSTER_DB_URL``; turn storage errors into CLI errors.

    Reuses the `Settings` the ``roster`` group loaded when there is one.
    """
    settings = click.get_current_context().find_object(config.Settings)
    app = bootstrap(resolve_db_url(), settings=settings)
    try:
        yield app
    except PersistenceError as e:
        raise click.ClickException(f"{e}\n{UPGRADE_SCHEMA_INSTRUCTIONS}") from e
    except DomainError as e:
        raise click.ClickException(str(e)) from e
    finally:
        app.close()


@click.command()
def seed() -> None:
    """Fill an empty database with sample classes, students and exams."""
    with open_app() as app:
        if seed_sample_data(app.message_bus):
            success("Sample data created.")
        else:
            warn("Students already exist; nothing seeded.")


# --- list ---


@click.group(name="list")
def list_group() -> None:
    """Show stored records."""


search_option = click.option(
    "--search", "-s", default="", help="Only rows containing this text."
)


@list_group.command()
@search_option
def students(search: str) -> None:
    """List students by name."""
    with open_app() as app:
        state = student_list_state(app.repositories.students)
        state.search_text = search
        table = Table("Name", "Email", "Grade", "Classes", title="Students")
        for s in state.filtered:
            table.add_row(s.name, s.email, str(s.grade), str(len(s.classes)))
        state.close()
    Console().print(table)


@list_group.command()
@search_option
def classes(search: str) -> None:
    """List classes by title."""
    with open_app() as app:
        state = class_list_state(app.repositories.classes)
        state.search_text = search
        capacity = app.settings.class_capacity
        table = Table("Title", "Subject", "Room", "Enrolled", title="Classes")
        for c in state.filtered:
            table.add_row(c.title, c.subject, c.room, f"{len(c.students)}/{capacity}")
        state.close()
    Console().print(table)


@list_group.command()
@search_option
def exams(search: str) -> None:
    """List exams by date."""
    with open_app() as app:
        state = exam_list_state(app.repositories.exams)
        state.search_text = search
        table = Table("Date", "Title", "Class", "Students", "Max", title="Exams")
        for e in state.filtered:
            table.add_row(
                e.date.strftime("%Y-%m-%d %H:%M"),
                e.title,
                e.class_item.title if e.class_item else "-",
                str(e.student_count),
                str(e.max_score),
            )
        state.close()
    Console().print(table)


# --- enrolment ---


@click.command()
@click.argument("student_name")
@click.argument("class_title")
def enroll(student_name: str, class_title: str) -> None:
    """Enrol STUDENT_NAME in the class titled CLASS_TITLE."""
    with open_app() as app:
        repos = app.repositories
        if (student := repos.students.fetch_by_name(student_name)) is None:
            raise click.ClickException(f"No student named {student_name!r}.")
        if (school_class := repos.classes.fetch_by_title(class_title)) is None:
            raise click.ClickException(f"No class titled {class_title!r}.")
        app.message_bus.handle(
            commands.EnrollStudent(
                student_id=student.record_id,  # type: ignore[arg-type]
                class_id=school_class.record_id,  # type: ignore[arg-type]
            )
        )
        success(f"Enrolled {student.name} in {school_class.title}.")
