"""End-to-end wiring over a migrated SQLite file."""

from __future__ import annotations

from roster.bootstrap import bootstrap
from roster.config import Settings
from roster.service_layer import commands
from roster.service_layer.seed import SAMPLE_CLASSES, SAMPLE_STUDENTS, seed_sample_data


def test_seeded_data_survives_restart(sqlite_url_file, scheduler):
    with bootstrap(sqlite_url_file, scheduler=scheduler, settings=Settings()) as app:
        assert seed_sample_data(app.message_bus)

    with bootstrap(sqlite_url_file, scheduler=scheduler, settings=Settings()) as app:
        repos = app.repositories
        assert repos.students.count() == len(SAMPLE_STUDENTS)
        diana = repos.students.fetch_by_name("Diana Prince")
        assert len(diana.classes) == len(SAMPLE_CLASSES)
        assert not seed_sample_data(app.message_bus)


def test_live_query_over_sql(sqlite_url_file, scheduler):
    with bootstrap(sqlite_url_file, scheduler=scheduler, settings=Settings()) as app:
        deliveries = []
        query = app.repositories.classes.observe_all(deliveries.append)
        for title in ("Algebra", "Biology", "Chemistry"):
            app.message_bus.handle(commands.CreateClass(title, "Science", "1"))
        scheduler.run_pending()

        assert query.refresh_count == 1
        assert [c.title for c in deliveries[-1]] == ["Algebra", "Biology", "Chemistry"]

        algebra = deliveries[-1][0]
        app.message_bus.handle(commands.DeleteClass(algebra.record_id))
        scheduler.run_pending()
        assert [c.title for c in query.value] == ["Biology", "Chemistry"]
        query.dispose()


def test_delete_class_removes_exams_in_database(sqlite_url_file, scheduler):
    with bootstrap(sqlite_url_file, scheduler=scheduler, settings=Settings()) as app:
        seed_sample_data(app.message_bus)
        physics = app.repositories.classes.fetch_by_title("Physics I")
        app.message_bus.handle(commands.DeleteClass(physics.record_id))

    with bootstrap(sqlite_url_file, scheduler=scheduler, settings=Settings()) as app:
        titles = {e.title for e in app.repositories.exams.fetch_all()}
        assert "Physics I Midterm" not in titles
        assert len(titles) == len(SAMPLE_CLASSES) - 1
        charlie = app.repositories.students.fetch_by_name("Charlie Brown")
        assert "Physics I" not in {c.title for c in charlie.classes}
