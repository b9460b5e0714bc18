"""SQLAlchemy-backed PersistenceContext for ROSTER.

Maps records onto the tables in `roster.adapters.db.schema` with SQLAlchemy
Core. The context keeps an identity map, so a stored row is materialized as
exactly one Python object for the life of the context. Loading a record
loads its relationships too, which pulls in the connected part of the graph
once and then serves it from the map.

Writes:
- `save` runs in one transaction: new rows (classes, then students, then
  exams), changed rows, removed rows, then many-to-many link rows.
- Changed records are found by comparing against the snapshot taken when
  the record was loaded or last saved (see `tracking`).
- Link rows are written from the student side (`Student.classes`,
  `Student.exams`). `roster.domain.relationships` keeps the other side in
  step, so the inverse lists never need writing.

Errors:
    Maps SQLAlchemy errors to ROSTER persistence exceptions:
    `IntegrityError` → `ConstraintViolationError`, any other `DBAPIError`
    → `StoreUnavailableError`.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, NoReturn

from sqlalchemy import and_, delete, func, insert, select, update
from sqlalchemy.exc import DBAPIError, IntegrityError

from roster.adapters.db.schema import (
    classes,
    enrollments,
    exam_registrations,
    exams,
    students,
)
from roster.adapters.id_generators import ULIDGenerator
from roster.domain.models import Exam, Record, SchoolClass, Student
from roster.interfaces.id_generator import IdGenerator
from roster.interfaces.persistence import (
    AllOf,
    Condition,
    ConstraintViolationError,
    Operator,
    PersistenceContext,
    PersistenceError,
    Predicate,
    R,
    RecordNotFoundError,
    SortKey,
    StoreUnavailableError,
)

from . import tracking

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, RowMapping, Table
    from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)

_TABLES: dict[type[Record], Table] = {
    SchoolClass: classes,
    Student: students,
    Exam: exams,
}

# (model, attribute) -> (link table, column for this side, column for the other side, other model)
_LINKS: dict[tuple[type[Record], str], tuple[Table, str, str, type[Record]]] = {
    (Student, "classes"): (enrollments, "student_id", "class_id", SchoolClass),
    (SchoolClass, "students"): (enrollments, "class_id", "student_id", Student),
    (Student, "exams"): (exam_registrations, "student_id", "exam_id", Exam),
    (Exam, "students"): (exam_registrations, "exam_id", "student_id", Student),
}

_OWNING_LINKS = ("classes", "exams")  # written from Student

_Key = tuple[type[Record], str]


class SqlAlchemyPersistenceContext(PersistenceContext):
    """PersistenceContext over a SQLAlchemy Engine.

    Args:
        engine: Engine bound to a database migrated to the ROSTER schema.
        id_generator: Source of record identities (ULIDs by default).
    """

    def __init__(self, engine: Engine, id_generator: IdGenerator | None = None):
        self.engine = engine
        self.id_generator = id_generator if id_generator is not None else ULIDGenerator()
        self._identity_map: dict[_Key, Record] = {}
        self._snapshots: dict[_Key, tracking.RecordState] = {}
        self._staged_inserts: list[Record] = []
        self._staged_deletes: list[Record] = []

    # --------------------------------------------------------------------- #
    # Staging
    # --------------------------------------------------------------------- #

    def insert(self, record: Record) -> None:
        if self.is_tracked(record):
            return
        self._staged_inserts.append(record)

    def delete(self, record: Record) -> None:
        for index, staged in enumerate(self._staged_inserts):
            if staged is record:
                del self._staged_inserts[index]
                return
        if not self._is_loaded(record):
            raise RecordNotFoundError(type(record).__name__, record.record_id)
        if not any(staged is record for staged in self._staged_deletes):
            self._staged_deletes.append(record)

    def is_tracked(self, record: Record) -> bool:
        return self._is_loaded(record) or any(
            staged is record for staged in self._staged_inserts
        )

    def _is_loaded(self, record: Record) -> bool:
        if record.record_id is None:
            return False
        key = (tracking.model_of(record), record.record_id)
        return self._identity_map.get(key) is record

    # --------------------------------------------------------------------- #
    # Reads
    # --------------------------------------------------------------------- #

    def fetch(
        self,
        model: type[R],
        predicate: Predicate | None = None,
        order: Sequence[SortKey] = (),
    ) -> list[R]:
        tracking.check_query_fields(model, predicate, order)
        table = _TABLES[model]
        stmt = select(table)
        if predicate is not None:
            stmt = stmt.where(self._compile(table, predicate))
        for key in order:
            column = self._column(table, key.field)
            stmt = stmt.order_by(column.desc() if key.descending else column.asc())
        stmt = stmt.order_by(table.c.id.asc())

        try:
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
                return [self._materialize(conn, model, row) for row in rows]  # type: ignore[misc]
        except DBAPIError as e:
            raise StoreUnavailableError(str(e)) from e

    def count(self, model: type[Record], predicate: Predicate | None = None) -> int:
        tracking.check_query_fields(model, predicate)
        table = _TABLES[model]
        stmt = select(func.count()).select_from(table)
        if predicate is not None:
            stmt = stmt.where(self._compile(table, predicate))
        try:
            with self.engine.connect() as conn:
                return int(conn.execute(stmt).scalar_one())
        except DBAPIError as e:
            raise StoreUnavailableError(str(e)) from e

    def get(self, model: type[R], record_id: str) -> R | None:
        if (cached := self._identity_map.get((model, record_id))) is not None:
            return cached  # type: ignore[return-value]
        try:
            with self.engine.connect() as conn:
                return self._load(conn, model, record_id)  # type: ignore[return-value]
        except DBAPIError as e:
            raise StoreUnavailableError(str(e)) from e

    # --------------------------------------------------------------------- #
    # Transactions
    # --------------------------------------------------------------------- #

    @property
    def has_changes(self) -> bool:
        return bool(
            self._staged_inserts or self._staged_deletes or self._dirty_records()
        )

    def save(self) -> None:
        deleting = {id(r) for r in self._staged_deletes}
        inserting = list(self._staged_inserts)
        dirty = [r for r in self._dirty_records() if id(r) not in deleting]
        to_write = [*inserting, *dirty]
        if not to_write and not self._staged_deletes:
            return

        self._validate(to_write, deleting)

        assigned: list[Record] = []
        try:
            with self.engine.begin() as conn:
                for record in inserting:
                    record.record_id = self.id_generator.new_id()
                    assigned.append(record)
                for model in tracking.MODELS:
                    rows = [self._row(r) for r in inserting if isinstance(r, model)]
                    if rows:
                        conn.execute(insert(_TABLES[model]), rows)
                for record in dirty:
                    table = _TABLES[tracking.model_of(record)]
                    conn.execute(
                        update(table)
                        .where(table.c.id == record.record_id)
                        .values(**self._row(record))
                    )
                self._delete_rows(conn)
                for record in to_write:
                    if isinstance(record, Student):
                        self._write_links(conn, record)
        except IntegrityError as e:
            self._unassign(assigned)
            raise ConstraintViolationError(str(e.orig)) from e
        except DBAPIError as e:
            self._unassign(assigned)
            raise StoreUnavailableError(str(e)) from e

        for record in inserting:
            self._identity_map[(tracking.model_of(record), record.record_id)] = record  # type: ignore[index]
        for record in self._staged_deletes:
            key = (tracking.model_of(record), record.record_id)
            self._identity_map.pop(key, None)  # type: ignore[arg-type]
            self._snapshots.pop(key, None)  # type: ignore[arg-type]
        for record in to_write:
            self._snapshots[(tracking.model_of(record), record.record_id)] = (  # type: ignore[index]
                tracking.capture(record)
            )

        logger.debug(
            "Saved %d insert(s), %d delete(s), %d update(s)",
            len(inserting),
            len(self._staged_deletes),
            len(dirty),
        )
        self._staged_inserts.clear()
        self._staged_deletes.clear()

    def rollback(self) -> None:
        self._staged_inserts.clear()
        self._staged_deletes.clear()
        for key, record in self._identity_map.items():
            tracking.restore(record, self._snapshots[key])

    def close(self) -> None:
        self.rollback()
        self._identity_map.clear()
        self._snapshots.clear()
        self.engine.dispose()

    # --------------------------------------------------------------------- #
    # Internals: materialization
    # --------------------------------------------------------------------- #

    def _load(self, conn: Connection, model: type[Record], record_id: str) -> Record | None:
        if (cached := self._identity_map.get((model, record_id))) is not None:
            return cached
        table = _TABLES[model]
        row = conn.execute(select(table).where(table.c.id == record_id)).mappings().first()
        return None if row is None else self._materialize(conn, model, row)

    def _materialize(self, conn: Connection, model: type[Record], row: RowMapping) -> Record:
        """Return the identity-mapped object for `row`, building it if needed.

        The new object is registered before its relationships are loaded so
        that cycles in the graph resolve to the same instance.
        """
        key = (model, row["id"])
        if (cached := self._identity_map.get(key)) is not None:
            return cached

        record = model(**{name: row[name] for name in tracking.SCALAR_FIELDS[model]})
        record.record_id = row["id"]
        self._identity_map[key] = record

        for name in tracking.LIST_LINKS[model]:
            getattr(record, name)[:] = self._load_list(conn, model, name, row["id"])
        if isinstance(record, Exam) and row["class_id"] is not None:
            record.class_item = self._load(conn, SchoolClass, row["class_id"])  # type: ignore[assignment]

        self._snapshots[key] = tracking.capture(record)
        return record

    def _load_list(
        self, conn: Connection, model: type[Record], name: str, record_id: str
    ) -> list[Record]:
        if (model, name) == (SchoolClass, "exams"):
            other_model: type[Record] = Exam
            stmt = select(exams.c.id).where(exams.c.class_id == record_id)
        else:
            table, own, other, other_model = _LINKS[(model, name)]
            stmt = select(table.c[other]).where(table.c[own] == record_id)
        ids = conn.execute(stmt.order_by(stmt.selected_columns[0])).scalars().all()
        related = (self._load(conn, other_model, other_id) for other_id in ids)
        return [r for r in related if r is not None]

    # --------------------------------------------------------------------- #
    # Internals: writes
    # --------------------------------------------------------------------- #

    def _dirty_records(self) -> list[Record]:
        return [
            record
            for key, record in self._identity_map.items()
            if tracking.capture(record).differs_from(self._snapshots[key])
        ]

    def _validate(self, to_write: list[Record], deleting: set[int]) -> None:
        inserting = {id(r) for r in self._staged_inserts}
        for record in to_write:
            tracking.check_required(record)
            for other in tracking.linked(record):
                if id(other) in deleting or not (
                    id(other) in inserting or self._is_loaded(other)
                ):
                    raise ConstraintViolationError(
                        f"{type(record).__name__} references a "
                        f"{type(other).__name__} that is not stored."
                    )

    @staticmethod
    def _row(record: Record) -> dict[str, Any]:
        row = {
            name: getattr(record, name)
            for name in tracking.SCALAR_FIELDS[tracking.model_of(record)]
        }
        row["id"] = record.record_id
        if isinstance(record, Exam):
            row["class_id"] = record.class_item.record_id if record.class_item else None
        return row

    def _delete_rows(self, conn: Connection) -> None:
        for model in reversed(tracking.MODELS):
            ids = [r.record_id for r in self._staged_deletes if isinstance(r, model)]
            if not ids:
                continue
            for (link_model, _), (table, own, _, _) in _LINKS.items():
                if link_model is model:
                    conn.execute(delete(table).where(table.c[own].in_(ids)))
            if model is SchoolClass:
                conn.execute(
                    update(exams).where(exams.c.class_id.in_(ids)).values(class_id=None)
                )
            table = _TABLES[model]
            conn.execute(delete(table).where(table.c.id.in_(ids)))

    def _write_links(self, conn: Connection, student: Student) -> None:
        for name in _OWNING_LINKS:
            table, own, other, _ = _LINKS[(Student, name)]
            conn.execute(delete(table).where(table.c[own] == student.record_id))
            rows = [
                {own: student.record_id, other: related.record_id}
                for related in getattr(student, name)
            ]
            if rows:
                conn.execute(insert(table), rows)

    @staticmethod
    def _unassign(records: list[Record]) -> None:
        for record in records:
            record.record_id = None

    # --------------------------------------------------------------------- #
    # Internals: predicates
    # --------------------------------------------------------------------- #

    @staticmethod
    def _column(table: Table, name: str):
        return table.c[name]

    def _compile(self, table: Table, predicate: Predicate) -> ColumnElement[bool]:
        if isinstance(predicate, AllOf):
            return and_(*(self._compile(table, p) for p in predicate.predicates))
        if isinstance(predicate, Condition):
            return self._compile_condition(table, predicate)
        raise TypeError(f"Unsupported predicate: {predicate!r}")

    def _compile_condition(self, table: Table, cond: Condition) -> ColumnElement[bool]:
        column = self._column(table, cond.field)
        value = cond.value
        match cond.op:
            case Operator.EQ:
                return column.is_(None) if value is None else column == value
            case Operator.NE:
                return column.is_not(None) if value is None else column != value
            case Operator.LT:
                return column < value
            case Operator.LE:
                return column <= value
            case Operator.GT:
                return column > value
            case Operator.GE:
                return column >= value
            case Operator.ICONTAINS:
                return func.lower(column).contains(str(value).lower(), autoescape=True)
        _unsupported(cond.op)


def _unsupported(op: Operator) -> NoReturn:
    raise PersistenceError(f"Unsupported operator: {op}")  # pragma: no cover
