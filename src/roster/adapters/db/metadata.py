"""The one `MetaData` every roster table is declared on.

Constraint and index names come from `NAMING_CONVENTION`, so the names in the
migration scripts match what ``metadata.create_all`` produces in tests. For
example, the exam score check becomes ``ck_exams_positive_max_score`` and the
exam → class reference becomes ``fk_exams_class_id_classes``.
"""

from sqlalchemy import MetaData

NAMING_CONVENTION: dict[str, str] = {
    "pk": "pk_%(table_name)s",
    "fk": "fk_%(table_name)s_%(column_0_N_name)s_%(referred_table_name)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "ix": "ix_%(table_name)s_%(column_0_N_label)s",
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)
