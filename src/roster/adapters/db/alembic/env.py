"""Alembic environment for the roster schema.

Roster builds its Alembic ``Config`` in code (`roster.config.build_alembic_config`),
so there is no ini file and no logging section to load. The database URL comes
from ``-x url=...`` when given, then the ``sqlalchemy.url`` main option, then
``ROSTER_DB_URL``. SQLite migrations run in batch mode because SQLite cannot
alter constraints in place.
"""

from alembic import context
from sqlalchemy import create_engine, pool

import roster.adapters.db.schema  # noqa: F401 # pylint: disable=unused-import
from roster import config as roster_config
from roster.adapters.db.dialects import DialectName
from roster.adapters.db.metadata import metadata

# pylint: disable=no-member


def _database_url() -> str:
    url = context.get_x_argument(as_dictionary=True).get("url")
    url = url or context.config.get_main_option("sqlalchemy.url")
    return url or roster_config.get_db_url()


def _configure(**kwargs) -> None:
    context.configure(target_metadata=metadata, compare_type=True, **kwargs)


def migrate_offline(url: str) -> None:
    """Write the migration SQL instead of executing it."""
    _configure(url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def migrate_online(url: str) -> None:
    """Apply migrations over a fresh connection to `url`."""
    engine = create_engine(url, poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            _configure(
                connection=connection,
                render_as_batch=DialectName.from_string(connection.dialect.name)
                is DialectName.SQLITE,
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    migrate_offline(_database_url())
else:
    migrate_online(_database_url())
