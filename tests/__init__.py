"""ROSTER test suite.

Folder taxonomy
- unit/         : One module/class/function at a time; in-memory only.
- contract/     : Behaviour every adapter of a port must share, parametrized
                  over the adapters.
- integration/  : Real SQLite databases and Alembic migrations.
- functional/   : The ``roster`` CLI driven through click's CliRunner.
- fixtures/     : Shared fixtures (no tests here).

Markers are added from the directory name (see ``conftest.py``); property-based
tests also carry ``@pytest.mark.property``.
"""
