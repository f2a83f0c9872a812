from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import inspect

from musicat.adapters.sqlalchemy import metadata
from musicat.adapters.sqlalchemy.migrations import upgrade_head

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def test_head_schema_matches_the_mapped_tables(sqlite_engine: Engine) -> None:
    tables = set(inspect(sqlite_engine).get_table_names()) - {"alembic_version"}

    assert tables == set(metadata.tables)
    for name, table in metadata.tables.items():
        columns = {column["name"] for column in inspect(sqlite_engine).get_columns(name)}
        assert columns == {column.name for column in table.columns}


def test_upgrade_is_repeatable(sqlite_engine: Engine) -> None:
    upgrade_head(engine=sqlite_engine)

    with sqlite_engine.connect() as connection:
        version = connection.exec_driver_sql("SELECT version_num FROM alembic_version").scalar()

    assert version == "0001"
