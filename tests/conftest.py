from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.pool import StaticPool

from musicat.adapters.sqlalchemy import SqlAlchemyCatalogStore
from musicat.adapters.sqlalchemy.migrations import upgrade_head
from musicat.adapters.sqlalchemy.unit_of_work import shutdown, startup

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def catalog_store(sqlite_engine: Engine) -> Iterator[SqlAlchemyCatalogStore]:
    startup(engine=sqlite_engine, force=True)
    try:
        yield SqlAlchemyCatalogStore()
    finally:
        shutdown()
