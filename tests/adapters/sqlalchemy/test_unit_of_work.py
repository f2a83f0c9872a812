from __future__ import annotations

import threading
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from musicat.adapters.sqlalchemy.mappings import track_table
from musicat.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)
from musicat.domain.model import ArtistUpsert, TrackInput
from tests.helpers.catalog import row_count

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_unit_of_work_requires_startup() -> None:
    assert not is_started()
    with pytest.raises(StartupError):
        SqlAlchemyCatalogUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b


def test_committed_work_is_visible_to_the_next_unit(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with SqlAlchemyCatalogUnitOfWork() as uow:
        id_map = uow.repositories.artists.upsert([ArtistUpsert(key="air", name="Air")])
        uow.commit()

    with SqlAlchemyCatalogUnitOfWork() as uow:
        artist = uow.repositories.artists.get("air")

    assert artist is not None
    assert artist.id == id_map["air"]


def test_errors_roll_the_unit_back(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)

    with pytest.raises(RuntimeError, match="abort"), SqlAlchemyCatalogUnitOfWork() as uow:
        uow.repositories.tracks.upsert([TrackInput("vid00000001", "Lost")])
        raise RuntimeError("abort")

    assert row_count(sqlite_engine, track_table) == 0


def test_repositories_are_only_available_inside_the_block(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    uow = SqlAlchemyCatalogUnitOfWork()

    with pytest.raises(StartupError):
        _ = uow.repositories

    with uow:
        assert uow.repositories.links is not None

    with pytest.raises(StartupError):
        _ = uow.session


def test_in_memory_database_is_shared_with_worker_threads() -> None:
    startup(database_uri="sqlite+pysqlite:///:memory:", force=True)

    def write() -> None:
        with SqlAlchemyCatalogUnitOfWork() as uow:
            uow.repositories.artists.upsert([ArtistUpsert(key="air", name="Air")])
            uow.commit()

    writer = threading.Thread(target=write)
    writer.start()
    writer.join()

    with SqlAlchemyCatalogUnitOfWork() as uow:
        assert uow.repositories.artists.get("air") is not None
