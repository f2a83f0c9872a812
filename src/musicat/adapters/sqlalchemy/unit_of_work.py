"""SQLAlchemy engine lifecycle and the catalog unit of work."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import create_engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from musicat.adapters.sqlalchemy.migrations import upgrade_head
from musicat.adapters.sqlalchemy.repositories import (
    SqlAlchemyArtistRepository,
    SqlAlchemyEntityRepository,
    SqlAlchemyLinkRepository,
    album_repository,
    playlist_repository,
    track_repository,
)
from musicat.config import get_database_config

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

    from musicat.domain.model import AlbumInput, PlaylistInput, TrackInput


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call musicat.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def _engine_options(uri: str) -> dict[str, Any]:
    # An in-memory SQLite database lives in one connection; share it across threads.
    url = make_url(uri)
    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {}


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the engine, migrate the schema to head and build the session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    if engine is None:
        database = get_database_config()
        uri = database_uri or database.uri
        engine = create_engine(uri, echo=database.echo, future=True, **_engine_options(uri))
    upgrade_head(engine=engine)
    _STATE.engine = engine


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


@dataclass(slots=True)
class CatalogRepositories:
    artists: SqlAlchemyArtistRepository
    albums: SqlAlchemyEntityRepository[AlbumInput]
    playlists: SqlAlchemyEntityRepository[PlaylistInput]
    tracks: SqlAlchemyEntityRepository[TrackInput]
    links: SqlAlchemyLinkRepository


class SqlAlchemyCatalogUnitOfWork:
    """One session per ``with`` block; rolled back when the block raises."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self.session_factory: sessionmaker[Session] = session_factory or _STATE.session_factory
        self._session: Session | None = None
        self._repositories: CatalogRepositories | None = None

    def _build_repositories(self, session: Session) -> CatalogRepositories:
        return CatalogRepositories(
            artists=SqlAlchemyArtistRepository(session),
            albums=album_repository(session),
            playlists=playlist_repository(session),
            tracks=track_repository(session),
            links=SqlAlchemyLinkRepository(session),
        )

    def __enter__(self) -> SqlAlchemyCatalogUnitOfWork:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self.session = None
        self._repositories = None
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> CatalogRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session
