"""Catalog store backed by the SQLAlchemy unit of work."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from musicat.adapters.sqlalchemy.unit_of_work import SqlAlchemyCatalogUnitOfWork
from musicat.domain.errors import StoreError
from musicat.domain.model import UpsertResult
from musicat.domain.ports.store import CatalogStore

if TYPE_CHECKING:
    import uuid
    from collections.abc import Iterable, Sequence

    from musicat.adapters.sqlalchemy.unit_of_work import CatalogRepositories
    from musicat.domain.model import (
        AlbumInput,
        ArtistRecord,
        ArtistTrackRole,
        ArtistUpsert,
        PlaylistInput,
        TrackInput,
    )

log = getLogger(__name__)

UnitOfWorkFactory = Callable[[], SqlAlchemyCatalogUnitOfWork]


class SqlAlchemyCatalogStore:
    """Every call runs in its own unit of work and commits before returning.

    Database errors surface as :class:`StoreError`.
    """

    def __init__(self, unit_of_work_factory: UnitOfWorkFactory | None = None) -> None:
        self._unit_of_work_factory = unit_of_work_factory or SqlAlchemyCatalogUnitOfWork

    def _run[T](self, operation: str, action: Callable[[CatalogRepositories], T]) -> T:
        try:
            with self._unit_of_work_factory() as uow:
                result = action(uow.repositories)
                uow.commit()
                return result
        except SQLAlchemyError as exc:
            log.error(f"Catalog store {operation} failed: {exc}")
            raise StoreError(f"{operation} failed: {exc}") from exc

    def get_artist(self, key: str) -> ArtistRecord | None:
        return self._run("get_artist", lambda repos: repos.artists.get(key))

    def upsert_artists(self, rows: Sequence[ArtistUpsert]) -> UpsertResult:
        id_map = self._run("upsert_artists", lambda repos: repos.artists.upsert(rows))
        return UpsertResult(id_map=id_map, count=len(id_map))

    def upsert_albums(self, rows: Sequence[AlbumInput]) -> UpsertResult:
        id_map = self._run("upsert_albums", lambda repos: repos.albums.upsert(rows))
        return UpsertResult(id_map=id_map, count=len(id_map))

    def upsert_playlists(self, rows: Sequence[PlaylistInput]) -> UpsertResult:
        id_map = self._run("upsert_playlists", lambda repos: repos.playlists.upsert(rows))
        return UpsertResult(id_map=id_map, count=len(id_map))

    def upsert_tracks(self, rows: Sequence[TrackInput]) -> UpsertResult:
        id_map = self._run("upsert_tracks", lambda repos: repos.tracks.upsert(rows))
        return UpsertResult(id_map=id_map, count=len(id_map))

    def link_artist_albums(self, artist_id: uuid.UUID, album_ids: Sequence[uuid.UUID]) -> int:
        return self._run(
            "link_artist_albums", lambda repos: repos.links.artist_albums(artist_id, album_ids)
        )

    def link_artist_playlists(
        self, artist_id: uuid.UUID, playlist_ids: Sequence[uuid.UUID]
    ) -> int:
        return self._run(
            "link_artist_playlists",
            lambda repos: repos.links.artist_playlists(artist_id, playlist_ids),
        )

    def link_artist_tracks(
        self,
        artist_id: uuid.UUID,
        track_ids: Sequence[uuid.UUID],
        role: ArtistTrackRole,
    ) -> int:
        return self._run(
            "link_artist_tracks",
            lambda repos: repos.links.artist_tracks(artist_id, track_ids, role),
        )

    def link_album_tracks(
        self, album_id: uuid.UUID, ordered_track_ids: Sequence[uuid.UUID]
    ) -> int:
        return self._run(
            "link_album_tracks",
            lambda repos: repos.links.album_tracks(album_id, ordered_track_ids),
        )

    def link_playlist_tracks(
        self, playlist_id: uuid.UUID, ordered_track_ids: Sequence[uuid.UUID]
    ) -> int:
        return self._run(
            "link_playlist_tracks",
            lambda repos: repos.links.playlist_tracks(playlist_id, ordered_track_ids),
        )

    def seed_artists(self, names: Iterable[str]) -> int:
        return self._run("seed_artists", lambda repos: repos.artists.seed(list(names)))

    def next_artist_for_refresh(self) -> ArtistRecord | None:
        return self._run(
            "next_artist_for_refresh", lambda repos: repos.artists.stalest_with_channel()
        )


if TYPE_CHECKING:
    _store_check: CatalogStore = SqlAlchemyCatalogStore()
