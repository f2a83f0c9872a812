"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import case, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from musicat.adapters.sqlalchemy.mappings import (
    album_table,
    album_track_table,
    artist_album_table,
    artist_playlist_table,
    artist_table,
    artist_track_table,
    playlist_table,
    playlist_track_table,
    track_table,
)
from musicat.domain.errors import StoreError
from musicat.domain.model import ArtistRecord, ArtistTrackRole, canonical_artist_key

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from sqlalchemy import Table
    from sqlalchemy.engine import Row
    from sqlalchemy.orm import Session

    from musicat.domain.model import (
        AlbumInput,
        ArtistUpsert,
        IdMap,
        PlaylistInput,
        TrackInput,
    )

# Columns an upsert never touches on conflict.
_IMMUTABLE_COLUMNS = frozenset({"id", "created_at"})


def _now() -> datetime:
    return datetime.now(UTC)


def dialect_insert(session: Session, table: Table) -> Any:
    """``INSERT`` construct supporting ``ON CONFLICT`` for the session's dialect."""

    dialect_name = session.get_bind().dialect.name
    if dialect_name == "sqlite":
        return sqlite_insert(table)
    if dialect_name == "postgresql":
        return pg_insert(table)
    raise StoreError(f"Upserts are not supported for dialect {dialect_name!r}")


def _first_per_key(rows: Iterable[dict[str, Any]], key: str) -> list[dict[str, Any]]:
    seen: set[object] = set()
    unique: list[dict[str, Any]] = []
    for row in rows:
        if row[key] in seen:
            continue
        seen.add(row[key])
        unique.append(row)
    return unique


def upsert_by_key(
    session: Session,
    table: Table,
    rows: Sequence[dict[str, Any]],
    *,
    key: str,
    keep_stored: frozenset[str] = frozenset(),
    key_placeholders: frozenset[str] = frozenset(),
) -> IdMap:
    """Insert ``rows`` or merge them into the existing row with the same ``key``.

    Merge rules per column: ``keep_stored`` columns only fill a stored
    ``NULL``; every other column takes the new value unless it is ``NULL``.
    A ``key_placeholders`` column whose new value merely repeats the key
    keeps the stored value.
    Returns ``key -> id`` for every input row, read back after the write.
    """

    unique_rows = _first_per_key(rows, key)
    if not unique_rows:
        return {}

    stmt = dialect_insert(session, table).values(unique_rows)
    excluded = stmt.excluded
    updates: dict[str, Any] = {}
    for column in table.columns:
        name = column.name
        if name in _IMMUTABLE_COLUMNS or name == key:
            continue
        if name == "updated_at":
            updates[name] = excluded[name]
        elif name in keep_stored:
            updates[name] = func.coalesce(column, excluded[name])
        elif name in key_placeholders:
            updates[name] = case(
                (excluded[name] == excluded[key], column),
                else_=func.coalesce(excluded[name], column),
            )
        else:
            updates[name] = func.coalesce(excluded[name], column)
    session.execute(stmt.on_conflict_do_update(index_elements=[table.c[key]], set_=updates))

    keys = [row[key] for row in unique_rows]
    selected = session.execute(
        select(table.c[key].label("key_value"), table.c.id).where(table.c[key].in_(keys))
    )
    return {row.key_value: row.id for row in selected}


def _stamped(row: dict[str, Any], now: datetime) -> dict[str, Any]:
    return {"id": uuid.uuid4(), **row, "created_at": now, "updated_at": now}


def _artist_record(row: Row[Any]) -> ArtistRecord:
    return ArtistRecord(
        id=row.id,
        key=row.key,
        name=row.name,
        display_name=row.display_name,
        channel_id=row.channel_id,
        description=row.description,
        image_url=row.image_url,
        thumbnails=row.thumbnails or (),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SqlAlchemyArtistRepository:
    # Enrichment fields are written once and then left alone.
    WRITE_ONCE = frozenset({"description", "image_url", "thumbnails", "display_name"})

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, key: str) -> ArtistRecord | None:
        row = self.session.execute(
            select(artist_table).where(artist_table.c.key == key)
        ).one_or_none()
        return _artist_record(row) if row is not None else None

    def upsert(self, artists: Sequence[ArtistUpsert]) -> IdMap:
        now = _now()
        rows = [
            _stamped(
                {
                    "key": artist.key,
                    "name": artist.name,
                    "display_name": artist.display_name,
                    "channel_id": artist.channel_id,
                    "description": artist.description,
                    "image_url": artist.image_url,
                    "thumbnails": artist.thumbnails,
                },
                now,
            )
            for artist in artists
        ]
        return upsert_by_key(
            self.session,
            artist_table,
            rows,
            key="key",
            keep_stored=self.WRITE_ONCE,
        )

    def seed(self, names: Iterable[str]) -> int:
        """Create an artist row for every name whose canonical key is not stored yet."""

        wanted: dict[str, str] = {}
        for name in names:
            display = name.strip()
            key = canonical_artist_key(display)
            if key and key not in wanted:
                wanted[key] = display
        if not wanted:
            return 0

        existing = set(
            self.session.execute(
                select(artist_table.c.key).where(artist_table.c.key.in_(list(wanted)))
            ).scalars()
        )
        now = _now()
        rows = [
            _stamped({"key": key, "name": name}, now)
            for key, name in wanted.items()
            if key not in existing
        ]
        if rows:
            self.session.execute(artist_table.insert(), rows)
        return len(rows)

    def stalest_with_channel(self) -> ArtistRecord | None:
        row = self.session.execute(
            select(artist_table)
            .where(artist_table.c.channel_id.is_not(None))
            .order_by(artist_table.c.updated_at.asc(), artist_table.c.key.asc())
            .limit(1)
        ).one_or_none()
        return _artist_record(row) if row is not None else None


class SqlAlchemyEntityRepository[TInput]:
    """Upsert-by-external-ID for albums, playlists and tracks."""

    # First writer wins the provenance tag.
    WRITE_ONCE = frozenset({"source"})
    # Titles default to the external ID when the page shows none.
    KEY_PLACEHOLDERS = frozenset({"title"})

    def __init__(
        self,
        session: Session,
        table: Table,
        to_row: Callable[[TInput], dict[str, Any]],
    ) -> None:
        self.session = session
        self._table = table
        self._to_row = to_row

    def upsert(self, items: Sequence[TInput]) -> IdMap:
        now = _now()
        rows = [_stamped(self._to_row(item), now) for item in items]
        return upsert_by_key(
            self.session,
            self._table,
            rows,
            key="external_id",
            keep_stored=self.WRITE_ONCE,
            key_placeholders=self.KEY_PLACEHOLDERS,
        )


def album_row(album: AlbumInput) -> dict[str, Any]:
    return {
        "external_id": album.external_id,
        "title": album.title,
        "cover_url": album.cover_url,
        "album_type": album.album_type,
        "year": album.year,
        "source": album.source.value,
    }


def playlist_row(playlist: PlaylistInput) -> dict[str, Any]:
    return {
        "external_id": playlist.external_id,
        "title": playlist.title,
        "cover_url": playlist.cover_url,
        "playlist_type": playlist.playlist_type,
        "source": playlist.source.value,
    }


def track_row(track: TrackInput) -> dict[str, Any]:
    return {
        "external_id": track.external_id,
        "title": track.title,
        "duration_sec": track.duration_sec,
        "image_url": track.image_url,
        "is_video": track.is_video,
        "source": track.source.value,
    }


def _first_per_child(child_ids: Iterable[uuid.UUID]) -> list[uuid.UUID]:
    return list(dict.fromkeys(child_ids))


class SqlAlchemyLinkRepository:
    """Link-table writers; each table is unique on its (parent, child) pair."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def _link(
        self,
        table: Table,
        parent: str,
        child: str,
        rows: list[dict[str, Any]],
        *,
        update: Sequence[str] = (),
    ) -> int:
        if not rows:
            return 0
        stmt = dialect_insert(self.session, table).values(rows)
        conflict = [table.c[parent], table.c[child]]
        if update:
            stmt = stmt.on_conflict_do_update(
                index_elements=conflict,
                set_={name: stmt.excluded[name] for name in update},
            )
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=conflict)
        self.session.execute(stmt)
        return len(rows)

    def _unordered(
        self, table: Table, parent: str, child: str, parent_id: uuid.UUID, ids: Sequence[uuid.UUID]
    ) -> int:
        now = _now()
        rows = [
            {parent: parent_id, child: child_id, "created_at": now}
            for child_id in _first_per_child(ids)
        ]
        return self._link(table, parent, child, rows)

    def _ordered(
        self, table: Table, parent: str, parent_id: uuid.UUID, track_ids: Sequence[uuid.UUID]
    ) -> int:
        now = _now()
        rows = [
            {parent: parent_id, "track_id": track_id, "position": index + 1, "created_at": now}
            for index, track_id in enumerate(_first_per_child(track_ids))
        ]
        return self._link(table, parent, "track_id", rows, update=("position",))

    def artist_albums(self, artist_id: uuid.UUID, album_ids: Sequence[uuid.UUID]) -> int:
        return self._unordered(artist_album_table, "artist_id", "album_id", artist_id, album_ids)

    def artist_playlists(self, artist_id: uuid.UUID, playlist_ids: Sequence[uuid.UUID]) -> int:
        return self._unordered(
            artist_playlist_table, "artist_id", "playlist_id", artist_id, playlist_ids
        )

    def artist_tracks(
        self, artist_id: uuid.UUID, track_ids: Sequence[uuid.UUID], role: ArtistTrackRole
    ) -> int:
        """Link tracks to an artist under ``role``.

        Top songs carry their 1-based rank and take over an existing link. Any
        other role leaves an existing link untouched.
        """

        now = _now()
        ranked = role is ArtistTrackRole.TOP_SONG
        rows = [
            {
                "artist_id": artist_id,
                "track_id": track_id,
                "role": role,
                "position": index + 1 if ranked else None,
                "created_at": now,
            }
            for index, track_id in enumerate(_first_per_child(track_ids))
        ]
        update = ("role", "position") if ranked else ()
        return self._link(artist_track_table, "artist_id", "track_id", rows, update=update)

    def album_tracks(self, album_id: uuid.UUID, track_ids: Sequence[uuid.UUID]) -> int:
        return self._ordered(album_track_table, "album_id", album_id, track_ids)

    def playlist_tracks(self, playlist_id: uuid.UUID, track_ids: Sequence[uuid.UUID]) -> int:
        return self._ordered(playlist_track_table, "playlist_id", playlist_id, track_ids)


def album_repository(session: Session) -> SqlAlchemyEntityRepository[AlbumInput]:
    return SqlAlchemyEntityRepository(session, album_table, album_row)


def playlist_repository(session: Session) -> SqlAlchemyEntityRepository[PlaylistInput]:
    return SqlAlchemyEntityRepository(session, playlist_table, playlist_row)


def track_repository(session: Session) -> SqlAlchemyEntityRepository[TrackInput]:
    return SqlAlchemyEntityRepository(session, track_table, track_row)
