"""SQLAlchemy table metadata for the catalog."""

from __future__ import annotations

import json
import uuid
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, cast

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)

from musicat.domain.model import AlbumType, ArtistTrackRole, PlaylistType, Thumbnail

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class ThumbnailListType(TypeDecorator[tuple[Thumbnail, ...]]):
    """Ordered thumbnail candidates stored as a JSON array."""

    impl = Text
    cache_ok = True

    def process_bind_param(
        self, value: tuple[Thumbnail, ...] | None, dialect: Dialect
    ) -> str | None:
        _ = dialect
        if value is None:
            return None
        payload = [
            {"url": item.url, "width": item.width, "height": item.height} for item in value
        ]
        return json.dumps(payload)

    def process_result_value(self, value: str | None, dialect: Dialect) -> tuple[Thumbnail, ...]:
        _ = dialect
        if value is None:
            return ()
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return ()
        items = cast(list[Any], loaded)
        thumbnails: list[Thumbnail] = []
        for item in items:
            if isinstance(item, dict) and isinstance(item.get("url"), str):
                thumbnails.append(Thumbnail(item["url"], item.get("width"), item.get("height")))
        return tuple(thumbnails)


def _enum_values(enum_cls: type[StrEnum]) -> list[str]:
    return [member.value for member in enum_cls]


def _enum_column_type(enum_cls: type[StrEnum], name: str) -> Enum:
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        create_constraint=False,
        length=32,
        values_callable=_enum_values,
    )


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}
metadata = mapper_registry.metadata


def _timestamps() -> tuple[Column[datetime], Column[datetime]]:
    return (
        Column("created_at", UTCDateTime(), nullable=False),
        Column("updated_at", UTCDateTime(), nullable=False),
    )


# Entity tables -----------------------------------------------------------------

artist_table = Table(
    "artists",
    metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("key", String, nullable=False),
    Column("name", String, nullable=False),
    Column("display_name", String, nullable=True),
    Column("channel_id", String, nullable=True),
    Column("description", Text, nullable=True),
    Column("image_url", String, nullable=True),
    Column("thumbnails", ThumbnailListType(), nullable=True),
    *_timestamps(),
    UniqueConstraint("key"),
    Index("ix_artists_channel_id", "channel_id"),
)

album_table = Table(
    "albums",
    metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("external_id", String, nullable=False),
    Column("title", String, nullable=False),
    Column("cover_url", String, nullable=True),
    Column("album_type", _enum_column_type(AlbumType, "album_type"), nullable=True),
    Column("year", Integer, nullable=True),
    Column("source", String(32), nullable=True),
    *_timestamps(),
    UniqueConstraint("external_id"),
)

playlist_table = Table(
    "playlists",
    metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("external_id", String, nullable=False),
    Column("title", String, nullable=False),
    Column("cover_url", String, nullable=True),
    Column("playlist_type", _enum_column_type(PlaylistType, "playlist_type"), nullable=True),
    Column("source", String(32), nullable=True),
    *_timestamps(),
    UniqueConstraint("external_id"),
)

track_table = Table(
    "tracks",
    metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("external_id", String(11), nullable=False),
    Column("title", String, nullable=False),
    Column("duration_sec", Integer, nullable=True),
    Column("image_url", String, nullable=True),
    Column("is_video", Boolean, nullable=True),
    Column("source", String(32), nullable=True),
    *_timestamps(),
    UniqueConstraint("external_id"),
)

# Link tables -------------------------------------------------------------------


def _fk(name: str, target: str) -> Column[uuid.UUID]:
    return Column(
        name, UUIDColumnType, ForeignKey(f"{target}.id", ondelete="CASCADE"), nullable=False
    )


artist_album_table = Table(
    "artist_albums",
    metadata,
    _fk("artist_id", "artists"),
    _fk("album_id", "albums"),
    Column("created_at", UTCDateTime(), nullable=False),
    UniqueConstraint("artist_id", "album_id"),
)

artist_playlist_table = Table(
    "artist_playlists",
    metadata,
    _fk("artist_id", "artists"),
    _fk("playlist_id", "playlists"),
    Column("created_at", UTCDateTime(), nullable=False),
    UniqueConstraint("artist_id", "playlist_id"),
)

artist_track_table = Table(
    "artist_tracks",
    metadata,
    _fk("artist_id", "artists"),
    _fk("track_id", "tracks"),
    Column("role", _enum_column_type(ArtistTrackRole, "artist_track_role"), nullable=False),
    Column("position", Integer, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    UniqueConstraint("artist_id", "track_id"),
)

album_track_table = Table(
    "album_tracks",
    metadata,
    _fk("album_id", "albums"),
    _fk("track_id", "tracks"),
    Column("position", Integer, nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    UniqueConstraint("album_id", "track_id"),
)

playlist_track_table = Table(
    "playlist_tracks",
    metadata,
    _fk("playlist_id", "playlists"),
    _fk("track_id", "tracks"),
    Column("position", Integer, nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    UniqueConstraint("playlist_id", "track_id"),
)

