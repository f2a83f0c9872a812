"""Catalog value types shared by the normalizer, the pipeline and the store."""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

type IdMap = dict[str, uuid.UUID]

_WHITESPACE = re.compile(r"\s+")


class AlbumType(StrEnum):
    ALBUM = "album"
    SINGLE = "single"
    EP = "ep"


class PlaylistType(StrEnum):
    ARTIST = "artist"
    USER = "user"
    EDITORIAL = "editorial"


class ArtistTrackRole(StrEnum):
    PRIMARY = "primary"
    FEATURED = "featured"
    TOP_SONG = "top_song"


class IngestSource(StrEnum):
    ARTIST_BROWSE = "artist_browse"
    TOP_SONG = "artist_top_song"
    COLLECTION = "collection"


@dataclass(frozen=True, slots=True)
class Thumbnail:
    url: str
    width: int | None = None
    height: int | None = None


@dataclass(frozen=True, slots=True)
class BylineArtist:
    """One credited artist from a track's byline column."""

    name: str
    browse_id: str | None = None


@dataclass(frozen=True, slots=True)
class ArtistSummary:
    name: str
    description: str | None = None
    image_url: str | None = None
    thumbnails: tuple[Thumbnail, ...] = ()


@dataclass(frozen=True, slots=True)
class ArtistRecord:
    id: uuid.UUID
    key: str
    name: str
    display_name: str | None = None
    channel_id: str | None = None
    description: str | None = None
    image_url: str | None = None
    thumbnails: tuple[Thumbnail, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class ArtistUpsert:
    """Write model for an artist row; ``None`` means "leave the stored value alone"."""

    key: str
    name: str
    display_name: str | None = None
    channel_id: str | None = None
    description: str | None = None
    image_url: str | None = None
    thumbnails: tuple[Thumbnail, ...] | None = None


@dataclass(frozen=True, slots=True)
class AlbumInput:
    external_id: str
    title: str
    cover_url: str | None = None
    album_type: AlbumType | None = None
    year: int | None = None
    source: IngestSource = IngestSource.ARTIST_BROWSE


@dataclass(frozen=True, slots=True)
class PlaylistInput:
    external_id: str
    title: str
    cover_url: str | None = None
    playlist_type: PlaylistType = PlaylistType.ARTIST
    source: IngestSource = IngestSource.ARTIST_BROWSE


@dataclass(frozen=True, slots=True)
class TrackInput:
    external_id: str
    title: str
    duration_sec: int | None = None
    image_url: str | None = None
    is_video: bool | None = None
    source: IngestSource = IngestSource.COLLECTION
    byline: tuple[BylineArtist, ...] = field(default=(), compare=False)


@dataclass(frozen=True, slots=True)
class UpsertResult:
    id_map: IdMap
    count: int

    def ordered_ids(self, external_ids: list[str]) -> list[uuid.UUID]:
        """Internal IDs for ``external_ids`` in the given order, skipping unknown keys."""

        return [self.id_map[key] for key in external_ids if key in self.id_map]


def canonical_artist_key(name: str) -> str:
    """Stable artist slug: casefolded, trimmed, whitespace runs collapsed to ``_``."""

    return _WHITESPACE.sub("_", name.strip().casefold())
