"""Mapping from renderer shapes to the catalog's write models."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final, Protocol

from musicat.domain.model import (
    AlbumInput,
    AlbumType,
    IngestSource,
    PlaylistInput,
    PlaylistType,
    TrackInput,
)

from .identifiers import looks_like_album_id, looks_like_playlist_id
from .renderers import is_album_card, is_playlist_card
from .text import normalize, to_seconds
from .thumbnails import best_thumbnail

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .renderers import CollectionCard, TrackRow

SINGLE_MAX_TRACKS: Final[int] = 3
EP_MAX_TRACKS: Final[int] = 6

_YEAR: Final[re.Pattern[str]] = re.compile(r"^(19|20)\d{2}$")
_EXPLICIT_TYPES: Final[dict[str, AlbumType]] = {
    "album": AlbumType.ALBUM,
    "single": AlbumType.SINGLE,
    "ep": AlbumType.EP,
}
_SHELF_ALBUM_TYPES: Final[dict[str, AlbumType]] = {"albums": AlbumType.ALBUM}
_SHELF_PLAYLIST_TYPES: Final[dict[str, PlaylistType]] = {
    "featured on": PlaylistType.EDITORIAL,
    "playlists": PlaylistType.ARTIST,
}


class _Keyed(Protocol):
    @property
    def external_id(self) -> str: ...


def dedupe_by_external_id[T: _Keyed](items: Iterable[T]) -> list[T]:
    """Keep the first occurrence of every external ID; later duplicates are dropped."""

    seen: set[str] = set()
    unique: list[T] = []
    for item in items:
        if not item.external_id or item.external_id in seen:
            continue
        seen.add(item.external_id)
        unique.append(item)
    return unique


def infer_album_type(track_count: int) -> AlbumType:
    if track_count <= SINGLE_MAX_TRACKS:
        return AlbumType.SINGLE
    if track_count <= EP_MAX_TRACKS:
        return AlbumType.EP
    return AlbumType.ALBUM


def explicit_album_type(labels: Iterable[str]) -> AlbumType | None:
    """Classification spelled out by the service (``"Single"``, ``"EP"``...), if any."""

    for label in labels:
        album_type = _EXPLICIT_TYPES.get(normalize(label).casefold())
        if album_type is not None:
            return album_type
    return None


def resolve_album_type(
    known: AlbumType | None, *, explicit: AlbumType | None, track_count: int
) -> AlbumType | None:
    """An already known or explicit type wins; otherwise infer from the track count."""

    if known is not None:
        return known
    if explicit is not None:
        return explicit
    if track_count <= 0:
        return None
    return infer_album_type(track_count)


def release_year(labels: Iterable[str]) -> int | None:
    for label in labels:
        text = normalize(label)
        if _YEAR.match(text):
            return int(text)
    return None


def _shelf_key(shelf_title: str) -> str:
    return normalize(shelf_title).casefold()


def classify_card(card: CollectionCard) -> str | None:
    """``"album"``, ``"playlist"`` or ``None`` for a card linking somewhere else."""

    if is_album_card(card):
        return "album"
    if is_playlist_card(card):
        return "playlist"
    if looks_like_album_id(card.browse_id):
        return "album"
    if looks_like_playlist_id(card.browse_id):
        return "playlist"
    return None


def album_from_card(card: CollectionCard, *, shelf_title: str = "") -> AlbumInput | None:
    external_id = normalize(card.browse_id)
    if not external_id:
        return None
    return AlbumInput(
        external_id=external_id,
        title=normalize(card.title) or external_id,
        cover_url=best_thumbnail(card.thumbnails),
        album_type=explicit_album_type(card.subtitle[:1])
        or _SHELF_ALBUM_TYPES.get(_shelf_key(shelf_title)),
        year=release_year(card.subtitle),
        source=IngestSource.ARTIST_BROWSE,
    )


def playlist_from_card(card: CollectionCard, *, shelf_title: str = "") -> PlaylistInput | None:
    external_id = normalize(card.browse_id)
    if not external_id:
        return None
    shelf = _shelf_key(shelf_title)
    playlist_type = next(
        (value for prefix, value in _SHELF_PLAYLIST_TYPES.items() if shelf.startswith(prefix)),
        PlaylistType.ARTIST,
    )
    return PlaylistInput(
        external_id=external_id,
        title=normalize(card.title) or external_id,
        cover_url=best_thumbnail(card.thumbnails),
        playlist_type=playlist_type,
        source=IngestSource.ARTIST_BROWSE,
    )


def track_from_row(row: TrackRow, *, source: IngestSource) -> TrackInput:
    return TrackInput(
        external_id=row.video_id,
        title=normalize(row.title) or row.video_id,
        duration_sec=to_seconds(row.duration_text),
        image_url=best_thumbnail(row.thumbnails),
        is_video=row.is_video,
        source=source,
        byline=row.byline,
    )
