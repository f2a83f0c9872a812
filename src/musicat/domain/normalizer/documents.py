"""Whole-document parsers for artist pages, album/playlist pages and search results."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Final

from musicat.domain.model import (
    AlbumInput,
    AlbumType,
    ArtistSummary,
    IngestSource,
    PlaylistInput,
    TrackInput,
)

from .entities import (
    album_from_card,
    classify_card,
    dedupe_by_external_id,
    explicit_album_type,
    playlist_from_card,
    track_from_row,
)
from .nodes import as_object, dig, objects
from .renderers import (
    RESPONSIVE_ITEM,
    TWO_ROW_ITEM,
    ArtistLink,
    CollectionCard,
    TrackRow,
    match_items,
)
from .schema import parse_text
from .text import optional_text
from .thumbnails import best_thumbnail, collect_thumbnails

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .nodes import JsonObject

log = getLogger(__name__)

MUSIC_SHELF: Final[str] = "musicShelfRenderer"
PLAYLIST_SHELF: Final[str] = "musicPlaylistShelfRenderer"
CAROUSEL_SHELF: Final[str] = "musicCarouselShelfRenderer"
CARD_SHELF: Final[str] = "musicCardShelfRenderer"
DESCRIPTION_SHELF: Final[str] = "musicDescriptionShelfRenderer"
RESPONSIVE_HEADER: Final[str] = "musicResponsiveHeaderRenderer"
LOOSE_ITEMS: Final[str] = "items"
PLAYLIST_CONTINUATION: Final[str] = "musicPlaylistShelfContinuation"
SHELF_CONTINUATION: Final[str] = "musicShelfContinuation"

SHELF_KINDS: Final[tuple[str, ...]] = (
    MUSIC_SHELF,
    PLAYLIST_SHELF,
    CAROUSEL_SHELF,
    CARD_SHELF,
    DESCRIPTION_SHELF,
    RESPONSIVE_HEADER,
)
TRACK_SHELF_KINDS: Final[frozenset[str]] = frozenset(
    {MUSIC_SHELF, PLAYLIST_SHELF, LOOSE_ITEMS, PLAYLIST_CONTINUATION, SHELF_CONTINUATION}
)
_RESULT_CONTAINERS: Final[tuple[str, ...]] = (
    "singleColumnBrowseResultsRenderer",
    "twoColumnBrowseResultsRenderer",
    "tabbedSearchResultsRenderer",
)
_ARTIST_HEADERS: Final[tuple[str, ...]] = (
    "musicImmersiveHeaderRenderer",
    "musicVisualHeaderRenderer",
    "musicHeaderRenderer",
)


@dataclass(frozen=True, slots=True)
class Shelf:
    kind: str
    title: str
    items: list[JsonObject]
    node: JsonObject


@dataclass(frozen=True, slots=True)
class ArtistBrowse:
    summary: ArtistSummary
    albums: tuple[AlbumInput, ...] = ()
    playlists: tuple[PlaylistInput, ...] = ()
    top_songs: tuple[TrackInput, ...] = ()


@dataclass(frozen=True, slots=True)
class CollectionBrowse:
    title: str
    album_type: AlbumType | None
    cover_url: str | None
    tracks: tuple[TrackInput, ...]


@dataclass(frozen=True, slots=True)
class SearchCandidate:
    browse_id: str
    name: str
    page_type: str


# Shelf traversal ---------------------------------------------------------------


def _shelf_title(node: JsonObject) -> str:
    title = parse_text(node.get("title")).text
    if title:
        return title
    header = as_object(node.get("header")) or {}
    for key in ("musicCarouselShelfBasicHeaderRenderer", "musicCarouselShelfRenderer"):
        title = parse_text(dig(header, key, "title")).text
        if title:
            return title
    return ""


def iter_shelves(contents: object) -> Iterator[Shelf]:
    """Shelves of a ``sectionListRenderer.contents`` list, flattening item sections."""

    for section in objects(contents):
        nested = dig(section, "itemSectionRenderer", "contents")
        if nested is not None:
            yield from iter_shelves(nested)
            continue
        if RESPONSIVE_ITEM in section or TWO_ROW_ITEM in section:
            yield Shelf(LOOSE_ITEMS, "", [section], section)
            continue
        for kind in SHELF_KINDS:
            node = as_object(section.get(kind))
            if node is not None:
                yield Shelf(kind, _shelf_title(node), objects(node.get("contents")), node)
                break
        else:
            log.debug("Skipping unknown section: %s", ", ".join(sorted(section)))


def _section_contents(document: Mapping[str, object]) -> list[JsonObject]:
    contents: list[JsonObject] = []
    for container_key in _RESULT_CONTAINERS:
        container = dig(document, "contents", container_key)
        for tab in objects(dig(container, "tabs")):
            contents.extend(
                objects(dig(tab, "tabRenderer", "content", "sectionListRenderer", "contents"))
            )
        contents.extend(
            objects(dig(container, "secondaryContents", "sectionListRenderer", "contents"))
        )
    contents.extend(objects(dig(document, "contents", "sectionListRenderer", "contents")))
    return contents


def iter_document_shelves(document: Mapping[str, object]) -> Iterator[Shelf]:
    """Every shelf of a browse/search document, plus an embedded continuation block."""

    yield from iter_shelves(_section_contents(document))
    for key in (PLAYLIST_CONTINUATION, SHELF_CONTINUATION):
        node = as_object(dig(document, "continuationContents", key))
        if node is not None:
            yield Shelf(key, "", objects(node.get("contents")), node)


# Artist pages ------------------------------------------------------------------


def _artist_header(document: Mapping[str, object]) -> JsonObject:
    for key in _ARTIST_HEADERS:
        header = as_object(dig(document, "header", key))
        if header is not None:
            return header
    return {}


def parse_artist_browse(document: Mapping[str, object]) -> ArtistBrowse:
    """Artist summary, album and playlist cards and the top-songs shelf of an artist page."""

    header = _artist_header(document)
    description = optional_text(parse_text(header.get("description")).text)
    thumbnails = collect_thumbnails(header)

    albums: list[AlbumInput] = []
    playlists: list[PlaylistInput] = []
    top_songs: list[TrackInput] = []

    for shelf in iter_document_shelves(document):
        if shelf.kind == DESCRIPTION_SHELF:
            description = description or optional_text(
                parse_text(shelf.node.get("description")).text
            )
            continue
        shapes = match_items(shelf.items)
        if shelf.kind == MUSIC_SHELF:
            if not top_songs:
                top_songs = [
                    track_from_row(shape, source=IngestSource.TOP_SONG)
                    for shape in shapes
                    if isinstance(shape, TrackRow)
                ]
            continue
        for shape in shapes:
            if not isinstance(shape, CollectionCard):
                continue
            kind = classify_card(shape)
            if kind == "album":
                album = album_from_card(shape, shelf_title=shelf.title)
                if album is not None:
                    albums.append(album)
            elif kind == "playlist":
                playlist = playlist_from_card(shape, shelf_title=shelf.title)
                if playlist is not None:
                    playlists.append(playlist)

    summary = ArtistSummary(
        name=parse_text(header.get("title")).text,
        description=description,
        image_url=best_thumbnail(thumbnails),
        thumbnails=thumbnails,
    )
    return ArtistBrowse(
        summary=summary,
        albums=tuple(dedupe_by_external_id(albums)),
        playlists=tuple(dedupe_by_external_id(playlists)),
        top_songs=tuple(dedupe_by_external_id(top_songs)),
    )


# Album and playlist pages ------------------------------------------------------


def _collection_header(document: Mapping[str, object]) -> JsonObject:
    candidates = (
        dig(document, "header", "musicDetailHeaderRenderer"),
        dig(
            document,
            "header",
            "musicEditablePlaylistDetailHeaderRenderer",
            "header",
            "musicDetailHeaderRenderer",
        ),
        dig(document, "header", RESPONSIVE_HEADER),
    )
    for candidate in candidates:
        header = as_object(candidate)
        if header is not None:
            return header
    for shelf in iter_shelves(_section_contents(document)):
        if shelf.kind == RESPONSIVE_HEADER:
            return shelf.node
    return {}


def parse_collection_browse(document: Mapping[str, object]) -> CollectionBrowse:
    """Header and ordered track list of an album or playlist page."""

    header = _collection_header(document)
    subtitle = parse_text(header.get("subtitle")).run_texts
    cover_url = best_thumbnail(
        collect_thumbnails(header), collect_thumbnails(dig(document, "background"))
    )

    tracks: list[TrackInput] = []
    for shelf in iter_document_shelves(document):
        if shelf.kind not in TRACK_SHELF_KINDS:
            continue
        tracks.extend(
            track_from_row(shape, source=IngestSource.COLLECTION)
            for shape in match_items(shelf.items)
            if isinstance(shape, TrackRow)
        )

    return CollectionBrowse(
        title=parse_text(header.get("title")).text,
        album_type=explicit_album_type(subtitle[:1]),
        cover_url=cover_url,
        tracks=tuple(dedupe_by_external_id(tracks)),
    )


# Search results ----------------------------------------------------------------


def _card_shelf_target(node: JsonObject) -> SearchCandidate | None:
    title = parse_text(node.get("title"))
    for run in title.runs:
        navigation = run.navigation_endpoint
        if navigation is not None and navigation.browse_id:
            return SearchCandidate(navigation.browse_id, title.text, navigation.page_type)
    return None


def parse_search(document: Mapping[str, object]) -> list[SearchCandidate]:
    """Browse targets of a search response in result order, first occurrence per ID."""

    candidates: list[SearchCandidate] = []
    for shelf in iter_document_shelves(document):
        if shelf.kind == CARD_SHELF:
            top_result = _card_shelf_target(shelf.node)
            if top_result is not None:
                candidates.append(top_result)
        for shape in match_items(shelf.items):
            if isinstance(shape, ArtistLink):
                candidates.append(SearchCandidate(shape.browse_id, shape.name, shape.page_type))
            elif isinstance(shape, CollectionCard):
                candidates.append(SearchCandidate(shape.browse_id, shape.title, shape.page_type))

    seen: set[str] = set()
    unique: list[SearchCandidate] = []
    for candidate in candidates:
        if candidate.browse_id in seen:
            continue
        seen.add(candidate.browse_id)
        unique.append(candidate)
    return unique
