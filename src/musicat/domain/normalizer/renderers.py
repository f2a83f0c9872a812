"""Renderer shapes.

A renderer is one UI item of a browse/search document. The same logical thing
shows up under several node layouts, so every item node is matched against the
known layouts and turned into exactly one tagged variant:

* :class:`TrackRow` - something playable with a valid 11-character video ID,
* :class:`CollectionCard` - a link to an album or playlist page,
* :class:`ArtistLink` - a link to an artist page,
* :class:`Unrecognized` - everything else; callers drop it.

Matching never raises. A payload whose leaf objects fail validation is
reported as :class:`Unrecognized` as well.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final

from pydantic import ValidationError

from musicat.domain.model import BylineArtist, Thumbnail

from .identifiers import (
    PAGE_TYPE_ALBUM,
    PAGE_TYPE_PLAYLIST,
    is_artist_page,
    is_official_artist_id,
)
from .nodes import as_object, dig, objects
from .schema import NavigationEndpointPayload, TextPayload, parse_navigation, parse_text
from .text import looks_like_video_id, normalize
from .thumbnails import collect_thumbnails

if TYPE_CHECKING:
    from .nodes import JsonObject

log = getLogger(__name__)

RESPONSIVE_ITEM: Final[str] = "musicResponsiveListItemRenderer"
TWO_ROW_ITEM: Final[str] = "musicTwoRowItemRenderer"

AUDIO_TRACK_VIDEO_TYPE: Final[str] = "MUSIC_VIDEO_TYPE_ATV"
_BYLINE_SEPARATORS: Final[frozenset[str]] = frozenset({"•", ",", "&", "–", "-", "x", "and"})


@dataclass(frozen=True, slots=True)
class TrackRow:
    video_id: str
    title: str
    byline: tuple[BylineArtist, ...]
    duration_text: str
    thumbnails: tuple[Thumbnail, ...]
    is_video: bool | None


@dataclass(frozen=True, slots=True)
class CollectionCard:
    browse_id: str
    page_type: str
    title: str
    subtitle: tuple[str, ...]
    thumbnails: tuple[Thumbnail, ...]


@dataclass(frozen=True, slots=True)
class ArtistLink:
    browse_id: str
    name: str
    page_type: str
    thumbnails: tuple[Thumbnail, ...]


@dataclass(frozen=True, slots=True)
class Unrecognized:
    renderer: str
    reason: str


type RendererShape = TrackRow | CollectionCard | ArtistLink | Unrecognized


# Video IDs ---------------------------------------------------------------------


def _overlay_navigation(node: JsonObject) -> object:
    return dig(
        node,
        "overlay",
        "musicItemThumbnailOverlayRenderer",
        "content",
        "musicPlayButtonRenderer",
        "playNavigationEndpoint",
    )


def _watch_video_id(endpoint: object) -> str:
    return normalize(dig(endpoint, "watchEndpoint", "videoId"))


def _first_valid(candidates: Iterator[str]) -> str | None:
    for candidate in candidates:
        if looks_like_video_id(candidate):
            return candidate
    return None


def _navigation_candidates(node: JsonObject) -> Iterator[str]:
    yield _watch_video_id(_overlay_navigation(node))
    yield _watch_video_id(node.get("navigationEndpoint"))
    yield _watch_video_id(node.get("playNavigationEndpoint"))


def _direct_candidates(node: JsonObject) -> Iterator[str]:
    yield normalize(dig(node, "watchEndpoint", "videoId"))
    yield normalize(node.get("videoId"))
    yield normalize(node.get("id"))


def _menu_scan(node: object, seen: set[int]) -> Iterator[str]:
    """Depth-first walk yielding watch-endpoint video IDs in document order."""

    if isinstance(node, list):
        if id(node) in seen:
            return
        seen.add(id(node))
        for item in node:
            yield from _menu_scan(item, seen)
        return
    if not isinstance(node, dict) or id(node) in seen:
        return
    seen.add(id(node))
    yield _watch_video_id(node.get("playNavigationEndpoint"))
    yield _watch_video_id(node)
    for value in node.values():
        yield from _menu_scan(value, seen)


def extract_video_id(node: Mapping[str, Any]) -> str | None:
    """The renderer's video ID, trying each known location in a fixed order.

    1. a watch endpoint on the renderer itself or on its overlay play button,
    2. ``playlistItemData.videoId``,
    3. a direct ``watchEndpoint.videoId`` / ``videoId`` / ``id`` field,
    4. the first watch endpoint found depth-first in the context menu.
    """

    renderer = dict(node)
    chain = (
        _navigation_candidates(renderer),
        iter((normalize(dig(renderer, "playlistItemData", "videoId")),)),
        _direct_candidates(renderer),
        _menu_scan(renderer.get("menu"), set()),
    )
    for candidates in chain:
        found = _first_valid(candidates)
        if found is not None:
            return found
    return None


def _music_video_type(node: JsonObject) -> str:
    for endpoint in (
        _overlay_navigation(node),
        node.get("navigationEndpoint"),
        node.get("playNavigationEndpoint"),
    ):
        navigation = parse_navigation(endpoint)
        if navigation is not None and navigation.watch_endpoint is not None:
            if navigation.watch_endpoint.music_video_type:
                return navigation.watch_endpoint.music_video_type
    return ""


def _is_video(node: JsonObject) -> bool | None:
    """``None`` when the row does not say whether it is a video or an audio track."""

    video_type = _music_video_type(node)
    if not video_type:
        return None
    return video_type != AUDIO_TRACK_VIDEO_TYPE


# Text helpers ------------------------------------------------------------------


def _flex_column(node: JsonObject, index: int) -> TextPayload:
    return parse_text(
        dig(node, "flexColumns", index, "musicResponsiveListItemFlexColumnRenderer", "text")
    )


def _fixed_column(node: JsonObject, index: int) -> TextPayload:
    return parse_text(
        dig(node, "fixedColumns", index, "musicResponsiveListItemFixedColumnRenderer", "text")
    )


def _is_artist_target(navigation: NavigationEndpointPayload | None) -> bool:
    if navigation is None or not navigation.browse_id:
        return False
    return is_artist_page(navigation.page_type) or is_official_artist_id(navigation.browse_id)


def extract_byline(text: TextPayload) -> tuple[BylineArtist, ...]:
    """Credited artists from a byline column.

    When any run links somewhere, only runs linking to artist pages count.
    Without links every non-separator run is taken as an artist name.
    """

    linked = [run for run in text.runs if run.navigation_endpoint is not None]
    if linked:
        return tuple(
            BylineArtist(name=normalize(run.text), browse_id=run.navigation_endpoint.browse_id)
            for run in linked
            if run.navigation_endpoint is not None
            and _is_artist_target(run.navigation_endpoint)
            and normalize(run.text)
        )
    return tuple(
        BylineArtist(name=name)
        for name in text.run_texts
        if name.casefold() not in _BYLINE_SEPARATORS
    )


# Matchers ----------------------------------------------------------------------


def _browse_target(
    node: JsonObject, title: str, thumbnails: tuple[Thumbnail, ...], subtitle: tuple[str, ...]
) -> RendererShape | None:
    navigation = parse_navigation(node.get("navigationEndpoint"))
    if navigation is None:
        return None
    if navigation.browse_id:
        if is_artist_page(navigation.page_type):
            return ArtistLink(navigation.browse_id, title, navigation.page_type, thumbnails)
        return CollectionCard(
            navigation.browse_id, navigation.page_type, title, subtitle, thumbnails
        )
    return None


def _match_responsive(node: JsonObject) -> RendererShape:
    title = _flex_column(node, 0)
    second = _flex_column(node, 1)
    thumbnails = collect_thumbnails(node)

    target = _browse_target(node, title.text, thumbnails, second.run_texts)
    if target is not None:
        return target

    video_id = extract_video_id(node)
    if video_id is None:
        return Unrecognized(RESPONSIVE_ITEM, "no valid video id")
    return TrackRow(
        video_id=video_id,
        title=title.text,
        byline=extract_byline(second),
        duration_text=_fixed_column(node, 0).text,
        thumbnails=thumbnails,
        is_video=_is_video(node),
    )


def _match_two_row(node: JsonObject) -> RendererShape:
    title = parse_text(node.get("title"))
    subtitle = parse_text(node.get("subtitle"))
    thumbnails = collect_thumbnails(node)

    target = _browse_target(node, title.text, thumbnails, subtitle.run_texts)
    if target is not None:
        return target

    navigation = parse_navigation(node.get("navigationEndpoint"))
    if navigation is not None and navigation.watch_playlist_endpoint is not None:
        playlist_id = navigation.watch_playlist_endpoint.playlist_id
        if playlist_id:
            return CollectionCard(
                playlist_id, PAGE_TYPE_PLAYLIST, title.text, subtitle.run_texts, thumbnails
            )

    video_id = extract_video_id(node)
    if video_id is None:
        return Unrecognized(TWO_ROW_ITEM, "no browse target or video id")
    return TrackRow(
        video_id=video_id,
        title=title.text,
        byline=extract_byline(subtitle),
        duration_text="",
        thumbnails=thumbnails,
        is_video=_is_video(node),
    )


_MATCHERS: Final[dict[str, Callable[[JsonObject], RendererShape]]] = {
    RESPONSIVE_ITEM: _match_responsive,
    TWO_ROW_ITEM: _match_two_row,
}


def match_renderer(item: object) -> RendererShape:
    """Classify one item wrapper such as ``{"musicResponsiveListItemRenderer": {...}}``."""

    wrapper = as_object(item)
    if wrapper is None:
        return Unrecognized("<non-object>", "item is not an object")
    for key, matcher in _MATCHERS.items():
        node = as_object(wrapper.get(key))
        if node is None:
            continue
        try:
            return matcher(node)
        except ValidationError as exc:
            log.debug("Dropping %s with invalid payload: %s", key, exc)
            return Unrecognized(key, "invalid payload")
    return Unrecognized(", ".join(sorted(wrapper)) or "<empty>", "unknown renderer")


def match_items(items: object) -> list[RendererShape]:
    """Match every item of a shelf ``contents`` list; unrecognized items are dropped."""

    shapes: list[RendererShape] = []
    for item in objects(items):
        shape = match_renderer(item)
        if isinstance(shape, Unrecognized):
            log.debug("Skipping unrecognized renderer %s: %s", shape.renderer, shape.reason)
            continue
        shapes.append(shape)
    return shapes


def is_album_card(card: CollectionCard) -> bool:
    return PAGE_TYPE_ALBUM in card.page_type


def is_playlist_card(card: CollectionCard) -> bool:
    return PAGE_TYPE_PLAYLIST in card.page_type
