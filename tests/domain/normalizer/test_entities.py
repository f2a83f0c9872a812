from __future__ import annotations

import pytest

from musicat.domain.model import (
    AlbumInput,
    AlbumType,
    IngestSource,
    PlaylistType,
    Thumbnail,
)
from musicat.domain.normalizer import (
    dedupe_by_external_id,
    explicit_album_type,
    infer_album_type,
    resolve_album_type,
)
from musicat.domain.normalizer.entities import (
    album_from_card,
    classify_card,
    playlist_from_card,
    track_from_row,
)
from musicat.domain.normalizer.renderers import CollectionCard, TrackRow


def _card(browse_id: str, page_type: str = "", subtitle: tuple[str, ...] = ()) -> CollectionCard:
    return CollectionCard(
        browse_id=browse_id,
        page_type=page_type,
        title=" Title ",
        subtitle=subtitle,
        thumbnails=(
            Thumbnail("https://img.test/s", 60, 60),
            Thumbnail("https://img.test/l", 544, 544),
        ),
    )


@pytest.mark.parametrize(
    ("count", "expected"),
    [
        (1, AlbumType.SINGLE),
        (3, AlbumType.SINGLE),
        (4, AlbumType.EP),
        (6, AlbumType.EP),
        (7, AlbumType.ALBUM),
        (20, AlbumType.ALBUM),
    ],
)
def test_infer_album_type_thresholds(count: int, expected: AlbumType) -> None:
    assert infer_album_type(count) is expected


def test_resolve_album_type_precedence() -> None:
    known = resolve_album_type(AlbumType.ALBUM, explicit=AlbumType.EP, track_count=2)
    assert known is AlbumType.ALBUM
    assert resolve_album_type(None, explicit=AlbumType.EP, track_count=12) is AlbumType.EP
    assert resolve_album_type(None, explicit=None, track_count=5) is AlbumType.EP
    assert resolve_album_type(None, explicit=None, track_count=0) is None


def test_explicit_album_type_labels() -> None:
    assert explicit_album_type(["Single"]) is AlbumType.SINGLE
    assert explicit_album_type([" EP "]) is AlbumType.EP
    assert explicit_album_type(["album"]) is AlbumType.ALBUM
    assert explicit_album_type(["2020"]) is None
    assert explicit_album_type([]) is None


def test_classify_card_by_page_type_then_prefix() -> None:
    assert classify_card(_card("xyz", "MUSIC_PAGE_TYPE_ALBUM")) == "album"
    assert classify_card(_card("xyz", "MUSIC_PAGE_TYPE_PLAYLIST")) == "playlist"
    assert classify_card(_card("MPREb_abc")) == "album"
    assert classify_card(_card("VLPLabc")) == "playlist"
    assert classify_card(_card("OLAK5uy_abc")) == "playlist"
    assert classify_card(_card("UCsomeone")) is None


def test_album_from_card() -> None:
    album = album_from_card(_card("MPREb_abc", subtitle=("Single", "•", "2021")))

    assert album == AlbumInput(
        external_id="MPREb_abc",
        title="Title",
        cover_url="https://img.test/l",
        album_type=AlbumType.SINGLE,
        year=2021,
        source=IngestSource.ARTIST_BROWSE,
    )


def test_album_type_falls_back_to_shelf_title() -> None:
    album = album_from_card(_card("MPREb_abc", subtitle=("2021",)), shelf_title="Albums")
    untyped = album_from_card(_card("MPREb_abc", subtitle=("2021",)), shelf_title="Singles")

    assert album is not None
    assert album.album_type is AlbumType.ALBUM
    assert untyped is not None
    assert untyped.album_type is None


def test_playlist_type_from_shelf_title() -> None:
    featured = playlist_from_card(_card("VLPLabc"), shelf_title="Featured on")
    own = playlist_from_card(_card("VLPLabc"), shelf_title="Playlists")
    other = playlist_from_card(_card("VLPLabc"), shelf_title="Fans might also like")

    assert featured is not None
    assert featured.playlist_type is PlaylistType.EDITORIAL
    assert own is not None
    assert own.playlist_type is PlaylistType.ARTIST
    assert other is not None
    assert other.playlist_type is PlaylistType.ARTIST


def test_cards_without_id_are_dropped() -> None:
    assert album_from_card(_card("  ")) is None
    assert playlist_from_card(_card("")) is None


def test_track_from_row_uses_video_id_as_title_fallback() -> None:
    row = TrackRow(
        video_id="abcdefghijk",
        title="   ",
        byline=(),
        duration_text="1:01",
        thumbnails=(),
        is_video=False,
    )

    track = track_from_row(row, source=IngestSource.TOP_SONG)

    assert track.title == "abcdefghijk"
    assert track.duration_sec == 61
    assert track.image_url is None
    assert track.source is IngestSource.TOP_SONG


def test_dedupe_keeps_first_occurrence() -> None:
    first = AlbumInput("MPREb_a", "First")
    duplicate = AlbumInput("MPREb_a", "Second")
    other = AlbumInput("MPREb_b", "Other")

    assert dedupe_by_external_id([first, duplicate, other, AlbumInput("", "blank")]) == [
        first,
        other,
    ]
