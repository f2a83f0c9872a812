from __future__ import annotations

from musicat.domain.model import BylineArtist
from musicat.domain.normalizer import extract_video_id, match_renderer
from musicat.domain.normalizer.identifiers import PAGE_TYPE_ALBUM
from musicat.domain.normalizer.renderers import (
    ArtistLink,
    CollectionCard,
    TrackRow,
    Unrecognized,
    extract_byline,
    match_items,
)
from musicat.domain.normalizer.schema import parse_text
from tests.helpers.innertube import (
    ARTIST_ID,
    ARTIST_NAME,
    MUSIC_VIDEO,
    artist_result,
    browse_endpoint,
    collection_card,
    text,
    track_item,
    video_id,
)

OVERLAY_ID = "overlay0001"
ITEM_DATA_ID = "itemdata001"
DIRECT_ID = "direct00001"
MENU_ID = "menuitem001"


def _overlay(video: str) -> dict[str, object]:
    play = {"playNavigationEndpoint": {"watchEndpoint": {"videoId": video}}}
    return {"musicItemThumbnailOverlayRenderer": {"content": {"musicPlayButtonRenderer": play}}}


def _menu(video: str) -> dict[str, object]:
    item = {"navigationEndpoint": {"watchEndpoint": {"videoId": video}}}
    return {"menuRenderer": {"items": [{"menuNavigationItemRenderer": item}]}}


def test_video_id_prefers_overlay_navigation() -> None:
    node = {
        "overlay": _overlay(OVERLAY_ID),
        "playlistItemData": {"videoId": ITEM_DATA_ID},
        "videoId": DIRECT_ID,
        "menu": _menu(MENU_ID),
    }

    assert extract_video_id(node) == OVERLAY_ID


def test_video_id_fallback_chain() -> None:
    node: dict[str, object] = {
        "playlistItemData": {"videoId": ITEM_DATA_ID},
        "videoId": DIRECT_ID,
        "menu": _menu(MENU_ID),
    }
    assert extract_video_id(node) == ITEM_DATA_ID

    del node["playlistItemData"]
    assert extract_video_id(node) == DIRECT_ID

    del node["videoId"]
    assert extract_video_id(node) == MENU_ID

    del node["menu"]
    assert extract_video_id(node) is None


def test_invalid_video_ids_fall_through() -> None:
    node = {
        "overlay": _overlay("too-short"),
        "playlistItemData": {"videoId": "way-too-long-for-a-video"},
        "id": DIRECT_ID,
    }

    assert extract_video_id(node) == DIRECT_ID


def test_track_row_from_responsive_item() -> None:
    shape = match_renderer(
        track_item(
            video_id(1),
            "Song One",
            credits=((ARTIST_NAME, ARTIST_ID), ("Guest", "UCguest")),
            duration="4:05",
            video_type=MUSIC_VIDEO,
        )
    )

    assert isinstance(shape, TrackRow)
    assert shape.video_id == video_id(1)
    assert shape.title == "Song One"
    assert shape.duration_text == "4:05"
    assert shape.is_video is True
    assert shape.byline == (
        BylineArtist(ARTIST_NAME, ARTIST_ID),
        BylineArtist("Guest", "UCguest"),
    )


def test_audio_tracks_are_not_videos() -> None:
    shape = match_renderer(track_item(video_id(2), "Song Two"))

    assert isinstance(shape, TrackRow)
    assert shape.is_video is False


def test_rows_without_a_video_type_leave_is_video_unknown() -> None:
    shape = match_renderer(track_item(video_id(3), "Song Three", video_type=""))

    assert isinstance(shape, TrackRow)
    assert shape.is_video is None


def test_collection_card_from_two_row_item() -> None:
    shape = match_renderer(collection_card("MPREb_one", "First Album", subtitle=("EP", "2019")))

    assert isinstance(shape, CollectionCard)
    assert shape.browse_id == "MPREb_one"
    assert shape.page_type == PAGE_TYPE_ALBUM
    assert shape.subtitle == ("EP", "•", "2019")
    assert shape.thumbnails


def test_watch_playlist_card_becomes_collection() -> None:
    shape = match_renderer(
        {
            "musicTwoRowItemRenderer": {
                "title": text("Radio"),
                "navigationEndpoint": {"watchPlaylistEndpoint": {"playlistId": "RDCLAK5uy_mix"}},
            }
        }
    )

    assert isinstance(shape, CollectionCard)
    assert shape.browse_id == "RDCLAK5uy_mix"


def test_artist_link_from_search_row() -> None:
    shape = match_renderer(artist_result(ARTIST_ID, ARTIST_NAME))

    assert shape == ArtistLink(ARTIST_ID, ARTIST_NAME, "MUSIC_PAGE_TYPE_ARTIST", ())


def test_unknown_and_broken_items_are_unrecognized() -> None:
    assert isinstance(match_renderer({"musicNavigationButtonRenderer": {}}), Unrecognized)
    assert isinstance(match_renderer("not an object"), Unrecognized)
    assert isinstance(match_renderer({"musicResponsiveListItemRenderer": {}}), Unrecognized)
    broken = {"musicTwoRowItemRenderer": {"title": {"runs": [{"navigationEndpoint": "oops"}]}}}
    assert isinstance(match_renderer(broken), Unrecognized)


def test_match_items_drops_unrecognized() -> None:
    shapes = match_items(
        [
            {"musicNavigationButtonRenderer": {}},
            track_item(video_id(3), "Kept"),
            "junk",
        ]
    )

    assert [type(shape) for shape in shapes] == [TrackRow]


def test_byline_keeps_only_artist_links_when_linked() -> None:
    byline = parse_text(
        text(
            (ARTIST_NAME, browse_endpoint(ARTIST_ID, "MUSIC_PAGE_TYPE_ARTIST")),
            " • ",
            ("Some Album", browse_endpoint("MPREb_x", PAGE_TYPE_ALBUM)),
        )
    )

    assert extract_byline(byline) == (BylineArtist(ARTIST_NAME, ARTIST_ID),)


def test_byline_without_links_splits_names() -> None:
    byline = parse_text(text("First", " & ", "Second", " • ", "3:20"))

    assert extract_byline(byline) == (
        BylineArtist("First"),
        BylineArtist("Second"),
        BylineArtist("3:20"),
    )
