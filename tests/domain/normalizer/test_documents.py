from __future__ import annotations

from musicat.domain.model import AlbumType, IngestSource, PlaylistType
from musicat.domain.normalizer import (
    parse_artist_browse,
    parse_collection_browse,
    parse_search,
)
from musicat.domain.normalizer.documents import LOOSE_ITEMS, iter_shelves
from tests.helpers.innertube import (
    ARTIST_ID,
    ARTIST_NAME,
    album_page,
    artist_page,
    artist_result,
    carousel,
    collection_card,
    playlist_card,
    playlist_page,
    search_page,
    text,
    track_item,
    video_id,
)


def test_parse_artist_browse_collects_every_shelf() -> None:
    document = artist_page(
        ARTIST_NAME,
        top_songs=[track_item(video_id(n), f"Top {n}", duration="2:0{n}") for n in range(1, 4)],
        albums=[
            collection_card("MPREb_one", "One", subtitle=("Album", "2019")),
            collection_card("MPREb_two", "Two", subtitle=("Single", "2021")),
            collection_card("MPREb_one", "One again"),
        ],
        playlists=[playlist_card("VLPLmine", "Mine")],
        description="An artist from the tests.",
    )

    browse = parse_artist_browse(document)

    assert browse.summary.name == ARTIST_NAME
    assert browse.summary.description == "An artist from the tests."
    assert browse.summary.image_url == "https://img.test/t1200x1200"
    assert len(browse.summary.thumbnails) == 3
    assert [album.external_id for album in browse.albums] == ["MPREb_one", "MPREb_two"]
    assert [album.album_type for album in browse.albums] == [AlbumType.ALBUM, AlbumType.SINGLE]
    assert browse.albums[0].title == "One"
    assert browse.albums[1].year == 2021
    assert [playlist.external_id for playlist in browse.playlists] == ["VLPLmine"]
    assert browse.playlists[0].playlist_type is PlaylistType.ARTIST
    assert [track.external_id for track in browse.top_songs] == [
        video_id(1),
        video_id(2),
        video_id(3),
    ]
    assert [track.duration_sec for track in browse.top_songs] == [121, 122, 123]
    assert {track.source for track in browse.top_songs} == {IngestSource.TOP_SONG}


def test_parse_artist_browse_tolerates_empty_documents() -> None:
    browse = parse_artist_browse({})

    assert browse.summary.name == ""
    assert browse.summary.image_url is None
    assert browse.albums == ()
    assert browse.playlists == ()
    assert browse.top_songs == ()


def test_featured_playlists_are_editorial() -> None:
    document = artist_page(ARTIST_NAME)
    sections = document["contents"]["singleColumnBrowseResultsRenderer"]["tabs"][0][
        "tabRenderer"
    ]["content"]["sectionListRenderer"]["contents"]
    sections.append(carousel("Featured on", [playlist_card("VLPLeditorial", "Editors")]))

    browse = parse_artist_browse(document)

    assert browse.playlists[0].playlist_type is PlaylistType.EDITORIAL


def test_parse_album_page_keeps_track_order() -> None:
    tracks = [track_item(video_id(n), f"Track {n}") for n in (3, 1, 2)]

    document = album_page("Second Album", tracks, subtitle=("EP", "2020"))

    collection = parse_collection_browse(document)

    assert collection.title == "Second Album"
    assert collection.album_type is AlbumType.EP
    assert collection.cover_url == "https://img.test/album/544x544"
    assert [track.external_id for track in collection.tracks] == [
        video_id(3),
        video_id(1),
        video_id(2),
    ]
    assert {track.source for track in collection.tracks} == {IngestSource.COLLECTION}


def test_parse_playlist_page_and_continuation() -> None:
    tracks = [track_item(video_id(1), "One"), track_item(video_id(1), "Dup")]
    document = playlist_page("Mine", tracks)
    document["continuationContents"] = {
        "musicPlaylistShelfContinuation": {"contents": [track_item(video_id(2), "Two")]}
    }

    collection = parse_collection_browse(document)

    assert collection.title == "Mine"
    assert collection.album_type is None
    assert [track.title for track in collection.tracks] == ["One", "Two"]


def test_loose_items_form_their_own_shelf() -> None:
    shelves = list(
        iter_shelves(
            [
                {"itemSectionRenderer": {"contents": [track_item(video_id(1), "Loose")]}},
                {"unknownRenderer": {}},
            ]
        )
    )

    assert [shelf.kind for shelf in shelves] == [LOOSE_ITEMS]


def test_parse_search_puts_top_result_first_and_dedupes() -> None:
    document = search_page(
        artist_result("UCother", "Other Artist"),
        artist_result(ARTIST_ID, ARTIST_NAME),
        collection_card("MPREb_x", "Some Album"),
        top_result=(ARTIST_ID, ARTIST_NAME),
    )

    candidates = parse_search(document)

    assert [candidate.browse_id for candidate in candidates] == [ARTIST_ID, "UCother", "MPREb_x"]
    assert candidates[0].name == ARTIST_NAME
    assert candidates[0].page_type == "MUSIC_PAGE_TYPE_ARTIST"


def test_parse_search_ignores_junk() -> None:
    document = search_page({"musicResponsiveListItemRenderer": {"flexColumns": text("x")}})

    assert parse_search(document) == []
    assert parse_search({}) == []


BROKEN_TEXT = {"runs": [{"text": "A", "navigationEndpoint": "junk"}]}


def _break_titles(node: object, renderers: set[str]) -> None:
    """Replace the ``title`` of every named renderer with a malformed run list."""

    if isinstance(node, dict):
        for key, value in node.items():
            if key in renderers and isinstance(value, dict):
                value["title"] = BROKEN_TEXT
            _break_titles(value, renderers)
    elif isinstance(node, list):
        for item in node:
            _break_titles(item, renderers)


def test_malformed_artist_titles_degrade_to_empty_text() -> None:
    document = artist_page(
        ARTIST_NAME,
        top_songs=[track_item(video_id(1), "Top 1")],
        albums=[collection_card("MPREb_one", "One")],
        playlists=[],
    )
    _break_titles(document, {"musicImmersiveHeaderRenderer", "musicShelfRenderer"})

    browse = parse_artist_browse(document)

    assert browse.summary.name == ""
    assert [track.external_id for track in browse.top_songs] == [video_id(1)]
    assert [album.external_id for album in browse.albums] == ["MPREb_one"]


def test_malformed_collection_titles_degrade_to_empty_text() -> None:
    document = album_page("Broken", [track_item(video_id(n), f"T{n}") for n in (2, 1)])
    _break_titles(document, {"musicResponsiveHeaderRenderer", "musicShelfRenderer"})

    browse = parse_collection_browse(document)

    assert browse.title == ""
    assert [track.external_id for track in browse.tracks] == [video_id(2), video_id(1)]


def test_malformed_card_shelf_title_is_skipped() -> None:
    document = search_page(artist_result(ARTIST_ID, ARTIST_NAME), top_result=("UCtop", "Top"))
    _break_titles(document, {"musicCardShelfRenderer"})

    assert [candidate.browse_id for candidate in parse_search(document)] == [ARTIST_ID]
