from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import pytest
from sqlalchemy import update

from musicat.adapters.sqlalchemy import SqlAlchemyCatalogStore
from musicat.adapters.sqlalchemy.mappings import (
    album_table,
    artist_album_table,
    artist_table,
    artist_track_table,
    playlist_track_table,
    track_table,
)
from musicat.domain.errors import StoreError
from musicat.domain.model import (
    AlbumInput,
    AlbumType,
    ArtistTrackRole,
    ArtistUpsert,
    IngestSource,
    PlaylistInput,
    Thumbnail,
    TrackInput,
)
from tests.helpers.catalog import one_row, ordered_playlist_tracks, row_count, rows

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.engine import Engine


def _track(number: int, **overrides: Any) -> TrackInput:
    return replace(TrackInput(f"vid{number:08d}", f"Track {number}"), **overrides)


def _artist_id(store: SqlAlchemyCatalogStore) -> uuid.UUID:
    return store.upsert_artists([ArtistUpsert(key="a", name="A")]).id_map["a"]


def test_upsert_returns_stable_ids(catalog_store: SqlAlchemyCatalogStore) -> None:
    albums = [AlbumInput("MPREb_1", "One"), AlbumInput("MPREb_2", "Two")]

    first = catalog_store.upsert_albums(albums)
    second = catalog_store.upsert_albums(list(reversed(albums)))

    assert first.count == 2
    assert first.id_map == second.id_map
    assert first.ordered_ids(["MPREb_2", "missing", "MPREb_1"]) == [
        first.id_map["MPREb_2"],
        first.id_map["MPREb_1"],
    ]


def test_duplicate_keys_in_one_batch_keep_the_first(
    catalog_store: SqlAlchemyCatalogStore, sqlite_engine: Engine
) -> None:
    result = catalog_store.upsert_tracks([_track(1, title="First"), _track(1, title="Second")])

    assert result.count == 1
    assert one_row(sqlite_engine, track_table, "external_id", "vid00000001")["title"] == "First"


def test_none_never_overwrites_stored_values(
    catalog_store: SqlAlchemyCatalogStore, sqlite_engine: Engine
) -> None:
    catalog_store.upsert_albums(
        [
            AlbumInput(
                "MPREb_1",
                "One",
                cover_url="https://img.test/c",
                album_type=AlbumType.EP,
                year=2020,
            )
        ]
    )
    catalog_store.upsert_albums([AlbumInput("MPREb_1", "One (Deluxe)")])

    album = one_row(sqlite_engine, album_table, "external_id", "MPREb_1")
    assert album["title"] == "One (Deluxe)"
    assert album["cover_url"] == "https://img.test/c"
    assert album["album_type"] is AlbumType.EP
    assert album["year"] == 2020


def test_source_is_written_once(
    catalog_store: SqlAlchemyCatalogStore, sqlite_engine: Engine
) -> None:
    catalog_store.upsert_tracks([_track(1, source=IngestSource.TOP_SONG)])
    catalog_store.upsert_tracks([_track(1, source=IngestSource.COLLECTION, duration_sec=200)])

    track = one_row(sqlite_engine, track_table, "external_id", "vid00000001")
    assert track["source"] == IngestSource.TOP_SONG.value
    assert track["duration_sec"] == 200


def test_id_placeholder_titles_keep_the_stored_title(
    catalog_store: SqlAlchemyCatalogStore, sqlite_engine: Engine
) -> None:
    catalog_store.upsert_tracks([_track(1, title="Real Title")])
    catalog_store.upsert_tracks([_track(1, title="vid00000001")])
    catalog_store.upsert_albums([AlbumInput("MPREb_1", "MPREb_1")])
    catalog_store.upsert_albums([AlbumInput("MPREb_1", "One")])

    assert one_row(sqlite_engine, track_table, "external_id", "vid00000001")["title"] == (
        "Real Title"
    )
    assert one_row(sqlite_engine, album_table, "external_id", "MPREb_1")["title"] == "One"


def test_unknown_video_flag_keeps_the_stored_one(
    catalog_store: SqlAlchemyCatalogStore, sqlite_engine: Engine
) -> None:
    catalog_store.upsert_tracks([_track(1, is_video=False)])
    catalog_store.upsert_tracks([_track(1)])

    assert one_row(sqlite_engine, track_table, "external_id", "vid00000001")["is_video"] is False


def test_artist_enrichment_is_written_once(
    catalog_store: SqlAlchemyCatalogStore, sqlite_engine: Engine
) -> None:
    thumbnails = (Thumbnail("https://img.test/a", 60, 60), Thumbnail("https://img.test/b"))
    catalog_store.upsert_artists(
        [
            ArtistUpsert(
                key="a",
                name="A",
                display_name="A!",
                channel_id="UCold",
                description="first",
                image_url="https://img.test/a",
                thumbnails=thumbnails,
            )
        ]
    )
    catalog_store.upsert_artists(
        [
            ArtistUpsert(
                key="a",
                name="A",
                display_name="Renamed",
                channel_id="UCnew",
                description="second",
                image_url="https://img.test/other",
                thumbnails=(),
            )
        ]
    )

    artist = catalog_store.get_artist("a")
    assert artist is not None
    assert artist.display_name == "A!"
    assert artist.description == "first"
    assert artist.image_url == "https://img.test/a"
    assert artist.thumbnails == thumbnails
    assert artist.channel_id == "UCnew"
    assert artist.updated_at is not None
    assert artist.updated_at.tzinfo is not None
    assert row_count(sqlite_engine, artist_table) == 1


def test_links_are_idempotent(
    catalog_store: SqlAlchemyCatalogStore, sqlite_engine: Engine
) -> None:
    artist_id = _artist_id(catalog_store)
    album_ids = list(catalog_store.upsert_albums([AlbumInput("MPREb_1", "One")]).id_map.values())

    catalog_store.link_artist_albums(artist_id, album_ids)
    catalog_store.link_artist_albums(artist_id, album_ids + album_ids)

    assert row_count(sqlite_engine, artist_album_table) == 1


def test_relinking_updates_positions(
    catalog_store: SqlAlchemyCatalogStore, sqlite_engine: Engine
) -> None:
    [playlist_id] = catalog_store.upsert_playlists([PlaylistInput("VLPL1", "P")]).id_map.values()
    result = catalog_store.upsert_tracks([_track(n) for n in (1, 2, 3)])
    ids = result.ordered_ids(["vid00000001", "vid00000002", "vid00000003"])

    assert catalog_store.link_playlist_tracks(playlist_id, ids) == 3
    catalog_store.link_playlist_tracks(playlist_id, [ids[2], ids[0], ids[1]])

    assert row_count(sqlite_engine, playlist_track_table) == 3
    assert ordered_playlist_tracks(sqlite_engine, "VLPL1") == [
        "vid00000003",
        "vid00000001",
        "vid00000002",
    ]


def test_top_song_role_takes_over_but_others_do_not(
    catalog_store: SqlAlchemyCatalogStore, sqlite_engine: Engine
) -> None:
    artist_id = _artist_id(catalog_store)
    result = catalog_store.upsert_tracks([_track(1), _track(2)])
    first, second = result.ordered_ids(["vid00000001", "vid00000002"])

    catalog_store.link_artist_tracks(artist_id, [first], ArtistTrackRole.PRIMARY)
    catalog_store.link_artist_tracks(artist_id, [second, first], ArtistTrackRole.TOP_SONG)
    catalog_store.link_artist_tracks(artist_id, [first, second], ArtistTrackRole.FEATURED)

    links = {
        row["track_id"]: (row["role"], row["position"])
        for row in rows(sqlite_engine, artist_track_table)
    }
    assert links == {
        second: (ArtistTrackRole.TOP_SONG, 1),
        first: (ArtistTrackRole.TOP_SONG, 2),
    }


def test_seed_artists_uses_canonical_keys(catalog_store: SqlAlchemyCatalogStore) -> None:
    created = catalog_store.seed_artists(["  Daft   Punk ", "daft punk", "Air", ""])
    again = catalog_store.seed_artists(["AIR", "Justice"])

    assert created == 2
    assert again == 1
    artist = catalog_store.get_artist("daft_punk")
    assert artist is not None
    assert artist.name == "Daft   Punk"
    assert artist.channel_id is None


def test_next_artist_for_refresh_picks_the_stalest_bound_artist(
    catalog_store: SqlAlchemyCatalogStore, sqlite_engine: Engine
) -> None:
    catalog_store.seed_artists(["Unbound"])
    catalog_store.upsert_artists(
        [
            ArtistUpsert(key="fresh", name="Fresh", channel_id="UCfresh"),
            ArtistUpsert(key="stale", name="Stale", channel_id="UCstale"),
        ]
    )
    with sqlite_engine.begin() as connection:
        connection.execute(
            update(artist_table)
            .where(artist_table.c.key == "stale")
            .values(updated_at=datetime(2020, 1, 1, tzinfo=UTC))
        )

    artist = catalog_store.next_artist_for_refresh()

    assert artist is not None
    assert artist.key == "stale"
    assert artist.channel_id == "UCstale"


def test_next_artist_for_refresh_without_channels(catalog_store: SqlAlchemyCatalogStore) -> None:
    catalog_store.seed_artists(["Unbound"])

    assert catalog_store.next_artist_for_refresh() is None


def test_unknown_artist_key(catalog_store: SqlAlchemyCatalogStore) -> None:
    assert catalog_store.get_artist("nobody") is None


def test_database_errors_become_store_errors(
    catalog_store: SqlAlchemyCatalogStore, sqlite_engine: Engine
) -> None:
    with sqlite_engine.begin() as connection:
        connection.exec_driver_sql("DROP TABLE albums")

    with pytest.raises(StoreError, match="upsert_albums"):
        catalog_store.upsert_albums([AlbumInput("MPREb_1", "One")])
