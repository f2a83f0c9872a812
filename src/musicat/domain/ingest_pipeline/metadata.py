"""Metadata phase: persist the albums, playlists and top songs of the artist page."""

from __future__ import annotations

from typing import TYPE_CHECKING

from musicat.domain.model import ArtistTrackRole

from .context import MetadataOutput

if TYPE_CHECKING:
    from .context import PipelineContext


class MetadataPhase:
    """Works only on the already parsed artist page; nothing is fetched here."""

    name: str = "metadata"

    async def run(self, context: PipelineContext) -> None:
        core = context.require_core()
        store = context.store
        browse = core.artist_browse

        albums = store.upsert_albums(browse.albums)
        linked_albums = store.link_artist_albums(
            core.artist_id, albums.ordered_ids([album.external_id for album in browse.albums])
        )

        playlists = store.upsert_playlists(browse.playlists)
        linked_playlists = store.link_artist_playlists(
            core.artist_id,
            playlists.ordered_ids([playlist.external_id for playlist in browse.playlists]),
        )

        tracks = store.upsert_tracks(browse.top_songs)
        linked_top_songs = store.link_artist_tracks(
            core.artist_id,
            tracks.ordered_ids([track.external_id for track in browse.top_songs]),
            ArtistTrackRole.TOP_SONG,
        )

        context.metadata = MetadataOutput(
            albums=browse.albums,
            playlists=browse.playlists,
            top_songs=browse.top_songs,
            album_ids=albums.id_map,
            playlist_ids=playlists.id_map,
            track_ids=tracks.id_map,
        )
        context.add_count("albums", albums.count)
        context.add_count("playlists", playlists.count)
        context.add_count("top_songs", tracks.count)
        context.add_count("artist_links", linked_albums + linked_playlists + linked_top_songs)
