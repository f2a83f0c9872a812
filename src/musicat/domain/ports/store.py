"""Store port: idempotent upserts keyed by external ID and ordered link writers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    import uuid
    from collections.abc import Sequence

    from musicat.domain.model import (
        AlbumInput,
        ArtistRecord,
        ArtistTrackRole,
        ArtistUpsert,
        PlaylistInput,
        TrackInput,
        UpsertResult,
    )


@runtime_checkable
class CatalogStore(Protocol):
    """Contract the pipeline relies on for persistence.

    Every ``upsert_*`` call must be repeatable with identical input without
    creating rows or clearing fields: a ``None`` attribute on an input never
    overwrites a stored value. The returned :class:`UpsertResult` maps each
    external ID (artist key for artists) of the input to its internal ID.

    ``link_*`` writers take internal IDs in source order and store
    ``position = index + 1`` where the link carries a position. A pair that
    already exists is not duplicated.
    """

    def get_artist(self, key: str) -> ArtistRecord | None: ...

    def upsert_artists(self, rows: Sequence[ArtistUpsert]) -> UpsertResult: ...

    def upsert_albums(self, rows: Sequence[AlbumInput]) -> UpsertResult: ...

    def upsert_playlists(self, rows: Sequence[PlaylistInput]) -> UpsertResult: ...

    def upsert_tracks(self, rows: Sequence[TrackInput]) -> UpsertResult: ...

    def link_artist_albums(
        self, artist_id: uuid.UUID, album_ids: Sequence[uuid.UUID]
    ) -> int: ...

    def link_artist_playlists(
        self, artist_id: uuid.UUID, playlist_ids: Sequence[uuid.UUID]
    ) -> int: ...

    def link_artist_tracks(
        self,
        artist_id: uuid.UUID,
        track_ids: Sequence[uuid.UUID],
        role: ArtistTrackRole,
    ) -> int: ...

    def link_album_tracks(
        self, album_id: uuid.UUID, ordered_track_ids: Sequence[uuid.UUID]
    ) -> int: ...

    def link_playlist_tracks(
        self, playlist_id: uuid.UUID, ordered_track_ids: Sequence[uuid.UUID]
    ) -> int: ...
