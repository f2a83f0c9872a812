"""Expansion phase: fetch every album and playlist page and link its tracks.

Collections are fed through one :class:`asyncio.Queue` to a fixed number of
workers. Each item is expanded independently; an exception inside one item is
recorded as a :class:`PartialExpansionFailure` on its outcome and never stops
the other workers.

The catalog store is synchronous. Workers call it through
:func:`asyncio.to_thread`, one call at a time, so page fetches of the other
workers keep running while a batch is written.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import TYPE_CHECKING

from musicat.domain.errors import PartialExpansionFailure
from musicat.domain.logging_events import log_event
from musicat.domain.model import ArtistTrackRole
from musicat.domain.normalizer import (
    is_radio_mix,
    normalize_collection_id,
    parse_collection_browse,
    resolve_album_type,
)

from .context import RunError

if TYPE_CHECKING:
    import uuid
    from collections.abc import Callable, Sequence

    from musicat.domain.model import AlbumInput, IdMap, PlaylistInput, TrackInput
    from musicat.domain.ports.store import CatalogStore
    from musicat.domain.ports.transport import BrowseTransport

    from .context import PipelineContext

log = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 3


class CollectionKind(StrEnum):
    ALBUM = "album"
    PLAYLIST = "playlist"


class ExpansionStatus(StrEnum):
    EXPANDED = "expanded"
    EMPTY = "empty"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class CollectionIdMaps:
    albums: IdMap = field(default_factory=dict)
    playlists: IdMap = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ExpansionItem:
    index: int
    kind: CollectionKind
    external_id: str
    parent_id: uuid.UUID | None
    album: AlbumInput | None = None


@dataclass(frozen=True, slots=True)
class ExpansionOutcome:
    kind: CollectionKind
    external_id: str
    status: ExpansionStatus
    tracks: int = 0
    artist_links: int = 0
    error: PartialExpansionFailure | None = None


@dataclass(frozen=True, slots=True)
class ExpansionReport:
    """Outcomes in the order the collections were handed to the scheduler."""

    outcomes: tuple[ExpansionOutcome, ...] = ()

    @property
    def failures(self) -> list[PartialExpansionFailure]:
        return [outcome.error for outcome in self.outcomes if outcome.error is not None]

    @property
    def tracks_linked(self) -> int:
        return sum(outcome.tracks for outcome in self.outcomes)

    def count(self, status: ExpansionStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)


def playlist_track_role(
    track: TrackInput, *, artist_browse_id: str, artist_name: str
) -> ArtistTrackRole | None:
    """Role of the artist on a playlist track, or ``None`` when they are not credited.

    A credit carrying a browse ID matches on the ID; a bare credit matches on
    the name, case-insensitively. The first credit is the primary artist.
    """

    wanted_name = artist_name.casefold()
    for index, credit in enumerate(track.byline):
        if credit.browse_id:
            matched = credit.browse_id == artist_browse_id
        else:
            matched = bool(wanted_name) and credit.name.casefold() == wanted_name
        if matched:
            return ArtistTrackRole.PRIMARY if index == 0 else ArtistTrackRole.FEATURED
    return None


@dataclass(frozen=True, slots=True)
class _ArtistContext:
    artist_id: uuid.UUID
    browse_id: str
    name: str


class ExpansionScheduler:
    def __init__(
        self,
        transport: BrowseTransport,
        store: CatalogStore,
        *,
        concurrency: int = DEFAULT_CONCURRENCY,
        link_all_playlist_tracks: bool = False,
        logger: logging.Logger | None = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._transport = transport
        self._store = store
        self._concurrency = concurrency
        self._link_all_playlist_tracks = link_all_playlist_tracks
        self._log = logger or log
        self._store_lock = asyncio.Lock()

    async def expand(
        self,
        artist_id: uuid.UUID,
        artist_browse_id: str,
        artist_name: str,
        albums: Sequence[AlbumInput],
        playlists: Sequence[PlaylistInput],
        id_maps: CollectionIdMaps,
    ) -> ExpansionReport:
        items = [
            ExpansionItem(
                index=index,
                kind=CollectionKind.ALBUM,
                external_id=album.external_id,
                parent_id=id_maps.albums.get(album.external_id),
                album=album,
            )
            for index, album in enumerate(albums)
        ]
        items.extend(
            ExpansionItem(
                index=len(albums) + index,
                kind=CollectionKind.PLAYLIST,
                external_id=playlist.external_id,
                parent_id=id_maps.playlists.get(playlist.external_id),
            )
            for index, playlist in enumerate(playlists)
        )
        if not items:
            return ExpansionReport()

        artist = _ArtistContext(artist_id, artist_browse_id, artist_name)
        outcomes: list[ExpansionOutcome | None] = [None] * len(items)
        queue: asyncio.Queue[ExpansionItem | None] = asyncio.Queue()
        for item in items:
            queue.put_nowait(item)
        workers = min(self._concurrency, len(items))
        for _ in range(workers):
            queue.put_nowait(None)

        async def worker() -> None:
            while True:
                item = await queue.get()
                try:
                    if item is None:
                        return
                    outcomes[item.index] = await self._run_item(item, artist)
                finally:
                    queue.task_done()

        await asyncio.gather(*(worker() for _ in range(workers)))
        return ExpansionReport(tuple(outcome for outcome in outcomes if outcome is not None))

    async def _run_item(self, item: ExpansionItem, artist: _ArtistContext) -> ExpansionOutcome:
        try:
            outcome = await self._expand_item(item, artist)
        except Exception as exc:  # noqa: BLE001
            failure = PartialExpansionFailure(item.external_id, exc)
            log_event(
                self._log,
                "expansion_failed",
                level=logging.WARNING,
                kind=item.kind.value,
                item_id=item.external_id,
                error=str(exc),
            )
            return ExpansionOutcome(
                item.kind, item.external_id, ExpansionStatus.FAILED, error=failure
            )
        log_event(
            self._log,
            "collection_expanded",
            level=logging.DEBUG,
            kind=item.kind.value,
            item_id=item.external_id,
            status=outcome.status.value,
            tracks=outcome.tracks,
        )
        return outcome

    async def _expand_item(self, item: ExpansionItem, artist: _ArtistContext) -> ExpansionOutcome:
        browse_id = normalize_collection_id(item.external_id)
        if browse_id is None or item.parent_id is None or is_radio_mix(item.external_id):
            return ExpansionOutcome(item.kind, item.external_id, ExpansionStatus.SKIPPED)

        document = await self._transport.fetch_browse(browse_id)
        if not document:
            return ExpansionOutcome(item.kind, item.external_id, ExpansionStatus.EMPTY)
        collection = parse_collection_browse(document)
        tracks = collection.tracks

        if item.album is not None and item.album.album_type is None:
            album_type = resolve_album_type(
                None, explicit=collection.album_type, track_count=len(tracks)
            )
            if album_type is not None:
                await self._call_store(
                    self._store.upsert_albums, [replace(item.album, album_type=album_type)]
                )

        if not tracks:
            return ExpansionOutcome(item.kind, item.external_id, ExpansionStatus.EMPTY)

        result = await self._call_store(self._store.upsert_tracks, tracks)
        ordered = result.ordered_ids([track.external_id for track in tracks])
        if item.kind is CollectionKind.ALBUM:
            linked = await self._call_store(
                self._store.link_album_tracks, item.parent_id, ordered
            )
            artist_links = await self._call_store(
                self._store.link_artist_tracks, artist.artist_id, ordered, ArtistTrackRole.PRIMARY
            )
        else:
            linked = await self._call_store(
                self._store.link_playlist_tracks, item.parent_id, ordered
            )
            artist_links = await self._link_playlist_artist(tracks, result.id_map, artist)
        return ExpansionOutcome(
            item.kind,
            item.external_id,
            ExpansionStatus.EXPANDED,
            tracks=linked,
            artist_links=artist_links,
        )

    async def _call_store[T](self, call: Callable[..., T], *args: object) -> T:
        async with self._store_lock:
            return await asyncio.to_thread(call, *args)

    async def _link_playlist_artist(
        self, tracks: Sequence[TrackInput], id_map: IdMap, artist: _ArtistContext
    ) -> int:
        by_role: dict[ArtistTrackRole, list[uuid.UUID]] = {}
        for track in tracks:
            track_id = id_map.get(track.external_id)
            if track_id is None:
                continue
            if self._link_all_playlist_tracks:
                role = ArtistTrackRole.PRIMARY
            else:
                role = playlist_track_role(
                    track, artist_browse_id=artist.browse_id, artist_name=artist.name
                )
            if role is not None:
                by_role.setdefault(role, []).append(track_id)
        linked = 0
        for role, track_ids in by_role.items():
            linked += await self._call_store(
                self._store.link_artist_tracks, artist.artist_id, track_ids, role
            )
        return linked


class ExpansionPhase:
    name: str = "expansion"

    async def run(self, context: PipelineContext) -> None:
        core = context.require_core()
        metadata = context.require_metadata()
        scheduler = ExpansionScheduler(
            context.transport,
            context.store,
            concurrency=context.expansion_concurrency,
            link_all_playlist_tracks=context.link_all_playlist_tracks,
            logger=context.logger,
        )
        report = await scheduler.expand(
            core.artist_id,
            core.browse_id,
            core.artist_name,
            metadata.albums,
            metadata.playlists,
            CollectionIdMaps(albums=metadata.album_ids, playlists=metadata.playlist_ids),
        )
        context.expansion = report
        for failure in report.failures:
            context.errors.append(RunError.from_exception(self.name, failure))
        context.add_count("collections_expanded", report.count(ExpansionStatus.EXPANDED))
        context.add_count("collections_skipped", report.count(ExpansionStatus.SKIPPED))
        context.add_count("collections_failed", report.count(ExpansionStatus.FAILED))
        context.add_count("collection_tracks", report.tracks_linked)
