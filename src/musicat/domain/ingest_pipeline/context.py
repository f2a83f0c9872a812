"""Request, per-phase outputs and the run result shared across pipeline phases."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from musicat.domain.errors import PartialExpansionFailure

if TYPE_CHECKING:
    import uuid

    from musicat.domain.errors import IngestError
    from musicat.domain.model import (
        AlbumInput,
        IdMap,
        PlaylistInput,
        TrackInput,
    )
    from musicat.domain.normalizer import ArtistBrowse
    from musicat.domain.ports.store import CatalogStore
    from musicat.domain.ports.transport import BrowseTransport

    from .expansion import ExpansionReport

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class IngestRequest:
    """One artist ingestion: the stored artist key plus optional lookup hints."""

    requested_artist_key: str
    browse_id: str | None = None
    artist_name: str | None = None
    channel_id: str | None = None


@dataclass(frozen=True, slots=True)
class CoreOutput:
    artist_key: str
    artist_id: uuid.UUID
    browse_id: str
    artist_name: str
    artist_browse: ArtistBrowse


@dataclass(frozen=True, slots=True)
class MetadataOutput:
    albums: tuple[AlbumInput, ...]
    playlists: tuple[PlaylistInput, ...]
    top_songs: tuple[TrackInput, ...]
    album_ids: IdMap
    playlist_ids: IdMap
    track_ids: IdMap


@dataclass(frozen=True, slots=True)
class RunError:
    """One entry of a run's ``errors`` list."""

    phase: str
    kind: str
    message: str
    item_id: str | None = None

    @classmethod
    def from_exception(cls, phase: str, exc: IngestError) -> RunError:
        item_id = exc.item_id if isinstance(exc, PartialExpansionFailure) else None
        return cls(phase=phase, kind=type(exc).__name__, message=str(exc), item_id=item_id)

    def as_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase,
            "kind": self.kind,
            "message": self.message,
            "item_id": self.item_id,
        }


@dataclass(slots=True)
class PipelineContext:
    """Mutable state threaded through the phases of one run."""

    request: IngestRequest
    transport: BrowseTransport
    store: CatalogStore
    logger: logging.Logger = log
    expansion_concurrency: int = 3
    link_all_playlist_tracks: bool = False
    core: CoreOutput | None = None
    metadata: MetadataOutput | None = None
    expansion: ExpansionReport | None = None
    errors: list[RunError] = field(default_factory=list[RunError])
    counts: dict[str, int] = field(default_factory=dict[str, int])
    fatal: RunError | None = None

    def require_core(self) -> CoreOutput:
        if self.core is None:
            raise RuntimeError("Core phase must run before this phase")
        return self.core

    def require_metadata(self) -> MetadataOutput:
        if self.metadata is None:
            raise RuntimeError("Metadata phase must run before this phase")
        return self.metadata

    def add_count(self, name: str, value: int) -> None:
        self.counts[name] = self.counts.get(name, 0) + value


@dataclass(frozen=True, slots=True)
class IngestResult:
    artist_key: str
    artist_id: uuid.UUID | None
    browse_id: str | None
    total_duration_ms: int
    errors: tuple[RunError, ...] = ()
    counts: dict[str, int] = field(default_factory=dict[str, int])
    fatal: bool = False

    @property
    def ok(self) -> bool:
        """``True`` unless a phase failed fatally; partial failures keep a run ok."""

        return not self.fatal

    def as_dict(self) -> dict[str, Any]:
        return {
            "artist_key": self.artist_key,
            "artist_id": str(self.artist_id) if self.artist_id is not None else None,
            "browse_id": self.browse_id,
            "total_duration_ms": self.total_duration_ms,
            "ok": self.ok,
            "counts": dict(self.counts),
            "errors": [error.as_dict() for error in self.errors],
        }
