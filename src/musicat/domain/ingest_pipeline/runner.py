"""Entry point for ingesting one artist."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from musicat.config.ingest import IngestSettings
from musicat.domain.logging_events import elapsed_ms, log_event

from .context import IngestResult, PipelineContext
from .core import CorePhase
from .expansion import ExpansionPhase
from .metadata import MetadataPhase
from .orchestrator import IngestionPipeline

if TYPE_CHECKING:
    from musicat.domain.ports.store import CatalogStore
    from musicat.domain.ports.transport import BrowseTransport

    from .context import IngestRequest

log = logging.getLogger(__name__)


def default_pipeline() -> IngestionPipeline:
    return IngestionPipeline(phases=(CorePhase(), MetadataPhase(), ExpansionPhase()))


async def ingest_one_artist(
    request: IngestRequest,
    *,
    transport: BrowseTransport,
    store: CatalogStore,
    settings: IngestSettings | None = None,
    logger: logging.Logger | None = None,
    pipeline: IngestionPipeline | None = None,
) -> IngestResult:
    """Run the core, metadata and expansion phases for ``request``.

    Fatal errors end the run early and come back in ``errors`` together with
    whatever the completed phases produced; nothing is raised for them.
    """

    effective = settings or IngestSettings()
    context = PipelineContext(
        request=request,
        transport=transport,
        store=store,
        logger=logger or log,
        expansion_concurrency=effective.expansion_concurrency,
        link_all_playlist_tracks=effective.link_all_playlist_tracks,
    )
    started = time.perf_counter()
    await (pipeline or default_pipeline()).run(context)

    core = context.core
    result = IngestResult(
        artist_key=core.artist_key if core is not None else request.requested_artist_key,
        artist_id=core.artist_id if core is not None else None,
        browse_id=core.browse_id if core is not None else None,
        total_duration_ms=elapsed_ms(started),
        errors=tuple(context.errors),
        counts=dict(context.counts),
        fatal=context.fatal is not None,
    )
    log_event(
        context.logger,
        "ingest_completed",
        artist_key=result.artist_key,
        ok=result.ok,
        errors=len(result.errors),
        duration_ms=result.total_duration_ms,
    )
    return result
