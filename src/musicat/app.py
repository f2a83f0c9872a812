"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from musicat.adapters.innertube import build_innertube_client
from musicat.adapters.sqlalchemy import SqlAlchemyCatalogStore, is_started, startup
from musicat.config import get_ingest_settings
from musicat.domain.ingest_pipeline import IngestRequest, ingest_one_artist

if TYPE_CHECKING:
    from collections.abc import Iterable

    from musicat.config import IngestSettings
    from musicat.domain.ingest_pipeline import IngestResult
    from musicat.domain.ports.store import CatalogStore
    from musicat.domain.ports.transport import BrowseTransport

log = getLogger(__name__)


def _default_store() -> SqlAlchemyCatalogStore:
    if not is_started():
        startup()
    return SqlAlchemyCatalogStore()


async def _ingest(
    request: IngestRequest,
    *,
    transport: BrowseTransport | None,
    store: CatalogStore,
    settings: IngestSettings,
) -> IngestResult:
    if transport is not None:
        return await ingest_one_artist(
            request, transport=transport, store=store, settings=settings
        )
    async with build_innertube_client() as client:
        return await ingest_one_artist(request, transport=client, store=store, settings=settings)


def ingest_artist(
    request: IngestRequest,
    *,
    transport: BrowseTransport | None = None,
    store: CatalogStore | None = None,
    settings: IngestSettings | None = None,
) -> IngestResult:
    """Ingest one artist using the configured adapters."""

    effective_store = store or _default_store()
    effective_settings = settings or get_ingest_settings()
    log.info(
        f"Starting ingestion: key={request.requested_artist_key}, "
        f"browse_id={request.browse_id}, name={request.artist_name}"
    )
    result = asyncio.run(
        _ingest(
            request,
            transport=transport,
            store=effective_store,
            settings=effective_settings,
        )
    )
    log.info(
        f"Finished ingestion: key={result.artist_key}, ok={result.ok}, "
        f"errors={len(result.errors)}, duration_ms={result.total_duration_ms}"
    )
    return result


def seed_artists(names: Iterable[str], *, store: SqlAlchemyCatalogStore | None = None) -> int:
    """Create artist rows for ``names`` that are not stored yet; returns how many were added."""

    effective_store = store or _default_store()
    created = effective_store.seed_artists(names)
    log.info(f"Seeded {created} artist(s)")
    return created


def next_refresh_request(*, store: SqlAlchemyCatalogStore | None = None) -> IngestRequest | None:
    """Request for the artist with a bound channel that was refreshed longest ago."""

    effective_store = store or _default_store()
    artist = effective_store.next_artist_for_refresh()
    if artist is None:
        return None
    return IngestRequest(requested_artist_key=artist.key, channel_id=artist.channel_id)
