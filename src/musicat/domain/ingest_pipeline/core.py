"""Core phase: resolve the artist, fetch its browse page, bind the channel."""

from __future__ import annotations

from typing import TYPE_CHECKING

from musicat.domain.errors import ArtistNotFoundError, FetchError
from musicat.domain.model import ArtistUpsert
from musicat.domain.normalizer import parse_artist_browse
from musicat.domain.resolver import BrowseIdResolver, ResolverHint

from .context import CoreOutput

if TYPE_CHECKING:
    from musicat.domain.model import ArtistRecord
    from musicat.domain.normalizer import ArtistBrowse

    from .context import IngestRequest, PipelineContext


def build_hint(request: IngestRequest, stored: ArtistRecord) -> ResolverHint:
    """Request fields first, then what the stored artist row already knows."""

    return ResolverHint(
        raw_id=request.browse_id,
        channel_id=request.channel_id or stored.channel_id,
        name=request.artist_name or stored.name,
    )


def artist_upsert(stored: ArtistRecord, browse_id: str, browse: ArtistBrowse) -> ArtistUpsert:
    summary = browse.summary
    return ArtistUpsert(
        key=stored.key,
        name=stored.name,
        display_name=summary.name or None,
        channel_id=browse_id,
        description=summary.description,
        image_url=summary.image_url,
        thumbnails=summary.thumbnails or None,
    )


class CorePhase:
    name: str = "core"

    async def run(self, context: PipelineContext) -> None:
        request = context.request
        stored = context.store.get_artist(request.requested_artist_key)
        if stored is None:
            raise ArtistNotFoundError(request.requested_artist_key)

        resolver = BrowseIdResolver(context.transport)
        browse_id = await resolver.resolve(build_hint(request, stored))

        document = await context.transport.fetch_browse(browse_id)
        if not document:
            raise FetchError(f"No browse document for artist {browse_id}")
        artist_browse = parse_artist_browse(document)

        result = context.store.upsert_artists([artist_upsert(stored, browse_id, artist_browse)])
        context.core = CoreOutput(
            artist_key=stored.key,
            artist_id=result.id_map.get(stored.key, stored.id),
            browse_id=browse_id,
            artist_name=artist_browse.summary.name or stored.name,
            artist_browse=artist_browse,
        )
