"""Resolve an artist hint to the canonical artist browse ID."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from musicat.domain.errors import ResolutionError
from musicat.domain.normalizer import (
    is_artist_page,
    is_official_artist_id,
    parse_search,
)
from musicat.domain.normalizer.text import normalize, optional_text

if TYPE_CHECKING:
    from musicat.domain.normalizer import SearchCandidate
    from musicat.domain.ports.transport import BrowseTransport

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ResolverHint:
    """What is known about the artist before the first network call."""

    raw_id: str | None = None
    channel_id: str | None = None
    name: str | None = None


def _official(value: str | None) -> str | None:
    text = normalize(value)
    if text and is_official_artist_id(text):
        return text
    return None


def pick_candidate(name: str, candidates: list[SearchCandidate]) -> SearchCandidate | None:
    """Exact name match first, then a partial match, then the first valid candidate."""

    valid = [
        candidate
        for candidate in candidates
        if is_artist_page(candidate.page_type) and is_official_artist_id(candidate.browse_id)
    ]
    if not valid:
        return None

    wanted = name.casefold()
    for candidate in valid:
        if candidate.name.casefold() == wanted:
            return candidate
    for candidate in valid:
        found = candidate.name.casefold()
        if found and (wanted in found or found in wanted):
            return candidate
    return valid[0]


class BrowseIdResolver:
    def __init__(self, transport: BrowseTransport) -> None:
        self._transport = transport

    async def resolve(self, hint: ResolverHint) -> str:
        """Return an official artist browse ID for ``hint``.

        An explicit ID or stored channel ID with an official prefix short-cuts
        the lookup. Otherwise the artist name is searched. Raises
        :class:`ResolutionError` when neither path yields a valid ID; transport
        failures propagate unchanged.
        """

        for value in (hint.raw_id, hint.channel_id):
            direct = _official(value)
            if direct is not None:
                return direct

        name = optional_text(hint.name)
        if name is None:
            raise ResolutionError("No official browse ID and no artist name to search for")

        document = await self._transport.search(name)
        candidates = parse_search(document) if document else []
        chosen = pick_candidate(name, candidates)
        if chosen is None:
            raise ResolutionError(f"No artist search result for {name!r}")
        log.debug("Resolved %r to %s (%s)", name, chosen.browse_id, chosen.name)
        return chosen.browse_id
