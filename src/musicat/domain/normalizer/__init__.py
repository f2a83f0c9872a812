"""Pure parsing of raw browse/search documents into catalog write models.

Nothing here performs I/O. Every function tolerates missing or malformed
nodes and degrades to empty results instead of raising.
"""

from __future__ import annotations

from .documents import (
    ArtistBrowse,
    CollectionBrowse,
    SearchCandidate,
    parse_artist_browse,
    parse_collection_browse,
    parse_search,
)
from .entities import (
    dedupe_by_external_id,
    explicit_album_type,
    infer_album_type,
    resolve_album_type,
)
from .identifiers import (
    is_artist_page,
    is_official_artist_id,
    is_radio_mix,
    normalize_collection_id,
)
from .renderers import extract_video_id, match_renderer
from .text import to_seconds
from .thumbnails import best_thumbnail, collect_thumbnails

__all__ = [
    "ArtistBrowse",
    "CollectionBrowse",
    "SearchCandidate",
    "best_thumbnail",
    "collect_thumbnails",
    "dedupe_by_external_id",
    "explicit_album_type",
    "extract_video_id",
    "infer_album_type",
    "is_artist_page",
    "is_official_artist_id",
    "is_radio_mix",
    "match_renderer",
    "normalize_collection_id",
    "parse_artist_browse",
    "parse_collection_browse",
    "parse_search",
    "resolve_album_type",
    "to_seconds",
]
