"""Identifier families used by the streaming service and their browse-safe forms."""

from __future__ import annotations

import re
from typing import Final

from .text import normalize

OFFICIAL_ARTIST_ID: Final[re.Pattern[str]] = re.compile(r"^(UC|MPLA)", re.IGNORECASE)

PAGE_TYPE_ARTIST: Final[str] = "MUSIC_PAGE_TYPE_ARTIST"
PAGE_TYPE_ALBUM: Final[str] = "MUSIC_PAGE_TYPE_ALBUM"
PAGE_TYPE_PLAYLIST: Final[str] = "MUSIC_PAGE_TYPE_PLAYLIST"

_PASSTHROUGH_PREFIXES: Final[tuple[str, ...]] = ("VL", "MPRE", "OLAK5UY")
_NON_MUSIC_PAGE_MARKERS: Final[tuple[str, ...]] = ("podcast", "show", "episode", "program")
_ALBUM_PREFIXES: Final[tuple[str, ...]] = ("MPRE",)
_PLAYLIST_PREFIXES: Final[tuple[str, ...]] = ("VL", "PL", "OLAK5UY")


def is_official_artist_id(value: object) -> bool:
    return OFFICIAL_ARTIST_ID.match(normalize(value)) is not None


def is_artist_page(page_type: str) -> bool:
    """Artist pages only; podcast/show/episode/program pages are not artists."""

    lowered = page_type.lower()
    if any(marker in lowered for marker in _NON_MUSIC_PAGE_MARKERS):
        return False
    return PAGE_TYPE_ARTIST.lower() in lowered


def is_radio_mix(collection_id: object) -> bool:
    upper = normalize(collection_id).upper()
    return upper.startswith("RD") or "RDCLAK" in upper


def normalize_collection_id(collection_id: object) -> str | None:
    """Browse ID for an album/playlist ID, or ``None`` when it cannot be browsed.

    ``VL``/``MPRE``/``OLAK5UY`` IDs pass through, a bare ``PL`` ID gains the
    ``VL`` prefix. Prefixes match case-insensitively; the returned ID keeps
    its original casing.
    """

    raw = normalize(collection_id)
    upper = raw.upper()
    if upper.startswith(_PASSTHROUGH_PREFIXES):
        return raw
    if upper.startswith("PL"):
        return f"VL{raw}"
    return None


def looks_like_album_id(collection_id: str) -> bool:
    return collection_id.upper().startswith(_ALBUM_PREFIXES)


def looks_like_playlist_id(collection_id: str) -> bool:
    return collection_id.upper().startswith(_PLAYLIST_PREFIXES)
