"""Tunables for the artist ingestion pipeline."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_bool, env_int

DEFAULT_EXPANSION_CONCURRENCY = 3


@dataclass(frozen=True, slots=True)
class IngestSettings:
    expansion_concurrency: int = DEFAULT_EXPANSION_CONCURRENCY
    link_all_playlist_tracks: bool = False


def get_ingest_settings() -> IngestSettings:
    return IngestSettings(
        expansion_concurrency=env_int(
            "MUSICAT_EXPANSION_CONCURRENCY", DEFAULT_EXPANSION_CONCURRENCY, minimum=1
        ),
        link_all_playlist_tracks=env_bool("MUSICAT_LINK_ALL_PLAYLIST_TRACKS", default=False),
    )
