"""Failure taxonomy for an ingestion run."""

from __future__ import annotations


class IngestError(RuntimeError):
    """Base class for errors that end or degrade an ingestion run."""


class ResolutionError(IngestError):
    """No valid artist browse ID could be obtained."""


class ArtistNotFoundError(ResolutionError):
    """The requested artist key has no stored record to attach the channel to."""

    def __init__(self, artist_key: str) -> None:
        super().__init__(f"Artist not found for key: {artist_key}")
        self.artist_key = artist_key


class FetchError(IngestError):
    """The transport returned nothing usable or failed outright."""


class StoreError(IngestError):
    """An upsert, select or link write against the catalog store failed."""


class PartialExpansionFailure(IngestError):
    """Expanding one album or playlist failed; the run continues without it."""

    def __init__(self, item_id: str, cause: BaseException) -> None:
        super().__init__(f"Expansion failed for {item_id}: {cause}")
        self.item_id = item_id
        self.cause = cause
