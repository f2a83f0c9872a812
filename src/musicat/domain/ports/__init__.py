"""Domain port definitions for adapters."""

from __future__ import annotations

from .store import CatalogStore
from .transport import BrowseTransport, RawDocument

__all__ = [
    "BrowseTransport",
    "CatalogStore",
    "RawDocument",
]
