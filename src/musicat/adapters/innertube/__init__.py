"""Public interface for the innertube transport adapter."""

from __future__ import annotations

from .client import InnertubeClient, build_innertube_client

__all__ = [
    "InnertubeClient",
    "build_innertube_client",
]
