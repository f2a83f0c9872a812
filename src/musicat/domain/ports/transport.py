"""Transport port: raw browse/search documents from the streaming service."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

type RawDocument = dict[str, Any]


@runtime_checkable
class BrowseTransport(Protocol):
    """Fetches raw JSON documents.

    Both methods return ``None`` when the service has nothing for the request.
    Transport-level failures surface as :class:`musicat.domain.errors.FetchError`.
    """

    async def fetch_browse(self, browse_id: str) -> RawDocument | None: ...

    async def search(self, query: str) -> RawDocument | None: ...
