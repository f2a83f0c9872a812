"""HTTP transport for the YouTube Music innertube ``browse`` and ``search`` calls."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx

from musicat.adapters.http_resilience import ResilientClient
from musicat.config.innertube import InnertubeConfig, get_innertube_config
from musicat.domain.errors import FetchError
from musicat.domain.ports.transport import BrowseTransport

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from musicat.config.http_resilience import ResilienceConfig
    from musicat.domain.ports.transport import RawDocument

log = getLogger(__name__)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _decode_document(response: httpx.Response) -> RawDocument | None:
    if response.status_code == httpx.codes.NO_CONTENT or not response.content:
        return None
    try:
        payload: Any = response.json()
    except ValueError as exc:
        raise FetchError(f"Innertube returned invalid JSON for {response.url}") from exc
    if not isinstance(payload, dict) or not payload:
        return None
    return payload


@dataclass(slots=True)
class InnertubeClient:
    """Posts innertube requests through one long-lived :class:`ResilientClient`.

    Use it as an async context manager, or call :meth:`aclose` when done.
    """

    config: InnertubeConfig = field(default_factory=get_innertube_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    _client: ResilientClient | None = field(default=None, init=False, repr=False)

    async def __aenter__(self) -> InnertubeClient:
        self._http()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch_browse(self, browse_id: str) -> RawDocument | None:
        return await self._post("browse", {"browseId": browse_id})

    async def search(self, query: str) -> RawDocument | None:
        body: dict[str, object] = {"query": query}
        if self.config.search_params:
            body["params"] = self.config.search_params
        return await self._post("search", body)

    def _http(self) -> ResilientClient:
        if self._client is None:
            self._client = self.client_factory(self.config.resilience)
        return self._client

    def _params(self) -> dict[str, str]:
        params = {"prettyPrint": "false"}
        if self.config.api_key:
            params["key"] = self.config.api_key
        return params

    async def _post(self, endpoint: str, body: dict[str, object]) -> RawDocument | None:
        payload = {"context": self.config.client_context(), **body}
        url = f"{self.config.resilience.base_url or ''}/{endpoint}"
        try:
            response = await self._http().post(url, params=self._params(), json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            log.warning(f"Innertube {endpoint} failed with {exc.response.status_code}")
            raise FetchError(
                f"Innertube {endpoint} returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            log.warning(f"Innertube {endpoint} request failed: {exc}")
            raise FetchError(f"Innertube {endpoint} request failed: {exc}") from exc
        return _decode_document(response)


def build_innertube_client(config: InnertubeConfig | None = None) -> InnertubeClient:
    """Build the transport once; callers pass it into the pipeline explicitly."""

    return InnertubeClient(config=config or get_innertube_config())


if TYPE_CHECKING:
    _transport_check: BrowseTransport = InnertubeClient()
