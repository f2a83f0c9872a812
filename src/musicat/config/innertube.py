"""Innertube (YouTube Music internal API) configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_int, optional_env
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_INNERTUBE_BASE_URL = "https://music.youtube.com/youtubei/v1"
DEFAULT_CLIENT_NAME = "WEB_REMIX"
DEFAULT_CLIENT_VERSION = "1.20240101.01.00"
DEFAULT_CALLS_PER_SECOND = 5
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0 Safari/537.36"
)


@dataclass(frozen=True, slots=True)
class InnertubeConfig:
    resilience: ResilienceConfig
    api_key: str | None = None
    client_name: str = DEFAULT_CLIENT_NAME
    client_version: str = DEFAULT_CLIENT_VERSION
    hl: str = "en"
    gl: str = "US"
    search_params: str | None = None

    def client_context(self) -> dict[str, object]:
        return {
            "client": {
                "clientName": self.client_name,
                "clientVersion": self.client_version,
                "hl": self.hl,
                "gl": self.gl,
            }
        }


def build_innertube_resilience(
    base_url: str = DEFAULT_INNERTUBE_BASE_URL,
    *,
    calls_per_second: int = DEFAULT_CALLS_PER_SECOND,
) -> ResilienceConfig:
    return ResilienceConfig(
        name="innertube",
        base_url=base_url.rstrip("/"),
        ratelimit=RateLimit(max_calls=calls_per_second, per_seconds=1.0),
        retry=RetryPolicy(total=4),
        default_headers={
            "User-Agent": DEFAULT_USER_AGENT,
            "Origin": "https://music.youtube.com",
            "Content-Type": "application/json",
        },
    )


def get_innertube_config() -> InnertubeConfig:
    """Build the transport configuration; every value has a working default."""

    base_url = optional_env("INNERTUBE_BASE_URL") or DEFAULT_INNERTUBE_BASE_URL
    calls_per_second = env_int(
        "INNERTUBE_CALLS_PER_SECOND", DEFAULT_CALLS_PER_SECOND, minimum=1
    )
    return InnertubeConfig(
        resilience=build_innertube_resilience(base_url, calls_per_second=calls_per_second),
        api_key=optional_env("INNERTUBE_API_KEY"),
        client_version=optional_env("INNERTUBE_CLIENT_VERSION") or DEFAULT_CLIENT_VERSION,
        hl=optional_env("INNERTUBE_HL") or "en",
        gl=optional_env("INNERTUBE_GL") or "US",
        search_params=optional_env("INNERTUBE_SEARCH_PARAMS"),
    )
