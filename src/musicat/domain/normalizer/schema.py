"""Pydantic models for the small, recurring leaf objects of innertube payloads.

Renderers themselves are too unstable to model wholesale; these models cover the
pieces that keep the same shape everywhere they appear (thumbnails, text runs,
navigation endpoints) so the renderer matchers can validate them in one step.
"""

from __future__ import annotations

from logging import getLogger
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
    model_validator,
)

from .nodes import dig, objects
from .text import normalize

log = getLogger(__name__)

NormalizedStr = Annotated[str, BeforeValidator(normalize)]


def _raw_string(value: object) -> str:
    return value if isinstance(value, str) else ""


RawStr = Annotated[str, BeforeValidator(_raw_string)]


def _dimension(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return int(value) if value > 0 else None
    text = normalize(value)
    if text.isdigit() and int(text) > 0:
        return int(text)
    return None


Dimension = Annotated[int | None, BeforeValidator(_dimension)]


class WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class ThumbnailPayload(WireModel):
    url: NormalizedStr
    width: Dimension = None
    height: Dimension = None


class BrowseEndpointPayload(WireModel):
    browse_id: NormalizedStr = Field(default="", alias="browseId")
    page_type: NormalizedStr = Field(default="", alias="pageType")

    @model_validator(mode="before")
    @classmethod
    def _lift_page_type(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "pageType" in data:
            return data
        page_type = dig(
            data,
            "browseEndpointContextSupportedConfigs",
            "browseEndpointContextMusicConfig",
            "pageType",
        )
        return {**data, "pageType": page_type}


class WatchEndpointPayload(WireModel):
    video_id: NormalizedStr = Field(default="", alias="videoId")
    playlist_id: NormalizedStr = Field(default="", alias="playlistId")
    music_video_type: NormalizedStr = Field(default="", alias="musicVideoType")

    @model_validator(mode="before")
    @classmethod
    def _lift_video_type(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "musicVideoType" in data:
            return data
        video_type = dig(
            data,
            "watchEndpointMusicSupportedConfigs",
            "watchEndpointMusicConfig",
            "musicVideoType",
        )
        return {**data, "musicVideoType": video_type}


class WatchPlaylistEndpointPayload(WireModel):
    playlist_id: NormalizedStr = Field(default="", alias="playlistId")


class NavigationEndpointPayload(WireModel):
    browse_endpoint: BrowseEndpointPayload | None = Field(default=None, alias="browseEndpoint")
    watch_endpoint: WatchEndpointPayload | None = Field(default=None, alias="watchEndpoint")
    watch_playlist_endpoint: WatchPlaylistEndpointPayload | None = Field(
        default=None, alias="watchPlaylistEndpoint"
    )

    @property
    def browse_id(self) -> str:
        return self.browse_endpoint.browse_id if self.browse_endpoint else ""

    @property
    def page_type(self) -> str:
        return self.browse_endpoint.page_type if self.browse_endpoint else ""


class TextRunPayload(WireModel):
    text: RawStr = ""
    navigation_endpoint: NavigationEndpointPayload | None = Field(
        default=None, alias="navigationEndpoint"
    )


class TextPayload(WireModel):
    runs: Annotated[list[TextRunPayload], BeforeValidator(objects)] = Field(
        default_factory=list[TextRunPayload]
    )
    simple_text: NormalizedStr = Field(default="", alias="simpleText")

    @property
    def text(self) -> str:
        if self.runs:
            return normalize("".join(run.text for run in self.runs))
        return self.simple_text

    @property
    def run_texts(self) -> tuple[str, ...]:
        return tuple(text for run in self.runs if (text := normalize(run.text)))


def parse_text(value: object) -> TextPayload:
    """Validate a ``{"runs": [...]}`` / ``{"simpleText": ...}`` node; junk yields empty text."""

    if isinstance(value, str):
        return TextPayload(simpleText=value)
    if not isinstance(value, dict):
        return TextPayload()
    try:
        return TextPayload.model_validate(value)
    except ValidationError as exc:
        log.debug("Dropping invalid text node: %s", exc)
        return TextPayload()


def parse_navigation(value: object) -> NavigationEndpointPayload | None:
    if not isinstance(value, dict):
        return None
    try:
        return NavigationEndpointPayload.model_validate(value)
    except ValidationError as exc:
        log.debug("Dropping invalid navigation endpoint: %s", exc)
        return None
