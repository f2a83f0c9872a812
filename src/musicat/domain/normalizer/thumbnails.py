"""Best-of-N image selection.

The same scoring is used for every image the catalog stores (artist, album,
playlist, track) so identical payloads always produce identical URLs:

* ``width * height`` when both dimensions are known,
* otherwise the larger of the two,
* otherwise ``1``.

The highest score wins; on a tie the candidate seen first wins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from pydantic import ValidationError

from musicat.domain.model import Thumbnail

from .nodes import dig, objects
from .schema import ThumbnailPayload

if TYPE_CHECKING:
    from collections.abc import Iterable

THUMBNAIL_PATHS: Final[tuple[tuple[str, ...], ...]] = (
    ("thumbnail", "musicThumbnailRenderer", "thumbnail", "thumbnails"),
    ("thumbnail", "croppedSquareThumbnailRenderer", "thumbnail", "thumbnails"),
    ("thumbnailRenderer", "musicThumbnailRenderer", "thumbnail", "thumbnails"),
    ("thumbnailRenderer", "croppedSquareThumbnailRenderer", "thumbnail", "thumbnails"),
    ("foregroundThumbnail", "musicThumbnailRenderer", "thumbnail", "thumbnails"),
    ("thumbnail", "thumbnails"),
    ("thumbnails",),
)


def parse_thumbnails(raw: object) -> tuple[Thumbnail, ...]:
    """Validate one raw ``[{url, width, height}, ...]`` array, dropping unusable entries."""

    thumbnails: list[Thumbnail] = []
    for item in objects(raw):
        try:
            payload = ThumbnailPayload.model_validate(item)
        except ValidationError:
            continue
        if payload.url:
            thumbnails.append(Thumbnail(payload.url, payload.width, payload.height))
    return tuple(thumbnails)


def collect_thumbnails(node: object) -> tuple[Thumbnail, ...]:
    """Candidates from every known thumbnail nesting under ``node``, in path order."""

    candidates: list[Thumbnail] = []
    for path in THUMBNAIL_PATHS:
        candidates.extend(parse_thumbnails(dig(node, *path)))
    return tuple(candidates)


def thumbnail_score(thumbnail: Thumbnail) -> int:
    width, height = thumbnail.width, thumbnail.height
    if width and height:
        return width * height
    if width or height:
        return max(width or 0, height or 0)
    return 1


def best_thumbnail(*candidate_lists: Iterable[Thumbnail]) -> str | None:
    best_url: str | None = None
    best_score = 0
    for candidates in candidate_lists:
        for thumbnail in candidates:
            if not thumbnail.url:
                continue
            score = thumbnail_score(thumbnail)
            if score > best_score:
                best_url, best_score = thumbnail.url, score
    return best_url
