"""String coercion helpers applied to every text field read from the wire."""

from __future__ import annotations

import re
from typing import Final

VIDEO_ID_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z0-9_-]{11}$")
_MAX_DURATION_PARTS: Final[int] = 3


def normalize(value: object) -> str:
    """Trim strings; anything that is not a string becomes ``""``."""

    return value.strip() if isinstance(value, str) else ""


def optional_text(value: object) -> str | None:
    text = normalize(value)
    return text or None


def looks_like_video_id(value: object) -> bool:
    return VIDEO_ID_PATTERN.fullmatch(normalize(value)) is not None


def to_seconds(value: object) -> int | None:
    """Parse ``"3:45"``, ``"1:02:03"`` or a bare number of seconds.

    >>> to_seconds("3:45")
    225
    >>> to_seconds("live") is None
    True
    """

    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return int(value) if value >= 0 else None
    text = normalize(value)
    if not text:
        return None
    parts = text.split(":")
    if len(parts) > _MAX_DURATION_PARTS or not all(part.isdigit() for part in parts):
        return None
    total = 0
    for part in parts:
        total = total * 60 + int(part)
    return total
