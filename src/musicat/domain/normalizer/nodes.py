"""Defensive accessors for untyped JSON trees."""

from __future__ import annotations

from typing import Any

type JsonObject = dict[str, Any]


def dig(node: object, *path: str | int) -> Any:
    """Follow ``path`` through nested dicts/lists; ``None`` once any step is missing."""

    current: Any = node
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or not -len(current) <= step < len(current):
                return None
            current = current[step]
        else:
            if not isinstance(current, dict):
                return None
            current = current.get(step)
        if current is None:
            return None
    return current


def as_object(value: object) -> JsonObject | None:
    return value if isinstance(value, dict) else None


def objects(value: object) -> list[JsonObject]:
    """Dict items of ``value`` when it is a list, otherwise an empty list."""

    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]
