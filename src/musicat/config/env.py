"""Environment variable loaders for configuration."""

from __future__ import annotations

import os

from .errors import InvalidConfigurationValueError

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def optional_env(name: str, default: str | None = None) -> str | None:
    """Return the trimmed value of ``name``; blank values count as unset."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def env_int(name: str, default: int, *, minimum: int | None = None) -> int:
    raw = optional_env(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise InvalidConfigurationValueError(name, raw, "an integer") from exc
    if minimum is not None and value < minimum:
        raise InvalidConfigurationValueError(name, raw, f"an integer >= {minimum}")
    return value


def env_bool(name: str, default: bool) -> bool:
    raw = optional_env(name)
    if raw is None:
        return default
    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise InvalidConfigurationValueError(name, raw, "a boolean flag")
