"""Structured log events with flat, JSON-compatible fields."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import logging

_JSON_PRIMITIVES = (str, int, float, bool, type(None))


def _validate_flat_value(name: str, value: Any) -> None:
    if isinstance(value, _JSON_PRIMITIVES):
        return
    raise TypeError(f"Field '{name}' must be a flat JSON-compatible value")


def log_event(
    logger: logging.Logger, event: str, /, *, level: int | None = None, **fields: Any
) -> None:
    """Emit ``event`` with ``fields`` attached to the record through ``extra``.

    Field values must be flat JSON primitives so any handler can render them.
    """

    if not event.strip():
        raise ValueError("event must be a non-empty string")

    extra: dict[str, Any] = {"event": event}
    for name, value in fields.items():
        _validate_flat_value(name, value)
        extra[name] = value

    rendered = " ".join(f"{name}={value}" for name, value in fields.items())
    message = f"{event} {rendered}" if rendered else event
    if level is None:
        logger.info(message, extra=extra)
    else:
        logger.log(level, message, extra=extra)


def elapsed_ms(started: float) -> int:
    """Milliseconds since ``started``, a :func:`time.perf_counter` reading."""

    return int((time.perf_counter() - started) * 1000)
