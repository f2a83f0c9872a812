"""Logging setup for musicat entry points."""

from __future__ import annotations

import logging


def configure_logging(*, level: int | str = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once with a terse CLI format.

    ``level`` accepts either a logging constant or its name (``"DEBUG"``).
    Pass ``force=True`` to reconfigure during tests or when the CLI overrides
    the level from the environment.
    """

    if isinstance(level, str):
        resolved = logging.getLevelNamesMapping().get(level.strip().upper())
        if resolved is None:
            raise ValueError(f"Unknown log level: {level}")
        level = resolved

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
