"""SQLAlchemy adapter package for the catalog store."""

from __future__ import annotations

from .mappings import mapper_registry, metadata
from .store import SqlAlchemyCatalogStore
from .unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyCatalogStore",
    "SqlAlchemyCatalogUnitOfWork",
    "StartupError",
    "configured_engine",
    "is_started",
    "mapper_registry",
    "metadata",
    "shutdown",
    "startup",
]
