"""Application configuration helpers."""

from __future__ import annotations

from .env import env_bool, env_int, optional_env
from .errors import ConfigurationError, InvalidConfigurationValueError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .ingest import IngestSettings, get_ingest_settings
from .innertube import InnertubeConfig, build_innertube_resilience, get_innertube_config
from .logging import configure_logging
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_storage_config,
)

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "IngestSettings",
    "InnertubeConfig",
    "InvalidConfigurationValueError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "build_innertube_resilience",
    "configure_logging",
    "env_bool",
    "env_int",
    "get_database_config",
    "get_ingest_settings",
    "get_innertube_config",
    "get_storage_config",
    "optional_env",
]
