"""Application configuration helpers."""

from __future__ import annotations

from .countries import DEFAULT_COUNTRIES_API_URL, CountriesFeedConfig, get_countries_feed_config
from .env import env_flag, optional_env_var
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "DEFAULT_COUNTRIES_API_URL",
    "ConfigurationError",
    "CountriesFeedConfig",
    "DatabaseConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "get_countries_feed_config",
    "get_database_config",
    "get_storage_config",
    "env_flag",
    "optional_env_var",
]
