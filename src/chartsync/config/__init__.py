"""Application configuration helpers."""

from __future__ import annotations

from .env import env_bool, env_float, env_int, env_str, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy, get_timeout_seconds
from .logging import configure_logging
from .storage import DatabaseConfig, get_data_dir, get_database_config
from .sync import SyncConfig, get_sync_config, parse_source_selection, parse_tag_order

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SyncConfig",
    "configure_logging",
    "env_bool",
    "env_float",
    "env_int",
    "env_str",
    "get_data_dir",
    "get_database_config",
    "get_sync_config",
    "get_timeout_seconds",
    "parse_source_selection",
    "parse_tag_order",
    "require_env_vars",
]
