"""Configuration module for meilisearch-tasks.

Configuration is managed with Pydantic settings and can come from a YAML
file, environment variables (``MEILI_`` prefix) or constructor arguments.
YAML values support ${VAR} and ${VAR:-default} interpolation.

Example:
    >>> from meilisearch_tasks.config import load_settings
    >>> settings = load_settings()
    >>> settings.meilisearch.task_timeout_ms
    5000
"""

from __future__ import annotations

from meilisearch_tasks.config.exceptions import (
    ConfigurationError,
    ConfigurationFileNotFoundError,
    ConfigurationValidationError,
)
from meilisearch_tasks.config.schema import (
    ConfigBaseModel,
    LogFormat,
    LoggingConfig,
    LogLevel,
    MeilisearchConfig,
    ObservabilityConfig,
)
from meilisearch_tasks.config.settings import (
    Settings,
    find_config_file,
    load_settings,
)


__all__ = [
    "ConfigBaseModel",
    "ConfigurationError",
    "ConfigurationFileNotFoundError",
    "ConfigurationValidationError",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "MeilisearchConfig",
    "ObservabilityConfig",
    "Settings",
    "find_config_file",
    "load_settings",
]
