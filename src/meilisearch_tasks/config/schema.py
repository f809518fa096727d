"""Configuration schema models for meilisearch-tasks.

This module defines Pydantic models for all configuration sections.
These models are used by the Settings class to validate and type-check
configuration loaded from YAML files and environment variables, and are
passed explicitly to the transport and client at construction time.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path  # noqa: TC003 - needed at runtime for Pydantic
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

from meilisearch_tasks.observability.logging import LogLevel  # noqa: TC001


__all__ = [
    "ConfigBaseModel",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "MeilisearchConfig",
    "ObservabilityConfig",
]


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class LogFormat(StrEnum):
    """Log output format.

    Attributes:
        LOGFMT: Machine-parseable logfmt lines.
        CONSOLE: Human-readable console output with colors.
    """

    LOGFMT = "logfmt"
    CONSOLE = "console"


# ---------------------------------------------------------------------------
# Base Configuration Model
# ---------------------------------------------------------------------------


class ConfigBaseModel(BaseModel):
    """Base model for all configuration sections.

    Uses stricter settings than API models to catch configuration typos:
    - extra="forbid" raises errors for unknown fields
    - validate_default=True ensures defaults are validated
    """

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        validate_default=True,
    )


# ---------------------------------------------------------------------------
# Meilisearch Connection
# ---------------------------------------------------------------------------


class MeilisearchConfig(ConfigBaseModel):
    """Meilisearch connection and task-polling configuration.

    Attributes:
        url: Base URL of the Meilisearch instance.
        api_key: API key sent as a Bearer token (supports ${VAR}
            interpolation in YAML).
        api_key_file: Path to a file containing the API key.
        client_agents: Extra client identifiers appended to the
            ``User-Agent`` header, e.g. ``["MyApp v1.44"]``.
        request_timeout_seconds: Socket-level timeout for a single request.
        max_connections: Size of the shared connection pool.
        task_timeout_ms: Default budget for waiting on a task.
        task_interval_ms: Default delay between task status fetches.
    """

    url: str = Field(
        default="http://localhost:7700",
        description="Base URL of the Meilisearch instance",
    )
    api_key: str | None = Field(
        default=None,
        description="API key (supports ${VAR} interpolation)",
    )
    api_key_file: Path | None = Field(
        default=None,
        description="Path to file containing the API key",
    )
    client_agents: list[str] = Field(
        default_factory=list,
        description="Client identifiers appended to the User-Agent header",
    )
    request_timeout_seconds: Annotated[
        float,
        Field(gt=0, le=600, description="Per-request socket timeout"),
    ] = 30.0
    max_connections: Annotated[
        int,
        Field(ge=1, le=1000, description="Connection pool size"),
    ] = 100
    task_timeout_ms: Annotated[
        int,
        Field(ge=0, description="Default task wait budget in milliseconds"),
    ] = 5000
    task_interval_ms: Annotated[
        int,
        Field(ge=0, description="Default task poll interval in milliseconds"),
    ] = 50

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Remove trailing slash from URL to avoid double slashes."""
        return v.rstrip("/")


# ---------------------------------------------------------------------------
# Observability
# ---------------------------------------------------------------------------


class LoggingConfig(ConfigBaseModel):
    """Logging configuration.

    Attributes:
        level: Log verbosity level.
        format: Log output format (logfmt or console).
    """

    level: LogLevel = Field(default=LogLevel.INFO)
    format: LogFormat = Field(default=LogFormat.LOGFMT)

    @field_validator("level", mode="before")
    @classmethod
    def lowercase_level(cls, v: object) -> object:
        """Accept level names in any case (``INFO``, ``info``)."""
        return v.lower() if isinstance(v, str) else v


class ObservabilityConfig(ConfigBaseModel):
    """Observability configuration."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
