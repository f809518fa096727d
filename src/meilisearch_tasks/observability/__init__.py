"""Observability module (structured logging)."""

from __future__ import annotations

from meilisearch_tasks.observability.logging import (
    LogLevel,
    configure_logging,
    get_logger,
)


__all__ = [
    "LogLevel",
    "configure_logging",
    "get_logger",
]
