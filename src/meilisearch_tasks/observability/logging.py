"""Structured logging configuration for meilisearch-tasks.

Library modules log through structlog with snake_case event names and
key/value context (``task_uid``, ``status``, ``elapsed_ms``). Applications
call :func:`configure_logging` once; until then structlog's defaults apply.
Output is either colorized console lines (TTY) or logfmt with ISO 8601 UTC
timestamps.
"""

from __future__ import annotations

import logging
import sys
from enum import StrEnum

import structlog
from structlog.contextvars import merge_contextvars
from structlog.processors import TimeStamper, add_log_level


__all__ = [
    "LogLevel",
    "configure_logging",
    "get_logger",
]


class LogLevel(StrEnum):
    """Supported log levels."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    def to_stdlib_level(self) -> int:
        """Convert to stdlib logging level.

        Returns:
            The corresponding logging module level constant.
        """
        level: int = getattr(logging, self.name)
        return level


def _create_renderer(
    *,
    colors: bool,
) -> structlog.dev.ConsoleRenderer | structlog.processors.LogfmtRenderer:
    if colors:
        return structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )
    return structlog.processors.LogfmtRenderer(
        key_order=["timestamp", "level", "event", "task_uid"],
        drop_missing=True,
        bool_as_flag=False,
    )


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    *,
    force_colors: bool | None = None,
) -> None:
    """Configure structured logging.

    Args:
        level: Minimum log level, as a LogLevel or a case-insensitive
            string ('debug', 'INFO', ...).
        force_colors: Force console output on/off. If None, use colors
            when stderr is a TTY and logfmt otherwise.

    Example:
        >>> configure_logging(level="debug", force_colors=False)
        >>> get_logger(__name__).info("task_wait_finished", task_uid=3)
        timestamp=2024-01-15T10:30:45.123456Z level=info event=task_wait_finished task_uid=3
    """
    if isinstance(level, str):
        level = LogLevel(level.lower())

    if force_colors is not None:
        use_colors = force_colors
    else:
        use_colors = (
            sys.stderr is not None
            and hasattr(sys.stderr, "isatty")
            and sys.stderr.isatty()
        )

    processors: list[structlog.typing.Processor] = [
        merge_contextvars,
        add_log_level,
        TimeStamper(fmt="iso", utc=True, key="timestamp"),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _create_renderer(colors=use_colors),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level.to_stdlib_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # httpx logs through stdlib logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level.to_stdlib_level(),
        force=True,
    )


def get_logger(
    name: str | None = None,
    **initial_context: object,
) -> structlog.BoundLogger:
    """Get a structured logger, optionally with bound context.

    Args:
        name: Logger name, typically ``__name__``.
        **initial_context: Key-value pairs to bind to the logger.

    Returns:
        A bound structlog logger.
    """
    log: structlog.BoundLogger = structlog.get_logger(name)
    if initial_context:
        log = log.bind(**initial_context)
    return log
