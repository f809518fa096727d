"""Unit tests for the logging module."""

from __future__ import annotations

import logging

import pytest
import structlog

from meilisearch_tasks.api import Task, TaskPoller
from meilisearch_tasks.exceptions import MeilisearchTimeoutError
from meilisearch_tasks.observability import LogLevel, configure_logging, get_logger


def reset_logging() -> None:
    """Undo configure_logging for structlog and the stdlib root logger."""
    structlog.reset_defaults()
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)


# ---------------------------------------------------------------------------
# TestLogLevel
# ---------------------------------------------------------------------------


class TestLogLevel:
    """Tests for LogLevel enum."""

    def test_log_level_values(self) -> None:
        """Test LogLevel enum values."""
        assert LogLevel.DEBUG == "debug"
        assert LogLevel.INFO == "info"
        assert LogLevel.WARNING == "warning"
        assert LogLevel.ERROR == "error"
        assert LogLevel.CRITICAL == "critical"

    @pytest.mark.parametrize(
        ("level", "expected"),
        [
            (LogLevel.DEBUG, logging.DEBUG),
            (LogLevel.INFO, logging.INFO),
            (LogLevel.WARNING, logging.WARNING),
            (LogLevel.ERROR, logging.ERROR),
            (LogLevel.CRITICAL, logging.CRITICAL),
        ],
    )
    def test_to_stdlib_level(self, level: LogLevel, expected: int) -> None:
        """Test conversion to stdlib levels."""
        assert level.to_stdlib_level() == expected


# ---------------------------------------------------------------------------
# TestConfigureLogging
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def setup_method(self) -> None:
        """Reset structlog configuration before each test."""
        structlog.reset_defaults()

    def teardown_method(self) -> None:
        """Reset configuration."""
        reset_logging()

    def test_configure_with_uppercase_string(self) -> None:
        """Test that config-file style levels are accepted."""
        # LogLevel normalizes to lowercase
        configure_logging(level="DEBUG")

    def test_configure_force_colors_true(self) -> None:
        """Test forcing console output."""
        configure_logging(level=LogLevel.INFO, force_colors=True)

    def test_configure_invalid_level_raises(self) -> None:
        """Test invalid log level raises ValueError."""
        with pytest.raises(ValueError, match="'invalid' is not a valid LogLevel"):
            configure_logging(level="invalid")

    def test_logfmt_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        """Test logfmt produces key=value pairs with a timestamp."""
        # Configure after capfd is active to capture output
        configure_logging(level=LogLevel.DEBUG, force_colors=False)
        logger = get_logger(__name__, index_uid="movies")
        logger.info("task_enqueued", task_uid=3, type="indexCreation")

        err = capfd.readouterr().err
        assert err.startswith("timestamp=")
        assert "level=info event=task_enqueued task_uid=3" in err
        assert "index_uid=movies" in err
        assert "type=indexCreation" in err

    def test_level_filtering(self, capfd: pytest.CaptureFixture[str]) -> None:
        """Test that messages below the level are dropped."""
        configure_logging(level=LogLevel.WARNING, force_colors=False)
        logger = get_logger(__name__)

        logger.debug("debug_message")
        logger.info("info_message")
        logger.warning("warning_message")

        err = capfd.readouterr().err
        assert "debug_message" not in err
        assert "info_message" not in err
        assert "warning_message" in err


# ---------------------------------------------------------------------------
# TestTaskWaitLogging
# ---------------------------------------------------------------------------


class TestTaskWaitLogging:
    """Tests for the events emitted while waiting on tasks."""

    def setup_method(self) -> None:
        """Reset structlog configuration before each test."""
        structlog.reset_defaults()

    def teardown_method(self) -> None:
        """Reset configuration."""
        reset_logging()

    async def test_timeout_is_logged(self, capfd: pytest.CaptureFixture[str]) -> None:
        """Test that an exhausted budget logs a warning with the task uid."""
        configure_logging(level=LogLevel.WARNING, force_colors=False)

        async def fetch(task_uid: int) -> Task:
            raise AssertionError(task_uid)

        poller = TaskPoller(fetch)
        with pytest.raises(MeilisearchTimeoutError):
            await poller.wait(9, timeout_in_ms=0)

        err = capfd.readouterr().err
        assert "event=task_wait_timeout task_uid=9" in err
        assert "attempts=0" in err
