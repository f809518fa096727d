"""Unit tests for the task poller."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable
from typing import TYPE_CHECKING

import pytest

from meilisearch_tasks.api import (
    DEFAULT_INTERVAL_IN_MS,
    DEFAULT_TIMEOUT_IN_MS,
    Task,
    TaskPoller,
    TaskStatus,
)
from meilisearch_tasks.exceptions import (
    ErrorKind,
    MeilisearchCommunicationError,
    MeilisearchTimeoutError,
    TaskWaitAbortedError,
)


if TYPE_CHECKING:
    from conftest import TaskJsonFactory


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


class ScriptedFetch:
    """Fetch function that replays a list of statuses per task uid.

    The last status of a script repeats forever.
    """

    def __init__(self, task_json: TaskJsonFactory, **scripts: list[str]) -> None:
        self._task_json = task_json
        self._scripts = {int(uid.removeprefix("uid")): s for uid, s in scripts.items()}
        self.calls: list[int] = []

    async def __call__(self, task_uid: int) -> Task:
        script = self._scripts[task_uid]
        status = script[min(self.calls.count(task_uid), len(script) - 1)]
        self.calls.append(task_uid)
        extra: dict[str, object] = {}
        if status == "failed":
            extra["error"] = {
                "message": "Index `movies` already exists.",
                "code": "index_already_exists",
                "type": "invalid_request",
                "link": "https://docs.meilisearch.com/errors#index_already_exists",
            }
        return Task.model_validate(self._task_json(task_uid, status, **extra))


ScriptedFactory = Callable[..., ScriptedFetch]


@pytest.fixture
def scripted(task_json: TaskJsonFactory) -> ScriptedFactory:
    """Factory for ScriptedFetch instances."""

    def make(**scripts: list[str]) -> ScriptedFetch:
        return ScriptedFetch(task_json, **scripts)

    return make


# ---------------------------------------------------------------------------
# Terminal Outcomes
# ---------------------------------------------------------------------------


class TestWaitOutcomes:
    """Tests for tasks that reach a terminal status."""

    async def test_enqueued_processing_succeeded(self, scripted: ScriptedFactory) -> None:
        """Test that the poller follows the task to completion."""
        fetch = scripted(uid1=["enqueued", "processing", "succeeded"])
        poller = TaskPoller(fetch, timeout_in_ms=5000, interval_in_ms=1)

        task = await poller.wait(1)

        assert task.status is TaskStatus.SUCCEEDED
        assert task.finished_at is not None
        assert task.details is not None
        assert task.details.primary_key is None
        assert fetch.calls == [1, 1, 1]

    async def test_already_finished_needs_one_fetch(self, scripted: ScriptedFactory) -> None:
        """Test that a finished task is returned after a single fetch."""
        fetch = scripted(uid7=["succeeded"])
        poller = TaskPoller(fetch)

        task = await poller.wait(7)

        assert task.uid == 7
        assert fetch.calls == [7]

    async def test_failed_is_returned(self, scripted: ScriptedFactory) -> None:
        """Test that a failed task is a normal return value."""
        fetch = scripted(uid2=["processing", "failed"])
        poller = TaskPoller(fetch, interval_in_ms=1)

        task = await poller.wait(2)

        assert task.status is TaskStatus.FAILED
        assert task.error is not None
        assert task.error.code == "index_already_exists"

    async def test_canceled_is_returned(self, scripted: ScriptedFactory) -> None:
        """Test that a canceled task is a normal return value."""
        fetch = scripted(uid3=["enqueued", "canceled"])
        poller = TaskPoller(fetch, interval_in_ms=1)

        task = await poller.wait(3)

        assert task.status is TaskStatus.CANCELED

    async def test_repeated_fetch_of_finished_task_is_equal(
        self,
        scripted: ScriptedFactory,
    ) -> None:
        """Test that waiting twice on a finished task gives equal records."""
        fetch = scripted(uid4=["succeeded"])
        poller = TaskPoller(fetch)

        assert await poller.wait(4) == await poller.wait(4)


# ---------------------------------------------------------------------------
# Timeout
# ---------------------------------------------------------------------------


class TestWaitTimeout:
    """Tests for the wait budget."""

    async def test_never_finishing_task_times_out(self, scripted: ScriptedFactory) -> None:
        """Test that a stuck task raises once the budget is spent."""
        fetch = scripted(uid5=["processing"])
        poller = TaskPoller(fetch)
        loop = asyncio.get_running_loop()

        start = loop.time()
        with pytest.raises(MeilisearchTimeoutError) as exc_info:
            await poller.wait(5, timeout_in_ms=50, interval_in_ms=10)
        elapsed = loop.time() - start

        assert elapsed >= 0.05
        assert elapsed < 0.15
        error = exc_info.value
        assert error.kind is ErrorKind.TIMEOUT
        assert isinstance(error, TimeoutError)
        assert error.task_uid == 5
        assert error.timeout_in_ms == 50
        assert error.elapsed_ms >= 50
        assert error.last_status == "processing"
        assert "Task 5 did not complete within 50ms" in str(error)
        assert 2 <= len(fetch.calls) <= 6

    async def test_last_sleep_is_cut_to_remaining_budget(
        self,
        scripted: ScriptedFactory,
    ) -> None:
        """Test that an interval longer than the budget does not delay the timeout."""
        fetch = scripted(uid5=["enqueued"])
        poller = TaskPoller(fetch)
        loop = asyncio.get_running_loop()

        start = loop.time()
        with pytest.raises(MeilisearchTimeoutError):
            await poller.wait(5, timeout_in_ms=50, interval_in_ms=1000)
        elapsed = loop.time() - start

        assert elapsed >= 0.05
        assert elapsed < 0.5
        assert 1 <= len(fetch.calls) <= 2

    async def test_zero_timeout_fails_without_fetch(self, scripted: ScriptedFactory) -> None:
        """Test that a zero budget raises even for a finished task."""
        fetch = scripted(uid6=["succeeded"])
        poller = TaskPoller(fetch)

        with pytest.raises(MeilisearchTimeoutError) as exc_info:
            await poller.wait(6, timeout_in_ms=0, interval_in_ms=50)

        assert fetch.calls == []
        assert exc_info.value.last_status is None

    async def test_poller_defaults_apply(self, scripted: ScriptedFactory) -> None:
        """Test that the constructor budget is used when none is passed."""
        fetch = scripted(uid1=["succeeded"])
        poller = TaskPoller(fetch, timeout_in_ms=0)

        with pytest.raises(MeilisearchTimeoutError):
            await poller.wait(1)

    def test_module_defaults(self, scripted: ScriptedFactory) -> None:
        """Test the default budget and interval."""
        poller = TaskPoller(scripted(uid1=["succeeded"]))

        assert poller.timeout_in_ms == DEFAULT_TIMEOUT_IN_MS == 5000
        assert poller.interval_in_ms == DEFAULT_INTERVAL_IN_MS == 50


# ---------------------------------------------------------------------------
# Abort, Errors and Concurrency
# ---------------------------------------------------------------------------


class TestWaitControl:
    """Tests for aborting, error propagation and concurrent waits."""

    async def test_abort_before_start(self, scripted: ScriptedFactory) -> None:
        """Test that a set abort event stops the wait before any fetch."""
        fetch = scripted(uid1=["processing"])
        poller = TaskPoller(fetch)
        abort = asyncio.Event()
        abort.set()

        with pytest.raises(TaskWaitAbortedError) as exc_info:
            await poller.wait(1, abort=abort)

        assert exc_info.value.kind is ErrorKind.ABORTED
        assert fetch.calls == []

    async def test_abort_interrupts_sleep(self, scripted: ScriptedFactory) -> None:
        """Test that setting the event wakes a sleeping wait."""
        fetch = scripted(uid1=["processing"])
        poller = TaskPoller(fetch)
        abort = asyncio.Event()
        loop = asyncio.get_running_loop()
        loop.call_later(0.02, abort.set)

        start = loop.time()
        with pytest.raises(TaskWaitAbortedError):
            await poller.wait(1, timeout_in_ms=60_000, interval_in_ms=10_000, abort=abort)

        assert loop.time() - start < 5
        assert fetch.calls == [1]

    async def test_fetch_error_propagates(self) -> None:
        """Test that a failing status fetch ends the wait unchanged."""
        calls = 0

        async def failing_fetch(task_uid: int) -> Task:
            nonlocal calls
            calls += 1
            raise MeilisearchCommunicationError

        poller = TaskPoller(failing_fetch)

        with pytest.raises(MeilisearchCommunicationError):
            await poller.wait(1)

        assert calls == 1

    async def test_concurrent_waits(self, scripted: ScriptedFactory) -> None:
        """Test that one poller serves independent concurrent waits."""
        fetch = scripted(
            uid1=["enqueued", "processing", "succeeded"],
            uid2=["processing", "failed"],
            uid3=["succeeded"],
        )
        poller = TaskPoller(fetch, interval_in_ms=1)

        results = await asyncio.gather(poller.wait(1), poller.wait(2), poller.wait(3))

        assert [t.uid for t in results] == [1, 2, 3]
        assert [t.status for t in results] == [
            TaskStatus.SUCCEEDED,
            TaskStatus.FAILED,
            TaskStatus.SUCCEEDED,
        ]

    async def test_zero_interval_yields_to_event_loop(
        self,
        scripted: ScriptedFactory,
    ) -> None:
        """Test that polling without a delay still lets other tasks run."""
        fetch = scripted(uid1=["enqueued", "processing", "succeeded"])
        poller = TaskPoller(fetch, interval_in_ms=0)
        ticks = 0

        async def ticker() -> None:
            nonlocal ticks
            while True:
                ticks += 1
                await asyncio.sleep(0)

        ticking = asyncio.create_task(ticker())
        try:
            task = await poller.wait(1, timeout_in_ms=5000)
        finally:
            ticking.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await ticking

        assert task.status is TaskStatus.SUCCEEDED
        assert fetch.calls == [1, 1, 1]
        assert ticks >= 2

    @pytest.mark.parametrize(
        ("timeout", "interval"),
        [(-1, 50), (5000, -1)],
    )
    async def test_negative_values_rejected(
        self,
        scripted: ScriptedFactory,
        timeout: int,
        interval: int,
    ) -> None:
        """Test that negative budgets and intervals are rejected."""
        poller = TaskPoller(scripted(uid1=["succeeded"]))

        with pytest.raises(ValueError, match=">= 0"):
            await poller.wait(1, timeout_in_ms=timeout, interval_in_ms=interval)

        with pytest.raises(ValueError, match=">= 0"):
            TaskPoller(
                scripted(uid1=["succeeded"]),
                timeout_in_ms=timeout,
                interval_in_ms=interval,
            )
