"""Waiting for asynchronous Meilisearch tasks to finish.

Every mutating call returns a :class:`~meilisearch_tasks.api.models.TaskInfo`
immediately. :class:`TaskPoller` turns the task uid into a terminal
:class:`~meilisearch_tasks.api.models.Task` by fetching it repeatedly until
its status is ``succeeded``, ``failed`` or ``canceled``, or until the time
budget runs out.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import TYPE_CHECKING

import structlog

from meilisearch_tasks.exceptions import MeilisearchTimeoutError, TaskWaitAbortedError


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from meilisearch_tasks.api.models import Task


__all__ = [
    "DEFAULT_INTERVAL_IN_MS",
    "DEFAULT_TIMEOUT_IN_MS",
    "TaskPoller",
]


DEFAULT_TIMEOUT_IN_MS = 5000
DEFAULT_INTERVAL_IN_MS = 50


class TaskPoller:
    """Polls a task until it reaches a terminal status.

    The poller holds no per-task state: every call to :meth:`wait` keeps
    its progress in local variables, so one poller can serve any number of
    concurrent waits.

    Example:
        ```python
        poller = TaskPoller(client.get_task, timeout_in_ms=10_000)
        task = await poller.wait(info.task_uid)
        if task.status is TaskStatus.FAILED:
            print(task.error.message)
        ```

    Attributes:
        timeout_in_ms: Default budget for a wait.
        interval_in_ms: Default delay between two fetches.
    """

    def __init__(
        self,
        fetch: Callable[[int], Awaitable[Task]],
        *,
        timeout_in_ms: float = DEFAULT_TIMEOUT_IN_MS,
        interval_in_ms: float = DEFAULT_INTERVAL_IN_MS,
    ) -> None:
        """Initialize the poller.

        Args:
            fetch: Coroutine function returning the current record of a
                task uid, e.g. ``Client.get_task``.
            timeout_in_ms: Default budget for a wait.
            interval_in_ms: Default delay between two fetches.
        """
        _check_non_negative(timeout_in_ms=timeout_in_ms, interval_in_ms=interval_in_ms)
        self._fetch = fetch
        self.timeout_in_ms = timeout_in_ms
        self.interval_in_ms = interval_in_ms
        self._logger = structlog.get_logger(__name__)

    async def wait(
        self,
        task_uid: int,
        *,
        timeout_in_ms: float | None = None,
        interval_in_ms: float | None = None,
        abort: asyncio.Event | None = None,
    ) -> Task:
        """Wait for a task to reach a terminal status.

        The elapsed time is checked before every fetch, the first one
        included, and ``elapsed >= timeout`` ends the wait. A budget of 0
        therefore fails without fetching, and a budget shorter than one
        fetch plus one interval can fail for a task that would have
        finished with a little more patience.

        Args:
            task_uid: The task to wait for.
            timeout_in_ms: Budget for this wait (defaults to the poller's).
            interval_in_ms: Delay between fetches (defaults to the poller's).
            abort: Optional event; setting it stops the wait before the
                next fetch.

        Returns:
            The terminal task record. A ``failed`` or ``canceled`` task is
            returned normally, not raised.

        Raises:
            MeilisearchTimeoutError: If the task is still enqueued or
                processing when the budget is exhausted.
            TaskWaitAbortedError: If ``abort`` was set.
            MeilisearchCommunicationError: If a status fetch cannot reach
                the server.
            MeilisearchApiError: If a status fetch returns a non-2xx status.
        """
        timeout = self.timeout_in_ms if timeout_in_ms is None else timeout_in_ms
        interval = self.interval_in_ms if interval_in_ms is None else interval_in_ms
        _check_non_negative(timeout_in_ms=timeout, interval_in_ms=interval)

        log = self._logger.bind(task_uid=task_uid)
        loop = asyncio.get_running_loop()
        start = loop.time()
        attempt = 0
        last_status: str | None = None

        while True:
            if abort is not None and abort.is_set():
                log.info("task_wait_aborted", attempts=attempt)
                raise TaskWaitAbortedError(task_uid)

            elapsed_ms = (loop.time() - start) * 1000
            if elapsed_ms >= timeout:
                log.warning(
                    "task_wait_timeout",
                    timeout_in_ms=timeout,
                    elapsed_ms=round(elapsed_ms, 3),
                    attempts=attempt,
                    last_status=last_status,
                )
                raise MeilisearchTimeoutError(
                    task_uid,
                    timeout,
                    elapsed_ms=elapsed_ms,
                    last_status=last_status,
                )

            task = await self._fetch(task_uid)
            attempt += 1
            last_status = task.status.value

            if task.is_terminal:
                log.debug(
                    "task_wait_finished",
                    status=last_status,
                    attempts=attempt,
                    elapsed_ms=round((loop.time() - start) * 1000, 3),
                )
                return task

            log.debug("task_pending", status=last_status, attempt=attempt)
            remaining_ms = timeout - (loop.time() - start) * 1000
            await _sleep(max(0.0, min(interval, remaining_ms)) / 1000, abort)


async def _sleep(seconds: float, abort: asyncio.Event | None) -> None:
    """Sleep for ``seconds``, returning early if ``abort`` gets set."""
    if abort is None:
        await asyncio.sleep(seconds)
        return
    with contextlib.suppress(TimeoutError):
        await asyncio.wait_for(abort.wait(), timeout=seconds)


def _check_non_negative(**values: float) -> None:
    for name, value in values.items():
        if value < 0:
            msg = f"{name} must be >= 0, got {value}"
            raise ValueError(msg)
