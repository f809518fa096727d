"""Meilisearch API client module.

This module provides an async client for the Meilisearch REST API with a
focus on task tracking: every mutating call returns a task handle that can
be awaited with ``wait_for_task``.

Example:
    ```python
    from meilisearch_tasks.api import Client, TaskStatus

    async with Client("http://localhost:7700", "masterKey") as client:
        info = await client.create_index("movies")
        task = await client.wait_for_task(info.task_uid)
        assert task.status is TaskStatus.SUCCEEDED

        index = client.index("movies")
        info = await index.add_documents([{"id": 1, "title": "Carol"}])
        await index.wait_for_task(info.task_uid, timeout_in_ms=10_000)
    ```
"""

from __future__ import annotations

from meilisearch_tasks.api.client import Client, raise_for_status
from meilisearch_tasks.api.index import Index
from meilisearch_tasks.api.index_settings import (
    Faceting,
    IndexSettings,
    MinWordSizeForTypos,
    Pagination,
    TypoTolerance,
)
from meilisearch_tasks.api.models import (
    CancelTasksQuery,
    DeleteTasksQuery,
    IndexStats,
    Stats,
    Task,
    TaskDetails,
    TaskError,
    TaskInfo,
    TasksQuery,
    TasksResults,
    TaskStatus,
)
from meilisearch_tasks.api.tasks import (
    DEFAULT_INTERVAL_IN_MS,
    DEFAULT_TIMEOUT_IN_MS,
    TaskPoller,
)


__all__ = [
    "DEFAULT_INTERVAL_IN_MS",
    "DEFAULT_TIMEOUT_IN_MS",
    "CancelTasksQuery",
    "Client",
    "DeleteTasksQuery",
    "Faceting",
    "Index",
    "IndexSettings",
    "IndexStats",
    "MinWordSizeForTypos",
    "Pagination",
    "Stats",
    "Task",
    "TaskDetails",
    "TaskError",
    "TaskInfo",
    "TaskPoller",
    "TaskStatus",
    "TasksQuery",
    "TasksResults",
    "TypoTolerance",
    "raise_for_status",
]
