"""Async Meilisearch client with task tracking.

Mutating Meilisearch operations are processed asynchronously: the server
answers with a task handle, and the client waits for the task to finish.

Example:
    ```python
    from meilisearch_tasks import Client

    async with Client("http://localhost:7700", "masterKey") as client:
        info = await client.create_index("movies")
        task = await client.wait_for_task(info.task_uid)
    ```
"""

from __future__ import annotations

from meilisearch_tasks._version import __version__
from meilisearch_tasks.api import (
    Client,
    Index,
    IndexSettings,
    Task,
    TaskInfo,
    TaskPoller,
    TaskStatus,
)
from meilisearch_tasks.exceptions import (
    ErrorKind,
    MeilisearchApiError,
    MeilisearchCommunicationError,
    MeilisearchError,
    MeilisearchTimeoutError,
    TaskWaitAbortedError,
)


__all__ = [
    "Client",
    "ErrorKind",
    "Index",
    "IndexSettings",
    "MeilisearchApiError",
    "MeilisearchCommunicationError",
    "MeilisearchError",
    "MeilisearchTimeoutError",
    "Task",
    "TaskInfo",
    "TaskPoller",
    "TaskStatus",
    "TaskWaitAbortedError",
    "__version__",
]
