"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest


TaskJsonFactory = Callable[..., dict[str, Any]]


@pytest.fixture
def base_url() -> str:
    """Base URL for test clients."""
    return "http://meili.test:7700"


@pytest.fixture
def api_key() -> str:
    """API key for test clients."""
    return "masterKey"


@pytest.fixture
def task_json() -> TaskJsonFactory:
    """Factory for task records as returned by ``GET /tasks/{uid}``."""

    def make(
        uid: int = 1,
        status: str = "succeeded",
        *,
        task_type: str = "indexCreation",
        index_uid: str | None = "movies",
        **extra: Any,  # noqa: ANN401
    ) -> dict[str, Any]:
        finished = status in {"succeeded", "failed", "canceled"}
        started = status != "enqueued"
        record: dict[str, Any] = {
            "uid": uid,
            "indexUid": index_uid,
            "status": status,
            "type": task_type,
            "canceledBy": None,
            "details": {"primaryKey": None},
            "error": None,
            "duration": "PT0.005S" if finished else None,
            "enqueuedAt": "2024-01-15T10:30:00.000000001Z",
            "startedAt": "2024-01-15T10:30:00.1Z" if started else None,
            "finishedAt": "2024-01-15T10:30:00.2Z" if finished else None,
        }
        record.update(extra)
        return record

    return make


@pytest.fixture
def task_info_json() -> TaskJsonFactory:
    """Factory for the body of a ``202 Accepted`` response."""

    def make(
        task_uid: int = 1,
        *,
        task_type: str = "indexCreation",
        index_uid: str | None = "movies",
    ) -> dict[str, Any]:
        return {
            "taskUid": task_uid,
            "indexUid": index_uid,
            "status": "enqueued",
            "type": task_type,
            "enqueuedAt": "2024-01-15T10:30:00.123456789Z",
        }

    return make
