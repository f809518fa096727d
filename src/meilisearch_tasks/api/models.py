"""Pydantic models for Meilisearch API payloads."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


__all__ = [
    "CancelTasksQuery",
    "DeleteTasksQuery",
    "IndexStats",
    "Stats",
    "Task",
    "TaskDetails",
    "TaskError",
    "TaskInfo",
    "TaskStatus",
    "TasksQuery",
    "TasksResults",
]


class TaskStatus(StrEnum):
    """Lifecycle states of a Meilisearch task.

    ``enqueued`` and ``processing`` are transient; the other three are
    terminal and never change once reached.
    """

    ENQUEUED = "enqueued"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transitions can happen."""
        return self in {
            TaskStatus.SUCCEEDED,
            TaskStatus.FAILED,
            TaskStatus.CANCELED,
        }


# Meilisearch emits RFC 3339 timestamps with nanosecond precision
_FRACTION_PATTERN = re.compile(r"(\.\d{6})\d+")


def _truncate_fraction(value: object) -> object:
    if isinstance(value, str):
        return _FRACTION_PATTERN.sub(r"\1", value, count=1)
    return value


class MeilisearchBaseModel(BaseModel):
    """Base model with common configuration for all API models.

    Fields use snake_case in Python and camelCase on the wire.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",  # Ignore unknown fields from API
    )


class TaskError(MeilisearchBaseModel):
    """Structured error attached to a failed task."""

    model_config = ConfigDict(frozen=True)

    message: str
    code: str
    type: str
    link: str | None = None


class TaskDetails(MeilisearchBaseModel):
    """Operation-specific task details.

    Only the keys relevant to the task type are present on the wire; any
    keys not modelled here are kept as extra fields.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    received_documents: int | None = None
    indexed_documents: int | None = None
    deleted_documents: int | None = None
    primary_key: str | None = None
    provided_ids: int | None = None
    original_filter: str | None = None
    matched_tasks: int | None = None
    canceled_tasks: int | None = None
    deleted_tasks: int | None = None


class TaskInfo(MeilisearchBaseModel):
    """Acknowledgement returned immediately by every mutating call."""

    model_config = ConfigDict(frozen=True)

    task_uid: int = Field(ge=0)
    index_uid: str | None = None
    status: TaskStatus
    type: str
    enqueued_at: datetime

    @field_validator("enqueued_at", mode="before")
    @classmethod
    def truncate_nanoseconds(cls, v: object) -> object:
        """Drop sub-microsecond digits that datetime cannot hold."""
        return _truncate_fraction(v)


class Task(MeilisearchBaseModel):
    """Snapshot of a task fetched from ``GET /tasks/{uid}``.

    Records are frozen: fetching again yields a new snapshot rather than
    updating this one.
    """

    model_config = ConfigDict(frozen=True)

    uid: int = Field(ge=0)
    index_uid: str | None = None
    status: TaskStatus
    type: str
    canceled_by: int | None = None
    details: TaskDetails | None = None
    error: TaskError | None = None
    duration: str | None = None
    enqueued_at: datetime
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @field_validator("enqueued_at", "started_at", "finished_at", mode="before")
    @classmethod
    def truncate_nanoseconds(cls, v: object) -> object:
        """Drop sub-microsecond digits that datetime cannot hold."""
        return _truncate_fraction(v)

    @property
    def is_terminal(self) -> bool:
        """Whether the task has reached a terminal status."""
        return self.status.is_terminal


class TasksResults(MeilisearchBaseModel):
    """One page of ``GET /tasks``.

    Attributes:
        results: Tasks on this page, most recent first.
        limit: Page size used by the server.
        from_: Uid of the first task on this page.
        next: Uid to pass as ``from_`` to fetch the next page, or None.
    """

    results: list[Task] = Field(default_factory=list)
    limit: int
    from_: int | None = Field(default=None, alias="from")
    next: int | None = None


# ---------------------------------------------------------------------------
# Task queries
# ---------------------------------------------------------------------------


def _format_param(value: object) -> str:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC).isoformat().replace("+00:00", "Z")
    if isinstance(value, (list, tuple)):
        return ",".join(_format_param(v) for v in value)
    if isinstance(value, StrEnum):
        return value.value
    return str(value)


class _TaskFilter(MeilisearchBaseModel):
    """Filters shared by the list, cancel and delete task endpoints."""

    uids: list[int] | None = None
    statuses: list[TaskStatus] | None = None
    types: list[str] | None = None
    index_uids: list[str] | None = None
    canceled_by: list[int] | None = None
    before_enqueued_at: datetime | None = None
    after_enqueued_at: datetime | None = None
    before_started_at: datetime | None = None
    after_started_at: datetime | None = None
    before_finished_at: datetime | None = None
    after_finished_at: datetime | None = None

    def to_params(self) -> dict[str, str]:
        """Serialize the set filters as query parameters.

        Returns:
            Mapping of camelCase parameter name to its string value.
        """
        params: dict[str, str] = {}
        for name, field in type(self).model_fields.items():
            value: Any = getattr(self, name)
            if value is not None:
                params[field.alias or name] = _format_param(value)
        return params


class TasksQuery(_TaskFilter):
    """Filters and pagination for ``GET /tasks``."""

    limit: int | None = Field(default=None, ge=0)
    from_: int | None = Field(default=None, ge=0, alias="from")


class CancelTasksQuery(_TaskFilter):
    """Filters selecting which tasks ``POST /tasks/cancel`` cancels."""


class DeleteTasksQuery(_TaskFilter):
    """Filters selecting which tasks ``DELETE /tasks`` deletes."""


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


class IndexStats(MeilisearchBaseModel):
    """Statistics for a single index."""

    number_of_documents: int = 0
    is_indexing: bool = False
    field_distribution: dict[str, int] = Field(default_factory=dict)


class Stats(MeilisearchBaseModel):
    """Instance-wide statistics from ``GET /stats``."""

    database_size: int = 0
    last_update: datetime | None = None
    indexes: dict[str, IndexStats] = Field(default_factory=dict)

    @field_validator("last_update", mode="before")
    @classmethod
    def truncate_nanoseconds(cls, v: object) -> object:
        """Drop sub-microsecond digits that datetime cannot hold."""
        return _truncate_fraction(v)
