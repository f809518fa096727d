"""Async client for the Meilisearch REST API."""

from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING, Any, Self
from urllib.parse import quote, urlencode

import structlog
from pydantic import ValidationError

from meilisearch_tasks.api.index import Index
from meilisearch_tasks.api.models import (
    CancelTasksQuery,
    DeleteTasksQuery,
    Stats,
    Task,
    TaskInfo,
    TasksQuery,
    TasksResults,
)
from meilisearch_tasks.api.tasks import TaskPoller
from meilisearch_tasks.config.schema import MeilisearchConfig
from meilisearch_tasks.exceptions import (
    MeilisearchApiError,
    MeilisearchAuthenticationError,
    MeilisearchError,
    MeilisearchNotFoundError,
    MeilisearchRateLimitError,
    MeilisearchServerError,
)
from meilisearch_tasks.http.envelope import HttpMethod, HttpRequest, HttpResponse
from meilisearch_tasks.http.transport import HttpTransport


if TYPE_CHECKING:
    import asyncio
    from collections.abc import Mapping

    import httpx
    from pydantic import BaseModel


__all__ = ["Client", "decode_response", "raise_for_status"]


# Distinguishes "no body" from a JSON null body
_NO_BODY: Any = object()


class Client:
    """Async client for interacting with the Meilisearch REST API.

    Every mutating call returns a :class:`TaskInfo` as soon as the server
    has enqueued the work; use :meth:`wait_for_task` to block until the
    task is finished.

    Example:
        ```python
        async with Client("http://localhost:7700", "masterKey") as client:
            info = await client.create_index("movies", primary_key="id")
            task = await client.wait_for_task(info.task_uid)
            print(task.status)
        ```

    Attributes:
        config: Connection and polling configuration.
        transport: The HTTP transport shared by every call of this client.
    """

    def __init__(
        self,
        url: str = "http://localhost:7700",
        api_key: str | None = None,
        *,
        client_agents: list[str] | None = None,
        config: MeilisearchConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Meilisearch client.

        Args:
            url: Base URL of the Meilisearch instance. Ignored when
                ``config`` is given.
            api_key: API key. Ignored when ``config`` is given.
            client_agents: Extra ``User-Agent`` identifiers. Ignored when
                ``config`` is given.
            config: Complete configuration, e.g. ``settings.meilisearch``.
            transport: Optional custom httpx transport for testing or
                advanced configuration.
        """
        self.config = config or MeilisearchConfig(
            url=url,
            api_key=api_key,
            client_agents=client_agents or [],
        )
        self.transport = HttpTransport(self.config, transport=transport)
        self._poller = TaskPoller(
            self.get_task,
            timeout_in_ms=self.config.task_timeout_ms,
            interval_in_ms=self.config.task_interval_ms,
        )
        self._logger = structlog.get_logger(__name__)

    @classmethod
    def from_config(
        cls,
        config: MeilisearchConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> Self:
        """Create a client from a configuration value.

        Args:
            config: Connection and polling configuration.
            transport: Optional custom httpx transport.

        Returns:
            A new client.
        """
        return cls(config=config, transport=transport)

    async def __aenter__(self) -> Self:
        """Enter async context and open the connection pool."""
        await self.transport.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit async context and close the connection pool."""
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        await self.transport.close()

    # -------------------------------------------------------------------------
    # Core Request Methods
    # -------------------------------------------------------------------------

    async def execute(self, request: HttpRequest) -> HttpResponse:
        """Execute an arbitrary request envelope.

        Args:
            request: The request to send.

        Returns:
            The 2xx response.

        Raises:
            MeilisearchApiError: Or a subclass, for non-2xx responses.
            MeilisearchCommunicationError: For connection failures.
        """
        response = await self.transport.execute(request)
        raise_for_status(response)
        return response

    async def _request(
        self,
        method: HttpMethod,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_body: Any = _NO_BODY,  # noqa: ANN401
        model: type[BaseModel] | None = None,
    ) -> Any:  # noqa: ANN401
        """Send a JSON request and return the decoded response.

        The body is validated into ``model`` when one is given.

        Raises:
            MeilisearchApiError: If a 2xx body is not JSON or does not match
                ``model``.
        """
        if params:
            path = f"{path}?{urlencode(params)}"
        if json_body is _NO_BODY:
            request = HttpRequest(method=method, path=path)
        else:
            request = HttpRequest.with_json(method, path, json_body)
        response = await self.execute(request)
        return decode_response(response, model)

    async def _get(self, path: str, **kwargs: Any) -> Any:  # noqa: ANN401
        return await self._request(HttpMethod.GET, path, **kwargs)

    async def _task_request(
        self,
        method: HttpMethod,
        path: str,
        **kwargs: Any,  # noqa: ANN401
    ) -> TaskInfo:
        """Send a mutating request and decode the enqueued task."""
        info: TaskInfo = await self._request(method, path, model=TaskInfo, **kwargs)
        self._logger.debug(
            "task_enqueued",
            task_uid=info.task_uid,
            type=info.type,
            index_uid=info.index_uid,
        )
        return info

    # -------------------------------------------------------------------------
    # Tasks
    # -------------------------------------------------------------------------

    async def get_task(self, task_uid: int) -> Task:
        """Fetch the current record of a task.

        Args:
            task_uid: The task uid.

        Returns:
            A fresh snapshot of the task.

        Raises:
            MeilisearchNotFoundError: If no task has this uid.
        """
        task: Task = await self._get(f"/tasks/{task_uid}", model=Task)
        return task

    async def get_tasks(self, query: TasksQuery | None = None) -> TasksResults:
        """List tasks, most recent first.

        Args:
            query: Optional filters and pagination.

        Returns:
            One page of tasks.
        """
        params = query.to_params() if query is not None else None
        page: TasksResults = await self._get(
            "/tasks", params=params, model=TasksResults
        )
        return page

    async def cancel_tasks(self, query: CancelTasksQuery) -> TaskInfo:
        """Cancel enqueued or processing tasks matching ``query``.

        Args:
            query: Filters selecting the tasks; at least one is required.

        Returns:
            The ``taskCancelation`` task.
        """
        params = _require_filters(query)
        return await self._task_request(
            HttpMethod.POST,
            "/tasks/cancel",
            params=params,
        )

    async def delete_tasks(self, query: DeleteTasksQuery) -> TaskInfo:
        """Delete finished tasks matching ``query`` from the task history.

        Args:
            query: Filters selecting the tasks; at least one is required.

        Returns:
            The ``taskDeletion`` task.
        """
        params = _require_filters(query)
        return await self._task_request(HttpMethod.DELETE, "/tasks", params=params)

    async def wait_for_task(
        self,
        task_uid: int,
        *,
        timeout_in_ms: float | None = None,
        interval_in_ms: float | None = None,
        abort: asyncio.Event | None = None,
    ) -> Task:
        """Wait until a task is succeeded, failed or canceled.

        Args:
            task_uid: The task uid.
            timeout_in_ms: Budget in milliseconds (default from config).
            interval_in_ms: Delay between fetches (default from config).
            abort: Optional event that stops the wait when set.

        Returns:
            The terminal task record.

        Raises:
            MeilisearchTimeoutError: If the task is not finished in time.
            TaskWaitAbortedError: If ``abort`` was set.
        """
        return await self._poller.wait(
            task_uid,
            timeout_in_ms=timeout_in_ms,
            interval_in_ms=interval_in_ms,
            abort=abort,
        )

    # -------------------------------------------------------------------------
    # Indexes
    # -------------------------------------------------------------------------

    def index(self, uid: str) -> Index:
        """Return a handle on an index without contacting the server.

        Args:
            uid: The index uid.

        Returns:
            The index handle.
        """
        return Index(self, uid)

    async def create_index(
        self,
        uid: str,
        *,
        primary_key: str | None = None,
    ) -> TaskInfo:
        """Create an index.

        Args:
            uid: The index uid.
            primary_key: Primary key attribute, inferred by the server if None.

        Returns:
            The ``indexCreation`` task.
        """
        return await self._task_request(
            HttpMethod.POST,
            "/indexes",
            json_body={"uid": uid, "primaryKey": primary_key},
        )

    async def delete_index(self, uid: str) -> TaskInfo:
        """Delete an index and all its documents.

        Args:
            uid: The index uid.

        Returns:
            The ``indexDeletion`` task.
        """
        return await self._task_request(HttpMethod.DELETE, f"/indexes/{quote(uid)}")

    # -------------------------------------------------------------------------
    # Stats and Health
    # -------------------------------------------------------------------------

    async def get_stats(self) -> Stats:
        """Get database size and per-index statistics.

        Returns:
            Instance-wide statistics.
        """
        stats: Stats = await self._get("/stats", model=Stats)
        return stats

    async def health(self) -> dict[str, Any]:
        """Get the raw health payload, e.g. ``{"status": "available"}``.

        Raises:
            MeilisearchApiError: If the payload is not a JSON object.
        """
        response = await self.execute(HttpRequest(HttpMethod.GET, "/health"))
        data = decode_response(response)
        if not isinstance(data, dict):
            raise _invalid_body(response, "expected a JSON object")
        return data

    async def is_healthy(self) -> bool:
        """Check if Meilisearch is reachable and available.

        Returns:
            True if healthy, False otherwise.
        """
        try:
            data = await self.health()
        except MeilisearchError:
            return False
        return data.get("status") == "available"


def _require_filters(query: CancelTasksQuery | DeleteTasksQuery) -> dict[str, str]:
    params = query.to_params()
    if not params:
        msg = f"{type(query).__name__} needs at least one filter"
        raise ValueError(msg)
    return params


def raise_for_status(response: HttpResponse) -> None:
    """Raise the matching :class:`MeilisearchApiError` for a non-2xx response.

    The server's structured error body (``message``, ``code``, ``type``,
    ``link``) is used when present; otherwise the message is built from the
    status code and reason phrase.

    Args:
        response: The response envelope.

    Raises:
        MeilisearchAuthenticationError: For 401/403 responses.
        MeilisearchNotFoundError: For 404 responses.
        MeilisearchRateLimitError: For 429 responses.
        MeilisearchServerError: For 5xx responses.
        MeilisearchApiError: For any other non-2xx response.
    """
    if response.is_success:
        return

    status = response.status_code
    payload: dict[str, Any] = {}
    with contextlib.suppress(ValueError):
        decoded = response.json()
        if isinstance(decoded, dict):
            payload = decoded

    message = payload.get("message") or (
        f"{status} {response.reason_phrase}".strip()
    )
    details: dict[str, Any] = {
        "status_code": status,
        "code": payload.get("code"),
        "error_type": payload.get("type"),
        "link": payload.get("link"),
        "response": response,
    }

    structlog.get_logger(__name__).debug(
        "api_error",
        status_code=status,
        code=details["code"],
    )

    if status in {401, 403}:
        raise MeilisearchAuthenticationError(message, **details)
    if status == 404:  # noqa: PLR2004
        raise MeilisearchNotFoundError(message, **details)
    if status == 429:  # noqa: PLR2004
        retry_after: float | None = None
        with contextlib.suppress(TypeError, ValueError):
            retry_after = float(response.header("Retry-After"))  # type: ignore[arg-type]
        raise MeilisearchRateLimitError(message, retry_after=retry_after, **details)
    if status >= 500:  # noqa: PLR2004
        raise MeilisearchServerError(message, **details)
    raise MeilisearchApiError(message, **details)


def _invalid_body(response: HttpResponse, reason: str) -> MeilisearchApiError:
    structlog.get_logger(__name__).debug(
        "invalid_response_body",
        status_code=response.status_code,
        reason=reason,
    )
    return MeilisearchApiError(
        f"Invalid response body: {reason}",
        status_code=response.status_code,
        response=response,
    )


def decode_response(
    response: HttpResponse,
    model: type[BaseModel] | None = None,
) -> Any:  # noqa: ANN401
    """Decode a 2xx JSON body, validating it into ``model`` when given.

    A body that is not JSON, or that does not match ``model``, is a
    protocol failure like any other malformed reply.

    Args:
        response: The response envelope.
        model: Optional pydantic model for the payload.

    Returns:
        The decoded value (None for an empty body), or the model instance.

    Raises:
        MeilisearchApiError: With kind ``protocol`` for an undecodable body.
    """
    try:
        data = response.json()
    except ValueError as exc:
        raise _invalid_body(response, str(exc)) from exc
    if model is None:
        return data
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise _invalid_body(response, str(exc)) from exc
