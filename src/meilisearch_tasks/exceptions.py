"""Error taxonomy for the Meilisearch client.

Every error raised by this package derives from :class:`MeilisearchError`
and carries an :class:`ErrorKind`, so callers can branch on the kind of
failure without walking the class hierarchy:

    ```python
    try:
        task = await client.wait_for_task(info.task_uid)
    except MeilisearchError as err:
        match err.kind:
            case ErrorKind.TRANSPORT:
                ...  # network unreachable, DNS failure, socket timeout
            case ErrorKind.PROTOCOL:
                ...  # non-2xx response from the server
            case ErrorKind.TIMEOUT:
                ...  # task still enqueued/processing when the budget ran out
    ```
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from meilisearch_tasks.http.envelope import HttpResponse


__all__ = [
    "ErrorKind",
    "MeilisearchApiError",
    "MeilisearchAuthenticationError",
    "MeilisearchCommunicationError",
    "MeilisearchError",
    "MeilisearchNotFoundError",
    "MeilisearchRateLimitError",
    "MeilisearchServerError",
    "MeilisearchTimeoutError",
    "TaskWaitAbortedError",
]


class ErrorKind(StrEnum):
    """Failure categories.

    Attributes:
        TRANSPORT: The request never produced an HTTP response.
        PROTOCOL: The server answered with a non-2xx status code.
        TIMEOUT: A task wait exhausted its time budget.
        ABORTED: A task wait was stopped by the caller's abort signal.
    """

    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    TIMEOUT = "timeout"
    ABORTED = "aborted"


class MeilisearchError(Exception):
    """Base exception for all Meilisearch client errors.

    Attributes:
        message: Human-readable error description.
        kind: Category of the failure.
    """

    kind: ErrorKind = ErrorKind.PROTOCOL

    def __init__(self, message: str) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)
        self.message = message


class MeilisearchCommunicationError(MeilisearchError):
    """Raised when a request cannot reach Meilisearch.

    This covers refused connections, DNS failures and socket-level
    timeouts. The request may or may not have been received by the server.
    """

    kind = ErrorKind.TRANSPORT

    def __init__(
        self,
        message: str = "Failed to connect to Meilisearch",
        *,
        cause: Exception | None = None,
    ) -> None:
        """Initialize the communication error.

        Args:
            message: Human-readable error description.
            cause: The underlying exception that caused this error.
        """
        super().__init__(message)
        self.__cause__ = cause


class MeilisearchApiError(MeilisearchError):
    """Raised for a well-formed HTTP response with a non-2xx status.

    Attributes:
        status_code: HTTP status code returned by the server.
        code: Meilisearch error code (e.g. ``index_not_found``), if provided.
        error_type: Meilisearch error type (e.g. ``invalid_request``).
        link: Documentation link for the error code.
        response: The response envelope that caused this error.
    """

    kind = ErrorKind.PROTOCOL

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        code: str | None = None,
        error_type: str | None = None,
        link: str | None = None,
        response: HttpResponse | None = None,
    ) -> None:
        """Initialize the API error.

        Args:
            message: Human-readable error description.
            status_code: HTTP status code.
            code: Meilisearch error code.
            error_type: Meilisearch error type.
            link: Documentation link.
            response: The response envelope.
        """
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.error_type = error_type
        self.link = link
        self.response = response

    def __str__(self) -> str:
        """Return string representation with status code and error code."""
        if self.code:
            return f"{self.message} (status={self.status_code}, code={self.code})"
        return f"{self.message} (status={self.status_code})"


class MeilisearchAuthenticationError(MeilisearchApiError):
    """Raised for authentication failures (401/403).

    The API key is missing, invalid, or lacks the required actions.
    """


class MeilisearchNotFoundError(MeilisearchApiError):
    """Raised when a resource is not found (404)."""


class MeilisearchRateLimitError(MeilisearchApiError):
    """Raised when the server rate limits the client (429).

    Attributes:
        retry_after: Seconds to wait before retrying, if provided.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 429,
        retry_after: float | None = None,
        code: str | None = None,
        error_type: str | None = None,
        link: str | None = None,
        response: HttpResponse | None = None,
    ) -> None:
        """Initialize the rate limit error.

        Args:
            message: Human-readable error description.
            status_code: HTTP status code.
            retry_after: Seconds to wait before retrying.
            code: Meilisearch error code.
            error_type: Meilisearch error type.
            link: Documentation link.
            response: The response envelope.
        """
        super().__init__(
            message,
            status_code=status_code,
            code=code,
            error_type=error_type,
            link=link,
            response=response,
        )
        self.retry_after = retry_after


class MeilisearchServerError(MeilisearchApiError):
    """Raised for server errors (5xx)."""


class MeilisearchTimeoutError(MeilisearchError, TimeoutError):
    """Raised when a task is still non-terminal after the wait budget.

    This is never raised for a task that finished with status ``failed``
    or ``canceled``; those are returned as ordinary records.

    Attributes:
        task_uid: The task that was being waited on.
        timeout_in_ms: The configured budget.
        elapsed_ms: Time actually spent waiting.
        last_status: Last status observed, or None if no fetch happened.
    """

    kind = ErrorKind.TIMEOUT

    def __init__(
        self,
        task_uid: int,
        timeout_in_ms: float,
        *,
        elapsed_ms: float,
        last_status: str | None = None,
    ) -> None:
        """Initialize the timeout error.

        Args:
            task_uid: The task uid.
            timeout_in_ms: The configured budget in milliseconds.
            elapsed_ms: Elapsed wall-clock time in milliseconds.
            last_status: Last observed task status.
        """
        message = f"Task {task_uid} did not complete within {timeout_in_ms}ms"
        super().__init__(message)
        self.task_uid = task_uid
        self.timeout_in_ms = timeout_in_ms
        self.elapsed_ms = elapsed_ms
        self.last_status = last_status


class TaskWaitAbortedError(MeilisearchError):
    """Raised when a task wait is stopped through its abort signal.

    Attributes:
        task_uid: The task that was being waited on.
    """

    kind = ErrorKind.ABORTED

    def __init__(self, task_uid: int) -> None:
        """Initialize the aborted error.

        Args:
            task_uid: The task uid.
        """
        super().__init__(f"Wait for task {task_uid} was aborted")
        self.task_uid = task_uid
