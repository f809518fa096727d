"""Request and response envelopes exchanged with the HTTP transport.

The envelopes are plain value types: they know nothing about httpx, so the
resource client can build requests and inspect responses without touching
the underlying HTTP library.
"""

from __future__ import annotations

import json
from collections.abc import Mapping  # noqa: TC003 - needed at runtime for dataclass
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any


__all__ = [
    "HttpMethod",
    "HttpRequest",
    "HttpResponse",
]


class HttpMethod(StrEnum):
    """HTTP verbs used by the Meilisearch API."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


def _freeze_headers(headers: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(headers or {}))


def _header_items(headers: Mapping[str, str]) -> tuple[tuple[str, str], ...]:
    return tuple(sorted(headers.items()))


@dataclass(frozen=True, slots=True)
class HttpRequest:
    """An outbound request.

    Attributes:
        method: HTTP verb.
        path: Resource path relative to the configured host, starting
            with ``/`` (may include a query string).
        headers: Extra headers, merged over the transport defaults.
        body: Pre-serialized payload, sent as-is. None for no body.

    Requests are immutable and hashable; two requests with the same fields
    compare and hash equal.
    """

    method: HttpMethod
    path: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: str | bytes | None = None

    def __post_init__(self) -> None:
        """Validate the path and freeze the header mapping."""
        if not self.path.startswith("/") or "://" in self.path:
            msg = f"Request path must be a relative resource path: {self.path!r}"
            raise ValueError(msg)
        object.__setattr__(self, "method", HttpMethod(self.method))
        object.__setattr__(self, "headers", _freeze_headers(self.headers))

    def __hash__(self) -> int:
        return hash((self.method, self.path, _header_items(self.headers), self.body))

    @classmethod
    def with_json(
        cls,
        method: HttpMethod,
        path: str,
        payload: Any,  # noqa: ANN401
        *,
        headers: Mapping[str, str] | None = None,
    ) -> HttpRequest:
        """Build a request whose body is ``payload`` serialized as JSON.

        Args:
            method: HTTP verb.
            path: Resource path.
            payload: Any JSON-serializable value.
            headers: Extra headers. A ``Content-Type`` given here, in any
                spelling, replaces the JSON default.

        Returns:
            The request envelope.
        """
        merged = dict(headers or {})
        if not any(key.lower() == "content-type" for key in merged):
            merged["Content-Type"] = "application/json"
        return cls(
            method=method,
            path=path,
            headers=merged,
            body=json.dumps(payload),
        )


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """An inbound response.

    Attributes:
        status_code: Status code exactly as sent by the server.
        body: Response payload. An empty body is ``""``, never None.
        headers: Response headers.
        reason_phrase: Reason phrase for the status code.

    Like requests, responses are immutable and hashable.
    """

    status_code: int
    body: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    reason_phrase: str = ""

    def __post_init__(self) -> None:
        """Normalize a missing body and freeze the header mapping."""
        if self.body is None:
            object.__setattr__(self, "body", "")
        object.__setattr__(self, "headers", _freeze_headers(self.headers))

    def __hash__(self) -> int:
        return hash(
            (
                self.status_code,
                self.body,
                _header_items(self.headers),
                self.reason_phrase,
            )
        )

    @property
    def is_success(self) -> bool:
        """Whether the status code is in the 2xx range."""
        return 200 <= self.status_code < 300  # noqa: PLR2004

    def header(self, name: str) -> str | None:
        """Look up a header value case-insensitively.

        Args:
            name: Header name.

        Returns:
            The header value, or None if absent.
        """
        for key, value in self.headers.items():
            if key.lower() == name.lower():
                return value
        return None

    @property
    def content_type(self) -> str | None:
        """Value of the Content-Type header."""
        return self.header("Content-Type")

    def json(self) -> Any:  # noqa: ANN401
        """Decode the body as JSON.

        Returns:
            The decoded value, or None for an empty body.
        """
        if not self.body:
            return None
        return json.loads(self.body)
