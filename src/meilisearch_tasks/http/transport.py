"""Connection-pooled HTTP transport for the Meilisearch API."""

from __future__ import annotations

from typing import Self

import httpx
import structlog

from meilisearch_tasks._version import qualified_version
from meilisearch_tasks.config.schema import MeilisearchConfig
from meilisearch_tasks.exceptions import MeilisearchCommunicationError
from meilisearch_tasks.http.envelope import HttpMethod, HttpRequest, HttpResponse


__all__ = ["HttpTransport", "build_user_agent"]


def build_user_agent(client_agents: list[str] | tuple[str, ...] = ()) -> str:
    """Build the ``User-Agent`` value sent with every request.

    The library identifier always comes first; client agents are appended
    after it, separated by ``;``.

    Args:
        client_agents: Extra client identifiers, e.g. ``["MyApp v1.44"]``.

    Returns:
        The header value.
    """
    return ";".join([qualified_version(), *client_agents])


class HttpTransport:
    """Executes request envelopes over a pooled ``httpx.AsyncClient``.

    Each call makes exactly one network request: there is no retry and no
    caching at this layer. Non-2xx responses are returned like any other
    response; only failures that prevent a response from arriving raise
    :class:`MeilisearchCommunicationError`.

    Example:
        ```python
        async with HttpTransport(MeilisearchConfig(url="http://localhost:7700")) as t:
            response = await t.get(HttpRequest(HttpMethod.GET, "/health"))
            print(response.status_code, response.body)
        ```
    """

    def __init__(
        self,
        config: MeilisearchConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            config: Connection configuration.
            transport: Optional custom httpx transport for testing or
                advanced configuration.
        """
        self.config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._logger = structlog.get_logger(__name__)

    @property
    def default_headers(self) -> dict[str, str]:
        """Headers sent with every request unless the envelope overrides them."""
        headers = {"User-Agent": build_user_agent(self.config.client_agents)}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    async def __aenter__(self) -> Self:
        """Enter async context and create HTTP client."""
        self._ensure_client()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit async context and close HTTP client."""
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure the pooled HTTP client is initialized."""
        if self._client is None or self._client.is_closed:
            limits = httpx.Limits(max_connections=self.config.max_connections)
            transport = self._transport or httpx.AsyncHTTPTransport(
                retries=0,
                limits=limits,
            )
            self._client = httpx.AsyncClient(
                base_url=self.config.url,
                headers=self.default_headers,
                timeout=httpx.Timeout(self.config.request_timeout_seconds),
                transport=transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release pooled connections."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def _merge_headers(self, request: HttpRequest) -> httpx.Headers:
        # Header names are case-insensitive: an envelope header replaces the
        # default of the same name whatever its spelling.
        headers = httpx.Headers(self.default_headers)
        headers.update(request.headers)
        if request.body is not None and "content-type" not in headers:
            headers["Content-Type"] = "application/json"
        return headers

    async def execute(self, request: HttpRequest) -> HttpResponse:
        """Send one request and return the server's response.

        Args:
            request: The request envelope.

        Returns:
            The response envelope. Its status code is whatever the server
            sent; an absent body is returned as ``""``.

        Raises:
            MeilisearchCommunicationError: If no response was received
                (connection refused, DNS failure, socket timeout).
        """
        client = self._ensure_client()
        log = self._logger.bind(method=request.method.value, path=request.path)
        log.debug("http_request", has_body=request.body is not None)

        try:
            response = await client.request(
                request.method.value,
                request.path,
                content=request.body,
                headers=self._merge_headers(request),
            )
        except httpx.TimeoutException as exc:
            log.warning("http_timeout", error=str(exc))
            raise MeilisearchCommunicationError(
                message="Request timed out",
                cause=exc,
            ) from exc
        except httpx.TransportError as exc:
            log.warning("http_transport_error", error=str(exc))
            raise MeilisearchCommunicationError(cause=exc) from exc

        log.debug(
            "http_response",
            status_code=response.status_code,
            elapsed_ms=response.elapsed.total_seconds() * 1000,
        )
        return HttpResponse(
            status_code=response.status_code,
            body=response.text or "",
            headers=dict(response.headers),
            reason_phrase=response.reason_phrase,
        )

    async def get(self, request: HttpRequest) -> HttpResponse:
        """Execute ``request`` as a GET."""
        return await self.execute(_with_method(request, HttpMethod.GET))

    async def post(self, request: HttpRequest) -> HttpResponse:
        """Execute ``request`` as a POST."""
        return await self.execute(_with_method(request, HttpMethod.POST))

    async def put(self, request: HttpRequest) -> HttpResponse:
        """Execute ``request`` as a PUT."""
        return await self.execute(_with_method(request, HttpMethod.PUT))

    async def patch(self, request: HttpRequest) -> HttpResponse:
        """Execute ``request`` as a PATCH."""
        return await self.execute(_with_method(request, HttpMethod.PATCH))

    async def delete(self, request: HttpRequest) -> HttpResponse:
        """Execute ``request`` as a DELETE."""
        return await self.execute(_with_method(request, HttpMethod.DELETE))


def _with_method(request: HttpRequest, method: HttpMethod) -> HttpRequest:
    if request.method is method:
        return request
    return HttpRequest(
        method=method,
        path=request.path,
        headers=request.headers,
        body=request.body,
    )
