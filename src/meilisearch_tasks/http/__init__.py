"""HTTP transport layer.

Request and response envelopes plus the pooled transport that executes
them. The resource client builds envelopes and never calls httpx itself.
"""

from __future__ import annotations

from meilisearch_tasks.http.envelope import HttpMethod, HttpRequest, HttpResponse
from meilisearch_tasks.http.transport import HttpTransport, build_user_agent


__all__ = [
    "HttpMethod",
    "HttpRequest",
    "HttpResponse",
    "HttpTransport",
    "build_user_agent",
]
