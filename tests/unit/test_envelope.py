"""Unit tests for the HTTP request/response envelopes."""

from __future__ import annotations

import pytest

from meilisearch_tasks.http import HttpMethod, HttpRequest, HttpResponse


class TestHttpRequest:
    """Tests for HttpRequest."""

    def test_defaults(self) -> None:
        """Test a request without headers or body."""
        request = HttpRequest(HttpMethod.GET, "/tasks/1")

        assert request.method is HttpMethod.GET
        assert request.path == "/tasks/1"
        assert dict(request.headers) == {}
        assert request.body is None

    def test_method_string_is_coerced(self) -> None:
        """Test that a plain string verb becomes an HttpMethod."""
        request = HttpRequest("PATCH", "/indexes/movies/settings")  # type: ignore[arg-type]

        assert request.method is HttpMethod.PATCH

    @pytest.mark.parametrize(
        "path",
        ["tasks", "http://evil.test/tasks", "/redirect?to=http://evil.test", ""],
    )
    def test_rejects_non_relative_path(self, path: str) -> None:
        """Test that absolute URLs and paths without a leading slash fail."""
        with pytest.raises(ValueError, match="relative resource path"):
            HttpRequest(HttpMethod.GET, path)

    def test_headers_are_read_only(self) -> None:
        """Test that the header mapping of a request cannot be mutated."""
        source = {"X-Trace": "abc"}
        request = HttpRequest(HttpMethod.GET, "/health", headers=source)
        source["X-Trace"] = "changed"

        assert request.headers["X-Trace"] == "abc"
        with pytest.raises(TypeError):
            request.headers["X-Trace"] = "nope"  # type: ignore[index]

    def test_with_json(self) -> None:
        """Test building a JSON request."""
        request = HttpRequest.with_json(
            HttpMethod.POST,
            "/indexes",
            {"uid": "movies", "primaryKey": None},
        )

        assert request.body == '{"uid": "movies", "primaryKey": null}'
        assert request.headers["Content-Type"] == "application/json"

    def test_with_json_null_payload(self) -> None:
        """Test that a None payload is sent as a JSON null."""
        request = HttpRequest.with_json(HttpMethod.PUT, "/x/stop-words", None)

        assert request.body == "null"

    @pytest.mark.parametrize("name", ["content-type", "CONTENT-TYPE", "Content-Type"])
    def test_with_json_keeps_caller_content_type(self, name: str) -> None:
        """Test that a caller content type in any spelling replaces the default."""
        request = HttpRequest.with_json(
            HttpMethod.POST,
            "/indexes/movies/documents",
            [{"id": 1}],
            headers={name: "application/x-ndjson"},
        )

        assert dict(request.headers) == {name: "application/x-ndjson"}

    def test_hashable(self) -> None:
        """Test that equal requests hash equal and can be used in sets."""
        first = HttpRequest(HttpMethod.GET, "/tasks/1", headers={"A": "1", "B": "2"})
        second = HttpRequest(HttpMethod.GET, "/tasks/1", headers={"B": "2", "A": "1"})
        other = HttpRequest(HttpMethod.GET, "/tasks/2")

        assert first == second
        assert hash(first) == hash(second)
        assert {first, second, other} == {first, other}


class TestHttpResponse:
    """Tests for HttpResponse."""

    def test_none_body_becomes_empty(self) -> None:
        """Test that a missing body is normalized to an empty string."""
        response = HttpResponse(204, None)  # type: ignore[arg-type]

        assert response.body == ""
        assert response.json() is None

    @pytest.mark.parametrize(
        ("status_code", "expected"),
        [(200, True), (202, True), (299, True), (199, False), (301, False), (404, False)],
    )
    def test_is_success(self, status_code: int, expected: bool) -> None:  # noqa: FBT001
        """Test the 2xx range check."""
        assert HttpResponse(status_code).is_success is expected

    def test_header_lookup_is_case_insensitive(self) -> None:
        """Test header() and content_type."""
        response = HttpResponse(
            200,
            "{}",
            headers={"content-type": "application/json", "Retry-After": "3"},
        )

        assert response.content_type == "application/json"
        assert response.header("retry-after") == "3"
        assert response.header("X-Missing") is None

    def test_json(self) -> None:
        """Test decoding a JSON body."""
        response = HttpResponse(200, '{"status": "available"}')

        assert response.json() == {"status": "available"}

    def test_hashable(self) -> None:
        """Test that equal responses hash equal and can be used as dict keys."""
        first = HttpResponse(200, "{}", headers={"Content-Type": "application/json"})
        second = HttpResponse(200, "{}", headers={"Content-Type": "application/json"})

        assert hash(first) == hash(second)
        assert {first: "seen"}[second] == "seen"
        assert first != HttpResponse(202, "{}")
