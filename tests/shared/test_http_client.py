"""Unit tests for the shared HTTP client wrapper."""

from __future__ import annotations

import httpx
import pytest

from packages.lakeblob_shared.http import HttpClient, HttpRequestError


def test_http_client_returns_failure_statuses_without_raising() -> None:
    """Every status is handed back to the caller for classification."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"missing": True}, request=request)

    with HttpClient(
        base_url="https://example.test",
        transport=httpx.MockTransport(handler),
    ) as client:
        response = client.request("GET", "/thing")

    assert response.status_code == 404
    assert response.json() == {"missing": True}


def test_http_client_maps_transport_failure_to_typed_error() -> None:
    """HttpClient should raise HttpRequestError on transport failures."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection failed", request=request)

    client = HttpClient(
        base_url="https://example.test",
        transport=httpx.MockTransport(handler),
    )
    try:
        with pytest.raises(HttpRequestError) as exc_info:
            client.request("GET", "/health")
    finally:
        client.close()

    error = exc_info.value
    assert error.method == "GET"
    assert error.url == "https://example.test/health"
    assert error.retryable is True
    assert isinstance(error.cause, httpx.ConnectError)


def test_http_client_maps_timeout_to_retryable_request_error() -> None:
    """Deadline expiry is a transport failure, not a distinct kind."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    client = HttpClient(
        base_url="https://example.test",
        transport=httpx.MockTransport(handler),
    )
    try:
        with pytest.raises(HttpRequestError) as exc_info:
            client.request("POST", "/slow", content=b"x")
    finally:
        client.close()

    assert exc_info.value.retryable is True
    assert isinstance(exc_info.value.cause, httpx.TimeoutException)


def test_http_client_stream_leaves_body_unread() -> None:
    """Streamed responses are consumed incrementally by the caller."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"abcdef", request=request)

    client = HttpClient(
        base_url="https://example.test",
        transport=httpx.MockTransport(handler),
    )
    try:
        response = client.request("GET", "/blob", stream=True)
        try:
            assert b"".join(response.iter_bytes()) == b"abcdef"
        finally:
            response.close()
    finally:
        client.close()


def test_http_client_applies_auth_per_request() -> None:
    """An injected httpx auth flow stamps each outgoing request."""
    seen: list[str] = []

    class _HeaderAuth(httpx.Auth):
        def auth_flow(self, request: httpx.Request):  # type: ignore[no-untyped-def]
            request.headers["Authorization"] = "Bearer abc"
            yield request

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers["Authorization"])
        return httpx.Response(200, request=request)

    client = HttpClient(
        base_url="https://example.test",
        auth=_HeaderAuth(),
        transport=httpx.MockTransport(handler),
    )
    try:
        client.request("PUT", "/a", content=b"")
        client.request("DELETE", "/a")
    finally:
        client.close()

    assert seen == ["Bearer abc", "Bearer abc"]


def test_http_client_does_not_close_injected_client() -> None:
    """Only clients built by the wrapper are closed by it."""
    injected = httpx.Client(
        transport=httpx.MockTransport(lambda request: httpx.Response(200))
    )
    wrapper = HttpClient(client=injected)

    wrapper.close()

    assert injected.is_closed is False
    injected.close()
