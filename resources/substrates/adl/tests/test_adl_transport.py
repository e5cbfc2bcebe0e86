"""Unit tests for the data-lake HTTP transport."""

from __future__ import annotations

import errno
import uuid
from collections.abc import Iterator

import httpx
import pytest

from packages.lakeblob_shared.errors import TransientError, exception_to_errno
from packages.lakeblob_shared.http import HttpRequestError
from resources.substrates.adl.adl_substrate import AdlBlobBackend
from resources.substrates.adl.config import AdlSettings
from resources.substrates.adl.remote import RemoteOp, RemoteRequest, format_permission
from resources.substrates.adl.transport import HttpAdlTransport


class _StaticCredentials:
    def __init__(self) -> None:
        self.calls = 0

    def authorization(self) -> str:
        self.calls += 1
        return f"Bearer token-{self.calls}"


def _transport(
    handler: object, credentials: _StaticCredentials | None = None
) -> HttpAdlTransport:
    settings = AdlSettings(endpoint="adl://acct.azuredatalakestore.net")
    return HttpAdlTransport(
        settings=settings,
        credentials=credentials or _StaticCredentials(),
        transport=httpx.MockTransport(handler),  # type: ignore[arg-type]
    )


def _backend(handler: object) -> tuple[AdlBlobBackend, HttpAdlTransport]:
    transport = _transport(handler)
    settings = AdlSettings(endpoint="adl://acct.azuredatalakestore.net")
    return AdlBlobBackend(settings=settings, transport=transport), transport


def _stalled_body(first: bytes = b"") -> Iterator[bytes]:
    if first:
        yield first
    raise httpx.ReadTimeout("deadline exceeded")


def test_send_builds_webhdfs_url_with_operation_and_api_version() -> None:
    """Each call targets the account host with op, api-version and a request id."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={"FileStatuses": {"FileStatus": []}},
            headers={"x-ms-request-id": "server-id"},
        )

    transport = _transport(handler)
    try:
        response = transport.send(
            RemoteRequest(op=RemoteOp.LISTSTATUS, path="root/a b")
        )
    finally:
        transport.close()

    request = seen[0]
    assert request.method == "GET"
    assert request.url.host == "acct.azuredatalakestore.net"
    assert request.url.path == "/webhdfs/v1/root/a b"
    assert request.url.params["op"] == "LISTSTATUS"
    assert request.url.params["api-version"] == "2016-11-01"
    assert uuid.UUID(request.headers["x-ms-request-id"])
    assert request.headers["authorization"] == "Bearer token-1"
    assert response.request_id == request.headers["x-ms-request-id"]
    assert response.response_id == "server-id"
    assert response.status_code == 200


def test_send_uses_fresh_request_id_and_credentials_per_call() -> None:
    """Request ids are never reused and credentials are asked for every call."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"boolean": True})

    credentials = _StaticCredentials()
    transport = _transport(handler, credentials)
    try:
        for _ in range(2):
            transport.send(RemoteRequest(op=RemoteOp.MKDIRS, path="d"))
    finally:
        transport.close()

    assert seen[0].headers["x-ms-request-id"] != seen[1].headers["x-ms-request-id"]
    assert [request.headers["authorization"] for request in seen] == [
        "Bearer token-1",
        "Bearer token-2",
    ]
    assert seen[0].method == "PUT"


def test_send_returns_failure_statuses_without_raising() -> None:
    """HTTP failures are handed back for classification."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"RemoteException": {"exception": "X"}})

    transport = _transport(handler)
    try:
        response = transport.send(RemoteRequest(op=RemoteOp.DELETE, path="f"))
    finally:
        transport.close()

    assert response.status_code == 404
    assert response.is_success is False
    assert b"RemoteException" in response.body


def test_send_streams_successful_reads() -> None:
    """Streamed reads expose the body incrementally and keep the last content type."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            content=b"payload",
            headers=[
                ("Content-Type", "text/plain"),
                ("Content-Type", "application/octet-stream"),
            ],
        )

    transport = _transport(handler)
    try:
        response = transport.send(
            RemoteRequest(
                op=RemoteOp.OPEN, path="f", params={"read": "true"}, stream=True
            )
        )
        assert response.stream is not None
        with response.stream as stream:
            assert stream.read() == b"payload"
        assert response.stream.closed is True
    finally:
        transport.close()

    assert response.headers["content-type"] == "application/octet-stream"


def test_send_reads_body_of_failed_streamed_call() -> None:
    """A failed streamed read is buffered like any other failure."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, content=b"denied")

    transport = _transport(handler)
    try:
        response = transport.send(
            RemoteRequest(op=RemoteOp.OPEN, path="f", stream=True)
        )
    finally:
        transport.close()

    assert response.stream is None
    assert response.body == b"denied"


def test_send_posts_empty_body_for_zero_length_append() -> None:
    """Appends without content still send an explicit empty body."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200)

    transport = _transport(handler)
    try:
        transport.send(
            RemoteRequest(op=RemoteOp.APPEND, path="f", params={"syncFlag": "CLOSE"})
        )
    finally:
        transport.close()

    assert seen[0].method == "POST"
    assert seen[0].content == b""
    assert seen[0].url.params["syncFlag"] == "CLOSE"


def test_send_raises_request_error_when_no_response() -> None:
    """Connection failures escape as retryable request errors."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    transport = _transport(handler)
    try:
        with pytest.raises(HttpRequestError) as exc_info:
            transport.send(RemoteRequest(op=RemoteOp.GETFILESTATUS, path="f"))
    finally:
        transport.close()

    assert exc_info.value.retryable is True


def test_format_permission_renders_octal() -> None:
    """Permission bits travel as zero-prefixed octal strings."""
    assert format_permission(0o644) == "0644"
    assert format_permission(0o755) == "0755"


def test_timeout_reading_failed_open_body_is_transient() -> None:
    """A deadline hit while buffering an error body is classified as transient."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, content=_stalled_body())

    backend, transport = _backend(handler)
    try:
        with pytest.raises(TransientError) as exc_info:
            backend.get_object(key="f")
    finally:
        transport.close()

    assert exception_to_errno(exc_info.value) == errno.EAGAIN


def test_timeout_reading_successful_open_body_is_transient() -> None:
    """A deadline hit mid-body surfaces from the stream as a transient error."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=_stalled_body(b"partial"))

    backend, transport = _backend(handler)
    try:
        result = backend.get_object(key="f")
        with result.body as body:
            with pytest.raises(TransientError) as exc_info:
                body.read()
    finally:
        transport.close()

    assert isinstance(exc_info.value.cause, httpx.ReadTimeout)
    assert result.body.closed is True
