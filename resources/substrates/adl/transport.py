"""HTTP transport for the data-lake filesystem REST API."""

from __future__ import annotations

import uuid
from typing import Generator, Iterator, Protocol
from urllib.parse import quote

import httpx

from packages.lakeblob_shared.blob import BlobStream
from packages.lakeblob_shared.errors import TransientError
from packages.lakeblob_shared.http import HttpClient, HttpRequestError
from packages.lakeblob_shared.logging import fields, get_logger
from resources.substrates.adl.config import AdlSettings
from resources.substrates.adl.remote import (
    REQUEST_ID_HEADER,
    RemoteRequest,
    RemoteResponse,
)

_LOGGER = get_logger(__name__)


class CredentialProvider(Protocol):
    """Supplies the ``Authorization`` header value for each request.

    Providers own token acquisition and refresh; the transport asks again on
    every call.
    """

    def authorization(self) -> str:
        """Return the current ``Authorization`` header value."""


class _CredentialAuth(httpx.Auth):
    """httpx auth flow that stamps the provider's header on each request."""

    def __init__(self, credentials: CredentialProvider) -> None:
        self._credentials = credentials

    def auth_flow(
        self, request: httpx.Request
    ) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = self._credentials.authorization()
        yield request


class HttpAdlTransport:
    """``AdlTransport`` over one shared ``HttpClient``.

    Every HTTP status is returned to the caller as a ``RemoteResponse``;
    ``HttpRequestError`` escapes only when no complete response was received.
    A streamed body that fails mid-read raises ``TransientError``.
    """

    def __init__(
        self,
        *,
        settings: AdlSettings,
        credentials: CredentialProvider,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._client = HttpClient(
            base_url=settings.base_url(),
            timeout_seconds=settings.timeout_seconds,
            auth=_CredentialAuth(credentials),
            transport=transport,
        )

    def close(self) -> None:
        """Release pooled connections."""
        self._client.close()

    def send(self, request: RemoteRequest) -> RemoteResponse:
        """Issue one remote call tagged with a fresh request id."""
        request_id = str(uuid.uuid4())
        params = {"op": request.op.value, **request.params}
        params["api-version"] = self._settings.api_version
        url = "/" + quote(request.path.lstrip("/"), safe="/")
        kwargs: dict[str, object] = {
            "params": params,
            "headers": {REQUEST_ID_HEADER: request_id},
        }
        if request.content is not None:
            kwargs["content"] = request.content
        elif request.op.method in ("PUT", "POST"):
            kwargs["content"] = b""

        _LOGGER.debug(
            "adl remote call",
            extra={
                fields.REMOTE_OP: request.op.value,
                fields.REMOTE_URL: url,
                fields.REQUEST_ID: request_id,
            },
        )
        response = self._client.request(
            request.op.method,
            url,
            stream=request.stream,
            **kwargs,
        )
        response_id = response.headers.get(REQUEST_ID_HEADER)
        _LOGGER.debug(
            "adl remote response",
            extra={
                fields.REMOTE_OP: request.op.value,
                fields.REQUEST_ID: request_id,
                fields.RESPONSE_ID: response_id,
                fields.STATUS_CODE: response.status_code,
            },
        )

        if request.stream and response.is_success:
            return RemoteResponse(
                op=request.op,
                status_code=response.status_code,
                headers=_headers(response),
                url=str(response.request.url),
                request_id=request_id,
                response_id=response_id,
                stream=BlobStream(_body_chunks(response), on_close=response.close),
            )
        if request.stream:
            _read_failure_body(response)
        return RemoteResponse(
            op=request.op,
            status_code=response.status_code,
            body=response.content,
            headers=_headers(response),
            url=str(response.request.url),
            request_id=request_id,
            response_id=response_id,
        )


def _headers(response: httpx.Response) -> dict[str, str]:
    """Flatten response headers, keeping the last value of repeated names."""
    flattened: dict[str, str] = {}
    for name, value in response.headers.multi_items():
        flattened[name.lower()] = value
    return flattened


def _read_failure_body(response: httpx.Response) -> None:
    """Buffer the body of a failed streamed call and release the connection."""
    request = response.request
    try:
        response.read()
    except httpx.RequestError as exc:
        raise HttpRequestError(
            f"HTTP body read failed for {request.method} {request.url}",
            method=request.method,
            url=str(request.url),
            cause=exc,
        ) from exc
    finally:
        response.close()


def _body_chunks(response: httpx.Response) -> Iterator[bytes]:
    """Yield a streamed body; transport failures mid-read are transient."""
    try:
        yield from response.iter_bytes()
    except httpx.RequestError as exc:
        raise TransientError(
            f"reading {response.request.url} failed: {exc}", cause=exc
        ) from exc
