"""Synchronous HTTP client shared by remote blob backends."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from .errors import HttpRequestError


class HttpClient:
    """One pooled ``httpx.Client`` with typed transport failures.

    The pool is safe to share between threads, so a backend keeps a single
    instance for all of its remote calls. Every HTTP status is returned to
    the caller, whose own classifier decides what counts as a failure.
    """

    def __init__(
        self,
        *,
        base_url: str = "",
        timeout_seconds: float = 10.0,
        headers: Mapping[str, str] | None = None,
        auth: httpx.Auth | None = None,
        transport: httpx.BaseTransport | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        if client is not None:
            self._client = client
            self._owned = False
            return
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
            headers=dict(headers or {}),
            auth=auth,
            transport=transport,
        )
        self._owned = True

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def close(self) -> None:
        """Release the connection pool unless it was injected by the caller."""
        if self._owned:
            self._client.close()

    def request(
        self,
        method: str,
        url: str,
        *,
        stream: bool = False,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send one request and return the response whatever its status.

        Transport failures, timeouts included, raise ``HttpRequestError``. A
        streamed response is returned unread and the caller must close it.
        """
        outgoing = self._client.build_request(method, url, **kwargs)
        try:
            return self._client.send(outgoing, stream=stream)
        except httpx.RequestError as exc:
            raise HttpRequestError(
                f"HTTP request failed for {outgoing.method} {outgoing.url}",
                method=outgoing.method,
                url=str(outgoing.url),
                cause=exc,
            ) from exc
