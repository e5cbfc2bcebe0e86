"""Typed errors for the shared HTTP client wrapper."""

from __future__ import annotations


class HttpError(Exception):
    """Base error type for shared HTTP helper failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class HttpRequestError(HttpError):
    """No response was received: connection failure or deadline exceeded."""

    def __init__(
        self,
        message: str,
        *,
        method: str,
        url: str,
        retryable: bool = True,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.url = url
        self.retryable = retryable
        self.cause = cause
