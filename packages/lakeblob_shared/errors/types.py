"""Canonical error taxonomy for blob storage backends.

Every backend surfaces failures as one of the exceptions below so consumers
can branch on a small, stable set of outcomes regardless of the remote
system's native error format.
"""

from __future__ import annotations

import errno as errno_codes
from enum import Enum
from typing import Any

from . import codes


class ErrorCategory(str, Enum):
    """High-level error categories shared across backends."""

    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    UNSUPPORTED = "unsupported"
    POLICY = "policy"
    DEPENDENCY = "dependency"
    INTERNAL = "internal"


class BlobStoreError(Exception):
    """Base exception for blob storage backend failures."""

    code: str = codes.INTERNAL_ERROR
    category: ErrorCategory = ErrorCategory.INTERNAL
    errno: int = errno_codes.EIO
    retryable: bool = False

    def __init__(self, message: str = "", *, key: str | None = None) -> None:
        super().__init__(message or self.code.lower().replace("_", " "))
        self.message = message
        self.key = key


class NotFoundError(BlobStoreError):
    """The addressed object, directory or container does not exist."""

    code = codes.NOT_FOUND
    category = ErrorCategory.NOT_FOUND
    errno = errno_codes.ENOENT


class AlreadyExistsError(BlobStoreError):
    """The object or directory to create already exists."""

    code = codes.ALREADY_EXISTS
    category = ErrorCategory.CONFLICT
    errno = errno_codes.EEXIST


class InvalidArgumentError(BlobStoreError):
    """The request was rejected as malformed or unrecoverable."""

    code = codes.INVALID_ARGUMENT
    category = ErrorCategory.VALIDATION
    errno = errno_codes.EINVAL


class NotSupportedError(BlobStoreError):
    """The backend has no way to perform the requested operation."""

    code = codes.NOT_SUPPORTED
    category = ErrorCategory.UNSUPPORTED
    errno = errno_codes.ENOTSUP


class PermissionDeniedError(BlobStoreError):
    """Credentials were missing or lack access to the addressed path."""

    code = codes.PERMISSION_DENIED
    category = ErrorCategory.POLICY
    errno = errno_codes.EACCES


class TransientError(BlobStoreError):
    """Ambiguous or temporary failure; the caller owns any retry policy."""

    code = codes.TRANSIENT
    category = ErrorCategory.DEPENDENCY
    errno = errno_codes.EAGAIN
    retryable = True

    def __init__(
        self,
        message: str = "",
        *,
        key: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, key=key)
        self.cause = cause


class ConflictError(TransientError):
    """The remote rejected the call because of a concurrent change."""

    code = codes.CONFLICT
    category = ErrorCategory.CONFLICT
    errno = errno_codes.EINTR


class RemoteExceptionError(BlobStoreError):
    """Structured remote failure carrying the remote exception name.

    Call sites that need to tell failure subtypes apart (missing files,
    offset races) branch on ``exception``; everything else treats it like
    any other backend error.
    """

    code = codes.REMOTE_EXCEPTION
    category = ErrorCategory.DEPENDENCY

    def __init__(
        self,
        message: str = "",
        *,
        exception: str,
        status_code: int,
        java_class_name: str = "",
        request_id: str | None = None,
        response_id: str | None = None,
        response: Any = None,
        key: str | None = None,
    ) -> None:
        super().__init__(
            message or f"{status_code} {exception}",
            key=key,
        )
        self.exception = exception
        self.status_code = status_code
        self.java_class_name = java_class_name
        self.request_id = request_id
        self.response_id = response_id
        self.response = response

    def __str__(self) -> str:
        return f"{self.status_code} {self.exception}: {self.message}"
