"""Exception normalization utilities for POSIX-style consumers."""

from __future__ import annotations

import errno

from .status import error_type_for_status
from .types import (
    BlobStoreError,
    ErrorCategory,
    InvalidArgumentError,
    RemoteExceptionError,
)


def exception_to_errno(exc: BaseException) -> int:
    """Normalize one exception into the errno a filesystem layer should return.

    Structured remote errors that the backend did not reinterpret map through
    the same status table the classifier uses; unmapped statuses are invalid
    argument there too.
    """
    if isinstance(exc, RemoteExceptionError):
        error_type = error_type_for_status(exc.status_code) or InvalidArgumentError
        return error_type.errno

    if isinstance(exc, BlobStoreError):
        return exc.errno

    if isinstance(exc, FileNotFoundError):
        return errno.ENOENT

    if isinstance(exc, PermissionError):
        return errno.EACCES

    if isinstance(exc, (TimeoutError, ConnectionError)):
        return errno.EAGAIN

    if isinstance(exc, OSError) and exc.errno is not None:
        return exc.errno

    return errno.EIO


def exception_category(exc: BaseException) -> str:
    """Return the taxonomy category name used in logs for one exception."""
    if isinstance(exc, BlobStoreError):
        return exc.category.value
    return ErrorCategory.INTERNAL.value
