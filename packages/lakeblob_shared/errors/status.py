"""HTTP status to taxonomy mapping shared by classifiers and errno normalization."""

from __future__ import annotations

from typing import Final, Mapping

from .types import (
    BlobStoreError,
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    NotSupportedError,
    PermissionDeniedError,
    TransientError,
)

# Statuses absent here are unexpected; callers treat them as invalid argument.
STATUS_ERRORS: Final[Mapping[int, type[BlobStoreError]]] = {
    400: InvalidArgumentError,
    401: PermissionDeniedError,
    403: PermissionDeniedError,
    404: NotFoundError,
    405: NotSupportedError,
    409: ConflictError,
    429: TransientError,
    500: TransientError,
}


def error_type_for_status(status_code: int) -> type[BlobStoreError] | None:
    """Return the error type for ``status_code``, or ``None`` when unmapped."""
    return STATUS_ERRORS.get(status_code)
