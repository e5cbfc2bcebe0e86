"""Public shared error API for lakeblob backends."""

from . import codes
from .normalize import exception_category, exception_to_errno
from .status import STATUS_ERRORS, error_type_for_status
from .types import (
    AlreadyExistsError,
    BlobStoreError,
    ConflictError,
    ErrorCategory,
    InvalidArgumentError,
    NotFoundError,
    NotSupportedError,
    PermissionDeniedError,
    RemoteExceptionError,
    TransientError,
)

__all__ = [
    "AlreadyExistsError",
    "BlobStoreError",
    "ConflictError",
    "ErrorCategory",
    "STATUS_ERRORS",
    "InvalidArgumentError",
    "NotFoundError",
    "NotSupportedError",
    "PermissionDeniedError",
    "RemoteExceptionError",
    "TransientError",
    "codes",
    "exception_category",
    "error_type_for_status",
    "exception_to_errno",
]
