"""Shared error code constants.

These constants are backend-agnostic and intended for stable machine-readable
handling by blob storage consumers. Backend-specific detail belongs on the
raised exception (for example the remote exception name), not in new codes.
"""

NOT_FOUND = "NOT_FOUND"
ALREADY_EXISTS = "ALREADY_EXISTS"
INVALID_ARGUMENT = "INVALID_ARGUMENT"
NOT_SUPPORTED = "NOT_SUPPORTED"
PERMISSION_DENIED = "PERMISSION_DENIED"

# Retryable by the caller; never retried internally.
TRANSIENT = "TRANSIENT"
CONFLICT = "CONFLICT"

REMOTE_EXCEPTION = "REMOTE_EXCEPTION"
INTERNAL_ERROR = "INTERNAL_ERROR"
