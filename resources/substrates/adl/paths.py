"""Logical key to remote path mapping."""

from __future__ import annotations

DELIMITER = "/"


def remote_path(bucket: str, key: str) -> str:
    """Join the bucket-like root prefix and a logical key.

    Leading delimiters on ``key`` are dropped; an empty key maps to the
    bucket itself. With no bucket the trimmed key is returned unchanged, so
    mapping an already-mapped path under an empty bucket is a no-op.
    """
    key = key.lstrip(DELIMITER)
    if bucket == "":
        return key
    if key == "":
        return bucket
    return f"{bucket}{DELIMITER}{key}"


def key_depth(key: str) -> int:
    """Return the number of path segments in ``key`` ignoring a trailing delimiter."""
    return len(key.rstrip(DELIMITER).split(DELIMITER))


def join_key(parent: str, child: str) -> str:
    """Join a listed child's path suffix onto its parent key."""
    if parent == "":
        return child
    return f"{parent}{DELIMITER}{child}"
