"""Batch delete ordering for a remote that refuses to delete non-empty directories."""

from __future__ import annotations

from typing import Iterable

from resources.substrates.adl.paths import key_depth


def delete_order(keys: Iterable[str]) -> list[str]:
    """Return ``keys`` deepest first, ties broken lexicographically.

    Children always precede their parent directory, so the batch must be
    deleted sequentially in this order.
    """
    return sorted(keys, key=lambda key: (-key_depth(key), key))
