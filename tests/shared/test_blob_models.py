"""Unit tests for shared blob contract DTOs."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from packages.lakeblob_shared.blob import BlobItem, BlobStream, ListBlobsResult


def test_blob_stream_skips_empty_chunks_and_reads_remainder() -> None:
    """Iteration yields non-empty chunks and read drains the rest."""
    stream = BlobStream([b"ab", b"", b"cd", b"ef"])

    first = next(iter(stream))

    assert first == b"ab"
    assert stream.read() == b"cdef"


def test_blob_stream_close_runs_once() -> None:
    """Closing releases the connection exactly once."""
    closes: list[int] = []
    stream = BlobStream([b"x"], on_close=lambda: closes.append(1))

    with stream:
        pass
    stream.close()

    assert stream.closed is True
    assert closes == [1]


def test_listing_dtos_are_frozen() -> None:
    """Listing rows cannot be mutated after construction."""
    item = BlobItem(key="a", size=1)

    with pytest.raises(ValidationError):
        item.size = 2  # type: ignore[misc]

    assert ListBlobsResult().truncated is False
