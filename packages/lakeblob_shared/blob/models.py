"""Backend-agnostic DTOs for the blob storage capability contract."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Iterator

from pydantic import BaseModel, ConfigDict, Field


class Capabilities(BaseModel):
    """Static descriptor consumers use to adapt to one backend."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    no_parallel_multipart: bool = False
    directories_are_blobs: bool = False
    name: str


class BlobItem(BaseModel):
    """One listing row: an object (or directory placeholder) and its metadata."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    key: str
    size: int = 0
    last_modified: datetime | None = None


class BlobPrefix(BaseModel):
    """One synthesized virtual directory, including its trailing delimiter."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    prefix: str


class HeadBlobResult(BaseModel):
    """Metadata for one addressed object or directory."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    key: str
    size: int
    last_modified: datetime | None = None
    is_directory: bool = False


class ListBlobsResult(BaseModel):
    """Prefix and item rows produced by one listing call."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    prefixes: tuple[BlobPrefix, ...] = Field(default_factory=tuple)
    items: tuple[BlobItem, ...] = Field(default_factory=tuple)
    truncated: bool = False


class BlobStream:
    """Readable byte stream over a remote object body.

    Iterating yields chunks as they arrive; ``read`` drains the remainder.
    The stream must be closed (or used as a context manager) to release the
    underlying connection.
    """

    def __init__(
        self,
        chunks: Iterable[bytes],
        *,
        on_close: Callable[[], None] | None = None,
    ) -> None:
        self._chunks = iter(chunks)
        self._on_close = on_close
        self._closed = False

    def __iter__(self) -> Iterator[bytes]:
        for chunk in self._chunks:
            if chunk:
                yield chunk

    def read(self) -> bytes:
        """Return every remaining byte of the body."""
        return b"".join(self)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the underlying connection; safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        if self._on_close is not None:
            self._on_close()

    def __enter__(self) -> BlobStream:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()


class GetBlobResult(BaseModel):
    """Object body plus the metadata the remote returned with it."""

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    key: str
    body: BlobStream
    content_type: str | None = None
    is_directory: bool = False


@dataclass(slots=True)
class MultipartCommit:
    """Caller-held handle for one in-progress multipart upload.

    Backends subclass this with their own private state; the handle is owned
    by exactly one writer between begin and commit/abort.
    """

    key: str
    remote_path: str
    upload_id: str
