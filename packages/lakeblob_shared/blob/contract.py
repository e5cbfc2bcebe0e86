"""Transport-agnostic protocol every blob storage backend implements."""

from __future__ import annotations

from typing import Iterable, Protocol, Sequence, runtime_checkable

from .models import (
    Capabilities,
    GetBlobResult,
    HeadBlobResult,
    ListBlobsResult,
    MultipartCommit,
)

BlobBody = bytes | Iterable[bytes]


@runtime_checkable
class BlobBackend(Protocol):
    """Protocol for the uniform blob capability contract.

    Failures are raised as ``packages.lakeblob_shared.errors`` exceptions.
    """

    @property
    def bucket(self) -> str:
        """Return the configured bucket-like root prefix (may be empty)."""

    def init(self, *, key: str = "") -> None:
        """Probe the backend root; absence is not an error."""

    def capabilities(self) -> Capabilities:
        """Return the static capability descriptor."""

    def head_object(self, *, key: str) -> HeadBlobResult:
        """Return metadata for one object or directory."""

    def list_objects(
        self,
        *,
        prefix: str = "",
        delimiter: str | None = None,
        continuation_token: str | None = None,
        start_after: str | None = None,
        max_keys: int | None = None,
    ) -> ListBlobsResult:
        """List objects under ``prefix``; no delimiter means recursive flat listing."""

    def delete_object(self, *, key: str) -> None:
        """Delete one object or empty directory."""

    def delete_objects(self, *, keys: Sequence[str]) -> None:
        """Delete many keys, stopping at the first failure."""

    def rename_object(self, *, source: str, destination: str) -> None:
        """Rename one object, replacing the destination."""

    def copy_object(self, *, source: str, destination: str) -> None:
        """Copy one object server-side."""

    def get_object(
        self,
        *,
        key: str,
        range_start: int = 0,
        range_count: int = 0,
        if_match: str | None = None,
    ) -> GetBlobResult:
        """Open one object body, optionally restricted to a byte range."""

    def put_object(
        self,
        *,
        key: str,
        body: BlobBody = b"",
        is_directory: bool = False,
    ) -> None:
        """Write one whole object, or create a directory placeholder."""

    def begin_multipart(self, *, key: str) -> MultipartCommit:
        """Start one multipart upload and return its commit handle."""

    def add_part(
        self, *, commit: MultipartCommit, body: BlobBody, size: int
    ) -> None:
        """Append one part of ``size`` bytes to an in-progress upload."""

    def commit_multipart(self, *, commit: MultipartCommit) -> None:
        """Finish one multipart upload."""

    def abort_multipart(self, *, commit: MultipartCommit) -> None:
        """Abandon one multipart upload."""

    def multipart_expire(self) -> None:
        """Expire stale multipart uploads."""

    def make_container(self) -> None:
        """Create the configured bucket-like root."""

    def remove_container(self) -> None:
        """Remove the configured bucket-like root."""
