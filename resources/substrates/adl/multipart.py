"""Multipart uploads emulated with a single-writer lease and sequential appends.

The remote has no multipart primitive. ``begin`` creates an empty file while
taking a lease, each part is appended at the offset where the previous part
ended, and ``commit``/``abort`` close the file to release the lease. Abort
cannot roll back: bytes already appended stay on the object.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Protocol

from packages.lakeblob_shared.blob import BlobBody, MultipartCommit
from packages.lakeblob_shared.errors import (
    BlobStoreError,
    InvalidArgumentError,
    NotFoundError,
    RemoteExceptionError,
)
from packages.lakeblob_shared.logging import get_logger
from resources.substrates.adl.classifier import (
    BAD_OFFSET_EXCEPTION,
    is_remote_exception,
    remap_by_status,
)
from resources.substrates.adl.remote import (
    RemoteOp,
    RemoteRequest,
    RemoteResponse,
    SyncFlag,
    format_permission,
)

_LOGGER = get_logger(__name__)


class ExecuteRemote(Protocol):
    """Send one request and raise its classified error, if any."""

    def __call__(
        self, request: RemoteRequest, *, structured: bool = False
    ) -> RemoteResponse: ...


@dataclass(slots=True)
class AdlMultipartCommit(MultipartCommit):
    """Commit handle whose ``upload_id`` is the lease; ``size`` counts appended bytes."""

    size: int = 0

    @property
    def lease_id(self) -> str:
        return self.upload_id


def require_commit(commit: MultipartCommit) -> AdlMultipartCommit:
    """Return ``commit`` as this backend's handle type.

    A handle of any other type was built by a caller that broke the contract;
    the ``TypeError`` is not meant to be handled.
    """
    if not isinstance(commit, AdlMultipartCommit):
        raise TypeError(
            f"multipart handle {type(commit).__name__} was not issued by the adl backend"
        )
    return commit


class MultipartEmulator:
    """Begin/add/commit/abort state machine over one lease per upload."""

    def __init__(self, *, execute: ExecuteRemote, file_mode: int) -> None:
        self._execute = execute
        self._file_mode = file_mode

    def begin(self, *, key: str, remote_path: str) -> AdlMultipartCommit:
        """Create an empty file under a fresh lease and return its handle."""
        lease_id = str(uuid.uuid4())
        self._execute(
            RemoteRequest(
                op=RemoteOp.CREATE,
                path=remote_path,
                params={
                    "write": "true",
                    "overwrite": "true",
                    "syncFlag": SyncFlag.DATA.value,
                    "leaseid": lease_id,
                    "permission": format_permission(self._file_mode),
                },
                content=b"",
            )
        )
        return AdlMultipartCommit(key=key, remote_path=remote_path, upload_id=lease_id)

    def add(self, *, commit: MultipartCommit, body: BlobBody, size: int) -> None:
        """Append one part of ``size`` bytes after everything appended so far."""
        handle = require_commit(commit)
        handle.size += size
        request = _append(handle, offset=handle.size - size, flag=SyncFlag.DATA, body=body)
        try:
            self._execute(request, structured=True)
        except RemoteExceptionError as exc:
            if exc.status_code == 404:
                # Raised both for oversized payloads and when a second writer
                # took over the lease; neither is recoverable for this upload.
                raise InvalidArgumentError(
                    f"append rejected for {handle.key}: {exc}", key=handle.key
                ) from exc
            if exc.status_code == 400 and is_remote_exception(exc, BAD_OFFSET_EXCEPTION):
                if self._append_landed(handle):
                    return
            raise remap_by_status(exc) from exc

    def _append_landed(self, handle: AdlMultipartCommit) -> bool:
        """Probe whether a bad-offset append actually reached the remote.

        A zero-length close at the new size only succeeds when the file is
        already that long.
        """
        probe = _append(handle, offset=handle.size, flag=SyncFlag.CLOSE)
        try:
            self._execute(probe)
        except BlobStoreError as exc:
            _LOGGER.debug(
                "bad offset probe failed for %s: %s", handle.remote_path, exc
            )
            return False
        _LOGGER.info(
            "bad offset append already landed",
            extra={"key": handle.key, "size": handle.size},
        )
        return True

    def commit(self, *, commit: MultipartCommit) -> None:
        """Close the file at its final size, releasing the lease."""
        handle = require_commit(commit)
        try:
            self._execute(_append(handle, offset=handle.size, flag=SyncFlag.CLOSE))
        except NotFoundError:
            # Deleted concurrently, or a racing create broke the lease after
            # every part was appended.
            _LOGGER.debug("commit of %s found no file; data was appended", handle.key)

    def abort(self, *, commit: MultipartCommit) -> None:
        """Release the lease; appended bytes are not discarded."""
        handle = require_commit(commit)
        self._execute(_append(handle, offset=None, flag=SyncFlag.CLOSE))


def _append(
    handle: AdlMultipartCommit,
    *,
    offset: int | None,
    flag: SyncFlag,
    body: BlobBody = b"",
) -> RemoteRequest:
    params = {
        "append": "true",
        "syncFlag": flag.value,
        "leaseid": handle.lease_id,
        "filesessionid": handle.lease_id,
    }
    if offset is not None:
        params["offset"] = str(offset)
    return RemoteRequest(
        op=RemoteOp.APPEND, path=handle.remote_path, params=params, content=body
    )
