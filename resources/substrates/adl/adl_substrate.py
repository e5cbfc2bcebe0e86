"""Blob storage backend over a hierarchical, lease-based data-lake filesystem."""

from __future__ import annotations

import uuid
from typing import Sequence

from packages.lakeblob_shared.blob import (
    BlobBackend,
    BlobBody,
    BlobStream,
    Capabilities,
    GetBlobResult,
    HeadBlobResult,
    ListBlobsResult,
    MultipartCommit,
)
from packages.lakeblob_shared.errors import (
    AlreadyExistsError,
    InvalidArgumentError,
    NotFoundError,
    NotSupportedError,
    RemoteExceptionError,
)
from packages.lakeblob_shared.http import HttpRequestError
from packages.lakeblob_shared.logging import get_logger, public_api_instrumented
from resources.substrates.adl.classifier import (
    FILE_NOT_FOUND_EXCEPTION,
    classify,
    decode_body,
)
from resources.substrates.adl.component import BACKEND_NAME, RESOURCE_COMPONENT_ID
from resources.substrates.adl.config import AdlSettings
from resources.substrates.adl.deletion import delete_order
from resources.substrates.adl.listing import KeyBudget, after_marker, walk
from resources.substrates.adl.multipart import MultipartEmulator
from resources.substrates.adl.paths import DELIMITER, remote_path
from resources.substrates.adl.remote import (
    AdlTransport,
    BooleanResult,
    FileStatus,
    FileStatusesResult,
    FileStatusResult,
    RemoteOp,
    RemoteRequest,
    RemoteResponse,
    SyncFlag,
    format_permission,
)

_LOGGER = get_logger(__name__)
_COMPONENT_ID = str(RESOURCE_COMPONENT_ID)

CAPABILITIES = Capabilities(
    no_parallel_multipart=True,
    directories_are_blobs=True,
    name=BACKEND_NAME,
)


class AdlBlobBackend(BlobBackend):
    """``BlobBackend`` for one data-lake account and bucket-like root prefix.

    Instances hold no mutable state beyond the transport's connection pool and
    may be shared across threads. Multipart handles are single-writer.
    """

    def __init__(self, *, settings: AdlSettings, transport: AdlTransport) -> None:
        self._settings = settings
        self._transport = transport
        self._multipart = MultipartEmulator(
            execute=self._execute, file_mode=settings.file_mode
        )

    @property
    def bucket(self) -> str:
        return self._settings.bucket

    def _path(self, key: str) -> str:
        return remote_path(self._settings.bucket, key)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=_COMPONENT_ID,
        id_fields=("key",),
    )
    def init(self, *, key: str = "") -> None:
        """Probe the root path; a missing path is not an error here."""
        request = RemoteRequest(op=RemoteOp.GETFILESTATUS, path=self._path(key))
        try:
            self._execute(request, structured=True)
        except RemoteExceptionError as exc:
            if exc.exception != FILE_NOT_FOUND_EXCEPTION:
                raise

    def capabilities(self) -> Capabilities:
        return CAPABILITIES

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=_COMPONENT_ID,
        id_fields=("key",),
    )
    def head_object(self, *, key: str) -> HeadBlobResult:
        """Return size, modification time and type of one path."""
        response = self._execute(
            RemoteRequest(op=RemoteOp.GETFILESTATUS, path=self._path(key))
        )
        status = decode_body(response, FileStatusResult).file_status
        return HeadBlobResult(
            key=key,
            size=status.length,
            last_modified=status.last_modified,
            is_directory=status.is_directory,
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=_COMPONENT_ID,
        id_fields=("prefix", "delimiter"),
    )
    def list_objects(
        self,
        *,
        prefix: str = "",
        delimiter: str | None = None,
        continuation_token: str | None = None,
        start_after: str | None = None,
        max_keys: int | None = None,
    ) -> ListBlobsResult:
        """List under ``prefix``; with no delimiter the whole subtree is walked.

        A tree walk cannot resume midway, so flat listings reject continuation
        markers. Results are never truncated.
        """
        recursive = delimiter is None
        if recursive:
            if continuation_token is not None or start_after is not None:
                raise NotSupportedError(
                    "flat listing cannot resume from a marker", key=prefix
                )
        elif delimiter != DELIMITER:
            raise NotSupportedError(f"unsupported delimiter {delimiter!r}", key=prefix)

        marker = start_after if start_after is not None else continuation_token
        rows = walk(
            self._list_statuses,
            prefix=prefix,
            recursive=recursive,
            budget=KeyBudget(max_keys),
        )
        rows = after_marker(rows, marker)
        return ListBlobsResult(
            prefixes=tuple(rows.prefixes),
            items=tuple(rows.items),
            truncated=False,
        )

    def _list_statuses(self, path: str) -> list[FileStatus]:
        response = self._execute(
            RemoteRequest(op=RemoteOp.LISTSTATUS, path=self._path(path))
        )
        return decode_body(response, FileStatusesResult).file_statuses.file_status

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=_COMPONENT_ID,
        id_fields=("key",),
    )
    def delete_object(self, *, key: str) -> None:
        """Delete one file or empty directory."""
        self._delete(key)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=_COMPONENT_ID,
    )
    def delete_objects(self, *, keys: Sequence[str]) -> None:
        """Delete ``keys`` children first; the first failure stops the batch."""
        for key in delete_order(keys):
            self._delete(key)

    def _delete(self, key: str) -> None:
        response = self._execute(
            RemoteRequest(
                op=RemoteOp.DELETE,
                path=self._path(key.rstrip(DELIMITER)),
                params={"recursive": "false"},
            )
        )
        if not decode_body(response, BooleanResult).boolean:
            raise NotFoundError(f"nothing to delete at {key}", key=key)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=_COMPONENT_ID,
        id_fields=("source", "destination"),
    )
    def rename_object(self, *, source: str, destination: str) -> None:
        """Rename ``source`` over ``destination``.

        The remote answers ``false`` both for a missing source and for a
        directory renamed onto a file; callers rule out the latter.
        """
        response = self._execute(
            RemoteRequest(
                op=RemoteOp.RENAME,
                path=self._path(source),
                params={
                    "destination": "/" + self._path(destination),
                    "renameoptions": "OVERWRITE",
                },
            )
        )
        if not decode_body(response, BooleanResult).boolean:
            raise NotFoundError(f"rename source {source} not found", key=source)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=_COMPONENT_ID,
        id_fields=("source", "destination"),
    )
    def copy_object(self, *, source: str, destination: str) -> None:
        """Always unsupported: the remote has no server-side copy."""
        raise NotSupportedError("server-side copy is not supported", key=source)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=_COMPONENT_ID,
        id_fields=("key",),
    )
    def get_object(
        self,
        *,
        key: str,
        range_start: int = 0,
        range_count: int = 0,
        if_match: str | None = None,
    ) -> GetBlobResult:
        """Open one object body; the caller must close the returned stream."""
        params = {"read": "true"}
        if range_count != 0:
            params["length"] = str(range_count)
        if range_start != 0:
            params["offset"] = str(range_start)
        if if_match is not None:
            params["filesessionid"] = file_session_id(if_match)

        response = self._execute(
            RemoteRequest(
                op=RemoteOp.OPEN, path=self._path(key), params=params, stream=True
            )
        )
        body = response.stream or BlobStream([response.body])
        return GetBlobResult(
            key=key,
            body=body,
            content_type=response.headers.get("content-type"),
            is_directory=False,
        )

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=_COMPONENT_ID,
        id_fields=("key",),
    )
    def put_object(
        self,
        *,
        key: str,
        body: BlobBody = b"",
        is_directory: bool = False,
    ) -> None:
        """Replace one object, or create a directory placeholder."""
        if is_directory:
            self._mkdir(key)
            return
        self._execute(
            RemoteRequest(
                op=RemoteOp.CREATE,
                path=self._path(key),
                params={
                    "write": "true",
                    "overwrite": "true",
                    "syncFlag": SyncFlag.CLOSE.value,
                    "permission": format_permission(self._settings.file_mode),
                },
                content=body,
            )
        )

    def _mkdir(self, key: str) -> None:
        response = self._execute(
            RemoteRequest(
                op=RemoteOp.MKDIRS,
                path=self._path(key),
                params={"permission": format_permission(self._settings.dir_mode)},
            ),
            structured=True,
        )
        if not decode_body(response, BooleanResult).boolean:
            raise AlreadyExistsError(f"directory {key} already exists", key=key)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=_COMPONENT_ID,
        id_fields=("key",),
    )
    def begin_multipart(self, *, key: str) -> MultipartCommit:
        return self._multipart.begin(key=key, remote_path=self._path(key))

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=_COMPONENT_ID,
        id_fields=("size",),
    )
    def add_part(self, *, commit: MultipartCommit, body: BlobBody, size: int) -> None:
        self._multipart.add(commit=commit, body=body, size=size)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=_COMPONENT_ID,
    )
    def commit_multipart(self, *, commit: MultipartCommit) -> None:
        self._multipart.commit(commit=commit)

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=_COMPONENT_ID,
    )
    def abort_multipart(self, *, commit: MultipartCommit) -> None:
        """Release the upload's lease. Bytes already appended are kept."""
        self._multipart.abort(commit=commit)

    def multipart_expire(self) -> None:
        raise NotSupportedError("multipart expiry is not supported")

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=_COMPONENT_ID,
    )
    def make_container(self) -> None:
        """Create the configured root prefix as a directory."""
        self._require_bucket()
        self._mkdir("")

    @public_api_instrumented(
        logger=_LOGGER,
        component_id=_COMPONENT_ID,
    )
    def remove_container(self) -> None:
        """Remove the configured root prefix; it must be empty."""
        self._require_bucket()
        response = self._execute(
            RemoteRequest(
                op=RemoteOp.DELETE,
                path=self._path(""),
                params={"recursive": "false"},
            )
        )
        if not decode_body(response, BooleanResult).boolean:
            raise NotFoundError(f"container {self.bucket} not found")

    def _require_bucket(self) -> None:
        if self._settings.bucket == "":
            raise InvalidArgumentError("no container configured")

    def _execute(
        self, request: RemoteRequest, *, structured: bool = False
    ) -> RemoteResponse:
        """Send one request and raise its classified error, if any."""
        try:
            response = self._transport.send(request)
        except HttpRequestError as exc:
            raise classify(None, transport_error=exc) from exc
        error = classify(response, structured=structured)
        if error is not None:
            raise error
        return response


def file_session_id(token: str) -> str:
    """Build a file-session UUID from the first 16 bytes of ``token``."""
    raw = token.encode("utf-8")[:16].ljust(16, b"\x00")
    return str(uuid.UUID(bytes=raw))
