"""Wire-level request/response shapes for the data-lake filesystem API.

The backend's algorithms only see ``RemoteRequest``/``RemoteResponse`` and the
``AdlTransport`` protocol, so they run unchanged against an in-memory fake.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Mapping, Protocol

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from packages.lakeblob_shared.blob import BlobBody, BlobStream

REQUEST_ID_HEADER = "x-ms-request-id"
DIRECTORY = "DIRECTORY"
FILE = "FILE"


class RemoteOp(str, Enum):
    """Remote filesystem operations used by the backend, with their HTTP verb."""

    GETFILESTATUS = "GETFILESTATUS"
    LISTSTATUS = "LISTSTATUS"
    OPEN = "OPEN"
    CREATE = "CREATE"
    APPEND = "APPEND"
    MKDIRS = "MKDIRS"
    DELETE = "DELETE"
    RENAME = "RENAME"

    @property
    def method(self) -> str:
        return _OP_METHODS[self]


_OP_METHODS = {
    RemoteOp.GETFILESTATUS: "GET",
    RemoteOp.LISTSTATUS: "GET",
    RemoteOp.OPEN: "GET",
    RemoteOp.CREATE: "PUT",
    RemoteOp.APPEND: "POST",
    RemoteOp.MKDIRS: "PUT",
    RemoteOp.DELETE: "DELETE",
    RemoteOp.RENAME: "PUT",
}


class SyncFlag(str, Enum):
    """Write durability flag; ``CLOSE`` also releases the lease."""

    DATA = "DATA"
    METADATA = "METADATA"
    CLOSE = "CLOSE"


@dataclass(frozen=True)
class RemoteRequest:
    """One remote filesystem call."""

    op: RemoteOp
    path: str
    params: Mapping[str, str] = field(default_factory=dict)
    content: BlobBody | None = None
    stream: bool = False


@dataclass(frozen=True)
class RemoteResponse:
    """Status, body and correlation ids for one completed remote call.

    ``stream`` is set instead of ``body`` for streamed successful reads.
    """

    op: RemoteOp
    status_code: int
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)
    url: str = ""
    request_id: str | None = None
    response_id: str | None = None
    stream: BlobStream | None = None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class AdlTransport(Protocol):
    """Narrow transport seam: issue one request, return status and body.

    Implementations return a response for every HTTP status and raise
    ``HttpRequestError`` only when no response was received.
    """

    def send(self, request: RemoteRequest) -> RemoteResponse:
        """Issue one remote call."""


class FileStatus(BaseModel):
    """Status of one file or directory as returned by the remote."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    length: int = 0
    path_suffix: str = Field(default="", alias="pathSuffix")
    type: str = FILE
    modification_time: int = Field(default=0, alias="modificationTime")

    @property
    def is_directory(self) -> bool:
        return self.type == DIRECTORY

    @property
    def last_modified(self) -> datetime:
        """Return the modification time (epoch milliseconds) as a UTC datetime."""
        return datetime.fromtimestamp(self.modification_time / 1000.0, tz=UTC)


class FileStatusResult(BaseModel):
    """GETFILESTATUS payload."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    file_status: FileStatus = Field(alias="FileStatus")


class FileStatusList(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    file_status: list[FileStatus] = Field(default_factory=list, alias="FileStatus")


class FileStatusesResult(BaseModel):
    """LISTSTATUS payload."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    file_statuses: FileStatusList = Field(alias="FileStatuses")


class BooleanResult(BaseModel):
    """Payload of operations reporting only whether they took effect."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    boolean: bool


class RemoteExceptionBody(BaseModel):
    """Decoded structured exception; field names match case-insensitively."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    exception: str = Field(
        default="", validation_alias=AliasChoices("exception", "Exception")
    )
    message: str = Field(default="", validation_alias=AliasChoices("message", "Message"))
    java_class_name: str = Field(
        default="",
        validation_alias=AliasChoices("javaClassName", "JavaClassName", "javaclassname"),
    )


class RemoteErrorEnvelope(BaseModel):
    """Error body returned by the remote on failure."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    remote_exception: RemoteExceptionBody = Field(
        default_factory=RemoteExceptionBody,
        validation_alias=AliasChoices(
            "RemoteException", "remoteException", "remoteexception"
        )
    )


def format_permission(mode: int) -> str:
    """Render permission bits the way the remote expects (``"0644"``)."""
    return f"0{mode:o}"
