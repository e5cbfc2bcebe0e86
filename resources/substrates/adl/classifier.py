"""Map remote responses onto the canonical blob storage error taxonomy."""

from __future__ import annotations

from typing import TypeVar

from pydantic import BaseModel, ValidationError

from packages.lakeblob_shared.errors import (
    BlobStoreError,
    InvalidArgumentError,
    RemoteExceptionError,
    TransientError,
    error_type_for_status,
)
from packages.lakeblob_shared.logging import fields, get_logger
from resources.substrates.adl.remote import RemoteErrorEnvelope, RemoteResponse

_LOGGER = get_logger(__name__)

_ModelT = TypeVar("_ModelT", bound=BaseModel)

FILE_NOT_FOUND_EXCEPTION = "FileNotFoundException"
BAD_OFFSET_EXCEPTION = "BadOffsetException"


def classify(
    response: RemoteResponse | None,
    *,
    transport_error: Exception | None = None,
    structured: bool = False,
) -> BlobStoreError | None:
    """Return the canonical error for one remote call, or ``None`` on success.

    With ``structured`` the error body is decoded into a
    ``RemoteExceptionError`` so callers can branch on the remote exception
    name; otherwise the HTTP status alone selects the error.
    """
    if response is None:
        if transport_error is None:
            return None
        return TransientError(str(transport_error), cause=transport_error)
    if response.is_success:
        return None
    if structured:
        return decode_remote_exception(response)
    return classify_status(response)


def decode_remote_exception(response: RemoteResponse) -> BlobStoreError:
    """Decode the structured error body of one failed response."""
    try:
        envelope = RemoteErrorEnvelope.model_validate_json(response.body)
    except ValidationError as exc:
        _LOGGER.error(
            "cannot parse error: %s",
            exc,
            extra=_correlation(response),
        )
        return TransientError(
            f"cannot parse error body for HTTP {response.status_code}", cause=exc
        )
    remote = envelope.remote_exception
    return RemoteExceptionError(
        remote.message,
        exception=remote.exception,
        status_code=response.status_code,
        java_class_name=remote.java_class_name,
        request_id=response.request_id,
        response_id=response.response_id,
        response=response,
    )


def classify_status(response: RemoteResponse) -> BlobStoreError:
    """Select an error from the HTTP status; unmapped statuses are logged."""
    error_type = error_type_for_status(response.status_code)
    if error_type is not None:
        return error_type(f"HTTP {response.status_code} for {response.op.value}")
    _LOGGER.error("unexpected adl response", extra=_correlation(response))
    return InvalidArgumentError(
        f"unexpected HTTP {response.status_code} for {response.op.value}"
    )


def remap_by_status(error: RemoteExceptionError) -> BlobStoreError:
    """Collapse a structured error back onto the status-based taxonomy."""
    if isinstance(error.response, RemoteResponse):
        return classify_status(error.response)
    error_type = error_type_for_status(error.status_code) or InvalidArgumentError
    return error_type(str(error))


def is_remote_exception(error: BlobStoreError | None, name: str) -> bool:
    """Return whether ``error`` is a structured remote error named ``name``."""
    return isinstance(error, RemoteExceptionError) and error.exception == name


def decode_body(response: RemoteResponse, model: type[_ModelT]) -> _ModelT:
    """Decode one successful response body; malformed bodies are transient."""
    try:
        return model.model_validate_json(response.body)
    except ValidationError as exc:
        raise TransientError(
            f"cannot decode {response.op.value} response", cause=exc
        ) from exc


def _correlation(response: RemoteResponse) -> dict[str, object]:
    return {
        fields.REMOTE_OP: response.op.value,
        fields.REMOTE_URL: response.url,
        fields.REQUEST_ID: response.request_id,
        fields.STATUS_CODE: response.status_code,
        fields.RESPONSE_ID: response.response_id,
    }
