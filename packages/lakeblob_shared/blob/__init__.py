"""Shared blob storage capability contract and DTOs."""

from .contract import BlobBackend, BlobBody
from .models import (
    BlobItem,
    BlobPrefix,
    BlobStream,
    Capabilities,
    GetBlobResult,
    HeadBlobResult,
    ListBlobsResult,
    MultipartCommit,
)

__all__ = [
    "BlobBackend",
    "BlobBody",
    "BlobItem",
    "BlobPrefix",
    "BlobStream",
    "Capabilities",
    "GetBlobResult",
    "HeadBlobResult",
    "ListBlobsResult",
    "MultipartCommit",
]
