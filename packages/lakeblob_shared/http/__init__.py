"""Public shared HTTP API for internal lakeblob packages."""

from .client import HttpClient
from .errors import HttpError, HttpRequestError

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpRequestError",
]
