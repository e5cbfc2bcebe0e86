"""Data-lake blob backend resource exports."""

from resources.substrates.adl.adl_substrate import CAPABILITIES, AdlBlobBackend
from resources.substrates.adl.component import (
    MANIFEST,
    RESOURCE_COMPONENT_ID,
    boot,
    is_adl_endpoint,
)
from resources.substrates.adl.config import AdlSettings, resolve_adl_settings
from resources.substrates.adl.multipart import AdlMultipartCommit
from resources.substrates.adl.remote import AdlTransport, RemoteRequest, RemoteResponse
from resources.substrates.adl.transport import CredentialProvider, HttpAdlTransport

__all__ = [
    "AdlBlobBackend",
    "AdlMultipartCommit",
    "AdlSettings",
    "AdlTransport",
    "CAPABILITIES",
    "CredentialProvider",
    "HttpAdlTransport",
    "MANIFEST",
    "RESOURCE_COMPONENT_ID",
    "RemoteRequest",
    "RemoteResponse",
    "boot",
    "is_adl_endpoint",
    "resolve_adl_settings",
]
