"""Component declaration for the hierarchical data-lake blob backend."""

from __future__ import annotations

from typing import TYPE_CHECKING

from packages.lakeblob_shared.config import LakeblobSettings
from packages.lakeblob_shared.logging import configure_logging_from_settings
from packages.lakeblob_shared.manifest import (
    BackendManifest,
    ComponentId,
    ModuleRoot,
    register_backend,
)

if TYPE_CHECKING:
    from resources.substrates.adl.transport import CredentialProvider

RESOURCE_COMPONENT_ID = ComponentId("substrate_adl")
BACKEND_NAME = "adl"
ENDPOINT_SCHEME = "adl"

MANIFEST = register_backend(
    BackendManifest(
        id=RESOURCE_COMPONENT_ID,
        name=BACKEND_NAME,
        endpoint_scheme=ENDPOINT_SCHEME,
        module_roots=frozenset({ModuleRoot("resources.substrates.adl")}),
    )
)


def is_adl_endpoint(endpoint: str) -> bool:
    """Return whether ``endpoint`` addresses a data-lake account."""
    return MANIFEST.claims_endpoint(endpoint)


def build_component(
    *, settings: LakeblobSettings, credentials: CredentialProvider
) -> object:
    """Build the concrete backend for this registered resource component."""
    from resources.substrates.adl.adl_substrate import AdlBlobBackend
    from resources.substrates.adl.config import resolve_adl_settings
    from resources.substrates.adl.transport import HttpAdlTransport

    adl_settings = resolve_adl_settings(settings)
    transport = HttpAdlTransport(settings=adl_settings, credentials=credentials)
    return AdlBlobBackend(settings=adl_settings, transport=transport)


def boot(*, settings: LakeblobSettings, credentials: CredentialProvider) -> object:
    """Configure process logging from ``settings`` and build the backend."""
    configure_logging_from_settings(settings.logging)
    return build_component(settings=settings, credentials=credentials)
