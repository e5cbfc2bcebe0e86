"""Backend manifest model and process-local registry.

Each storage backend registers one manifest at import time so a consumer can
pick the backend that serves a configured endpoint without importing every
backend module up front.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from threading import RLock
from typing import Final, FrozenSet, NewType

ComponentId = NewType("ComponentId", str)
ModuleRoot = NewType("ModuleRoot", str)

_COMPONENT_ID_RE: Final[re.Pattern[str]] = re.compile(r"^[a-z][a-z0-9_]{1,62}$")
_MODULE_ROOT_RE: Final[re.Pattern[str]] = re.compile(
    r"^[a-zA-Z_][a-zA-Z0-9_]*(\.[a-zA-Z_][a-zA-Z0-9_]*)*$"
)
_SCHEME_RE: Final[re.Pattern[str]] = re.compile(r"^[a-z][a-z0-9+.-]*$")


class ManifestError(ValueError):
    """Raised when manifest definitions or registration are invalid."""


@dataclass(frozen=True, slots=True)
class BackendManifest:
    """Manifest declaration for one blob storage backend."""

    id: ComponentId
    name: str
    endpoint_scheme: str
    module_roots: FrozenSet[ModuleRoot]

    def __post_init__(self) -> None:
        """Validate manifest invariants."""
        validate_component_id(self.id)
        if self.name.strip() == "":
            raise ManifestError("name must not be empty")
        if not _SCHEME_RE.fullmatch(self.endpoint_scheme):
            raise ManifestError(f"invalid endpoint scheme '{self.endpoint_scheme}'")
        if len(self.module_roots) == 0:
            raise ManifestError("module_roots must not be empty")
        for root in self.module_roots:
            validate_module_root(root)

    def claims_endpoint(self, endpoint: str) -> bool:
        """Return whether ``endpoint`` uses this backend's URL scheme."""
        return endpoint.startswith(f"{self.endpoint_scheme}://")


@dataclass(slots=True)
class ManifestRegistry:
    """In-memory registry for backend manifests."""

    _backends: dict[ComponentId, BackendManifest] = field(default_factory=dict)
    _lock: RLock = field(default_factory=RLock)

    def register_backend(self, manifest: BackendManifest) -> None:
        """Register one backend manifest with uniqueness validation."""
        with self._lock:
            existing = self._backends.get(manifest.id)
            if existing is not None and existing != manifest:
                raise ManifestError(
                    f"duplicate backend id with mismatched definition: {manifest.id}"
                )
            for other in self._backends.values():
                if other.id != manifest.id and (
                    other.endpoint_scheme == manifest.endpoint_scheme
                ):
                    raise ManifestError(
                        f"endpoint scheme '{manifest.endpoint_scheme}' already "
                        f"claimed by {other.id}"
                    )
            self._backends[manifest.id] = manifest

    def get_backend(self, backend_id: ComponentId) -> BackendManifest:
        """Return one registered backend manifest by id."""
        try:
            return self._backends[backend_id]
        except KeyError as exc:
            raise ManifestError(f"backend not registered: {backend_id}") from exc

    def list_backends(self) -> tuple[BackendManifest, ...]:
        """Return all registered backends sorted by id."""
        return tuple(sorted(self._backends.values(), key=lambda item: str(item.id)))

    def resolve_for_endpoint(self, endpoint: str) -> BackendManifest | None:
        """Return the backend claiming ``endpoint`` by scheme, if any."""
        for manifest in self.list_backends():
            if manifest.claims_endpoint(endpoint):
                return manifest
        return None


def validate_component_id(value: ComponentId) -> None:
    """Validate component-id format."""
    raw = str(value)
    if not _COMPONENT_ID_RE.fullmatch(raw):
        raise ManifestError(
            f"invalid component id '{raw}'; expected ^[a-z][a-z0-9_]{{1,62}}$"
        )


def validate_module_root(value: ModuleRoot) -> None:
    """Validate Python module-root path format."""
    if not _MODULE_ROOT_RE.fullmatch(str(value)):
        raise ManifestError(f"invalid module root '{value}'")


_DEFAULT_REGISTRY = ManifestRegistry()


def register_backend(manifest: BackendManifest) -> BackendManifest:
    """Register a backend manifest in the default process-local registry."""
    _DEFAULT_REGISTRY.register_backend(manifest)
    return manifest


def get_registry() -> ManifestRegistry:
    """Return the process-local default manifest registry."""
    return _DEFAULT_REGISTRY
