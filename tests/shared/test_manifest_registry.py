"""Unit tests for backend manifest validation and registry lookup."""

from __future__ import annotations

import pytest

from packages.lakeblob_shared.manifest import (
    BackendManifest,
    ComponentId,
    ManifestError,
    ManifestRegistry,
    ModuleRoot,
)


def _manifest(
    component_id: str = "substrate_example", scheme: str = "example"
) -> BackendManifest:
    return BackendManifest(
        id=ComponentId(component_id),
        name="example",
        endpoint_scheme=scheme,
        module_roots=frozenset({ModuleRoot("resources.substrates.example")}),
    )


def test_manifest_rejects_invalid_definitions() -> None:
    """Ids, schemes and module roots are validated at construction."""
    with pytest.raises(ManifestError, match="invalid component id"):
        _manifest(component_id="Bad-Id")
    with pytest.raises(ManifestError, match="invalid endpoint scheme"):
        _manifest(scheme="Not A Scheme")
    with pytest.raises(ManifestError, match="module_roots"):
        BackendManifest(
            id=ComponentId("substrate_example"),
            name="example",
            endpoint_scheme="example",
            module_roots=frozenset(),
        )


def test_registry_resolves_backend_by_endpoint_scheme() -> None:
    """Endpoints are routed by URL scheme."""
    registry = ManifestRegistry()
    manifest = _manifest()
    registry.register_backend(manifest)

    assert registry.resolve_for_endpoint("example://host") == manifest
    assert registry.resolve_for_endpoint("other://host") is None
    assert registry.get_backend(ComponentId("substrate_example")) == manifest


def test_registry_allows_identical_reregistration() -> None:
    """Registering the same manifest twice is harmless."""
    registry = ManifestRegistry()
    registry.register_backend(_manifest())
    registry.register_backend(_manifest())

    assert len(registry.list_backends()) == 1


def test_registry_rejects_conflicting_definitions() -> None:
    """A reused id or a claimed scheme cannot be registered again."""
    registry = ManifestRegistry()
    registry.register_backend(_manifest())

    with pytest.raises(ManifestError, match="mismatched"):
        registry.register_backend(_manifest(scheme="changed"))
    with pytest.raises(ManifestError, match="already claimed"):
        registry.register_backend(_manifest(component_id="substrate_other"))


def test_registry_reports_unknown_backend() -> None:
    """Looking up an unregistered id is an error."""
    with pytest.raises(ManifestError, match="not registered"):
        ManifestRegistry().get_backend(ComponentId("substrate_missing"))
