"""Public API for shared lakeblob configuration utilities."""

from .models import (
    DEFAULT_CONFIG_PATH,
    ComponentNamespaceSettings,
    ComponentsSettings,
    LakeblobSettings,
    LoggingSettings,
    load_settings,
    resolve_component_settings,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ComponentNamespaceSettings",
    "ComponentsSettings",
    "LakeblobSettings",
    "LoggingSettings",
    "load_settings",
    "resolve_component_settings",
]
