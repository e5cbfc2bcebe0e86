"""Settings for lakeblob processes and the backends they host.

Values resolve in this order: explicit init kwargs, ``LAKEBLOB_*``
environment variables (``__`` separates nesting levels), the YAML file,
then model defaults. Backend-specific settings live under
``components.substrate.<name>`` and are validated by the backend's own model.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Mapping, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "lakeblob" / "lakeblob.yaml"
COMPONENT_KINDS = frozenset({"substrate"})

TComponentSettings = TypeVar("TComponentSettings", bound=BaseModel)


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_output: bool = True
    service: str = "lakeblob"
    environment: str = "dev"


class ComponentNamespaceSettings(BaseModel):
    """Open mapping of backend name to that backend's raw settings."""

    model_config = ConfigDict(extra="allow")


class ComponentsSettings(BaseModel):
    """``components`` subtree keyed by kind, then by backend name.

    Only the nested ``components.<kind>.<name>`` shape is accepted; a flat
    ``<kind>_<name>`` key is reported with its nested spelling.
    """

    model_config = ConfigDict(extra="allow")

    substrate: ComponentNamespaceSettings = Field(
        default_factory=ComponentNamespaceSettings
    )

    @model_validator(mode="before")
    @classmethod
    def _reject_flat_keys(cls, value: object) -> object:
        if isinstance(value, dict):
            for key in value:
                kind, separator, name = str(key).partition("_")
                if separator and kind in COMPONENT_KINDS:
                    raise ValueError(
                        f"components.{key} is invalid; use components.{kind}.{name}"
                    )
        return value


class LakeblobSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LAKEBLOB_",
        env_nested_delimiter="__",
        extra="ignore",
        nested_model_default_partial_update=True,
        yaml_file=DEFAULT_CONFIG_PATH,
        yaml_file_encoding="utf-8",
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    components: ComponentsSettings = Field(default_factory=ComponentsSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, env_settings, YamlConfigSettingsSource(settings_cls)


def load_settings(
    *,
    cli_params: Mapping[str, Any] | None = None,
    config_path: str | Path | None = None,
) -> LakeblobSettings:
    """Load settings, reading YAML from ``config_path`` instead of the default."""
    overrides = dict(cli_params or {})
    if config_path is None:
        return LakeblobSettings(**overrides)

    class _FileSettings(LakeblobSettings):
        model_config = SettingsConfigDict(yaml_file=Path(config_path))

    return _FileSettings(**overrides)


def resolve_component_settings(
    *,
    settings: LakeblobSettings,
    component_id: str,
    model: type[TComponentSettings],
) -> TComponentSettings:
    """Validate the settings block for ``component_id`` (``<kind>_<name>``)."""
    kind, _, name = component_id.partition("_")
    if kind not in COMPONENT_KINDS or not name:
        raise ValueError(f"component id must be <kind>_<name>: {component_id}")
    namespace = getattr(settings.components, kind).model_dump(mode="python")
    block = namespace.get(name, {})
    if not isinstance(block, dict):
        raise TypeError(f"components.{kind}.{name} must be a mapping")
    return model.model_validate(block)
