"""Pydantic settings for the data-lake blob backend."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from packages.lakeblob_shared.config import LakeblobSettings, resolve_component_settings
from resources.substrates.adl.component import ENDPOINT_SCHEME, RESOURCE_COMPONENT_ID

_SCHEME_PREFIX = f"{ENDPOINT_SCHEME}://"


class AdlSettings(BaseModel):
    """Runtime settings for one data-lake account and bucket-like prefix."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    endpoint: str
    bucket: str = ""
    file_mode: int = Field(default=0o644, ge=0, le=0o7777)
    dir_mode: int = Field(default=0o755, ge=0, le=0o7777)
    timeout_seconds: float = Field(default=30.0, gt=0)
    api_version: str = "2016-11-01"
    scheme: str = "https"

    @field_validator("endpoint")
    @classmethod
    def _validate_endpoint(cls, value: str) -> str:
        """Require ``<account>.<dns-suffix>``, with an optional ``adl://`` scheme."""
        normalized = value.strip()
        if normalized.startswith(_SCHEME_PREFIX):
            normalized = normalized[len(_SCHEME_PREFIX) :]
        normalized = normalized.rstrip("/")
        account, _, suffix = normalized.partition(".")
        if account == "" or suffix == "":
            raise ValueError(f"Invalid endpoint: {value}")
        return normalized

    @field_validator("bucket")
    @classmethod
    def _normalize_bucket(cls, value: str) -> str:
        """Store the bucket prefix without surrounding delimiters."""
        return value.strip().strip("/")

    @field_validator("file_mode", "dir_mode", mode="before")
    @classmethod
    def _parse_octal_mode(cls, value: object) -> object:
        """Accept permission bits written as octal strings (``"0644"``)."""
        if isinstance(value, str):
            return int(value.strip(), 8)
        return value

    @property
    def account(self) -> str:
        """Return the account name (first endpoint label)."""
        return self.endpoint.partition(".")[0]

    @property
    def dns_suffix(self) -> str:
        """Return the filesystem DNS suffix following the account name."""
        return self.endpoint.partition(".")[2]

    def base_url(self) -> str:
        """Return the WebHDFS base URL for this account."""
        return f"{self.scheme}://{self.account}.{self.dns_suffix}/webhdfs/v1"


def resolve_adl_settings(settings: LakeblobSettings) -> AdlSettings:
    """Resolve backend settings from ``components.substrate.adl``."""
    return resolve_component_settings(
        settings=settings,
        component_id=str(RESOURCE_COMPONENT_ID),
        model=AdlSettings,
    )
