"""Plugin settings and configuration file helpers."""

import tomllib
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from collrest.core.logging import get_logger

from .logging import LoggingSettings


__all__ = [
    "ConfigurationError",
    "PathStyle",
    "RestSettings",
    "deep_merge",
    "load_collection_definitions",
]


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


class PathStyle(str, Enum):
    """Layout of the route table.

    ``prefixed`` nests documents under ``/collection/{coll}`` and allows
    ``/definitions`` without a collection; ``flat`` serves ``/{coll}``
    directly and requires the collection on ``/definitions/{coll}``.
    """

    PREFIXED = "prefixed"
    FLAT = "flat"


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` onto a copy of ``base``."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read TOML config file {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML syntax in {path}: {e}") from e


class RestSettings(BaseSettings):
    """
    Configuration settings for the collection REST plugin.

    Values come from, in increasing precedence: field defaults, an optional
    TOML file, the ``config`` mapping handed to the plugin, and
    ``COLLREST_*`` environment variables.
    """

    model_config = SettingsConfigDict(
        env_prefix="COLLREST_",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    base_path: str = Field(
        default="/api",
        description="Base path the API is mounted at on the host server",
    )

    path_style: PathStyle = Field(
        default=PathStyle.PREFIXED,
        description="Route table layout: 'prefixed' or 'flat'",
    )

    auth_enabled: bool | None = Field(
        default=None,
        description="Force the authentication gate on or off (None follows the host service)",
    )

    cast_document_ids: bool | None = Field(
        default=None,
        description="Cast document ids with the collection's cast_id (None: only for flat paths)",
    )

    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )

    @field_validator("base_path")
    @classmethod
    def validate_base_path(cls, v: str) -> str:
        """Ensure the base path is absolute with no trailing slash."""
        v = v.strip()
        if not v.startswith("/"):
            raise ValueError("base_path must start with '/'")
        return v.rstrip("/") or "/"

    @property
    def should_cast_ids(self) -> bool:
        if self.cast_document_ids is None:
            return self.path_style is PathStyle.FLAT
        return self.cast_document_ids

    def auth_active(self, authentication: Any) -> bool:
        """Whether the authentication gate should be installed."""
        if authentication is None:
            return False
        if self.auth_enabled is None:
            return bool(getattr(authentication, "is_enabled", False))
        return self.auth_enabled

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any] | None = None,
        config_path: Path | str | None = None,
    ) -> "RestSettings":
        """Create settings by merging a TOML file and a mapping over defaults.

        Environment variables still take precedence over both sources.
        """
        data: dict[str, Any] = {}
        if config_path is not None:
            path = Path(config_path)
            toml_data = _load_toml(path)
            data = deep_merge(data, toml_data.get("collrest", toml_data))
            get_logger(__name__).info(
                "config_file_loaded", path=str(path), category="config"
            )
        if config:
            data = deep_merge(data, config)

        # init kwargs beat env vars in pydantic-settings, so reapply them
        try:
            from_env = cls()
            data = deep_merge(data, from_env.model_dump(exclude_unset=True))
            return cls(**data)
        except ValueError as e:
            raise ConfigurationError(f"Invalid collrest configuration: {e}") from e


def load_collection_definitions(path: Path | str) -> dict[str, dict[str, Any]]:
    """Read demo collection definitions from a TOML file.

    The file holds one ``[collections.<name>]`` table per collection, each
    with a ``model_name`` and a ``fields`` table.
    """
    data = _load_toml(Path(path))
    collections = data.get("collections")
    if not isinstance(collections, dict) or not collections:
        raise ConfigurationError(f"No [collections] defined in {path}")
    return collections
