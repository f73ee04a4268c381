"""Configuration for the collrest plugin."""

from .logging import LoggingSettings
from .settings import (
    ConfigurationError,
    PathStyle,
    RestSettings,
    load_collection_definitions,
)


__all__ = [
    "ConfigurationError",
    "LoggingSettings",
    "PathStyle",
    "RestSettings",
    "load_collection_definitions",
]
