"""Demo host application backed by in-memory collections."""

import tomllib
from pathlib import Path
from typing import Any

from fastapi import FastAPI

from collrest.auth.memory import InMemoryAuthentication
from collrest.collections.inmem import InMemoryCollectionFactory
from collrest.config.settings import (
    ConfigurationError,
    RestSettings,
    load_collection_definitions,
)
from collrest.plugin import CollectionRestPlugin, Host


def _load_users(path: Path) -> dict[str, str]:
    try:
        with path.open("rb") as f:
            users = tomllib.load(f).get("users", {})
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Cannot read users from {path}: {e}") from e
    return {str(k): str(v) for k, v in users.items()}


def create_demo_app(
    definitions_path: Path | str, settings: RestSettings | None = None
) -> tuple[FastAPI, CollectionRestPlugin]:
    """Create a host app serving the collections defined in a TOML file.

    A ``[users]`` table in the same file enables the authentication gate
    with those username/password pairs.
    """
    path = Path(definitions_path)
    definitions = load_collection_definitions(path)
    users = _load_users(path)

    server = FastAPI(title="collrest demo")
    host = Host(
        factory=InMemoryCollectionFactory(definitions),
        server=server,
        authentication=InMemoryAuthentication(users) if users else None,
    )
    plugin = CollectionRestPlugin(host, settings)
    plugin.run()

    @server.get("/health")
    async def health() -> dict[str, Any]:
        return plugin.health_check()

    return server, plugin
