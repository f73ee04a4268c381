"""Host application factory for composable test fixtures."""

from collections.abc import Mapping
from typing import Any

from fastapi import FastAPI
from fastapi.testclient import TestClient

from collrest.auth.memory import InMemoryAuthentication
from collrest.collections.inmem import InMemoryCollectionFactory
from collrest.plugin import CollectionRestPlugin, Host


class RestAppFactory:
    """Factory for host applications with the REST plugin mounted.

    Example usage:
        factory = RestAppFactory(definitions)
        app = factory.create_app(config={"path_style": "flat"}, users={"admin": "pw"})
    """

    def __init__(self, definitions: Mapping[str, Mapping[str, Any]]) -> None:
        self.definitions = definitions

    def create_app(
        self,
        config: Mapping[str, Any] | None = None,
        users: Mapping[str, str] | None = None,
    ) -> FastAPI:
        """Create a host app; ``users`` turns the authentication gate on."""
        server = FastAPI()
        host = Host(
            factory=InMemoryCollectionFactory(self.definitions),
            server=server,
            authentication=InMemoryAuthentication(users) if users else None,
        )
        CollectionRestPlugin(host, config).run()
        return server

    def create_client(self, **kwargs: Any) -> TestClient:
        """Create a test client for an app built with :meth:`create_app`."""
        return TestClient(self.create_app(**kwargs))
