"""Plugin entry point: mounts the REST API on the host application."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from fastapi import FastAPI
from starlette.applications import Starlette

from collrest._version import __version__
from collrest.auth.protocol import AuthenticationService
from collrest.collections.protocol import CollectionFactory
from collrest.config.settings import RestSettings
from collrest.controller import Controller, bind_middleware
from collrest.core.logging import get_plugin_logger


logger = get_plugin_logger(__name__)


class HostProtocol(Protocol):
    """What the plugin needs from the host application."""

    factory: CollectionFactory
    authentication: AuthenticationService | None
    server: Starlette


@dataclass
class Host:
    """Minimal host wiring for applications without their own host object."""

    factory: CollectionFactory
    server: Starlette
    authentication: AuthenticationService | None = None


class CollectionRestPlugin:
    """REST API plugin for a collection-based host.

    ``config`` is merged over the defaults of :class:`RestSettings`; a
    ready :class:`RestSettings` instance is used as is.
    """

    name = "collrest"
    version = __version__

    def __init__(
        self,
        host: HostProtocol,
        config: Mapping[str, Any] | RestSettings | None = None,
    ) -> None:
        self.host = host
        if isinstance(config, RestSettings):
            self.settings = config
        else:
            self.settings = RestSettings.from_config(config)
        self.controller: Controller | None = None
        self.app: FastAPI | None = None

    @property
    def mounted(self) -> bool:
        return self.app is not None

    def run(self) -> FastAPI:
        """Build the controller and mount its API at ``base_path``."""
        if self.app is not None:
            logger.warning("plugin_already_mounted", base_path=self.settings.base_path)
            return self.app

        self.controller = Controller(
            self.host.factory,
            getattr(self.host, "authentication", None),
            self.settings,
        )
        self.app = bind_middleware(
            self.controller.middleware,
            FastAPI(
                title="collrest",
                version=self.version,
                openapi_url=None,
                docs_url=None,
                redoc_url=None,
            ),
        )
        self.host.server.mount(self.settings.base_path, self.app, name=self.name)

        logger.info(
            "plugin_mounted",
            base_path=self.settings.base_path,
            path_style=self.settings.path_style.value,
            auth_enabled=self.controller.auth_enabled,
            version=self.version,
        )
        return self.app

    def health_check(self) -> dict[str, Any]:
        """Report plugin status in the IETF health check format."""
        details: dict[str, Any] = {"mounted": self.mounted}
        if self.controller is not None:
            details.update(
                base_path=self.settings.base_path,
                path_style=self.settings.path_style.value,
                auth_enabled=self.controller.auth_enabled,
                collections=len(self.host.factory.collections),
            )
        return {
            "status": "pass" if self.mounted else "fail",
            "componentId": self.name,
            "componentType": "system_plugin",
            "version": self.version,
            "details": details,
        }
