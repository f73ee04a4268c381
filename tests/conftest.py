"""Shared test fixtures and configuration for collrest tests.

Controller-level tests build real Starlette requests from an ASGI scope and
run them against in-memory collaborators; nothing external is mocked except
where a test needs a failing collaborator.
"""

import json
from collections.abc import Callable
from typing import Any

import pytest
from starlette.requests import Request

from collrest.auth.memory import InMemoryAuthentication
from collrest.collections.inmem import InMemoryCollectionFactory
from collrest.config.settings import RestSettings
from collrest.controller import Controller, ResponseContext
from collrest.core.logging import setup_logging


RequestFactory = Callable[..., Request]


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom settings."""
    config.option.asyncio_mode = "auto"
    setup_logging(json_logs=False, log_level_name="DEBUG")


@pytest.fixture
def make_request() -> RequestFactory:
    """Build a request whose ``state`` is pre-populated.

    Keyword arguments other than the ones below are copied onto
    ``request.state`` (e.g. ``collection=...``, ``document_id=...``).
    """

    def _make(
        method: str = "GET",
        path: str = "/",
        query_string: bytes = b"",
        headers: dict[str, str] | None = None,
        body: bytes | dict[str, Any] | list[Any] | None = None,
        **state: Any,
    ) -> Request:
        raw_body = b""
        header_map = dict(headers or {})
        if isinstance(body, bytes):
            raw_body = body
        elif body is not None:
            raw_body = json.dumps(body).encode()
            header_map.setdefault("content-type", "application/json")

        scope = {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": query_string,
            "headers": [
                (k.lower().encode(), v.encode()) for k, v in header_map.items()
            ],
        }
        sent = False

        async def receive() -> dict[str, Any]:
            nonlocal sent
            if sent:
                return {"type": "http.disconnect"}
            sent = True
            return {"type": "http.request", "body": raw_body, "more_body": False}

        request = Request(scope, receive)
        for key, value in state.items():
            setattr(request.state, key, value)
        return request

    return _make


@pytest.fixture
def res() -> ResponseContext:
    return ResponseContext()


@pytest.fixture
def controller(collection_factory: InMemoryCollectionFactory) -> Controller:
    return Controller(collection_factory)


@pytest.fixture
def auth_controller(
    collection_factory: InMemoryCollectionFactory,
    authentication: InMemoryAuthentication,
) -> Controller:
    return Controller(collection_factory, authentication)


@pytest.fixture
def flat_controller(collection_factory: InMemoryCollectionFactory) -> Controller:
    return Controller(collection_factory, settings=RestSettings(path_style="flat"))
