"""Tests for the demo host, driven through httpx's ASGI transport."""

import base64
from collections.abc import AsyncGenerator
from pathlib import Path

import httpx
import pytest

from collrest.config import RestSettings
from collrest.demo import create_demo_app


DEFINITIONS = """
[collections.books]
model_name = "Book"

[collections.books.fields.title]
label = "Title"
required = true

[users]
reader = "pw"
"""


@pytest.fixture
def definitions_file(tmp_path: Path) -> Path:
    path = tmp_path / "collections.toml"
    path.write_text(DEFINITIONS)
    return path


@pytest.fixture
async def demo_client(definitions_file: Path) -> AsyncGenerator[httpx.AsyncClient, None]:
    server, _ = create_demo_app(definitions_file, RestSettings(base_path="/rest"))
    transport = httpx.ASGITransport(app=server)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


class TestDemoApp:
    async def test_health(self, demo_client: httpx.AsyncClient) -> None:
        response = await demo_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "pass"
        assert body["details"]["auth_enabled"] is True
        assert body["details"]["collections"] == 1

    async def test_users_table_enables_auth(self, demo_client: httpx.AsyncClient) -> None:
        response = await demo_client.get("/rest/collection/books")
        assert response.status_code == 400

        credentials = base64.b64encode(b"reader:pw").decode()
        response = await demo_client.post(
            "/rest/collection/books",
            json={"title": "Dune"},
            headers={"Authorization": f"Basic {credentials}"},
        )
        assert response.status_code == 201
        assert response.json()["data"]["title"] == "Dune"
