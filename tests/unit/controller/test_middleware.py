"""Tests for the controller pipeline and request body parsing."""

from typing import Any

import pytest

from collrest.config.settings import RestSettings
from collrest.controller import Controller, MiddlewareKind
from collrest.core.errors import BadRequestError


ROUTE_NAMES = [
    "route.definition",
    "route.definition",
    "route.read.collection",
    "route.read.document",
    "route.read.field",
    "route.create.collection",
    "route.update.collection",
    "route.update.document",
    "route.delete.collection",
    "route.delete.document",
]


class TestMiddlewareOrder:
    """Test the order the pipeline is declared in."""

    def test_without_auth(self, controller: Controller) -> None:
        names = [spec.name for spec in controller.middleware]

        assert not controller.auth_enabled
        assert names == [
            "global.body",
            "param.coll",
            "param.id",
            "param.field",
            *ROUTE_NAMES,
            "response.success",
            "response.error",
        ]

    def test_with_auth(self, auth_controller: Controller) -> None:
        names = [spec.name for spec in auth_controller.middleware]

        assert auth_controller.auth_enabled
        assert names[:3] == ["global.body", "auth", "token"]
        assert names[3:6] == ["param.coll", "param.id", "param.field"]
        assert names[-2:] == ["response.success", "response.error"]

    def test_route_table(self, controller: Controller) -> None:
        routes = [
            (spec.method, spec.path)
            for spec in controller.middleware
            if spec.kind is MiddlewareKind.ROUTE
        ]

        assert routes == [
            ("GET", "/definitions"),
            ("GET", "/definitions/{coll}"),
            ("GET", "/collection/{coll}"),
            ("GET", "/collection/{coll}/{id}"),
            ("GET", "/collection/{coll}/{id}/{field}"),
            ("POST", "/collection/{coll}"),
            ("PUT", "/collection/{coll}"),
            ("PUT", "/collection/{coll}/{id}"),
            ("DELETE", "/collection/{coll}"),
            ("DELETE", "/collection/{coll}/{id}"),
        ]

    def test_flat_route_table(self, flat_controller: Controller) -> None:
        paths = {
            spec.path
            for spec in flat_controller.middleware
            if spec.kind is MiddlewareKind.ROUTE
        }

        assert paths == {"/definitions/{coll}", "/{coll}", "/{coll}/{id}", "/{coll}/{id}/{field}"}

    def test_auth_can_be_forced_off(self, collection_factory: Any, authentication: Any) -> None:
        controller = Controller(
            collection_factory, authentication, RestSettings(auth_enabled=False)
        )

        assert "auth" not in [spec.name for spec in controller.middleware]


class TestParseBody:
    """Test the global body parser."""

    async def test_json_body(self, controller: Controller, make_request: Any) -> None:
        request = make_request(method="POST", body={"title": "x"})

        await controller._parse_body(request)

        assert request.state.body == {"title": "x"}

    async def test_urlencoded_body(self, controller: Controller, make_request: Any) -> None:
        request = make_request(
            method="POST",
            body=b"title=x&content=y",
            headers={"content-type": "application/x-www-form-urlencoded"},
        )

        await controller._parse_body(request)

        assert request.state.body == {"title": "x", "content": "y"}

    async def test_missing_body_defaults_to_empty(
        self, controller: Controller, make_request: Any
    ) -> None:
        request = make_request()

        await controller._parse_body(request)

        assert request.state.body == {}
        assert request.state.response.status_code == 200

    async def test_malformed_json_is_400(
        self, controller: Controller, make_request: Any
    ) -> None:
        request = make_request(
            method="POST", body=b"{nope", headers={"content-type": "application/json"}
        )

        with pytest.raises(BadRequestError):
            await controller._parse_body(request)
