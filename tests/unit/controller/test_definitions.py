"""Tests for collection definition endpoints."""

from typing import Any

import pytest

from collrest.collections.inmem import InMemoryCollectionFactory
from collrest.controller import Controller, ResponseContext


POST_FIELDS = {
    "title": {"label": "Title", "name": "title", "schemaType": "String"},
    "content": {"label": "Content", "name": "content", "schemaType": "String"},
    "author": {"label": "Author", "name": "author", "schemaType": "ObjectId"},
}


class TestDefinitionLink:
    @pytest.mark.parametrize("name", ["posts", "users"])
    def test_link_path(self, controller: Controller, name: str) -> None:
        assert controller.get_definition_link(name) == f"/definitions/{name}"

    def test_flat_style_uses_same_link(self, flat_controller: Controller) -> None:
        assert flat_controller.get_definition_link("posts") == "/definitions/posts"


class TestDefine:
    """Test the definition route handler."""

    async def test_single_collection(
        self,
        controller: Controller,
        collection_factory: InMemoryCollectionFactory,
        make_request: Any,
        res: ResponseContext,
    ) -> None:
        """Test a definition with a linked reference field."""
        posts = collection_factory.get_instance("posts")

        await controller._rest_define(make_request(collection=posts), res)

        assert res.data == {
            "data": {"name": "posts", "modelName": "Post", "fields": POST_FIELDS},
            "links": {"fields": {"author": "/definitions/users"}},
        }

    async def test_collection_without_references(
        self,
        controller: Controller,
        collection_factory: InMemoryCollectionFactory,
        make_request: Any,
        res: ResponseContext,
    ) -> None:
        users = collection_factory.get_instance("users")

        await controller._rest_define(make_request(collection=users), res)

        assert res.data is not None
        assert res.data["links"] == {"fields": {}}
        assert set(res.data["data"]["fields"]) == {"username", "email"}

    async def test_all_collections(
        self,
        controller: Controller,
        make_request: Any,
        res: ResponseContext,
    ) -> None:
        """Test that every registered collection is listed under its key."""
        await controller._rest_define(make_request(), res)

        assert res.data is not None
        assert [d["name"] for d in res.data["data"]] == ["users", "posts"]
        assert [set(d) for d in res.data["data"]] == [{"data", "links", "name"}] * 2
        posts_def = res.data["data"][1]
        assert posts_def["links"] == {"fields": {"author": "/definitions/users"}}

    async def test_registry_key_is_kept_beside_collection_name(
        self,
        collection_factory: InMemoryCollectionFactory,
        make_request: Any,
        res: ResponseContext,
    ) -> None:
        """Test a collection registered under a key other than its own name."""
        posts = collection_factory.get_instance("posts")

        class AliasedFactory:
            collections = {"articles": posts}

            def get_instance(self, name: str) -> Any:
                return self.collections.get(name)

            def get_instance_with_model(self, model_name: str) -> Any:
                return collection_factory.get_instance_with_model(model_name)

        await Controller(AliasedFactory())._rest_define(make_request(), res)

        assert res.data is not None
        (entry,) = res.data["data"]
        assert entry["name"] == "articles"
        assert entry["data"]["name"] == "posts"

    async def test_unresolved_reference_is_skipped(
        self, make_request: Any, res: ResponseContext
    ) -> None:
        factory = InMemoryCollectionFactory(
            {
                "comments": {
                    "fields": {
                        "text": {"label": "Text", "schemaType": "String"},
                        "thread": {"label": "Thread", "ref": "Thread"},
                    }
                }
            }
        )
        controller = Controller(factory)

        await controller._rest_define(
            make_request(collection=factory.get_instance("comments")), res
        )

        assert res.data is not None
        assert res.data["links"] == {"fields": {}}
        assert res.data["data"]["modelName"] == "Comments"
