"""Controller translating REST requests into collection operations."""

import json
from collections.abc import Mapping
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.requests import Request

from collrest.auth.gate import authorize
from collrest.auth.protocol import AuthenticationService
from collrest.collections.protocol import Collection, CollectionFactory, get_field_ref
from collrest.config.settings import RestSettings
from collrest.core.errors import (
    BadRequestError,
    CollectionNotFoundError,
    DelegateError,
    DocumentNotFoundError,
    FieldNotFoundError,
)
from collrest.core.logging import get_logger

from .declaration import MiddlewareKind, MiddlewareSpec
from .paths import RoutePaths, paths_for
from .response import (
    ResponseContext,
    describe_error,
    fail_envelope,
    get_response_context,
    success_envelope,
)


logger = get_logger(__name__)

_JSON_TYPES = ("application/json",)
_FORM_TYPES = ("application/x-www-form-urlencoded",)


def _validation_details(err: Exception) -> dict[str, Any] | None:
    errors = getattr(err, "errors", None)
    if isinstance(errors, Mapping):
        return {"errors": dict(errors)}
    return None


def _pick_field(doc: Any, field: str) -> Any:
    if isinstance(doc, Mapping):
        return doc.get(field)
    return getattr(doc, field, None)


def _field_attr(field: Any, *names: str) -> Any:
    for name in names:
        if isinstance(field, Mapping):
            if name in field:
                return field[name]
        elif hasattr(field, name):
            return getattr(field, name)
    return None


class Controller:
    """Builds the REST pipeline around a collection factory.

    The controller holds no per-request state; everything a request needs
    is kept on ``request.state`` (``body``, ``user``, ``collection``,
    ``document_id``, ``field`` and ``response``).
    """

    def __init__(
        self,
        factory: CollectionFactory,
        authentication: AuthenticationService | None = None,
        settings: RestSettings | None = None,
    ) -> None:
        self._collection_factory = factory
        self._authentication = authentication
        self.settings = settings or RestSettings()
        self.paths: RoutePaths = paths_for(self.settings.path_style)

    @property
    def auth_enabled(self) -> bool:
        return self.settings.auth_active(self._authentication)

    @property
    def middleware(self) -> list[MiddlewareSpec]:
        """The controller pipeline, in the order it must be bound."""
        return [
            *self._get_global_middleware(),
            *(self._get_auth_middleware() if self.auth_enabled else []),
            *self._get_parameter_middleware(),
            *self._get_routes(),
            *self._get_response_middleware(),
        ]

    def _get_global_middleware(self) -> list[MiddlewareSpec]:
        return [
            MiddlewareSpec("global.body", MiddlewareKind.USE, self._parse_body),
        ]

    def _get_auth_middleware(self) -> list[MiddlewareSpec]:
        return [
            MiddlewareSpec("auth", MiddlewareKind.USE, self._authorize_request),
            MiddlewareSpec(
                "token",
                MiddlewareKind.ROUTE,
                self._get_token,
                path=self.paths.token,
                method="GET",
            ),
        ]

    def _get_parameter_middleware(self) -> list[MiddlewareSpec]:
        return [
            MiddlewareSpec(
                "param.coll",
                MiddlewareKind.PARAM,
                self._attach_collection_to_request,
                path="coll",
            ),
            MiddlewareSpec(
                "param.id", MiddlewareKind.PARAM, self._attach_id_to_request, path="id"
            ),
            MiddlewareSpec(
                "param.field",
                MiddlewareKind.PARAM,
                self._attach_field_to_request,
                path="field",
            ),
        ]

    def _get_routes(self) -> list[MiddlewareSpec]:
        paths = self.paths
        route = MiddlewareKind.ROUTE

        definitions = [
            MiddlewareSpec("route.definition", route, self._rest_define, path=p, method="GET")
            for p in paths.definitions
        ]
        return [
            *definitions,
            MiddlewareSpec("route.read.collection", route, self._rest_read_collection, path=paths.collection, method="GET"),
            MiddlewareSpec("route.read.document", route, self._rest_read, path=paths.document, method="GET"),
            MiddlewareSpec("route.read.field", route, self._rest_read, path=paths.field, method="GET"),
            MiddlewareSpec("route.create.collection", route, self._rest_create, path=paths.collection, method="POST"),
            MiddlewareSpec("route.update.collection", route, self._rest_update_collection, path=paths.collection, method="PUT"),
            MiddlewareSpec("route.update.document", route, self._rest_update, path=paths.document, method="PUT"),
            MiddlewareSpec("route.delete.collection", route, self._rest_del_collection, path=paths.collection, method="DELETE"),
            MiddlewareSpec("route.delete.document", route, self._rest_del, path=paths.document, method="DELETE"),
        ]  # fmt: skip

    def _get_response_middleware(self) -> list[MiddlewareSpec]:
        return [
            MiddlewareSpec("response.success", MiddlewareKind.SUCCESS, self._success_handler),
            MiddlewareSpec("response.error", MiddlewareKind.ERROR, self._error_handler),
        ]

    def get_definition_link(self, collection_name: str) -> str:
        """Get the path of a collection's definition endpoint."""
        return self.paths.definition_link.format(coll=collection_name)

    # -- global and auth stages ------------------------------------------

    async def _parse_body(self, request: Request) -> None:
        """Parse JSON or urlencoded bodies into ``request.state.body``."""
        get_response_context(request)
        request.state.body = {}

        content_type = request.headers.get("content-type", "")
        media_type = content_type.split(";", 1)[0].strip().lower()

        if media_type in _JSON_TYPES or media_type.endswith("+json"):
            raw = await request.body()
            if raw.strip():
                try:
                    request.state.body = json.loads(raw)
                except ValueError as e:
                    raise BadRequestError(f"Malformed JSON body: {e}") from e
        elif media_type in _FORM_TYPES:
            form = await request.form()
            request.state.body = dict(form)

    async def _authorize_request(self, request: Request) -> None:
        """Attach the authenticated user to the request."""
        if self._authentication is None:
            raise RuntimeError("Authentication service not set")
        request.state.user = await authorize(
            self._authentication, request.headers.get("authorization")
        )

    async def _get_token(self, request: Request, res: ResponseContext) -> None:
        if self._authentication is None:
            raise RuntimeError("Authentication service not set")
        try:
            token = await self._authentication.create_token(request.state.user)
        except Exception as e:
            raise DelegateError(e, status_code=500) from e
        res.data = {"token": token}

    # -- parameter capture -----------------------------------------------

    async def _attach_collection_to_request(self, request: Request, coll: str) -> None:
        """Add the named collection to the request, or fail with a 404."""
        instance = self._collection_factory.get_instance(coll)
        if not instance:
            raise CollectionNotFoundError(coll)
        request.state.collection = instance

    async def _attach_id_to_request(self, request: Request, document_id: str) -> None:
        """Add the document id to the request, cast if so configured.

        A value the collection cannot cast is a 400.
        """
        if self.settings.should_cast_ids:
            cast = getattr(request.state.collection, "cast_id", None)
            if cast is not None:
                try:
                    document_id = cast(document_id)
                except (TypeError, ValueError) as e:
                    raise DelegateError(e, status_code=400) from e
        request.state.document_id = document_id

    async def _attach_field_to_request(self, request: Request, field: str) -> None:
        """Add the field name to the request if the collection declares it."""
        if field not in request.state.collection.get_fields():
            raise FieldNotFoundError(field)
        request.state.field = field

    # -- response formatting ---------------------------------------------

    def _error_handler(self, err: Any, res: ResponseContext) -> JSONResponse:
        """Send the fail envelope for ``err``."""
        message, name = describe_error(err)
        log = logger.warning if res.status_code >= 500 else logger.debug
        log("request_failed", status_code=res.status_code, error=name, message=str(message))
        return JSONResponse(
            status_code=res.status_code,
            content=jsonable_encoder(fail_envelope(err, res)),
        )

    def _success_handler(self, res: ResponseContext) -> JSONResponse:
        """Send the success envelope."""
        return JSONResponse(
            status_code=res.status_code,
            content=jsonable_encoder(success_envelope(res)),
        )

    # -- CRUD routes -----------------------------------------------------

    async def _rest_read_collection(self, request: Request, res: ResponseContext) -> None:
        coll: Collection = request.state.collection
        query = dict(request.query_params)

        try:
            docs = await coll.read(query)
        except Exception as e:
            res.data = {"query": query}
            raise DelegateError(e, status_code=500) from e
        res.data = {"query": query, "data": docs}

    async def _rest_read(self, request: Request, res: ResponseContext) -> None:
        """Read a document, or one of its fields when the path names one."""
        coll: Collection = request.state.collection
        document_id = request.state.document_id
        field = getattr(request.state, "field", None)

        try:
            doc = await coll.read_by_id(document_id, field)
        except Exception as e:
            raise DelegateError(e, status_code=500) from e
        if doc is None:
            raise DocumentNotFoundError(document_id)
        res.data = {"data": _pick_field(doc, field) if field else doc}

    async def _rest_create(self, request: Request, res: ResponseContext) -> None:
        coll: Collection = request.state.collection

        try:
            doc = await coll.create(request.state.body)
        except Exception as e:
            res.data = _validation_details(e)
            raise DelegateError(e, status_code=400) from e
        res.data = {"data": doc}
        res.status_code = 201

    async def _rest_update_collection(self, request: Request, res: ResponseContext) -> None:
        coll: Collection = request.state.collection

        try:
            docs = await coll.update(request.state.body)
        except Exception as e:
            res.data = _validation_details(e)
            raise DelegateError(e, status_code=400) from e
        res.data = {"data": docs}

    async def _rest_update(self, request: Request, res: ResponseContext) -> None:
        coll: Collection = request.state.collection

        try:
            doc = await coll.update_by_id(request.state.document_id, request.state.body)
        except Exception as e:
            res.data = _validation_details(e)
            raise DelegateError(e, status_code=400) from e
        res.data = {"data": doc}

    async def _rest_del_collection(self, request: Request, res: ResponseContext) -> None:
        coll: Collection = request.state.collection

        try:
            await coll.delete()
        except Exception as e:
            raise DelegateError(e, status_code=500) from e

    async def _rest_del(self, request: Request, res: ResponseContext) -> None:
        coll: Collection = request.state.collection
        document_id = request.state.document_id

        try:
            doc = await coll.delete_by_id(document_id)
        except Exception as e:
            raise DelegateError(e, status_code=500) from e
        if doc is None:
            raise DocumentNotFoundError(document_id)
        res.data = {"data": doc}

    async def _rest_define(self, request: Request, res: ResponseContext) -> None:
        """Send one collection definition, or all of them without a collection."""
        coll = getattr(request.state, "collection", None)
        if coll is not None:
            res.data = self._get_collection_def(coll)
            return

        res.data = {
            "data": [
                {**self._get_collection_def(instance), "name": name}
                for name, instance in self._collection_factory.collections.items()
            ]
        }

    def _get_collection_def(self, coll: Collection) -> dict[str, Any]:
        """Describe a collection's fields and link its reference fields."""
        fields = coll.get_fields()
        fields_obj = {
            key: {
                "label": _field_attr(f, "label"),
                "name": _field_attr(f, "name"),
                "schemaType": _field_attr(f, "schemaType", "schema_type"),
            }
            for key, f in fields.items()
        }

        links: dict[str, str] = {}
        for key in coll.population_fields:
            ref = get_field_ref(fields.get(key))
            ref_coll = (
                self._collection_factory.get_instance_with_model(ref) if ref else None
            )
            if ref_coll is None:
                logger.warning(
                    "definition_ref_unresolved",
                    collection=coll.name,
                    field=key,
                    ref=ref,
                )
                continue
            links[key] = self.get_definition_link(ref_coll.name)

        return {
            "data": {
                "name": coll.name,
                "modelName": coll.model_name,
                "fields": fields_obj,
            },
            "links": {"fields": links},
        }
