"""Bind controller middleware descriptors onto a FastAPI application."""

import re
from collections.abc import Awaitable, Callable, Sequence
from http import HTTPStatus
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from collrest.core.errors import BadRequestError, CollectionRestError
from collrest.core.logging import get_logger

from .declaration import MiddlewareKind, MiddlewareSpec
from .response import ResponseContext, get_response_context


logger = get_logger(__name__)

_PATH_PARAM = re.compile(r"{(\w+)}")

RouteHandler = Callable[[Request, ResponseContext], Awaitable[None]]
SuccessHandler = Callable[[ResponseContext], Response]
ErrorHandler = Callable[[Any, ResponseContext], Response]


def _param_dependency(
    name: str, resolver: Callable[[Request, str], Awaitable[None]]
) -> Callable[[Request], Awaitable[None]]:
    async def dependency(request: Request) -> None:
        await resolver(request, request.path_params[name])

    dependency.__name__ = f"param_{name}"
    return dependency


def _route_endpoint(
    handler: RouteHandler, success: SuccessHandler
) -> Callable[[Request], Awaitable[Response]]:
    async def endpoint(request: Request) -> Response:
        res = get_response_context(request)
        await handler(request, res)
        return success(res)

    endpoint.__name__ = getattr(handler, "__name__", "endpoint").lstrip("_")
    return endpoint


def _error_handlers(error: ErrorHandler) -> dict[Any, Callable[..., Any]]:
    async def rest_error_handler(
        request: Request, exc: CollectionRestError
    ) -> Response:
        res = get_response_context(request)
        res.status_code = exc.status_code
        return error(exc.error, res)

    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> Response:
        res = get_response_context(request)
        res.status_code = exc.status_code
        err = CollectionRestError(str(exc.detail), status_code=exc.status_code)
        err.name = HTTPStatus(exc.status_code).phrase
        return error(err, res)

    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> Response:
        res = get_response_context(request)
        res.status_code = 400
        return error(BadRequestError(str(exc)), res)

    return {
        CollectionRestError: rest_error_handler,
        StarletteHTTPException: http_error_handler,
        RequestValidationError: validation_error_handler,
    }


def _default_success(res: ResponseContext) -> Response:
    return JSONResponse(status_code=res.status_code, content=res.data)


def bind_middleware(
    middleware: Sequence[MiddlewareSpec], app: FastAPI | None = None
) -> FastAPI:
    """Apply a controller pipeline to ``app`` (a new FastAPI app by default).

    USE entries become dependencies of every route, in order. PARAM entries
    run for each route whose path template names the parameter, after the
    USE entries and in the order the parameters were declared. ROUTE entries
    are registered in list order, so earlier templates win on overlap. The
    SUCCESS entry formats every completed route and the ERROR entry formats
    every raised :class:`CollectionRestError` and HTTP error.
    """
    if app is None:
        app = FastAPI(openapi_url=None, docs_url=None, redoc_url=None)

    steps: list[Callable[..., Any]] = []
    params: dict[str, Callable[[Request, str], Awaitable[None]]] = {}
    routes: list[MiddlewareSpec] = []
    success: SuccessHandler = _default_success
    error: ErrorHandler | None = None

    for spec in middleware:
        match spec.kind:
            case MiddlewareKind.USE:
                steps.append(spec.callback)
            case MiddlewareKind.PARAM:
                params[spec.path] = spec.callback
            case MiddlewareKind.ROUTE:
                routes.append(spec)
            case MiddlewareKind.SUCCESS:
                success = spec.callback
            case MiddlewareKind.ERROR:
                error = spec.callback

    router = APIRouter(dependencies=[Depends(step) for step in steps])
    param_order = list(params)

    for spec in routes:
        named = set(_PATH_PARAM.findall(spec.path))
        dependencies = [
            Depends(_param_dependency(name, params[name]))
            for name in param_order
            if name in named
        ]
        router.add_api_route(
            spec.path,
            _route_endpoint(spec.callback, success),
            methods=[spec.method or "GET"],
            name=spec.name,
            dependencies=dependencies,
        )
        logger.debug(
            "route_bound", name=spec.name, method=spec.method, path=spec.path
        )

    app.include_router(router)

    if error is not None:
        for exc_class, handler in _error_handlers(error).items():
            app.add_exception_handler(exc_class, handler)

    return app
