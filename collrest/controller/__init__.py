"""REST controller: middleware descriptors, route handlers and binding."""

from .binding import bind_middleware
from .controller import Controller
from .declaration import MiddlewareKind, MiddlewareSpec
from .paths import FLAT, PREFIXED, RoutePaths, paths_for
from .response import ResponseContext


__all__ = [
    "Controller",
    "FLAT",
    "MiddlewareKind",
    "MiddlewareSpec",
    "PREFIXED",
    "ResponseContext",
    "RoutePaths",
    "bind_middleware",
    "paths_for",
]
