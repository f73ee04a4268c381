"""Middleware descriptors produced by the controller.

The controller describes its request pipeline as an ordered list of
:class:`MiddlewareSpec` entries; :func:`~collrest.controller.binding.bind_middleware`
turns that list into a FastAPI application.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any


class MiddlewareKind(str, Enum):
    """How a descriptor is attached to the application."""

    USE = "use"  # runs for every request before parameters and routes
    PARAM = "param"  # resolves a named path parameter
    ROUTE = "route"  # endpoint for one HTTP method and path
    SUCCESS = "success"  # formats the response after a route completed
    ERROR = "error"  # formats the response after an error was raised


@dataclass(frozen=True)
class MiddlewareSpec:
    """One entry of the controller's pipeline.

    ``path`` is a route path template for ROUTE entries and the parameter
    name for PARAM entries; it is ignored otherwise.
    """

    name: str
    kind: MiddlewareKind
    callback: Callable[..., Any]
    path: str = "/"
    method: str | None = None
