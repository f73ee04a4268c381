"""Request-scoped response state and envelope assembly."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from starlette.requests import Request


@dataclass
class ResponseContext:
    """What a handler wants sent back: the status and extra envelope keys."""

    status_code: int = 200
    data: dict[str, Any] | None = None


def get_response_context(request: Request) -> ResponseContext:
    """Return the request's response context, creating it if needed."""
    res = getattr(request.state, "response", None)
    if res is None:
        res = ResponseContext()
        request.state.response = res
    return res


def _exception_message(err: BaseException) -> str:
    # str(KeyError("x")) is "'x'"
    if len(err.args) == 1 and isinstance(err.args[0], str):
        return err.args[0]
    return str(err)


def describe_error(err: Any) -> tuple[Any, str]:
    """Return the ``(message, data)`` pair reported for an error value.

    Exceptions report their message and their ``name`` attribute (falling
    back to the class name). Any other value, mappings included, is itself
    the message; a mapping may still name the error with its ``name`` key.
    """
    if isinstance(err, BaseException):
        name = getattr(err, "name", None) or type(err).__name__
        return _exception_message(err), name
    if isinstance(err, Mapping):
        return err, err.get("name") or "Error"
    return err, "Error"


def success_envelope(res: ResponseContext) -> dict[str, Any]:
    return {**(res.data or {}), "status": "success", "code": res.status_code}


def fail_envelope(err: Any, res: ResponseContext) -> dict[str, Any]:
    message, name = describe_error(err)
    return {
        **(res.data or {}),
        "status": "fail",
        "code": res.status_code,
        "message": message,
        "data": name,
    }
