"""Structured logging setup for collrest.

The plugin logs through structlog. Hosts that already configure structlog
can skip :func:`setup_logging`; the loggers returned by :func:`get_logger`
pick up whatever configuration is active.
"""

import inspect
import logging
import sys
from typing import Any

import structlog
from structlog.contextvars import merge_contextvars
from structlog.typing import Processor


def add_plugin_name(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Tag every event with the plugin that emitted it."""
    event_dict.setdefault("plugin", "collrest")
    return event_dict


def setup_logging(json_logs: bool = False, log_level_name: str = "INFO") -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        json_logs: Render events as JSON lines instead of console output
        log_level_name: Minimum level name (DEBUG, INFO, WARNING, ERROR)
    """
    level = getattr(logging, log_level_name.upper(), logging.INFO)

    processors: list[Processor] = [
        merge_contextvars,
        add_plugin_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
    ]
    if json_logs:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors += [
            structlog.dev.set_exc_info,
            structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(
        level=level,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    # uvicorn's access log duplicates what the host already records
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger, named after the calling module by default."""
    if name is None:
        frame = inspect.currentframe()
        caller = frame.f_back if frame else None
        name = caller.f_globals.get("__name__", "collrest") if caller else "collrest"
    return structlog.get_logger(name)  # type: ignore[no-any-return]


def get_plugin_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger bound with a ``category="plugin"`` field."""
    return get_logger(name or "collrest.plugin").bind(category="plugin")
