"""
Structured Logging Module
=========================

structlog setup for the announcer. Console rendering (with rich tracebacks)
while debugging, JSON lines otherwise.
"""

import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import Processor

from a11y_announcer.config import get_settings

APP_NAME = "a11y-announcer"

# Third-party loggers that are too chatty at INFO.
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def add_app_context(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Stamp every event with the application name and version."""
    from a11y_announcer import __version__

    event_dict["app"] = APP_NAME
    event_dict["version"] = __version__
    return event_dict


def _renderer_chain(use_json: bool) -> list[Processor]:
    chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
    ]
    if use_json:
        chain += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        chain.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.rich_traceback,
            )
        )
    return chain


def setup_logging(
    level: Optional[str] = None,
    json_logs: Optional[bool] = None,
) -> None:
    """
    Configure structlog and the standard library root logger.

    Call once at startup; calling again replaces the configuration.

    Args:
        level: Log level name. Defaults to ``settings.server.log_level``.
        json_logs: Force JSON output. Defaults to ``not settings.server.debug``.
    """
    settings = get_settings()
    log_level = getattr(logging, (level or settings.server.log_level).upper())
    use_json = (not settings.server.debug) if json_logs is None else json_logs

    structlog.configure(
        processors=_renderer_chain(use_json),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


class LogContext:
    """
    Binds key-value pairs to every log line emitted inside the block.

    ``AccessibilityService.on_scene_loaded`` uses it to tag the scene name.
    """

    def __init__(self, **kwargs: Any) -> None:
        self.context = kwargs

    def __enter__(self) -> "LogContext":
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.context.keys())
