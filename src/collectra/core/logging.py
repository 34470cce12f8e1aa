"""structlog setup for Collectra.

Every event carries a correlation ID. The HTTP middleware binds the one sent
in X-Correlation-ID; CLI runs get a fresh one per event.
"""

import logging
import sys
import uuid
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from collectra.core.config import Settings, get_settings


def new_correlation_id() -> str:
    return f"cid_{uuid.uuid4().hex[:12]}"


def add_correlation_id(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Fill in correlation_id when nothing bound one to the context."""
    event_dict.setdefault("correlation_id", new_correlation_id())
    return event_dict


def add_logger_name(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    # structlog.stdlib.add_logger_name expects a stdlib logger, not PrintLogger
    event_dict["logger"] = getattr(logger, "name", "collectra")
    return event_dict


def rename_message_field(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Emit the event text as "message" for log shippers."""
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def build_renderer(settings: Settings) -> tuple[Processor, bool]:
    """Pick the final renderer and whether loggers may be cached.

    Console output is for people at a terminal; everything else is JSON.
    """
    if settings.is_development or settings.log_format == "console":
        return structlog.dev.ConsoleRenderer(colors=True, exception_formatter=structlog.dev.plain_traceback), False
    return structlog.processors.JSONRenderer(), True


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog and the stdlib loggers used by uvicorn and SQLAlchemy."""
    settings = settings or get_settings()
    level = getattr(logging, settings.log_level)
    renderer, cache_logger = build_renderer(settings)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        add_correlation_id,
        rename_message_field,
        renderer,
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=cache_logger,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        logging.getLogger(name).setLevel(level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name or "collectra")


class LoggingContext:
    """Bind key/value pairs to every event logged inside the block.

    Example:
        with LoggingContext(session_id="ses_1", actor_id="user-1"):
            service_logger.info("Session transitioned")
    """

    def __init__(self, **kwargs: str) -> None:
        self.context = kwargs

    def __enter__(self) -> "LoggingContext":
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.context)


def bind_correlation_id(correlation_id: str) -> None:
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
