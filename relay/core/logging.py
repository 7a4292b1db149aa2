"""structlog setup with secret redaction.

`configure_structlog` runs once per process (app factory, CLI entry or
edge cold start); later `structlog.get_logger()` calls pick it up.

Output is JSON in production and coloured console lines when ``debug`` is
set. Every event goes through `redact_event` before rendering, and stdlib
records (httpx, uvicorn) go through `RedactingFilter`, so tokens, codes and
client secrets are masked even when a call site passes them by mistake.
"""

from __future__ import annotations

import logging
import sys

import structlog
from structlog.typing import EventDict, WrappedLogger

from relay.core.middleware import get_request_id
from relay.core.redaction import redact


def add_request_id(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    request_id = get_request_id()
    if request_id:
        event_dict.setdefault("request_id", request_id)
    return event_dict


def redact_event(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask secrets in every field of the event, the message included."""
    return redact(event_dict)


class RedactingFilter(logging.Filter):
    """Mask secrets in stdlib log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.args:
            record.msg, record.args = record.getMessage(), None
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)
        return True


def configure_structlog(debug: bool = False) -> None:
    """Configure structlog and the stdlib bridge. Safe to call repeatedly."""
    level = logging.DEBUG if debug else logging.INFO
    renderer = (
        structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            add_request_id,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            # Last before rendering so formatted tracebacks are masked too.
            redact_event,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        # Resolve sys.stdout per logger so redirected streams are honoured.
        logger_factory=structlog.WriteLoggerFactory(),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(format="%(levelname)s %(name)s %(message)s", stream=sys.stdout, level=level)
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RedactingFilter) for f in handler.filters):
            handler.addFilter(RedactingFilter())
