"""Structured logging for the access key service.

structlog is configured once by configure_logging(): JSON lines for
deployments, the console renderer for local development.

Per-request context lives in structlog's own contextvars. RequestIDMiddleware
binds ``request_id`` with bind_request_context() and drops it with
clear_request_context(), so the store write and the audit write of one key
mutation log under one identifier.

Secret material must never reach a log line. redact_secrets() is the last
processor before rendering and replaces the value of any field whose name
marks it as credential material.
"""

import logging
import sys

import structlog
from structlog.types import EventDict, Processor

# Field names whose values are replaced before rendering.
REDACTED_FIELDS: frozenset[str] = frozenset({"secret", "private_key", "password"})

REDACTED_VALUE = "[REDACTED]"


def redact_secrets(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    for name in REDACTED_FIELDS.intersection(event_dict):
        event_dict[name] = REDACTED_VALUE
    return event_dict


def configure_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """Configure structlog for the process.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
        json_output: JSON lines when True, coloured console output otherwise.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        redact_secrets,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "accesskeys") -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request_context(request_id: str) -> None:
    """Attach ``request_id`` to every log line of the current request."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


# Defaults until main.py reconfigures from the environment
configure_logging()
