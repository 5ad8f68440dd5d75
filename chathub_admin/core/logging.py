"""
core/logging.py
---------------
Structured logging for the admin backend using structlog.
DEBUG=true  → human-readable console output
DEBUG=false → JSON, one event per line

Events are key/value pairs: store failures carry collection and operation,
batch failures carry batch and item, approval changes carry company_id,
status and actor_id. Every line is tagged with the service name and
environment so exports from several deployments can be told apart.
"""

import logging
import sys

import structlog

from chathub_admin.core.config import settings


def add_service_context(logger, method_name, event_dict):
    event_dict.setdefault("service", settings.APP_NAME)
    event_dict.setdefault("env", settings.APP_ENV)
    return event_dict


def configure_logging() -> None:
    log_level = logging.DEBUG if settings.DEBUG else logging.INFO

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    if not settings.DEBUG:
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
        # aiosqlite logs every cursor call at DEBUG
        logging.getLogger("aiosqlite").setLevel(logging.WARNING)

    processors = [
        structlog.contextvars.merge_contextvars,
        add_service_context,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.DEBUG:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = __name__):
    return structlog.get_logger(name)
