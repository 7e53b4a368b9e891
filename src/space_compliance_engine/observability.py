"""Structured logging setup.

All modules obtain their logger through get_logger(__name__) and log with
keyword context, e.g. ``logger.info("Assessment complete", framework=code)``.
"""

import logging
from typing import Any

import structlog

from space_compliance_engine.settings import Settings


def configure_logging(settings: Settings) -> None:
    """Configure structlog for JSON or console output.

    Args:
        settings: Service settings providing log_level and log_format.
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(format="%(message)s", level=level)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structured logger bound to the given module name.

    Args:
        name: Logger name, conventionally the calling module's __name__.

    Returns:
        A structlog logger accepting keyword context on every call.
    """
    return structlog.get_logger(name)
