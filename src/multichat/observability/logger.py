"""Structured logging configuration using structlog.

JSON lines in production, coloured console output when debugging. Every
entry carries the service name and, inside a request, its correlation ID.
"""

import logging
import sys

import structlog
from structlog.typing import EventDict, Processor

from multichat.observability.constants import SERVICE_NAME
from multichat.observability.context import get_correlation_id


def add_correlation_id(
    logger: logging.Logger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor stamping the request correlation ID, if any."""
    correlation_id = get_correlation_id()
    if correlation_id:
        event_dict.setdefault("correlation_id", correlation_id)
    return event_dict


def add_service_name(
    logger: logging.Logger,  # noqa: ARG001
    method_name: str,  # noqa: ARG001
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor stamping the service name.

    ``service`` is also a field name used by chat log entries (the provider
    display name), so the service identity goes under ``app``.
    """
    event_dict["app"] = SERVICE_NAME
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    development_mode: bool = False,
) -> None:
    """Configure structlog on top of the stdlib root logger.

    Args:
        log_level: The log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: "json" for production, "console" for development.
        development_mode: Forces console output regardless of ``log_format``.
    """
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_service_name,
        add_correlation_id,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "console" or development_mode:
        processors: list[Processor] = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
        force=True,
    )

    # Reduce noise from third-party libraries
    for noisy in ("httpx", "httpcore", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("provider.call.completed", service="DeepSeek")
    """
    return structlog.get_logger(name)
