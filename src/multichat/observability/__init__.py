"""Observability layer for multichat.

Structured logging, request tracing via correlation IDs and uniform error
responses.

Usage:
    from multichat.observability import get_logger

    logger = get_logger(__name__)
    logger.info("chat.request.started", services=["ChatGPT"])
"""

from multichat.observability.context import (
    correlation_id_var,
    get_correlation_id,
    set_correlation_id,
)
from multichat.observability.handlers import register_exception_handlers
from multichat.observability.logger import configure_logging, get_logger
from multichat.observability.middleware import (
    CorrelationIDMiddleware,
    RequestLoggingMiddleware,
)
from multichat.observability.sanitizer import (
    sanitize,
    sanitize_body,
    sanitize_headers,
    truncate_text,
)

__all__ = [
    # Context
    "correlation_id_var",
    "get_correlation_id",
    "set_correlation_id",
    # Logger
    "configure_logging",
    "get_logger",
    # Handlers
    "register_exception_handlers",
    # Middleware
    "CorrelationIDMiddleware",
    "RequestLoggingMiddleware",
    # Sanitizer
    "sanitize",
    "sanitize_body",
    "sanitize_headers",
    "truncate_text",
]
