"""FastAPI middleware for observability.

Provides correlation ID injection and request/response logging.
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from multichat.observability.constants import CORRELATION_ID_HEADER, LogEvents
from multichat.observability.context import set_correlation_id
from multichat.observability.sanitizer import sanitize_headers

logger = structlog.get_logger(__name__)


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """Extract or generate a correlation ID for every request.

    The ID comes from the ``X-Correlation-ID`` header when the caller sent
    one, otherwise a fresh UUID4. It is stored in a ContextVar, bound to the
    structlog context and echoed back on the response.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        correlation_id = request.headers.get(CORRELATION_ID_HEADER) or str(uuid.uuid4())

        set_correlation_id(correlation_id)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=correlation_id)

        response = await call_next(request)
        response.headers[CORRELATION_ID_HEADER] = correlation_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log request start, completion and timing.

    For ``/api/chat/stream`` the completion entry is written when the
    response headers go out; the stream itself logs its own completion.
    """

    def __init__(
        self,
        app: ASGIApp,
        log_request_headers: bool = False,
        exclude_paths: set[str] | None = None,
    ) -> None:
        """Initialize the middleware.

        Args:
            app: The ASGI application.
            log_request_headers: Include (sanitized) request headers in the start entry.
            exclude_paths: Paths to exclude from logging (e.g., health checks).
        """
        super().__init__(app)
        self.log_request_headers = log_request_headers
        self.exclude_paths = exclude_paths or {"/health", "/ready"}

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in self.exclude_paths:
            return await call_next(request)

        start_time = time.perf_counter()

        request_context = {
            "method": request.method,
            "path": request.url.path,
            "query": str(request.query_params) if request.query_params else None,
            "client_ip": self._get_client_ip(request),
            "user_agent": request.headers.get("user-agent"),
        }
        if self.log_request_headers:
            request_context["headers"] = sanitize_headers(dict(request.headers))

        logger.info(
            LogEvents.REQUEST_STARTED,
            **{k: v for k, v in request_context.items() if v is not None},
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            duration_ms = int((time.perf_counter() - start_time) * 1000)
            logger.error(
                LogEvents.REQUEST_FAILED,
                **request_context,
                duration_ms=duration_ms,
                error_type=type(exc).__name__,
                error_message=str(exc),
            )
            raise

        response_context = {
            **request_context,
            "status_code": response.status_code,
            "duration_ms": int((time.perf_counter() - start_time) * 1000),
        }

        if response.status_code >= 500:
            logger.error(LogEvents.REQUEST_FAILED, **response_context)
        elif response.status_code >= 400:
            logger.warning(LogEvents.REQUEST_COMPLETED, **response_context)
        else:
            logger.info(LogEvents.REQUEST_COMPLETED, **response_context)

        return response

    def _get_client_ip(self, request: Request) -> str:
        """Extract client IP from request, considering proxies."""
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip

        if request.client:
            return request.client.host

        return "unknown"
