"""Global exception handlers for error capture and logging.

Every error leaves the service as an ``ErrorResponse`` body with the
correlation ID header set, so callers can quote it when reporting issues.
"""

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from multichat.observability.constants import CORRELATION_ID_HEADER, LogEvents
from multichat.observability.context import get_correlation_id
from multichat.observability.logger import get_logger
from multichat.schemas.responses import ErrorResponse

logger = get_logger(__name__)

_VALUE_ERROR_PREFIX = "Value error, "

INTERNAL_ERROR_MESSAGE = "An internal error occurred. Please try again later."


def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    body = ErrorResponse(error=error, message=message, details=details)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers={CORRELATION_ID_HEADER: get_correlation_id()},
    )


def _validation_message(error: dict[str, Any]) -> str:
    """Turn one pydantic error into the message shown to API callers."""
    if error.get("type") == "missing":
        field = str(error["loc"][-1]) if error.get("loc") else "field"
        return "Prompt is required" if field == "prompt" else f"{field} is required"
    if error.get("type") in ("json_invalid", "model_attributes_type", "dict_type"):
        return "Invalid request body"
    message = str(error.get("msg", "Invalid request"))
    if message.startswith(_VALUE_ERROR_PREFIX):
        message = message[len(_VALUE_ERROR_PREFIX) :]
    return message


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        log_method = logger.warning if exc.status_code < 500 else logger.error
        log_method(
            LogEvents.ERROR_HTTP,
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=str(request.url.path),
            method=request.method,
        )
        return _error_response(exc.status_code, "http_error", str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Answer 400 with the first validation problem as the message.

        The ``ctx`` entries pydantic attaches may hold exception objects and
        are dropped so the details stay JSON-serializable.
        """
        errors = [
            {k: v for k, v in err.items() if k not in ("ctx", "input", "url")}
            for err in exc.errors()
        ]
        messages = [_validation_message(err) for err in errors] or ["Invalid request"]

        logger.warning(
            LogEvents.ERROR_VALIDATION,
            path=str(request.url.path),
            method=request.method,
            errors=messages,
        )

        return _error_response(
            status.HTTP_400_BAD_REQUEST,
            "validation_error",
            messages[0],
            details={"errors": errors},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Log the full error and answer 500 without exposing internals."""
        logger.error(
            LogEvents.ERROR_UNHANDLED,
            path=str(request.url.path),
            method=request.method,
            error_type=type(exc).__name__,
            error_message=str(exc),
            exc_info=True,
        )
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "internal_error",
            INTERNAL_ERROR_MESSAGE,
            details={"correlation_id": get_correlation_id()},
        )
