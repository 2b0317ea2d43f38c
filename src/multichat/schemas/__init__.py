"""Schemas package - request/response models for multichat."""

from multichat.schemas.internal import CodeSearchItem, CodeSearchResult, CompletionResult
from multichat.schemas.requests import (
    PROVIDER_DISPLAY_NAMES,
    ChatRequest,
    ProviderId,
    SelectedServices,
)
from multichat.schemas.responses import (
    AggregateResult,
    ChatResponse,
    ErrorResponse,
    StreamEvent,
    now_ms,
)

__all__ = [
    # Requests
    "ChatRequest",
    "ProviderId",
    "PROVIDER_DISPLAY_NAMES",
    "SelectedServices",
    # Responses
    "AggregateResult",
    "ChatResponse",
    "ErrorResponse",
    "StreamEvent",
    "now_ms",
    # Internal
    "CodeSearchItem",
    "CodeSearchResult",
    "CompletionResult",
]
