"""Chat endpoints for the multichat API."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse

from multichat.api.dependencies import get_orchestrator
from multichat.observability.constants import LogEvents
from multichat.observability.logger import get_logger
from multichat.schemas import ChatRequest, ChatResponse, ErrorResponse
from multichat.services import ChatOrchestrator

logger = get_logger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",  # Disable nginx buffering
}


@router.post(
    "",
    response_model=ChatResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse, "description": "Blank prompt or no service selected"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)
async def chat(
    chat_request: ChatRequest,
    orchestrator: Annotated[ChatOrchestrator, Depends(get_orchestrator)],
) -> ChatResponse:
    """
    Send one prompt to every selected service and wait for all of them.

    **Request:**
    - `prompt`: The user's prompt (must not be blank)
    - `selectedServices`: `{chatgpt, deepseek, github, microsoft}` booleans

    **Response:**
    - `success`: Always true; per-service failures are reported in `results`
    - `results`: One entry per selected service, in canonical order, with
      `response` text or `error` / `error_type`
    - `timestamp`: Epoch milliseconds
    """
    try:
        return await orchestrator.process_chat(chat_request)
    except Exception as e:
        logger.exception(LogEvents.CHAT_REQUEST_FAILED)
        raise HTTPException(status_code=500, detail="Internal server error") from e


@router.post(
    "/stream",
    responses={
        200: {"content": {"text/event-stream": {}}, "description": "Framed event stream"},
        400: {"model": ErrorResponse, "description": "Blank prompt or no service selected"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)
async def chat_stream(
    chat_request: ChatRequest,
    request: Request,
    orchestrator: Annotated[ChatOrchestrator, Depends(get_orchestrator)],
) -> StreamingResponse:
    """
    Stream every selected service's answer as it is produced.

    The body is a sequence of `data: <json>` records, one per fragment:
    `{service, provider, content, done, error?, error_type?, timestamp}`.
    Each service ends with exactly one record where `done` is true (carrying
    `error` if it failed). The stream ends with `data: [DONE]`.
    """
    return StreamingResponse(
        orchestrator.process_chat_stream(chat_request, request.is_disconnected),
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
    )
