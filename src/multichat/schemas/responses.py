"""Response schemas for the multichat API."""

import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from multichat.schemas.requests import ProviderId


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class AggregateResult(BaseModel):
    """Outcome of one provider in batch mode."""

    model_config = ConfigDict(frozen=True)

    service: str = Field(..., description="Provider display name")
    provider: ProviderId = Field(..., description="Provider identifier")
    response: str = Field(default="", description="Response text, empty on failure")
    error: str | None = Field(default=None, description="Error message if the provider failed")
    error_type: str | None = Field(default=None, description="Error category if failed")
    timestamp: int = Field(default_factory=now_ms, description="Completion time (epoch ms)")


class ChatResponse(BaseModel):
    """Response from the batch chat endpoint."""

    success: bool = Field(default=True)
    results: list[AggregateResult] = Field(default_factory=list)
    timestamp: int = Field(default_factory=now_ms)


class StreamEvent(BaseModel):
    """One unit of the multiplexed stream.

    Events from different providers interleave freely; consumers key their
    accumulation by ``service`` (or ``provider``).
    """

    model_config = ConfigDict(frozen=True)

    service: str = Field(..., description="Provider display name")
    provider: ProviderId = Field(..., description="Provider identifier")
    content: str = Field(default="", description="Content fragment")
    done: bool = Field(default=False, description="Terminal event for this provider")
    error: str | None = Field(default=None, description="Error message on a failed terminal event")
    error_type: str | None = Field(default=None, description="Error category if failed")
    timestamp: int = Field(default_factory=now_ms)

    def to_wire(self) -> dict[str, Any]:
        """Serialize for the event stream, omitting unset optional fields."""
        return self.model_dump(mode="json", exclude_none=True)


class ErrorResponse(BaseModel):
    """Error response from the API."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: dict[str, Any] | None = Field(default=None, description="Additional error details")
