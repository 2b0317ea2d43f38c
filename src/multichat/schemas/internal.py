"""Internal DTOs used within the multichat service."""

from pydantic import BaseModel, Field


class CodeSearchItem(BaseModel):
    """A single code search hit from the GitHub API."""

    name: str = Field(..., description="File name")
    path: str = Field(default="", description="Path inside the repository")
    repository: str = Field(default="", description="Repository full name (owner/repo)")
    language: str | None = Field(default=None, description="Repository primary language")


class CodeSearchResult(BaseModel):
    """Result of a GitHub code search."""

    total_count: int = Field(default=0, description="Total hits reported by GitHub")
    items: list[CodeSearchItem] = Field(default_factory=list)
    latency_ms: int = Field(default=0, description="Search latency in milliseconds")


class CompletionResult(BaseModel):
    """Result of a non-streaming chat completion call."""

    content: str = Field(..., description="Generated text")
    latency_ms: int = Field(..., description="Call latency in milliseconds")
    usage: dict | None = Field(default=None, description="Token usage if available")
