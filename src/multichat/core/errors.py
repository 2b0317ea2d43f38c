"""Error taxonomy shared by clients, providers and the HTTP layer."""

from __future__ import annotations

from enum import Enum


class ErrorCategory(str, Enum):
    """Classification of a provider failure."""

    CONFIGURATION = "configuration"
    AUTHENTICATION = "authentication"
    PAYMENT = "payment"
    RATE_LIMIT = "rate_limit"
    NOT_FOUND = "not_found"
    INVALID_REQUEST = "invalid_request"
    UPSTREAM = "upstream"
    TIMEOUT = "timeout"
    NETWORK = "network"
    PROTOCOL = "protocol"
    INTERNAL = "internal"


# Human-readable titles used in error messages shown to users
CATEGORY_TITLES: dict[ErrorCategory, str] = {
    ErrorCategory.CONFIGURATION: "Configuration Error",
    ErrorCategory.AUTHENTICATION: "Authentication Error",
    ErrorCategory.PAYMENT: "Payment Required",
    ErrorCategory.RATE_LIMIT: "Rate Limit",
    ErrorCategory.NOT_FOUND: "Not Found",
    ErrorCategory.INVALID_REQUEST: "Invalid Request",
    ErrorCategory.UPSTREAM: "API error",
    ErrorCategory.TIMEOUT: "Timeout",
    ErrorCategory.NETWORK: "Network Error",
    ErrorCategory.PROTOCOL: "Stream Error",
    ErrorCategory.INTERNAL: "Internal Error",
}

# Default explanation per category when the upstream gives nothing better
CATEGORY_HINTS: dict[ErrorCategory, str] = {
    ErrorCategory.AUTHENTICATION: "Invalid API key or insufficient credits",
    ErrorCategory.PAYMENT: "Please add credits to your account",
    ErrorCategory.RATE_LIMIT: "Too many requests, please try again later",
    ErrorCategory.NOT_FOUND: "Check the endpoint or deployment name",
    ErrorCategory.TIMEOUT: "Request timed out",
}

_TRANSIENT = frozenset({ErrorCategory.RATE_LIMIT, ErrorCategory.TIMEOUT, ErrorCategory.NETWORK})


def classify_status(status_code: int) -> ErrorCategory:
    """Map an upstream HTTP status code onto an error category."""
    if status_code == 401:
        return ErrorCategory.AUTHENTICATION
    if status_code == 402:
        return ErrorCategory.PAYMENT
    if status_code in (403, 429):
        return ErrorCategory.RATE_LIMIT
    if status_code == 404:
        return ErrorCategory.NOT_FOUND
    if status_code in (400, 422):
        return ErrorCategory.INVALID_REQUEST
    return ErrorCategory.UPSTREAM


class ConfigurationError(Exception):
    """Raised when required process configuration is missing."""

    pass


class ProviderError(Exception):
    """A classified failure of one provider call.

    Attributes:
        label: Upstream name used in messages (e.g. ``"DeepSeek"``).
        category: The error classification.
        status_code: Upstream HTTP status, when there was a response.
        detail: Raw upstream detail (truncated body, exception text).
    """

    def __init__(
        self,
        label: str,
        category: ErrorCategory,
        message: str | None = None,
        *,
        status_code: int | None = None,
        detail: str | None = None,
    ) -> None:
        self.label = label
        self.category = category
        self.status_code = status_code
        self.detail = detail
        self.message = message or self._default_message()
        super().__init__(self.message)

    @classmethod
    def from_status(cls, label: str, status_code: int, detail: str = "") -> ProviderError:
        """Build an error from a non-2xx upstream response."""
        category = classify_status(status_code)
        title = CATEGORY_TITLES[category]
        hint = CATEGORY_HINTS.get(category)
        if category is ErrorCategory.UPSTREAM or hint is None:
            suffix = f" - {detail}" if detail else ""
            message = f"{label} {title}: {status_code}{suffix}"
        else:
            message = f"{label} {title}: {hint}"
        return cls(label, category, message, status_code=status_code, detail=detail or None)

    @property
    def transient(self) -> bool:
        """Whether retrying elsewhere (a lower tier) is reasonable."""
        if self.category in _TRANSIENT:
            return True
        return (
            self.category is ErrorCategory.UPSTREAM
            and self.status_code is not None
            and self.status_code >= 500
        )

    def _default_message(self) -> str:
        title = CATEGORY_TITLES[self.category]
        hint = CATEGORY_HINTS.get(self.category)
        if self.detail:
            return f"{self.label} {title}: {self.detail}"
        if hint:
            return f"{self.label} {title}: {hint}"
        return f"{self.label} {title}"
