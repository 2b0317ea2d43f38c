"""Redaction of credentials before anything reaches the logs.

Provider calls carry API keys in headers (``Authorization``, ``api-key``) and
OAuth secrets in form bodies; these helpers strip them from whatever we log.
"""

import json
from typing import Any

from multichat.observability.constants import (
    REDACTED_VALUE,
    SENSITIVE_FIELD_PATTERNS,
    SENSITIVE_FIELDS,
)

_SENSITIVE_HEADERS = frozenset({"authorization", "api-key", "cookie", "x-api-key", "x-auth-token"})


def _is_sensitive_field(field_name: str) -> bool:
    field_lower = field_name.lower()
    if field_lower in SENSITIVE_FIELDS:
        return True
    return any(pattern in field_lower for pattern in SENSITIVE_FIELD_PATTERNS)


def sanitize(data: Any, max_depth: int = 10) -> Any:
    """Recursively redact sensitive fields from a structure.

    Args:
        data: The data to sanitize (dict, list, tuple or scalar).
        max_depth: Recursion limit; anything deeper is redacted wholesale.

    Returns:
        A sanitized copy; the input is never mutated.
    """
    if max_depth <= 0:
        return REDACTED_VALUE

    if isinstance(data, dict):
        return {
            k: REDACTED_VALUE
            if isinstance(k, str) and _is_sensitive_field(k)
            else sanitize(v, max_depth - 1)
            for k, v in data.items()
        }

    if isinstance(data, list):
        return [sanitize(item, max_depth - 1) for item in data]

    if isinstance(data, tuple):
        return tuple(sanitize(item, max_depth - 1) for item in data)

    return data


def sanitize_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact credential-bearing HTTP headers."""
    return {
        k: REDACTED_VALUE if k.lower() in _SENSITIVE_HEADERS else v for k, v in headers.items()
    }


def truncate_text(text: str, max_length: int = 500) -> str:
    """Shorten upstream bodies and prompts for log entries."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + f"... [truncated, {len(text)} total chars]"


def sanitize_body(body: str, max_length: int = 200) -> Any:
    """Prepare an upstream response body for logging.

    JSON bodies are parsed and redacted (token endpoints echo credentials in
    error payloads); anything else is truncated.
    """
    try:
        return sanitize(json.loads(body))
    except ValueError:
        return truncate_text(body, max_length)
