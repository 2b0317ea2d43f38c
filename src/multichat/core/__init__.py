"""Core configuration and error types."""

from multichat.core.config import Settings, get_settings, validate_startup
from multichat.core.errors import (
    ConfigurationError,
    ErrorCategory,
    ProviderError,
    classify_status,
)

__all__ = [
    "ConfigurationError",
    "ErrorCategory",
    "ProviderError",
    "Settings",
    "classify_status",
    "get_settings",
    "validate_startup",
]
