"""Constants for observability layer."""

# HTTP header for correlation ID propagation
CORRELATION_ID_HEADER = "X-Correlation-ID"

# Service identifier for logs
SERVICE_NAME = "multichat"


# Log event names following the pattern: {domain}.{action}.{result}
class LogEvents:
    """Standardized log event names."""

    # Service lifecycle
    SERVICE_STARTING = "service.lifecycle.starting"
    SERVICE_STOPPING = "service.lifecycle.stopping"

    # Batch chat
    CHAT_REQUEST_STARTED = "chat.request.started"
    CHAT_REQUEST_COMPLETED = "chat.request.completed"
    CHAT_REQUEST_FAILED = "chat.request.failed"

    # Provider calls
    PROVIDER_CALL_COMPLETED = "provider.call.completed"
    PROVIDER_CALL_FAILED = "provider.call.failed"
    PROVIDER_TIER_SKIPPED = "provider.tier.skipped"
    PROVIDER_TIER_FAILED = "provider.tier.failed"
    PROVIDER_UNEXPECTED_ERROR = "provider.call.crashed"

    # Upstream HTTP
    UPSTREAM_REQUEST_COMPLETED = "upstream.request.completed"
    UPSTREAM_REQUEST_FAILED = "upstream.request.failed"
    UPSTREAM_STREAM_MALFORMED = "upstream.stream.malformed"

    # SSE streaming
    SSE_STREAM_STARTED = "sse.stream.started"
    SSE_STREAM_COMPLETED = "sse.stream.completed"
    SSE_STREAM_DISCONNECTED = "sse.stream.disconnected"
    SSE_PRODUCER_FAILED = "sse.producer.failed"
    CLIENT_STREAM_MALFORMED = "client.stream.malformed"

    # Request lifecycle events
    REQUEST_STARTED = "request.started"
    REQUEST_COMPLETED = "request.completed"
    REQUEST_FAILED = "request.failed"

    # Error events
    ERROR_UNHANDLED = "error.unhandled"
    ERROR_VALIDATION = "error.validation"
    ERROR_HTTP = "error.http"


# Fields that should be redacted in logs
SENSITIVE_FIELDS = frozenset({
    "password",
    "secret",
    "token",
    "access_token",
    "api_key",
    "apikey",
    "api-key",
    "authorization",
    "client_secret",
    "nextauth_secret",
})

# Fields to redact (case-insensitive patterns)
SENSITIVE_FIELD_PATTERNS = frozenset({
    "password",
    "secret",
    "token",
    "key",
    "credential",
    "auth",
})

# Redaction placeholder
REDACTED_VALUE = "[REDACTED]"
