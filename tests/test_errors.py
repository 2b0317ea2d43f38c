"""Tests for the provider error taxonomy."""

import pytest

from multichat.core.errors import ErrorCategory, ProviderError, classify_status


@pytest.mark.parametrize(
    ("status_code", "category"),
    [
        (401, ErrorCategory.AUTHENTICATION),
        (402, ErrorCategory.PAYMENT),
        (403, ErrorCategory.RATE_LIMIT),
        (429, ErrorCategory.RATE_LIMIT),
        (404, ErrorCategory.NOT_FOUND),
        (400, ErrorCategory.INVALID_REQUEST),
        (500, ErrorCategory.UPSTREAM),
        (503, ErrorCategory.UPSTREAM),
    ],
)
def test_classify_status(status_code: int, category: ErrorCategory) -> None:
    assert classify_status(status_code) is category


class TestFromStatus:
    def test_payment_required_message(self) -> None:
        error = ProviderError.from_status("DeepSeek", 402, "insufficient balance")

        assert error.category is ErrorCategory.PAYMENT
        assert error.message == "DeepSeek Payment Required: Please add credits to your account"
        assert error.status_code == 402
        assert error.detail == "insufficient balance"

    def test_authentication_message(self) -> None:
        error = ProviderError.from_status("OpenAI", 401)

        assert error.message == (
            "OpenAI Authentication Error: Invalid API key or insufficient credits"
        )
        assert str(error) == error.message

    def test_upstream_message_carries_status_and_detail(self) -> None:
        error = ProviderError.from_status("OpenAI", 500, "boom")

        assert error.category is ErrorCategory.UPSTREAM
        assert error.message == "OpenAI API error: 500 - boom"

    def test_upstream_message_without_detail(self) -> None:
        error = ProviderError.from_status("OpenAI", 502)

        assert error.message == "OpenAI API error: 502"
        assert error.detail is None


class TestDefaultMessage:
    def test_timeout_uses_hint(self) -> None:
        assert ProviderError("X", ErrorCategory.TIMEOUT).message == "X Timeout: Request timed out"

    def test_detail_wins_over_hint(self) -> None:
        error = ProviderError("X", ErrorCategory.NETWORK, detail="connection refused")
        assert error.message == "X Network Error: connection refused"

    def test_explicit_message(self) -> None:
        error = ProviderError("X", ErrorCategory.CONFIGURATION, "X is not configured")
        assert error.message == "X is not configured"


class TestTransient:
    @pytest.mark.parametrize(
        "category", [ErrorCategory.RATE_LIMIT, ErrorCategory.TIMEOUT, ErrorCategory.NETWORK]
    )
    def test_transient_categories(self, category: ErrorCategory) -> None:
        assert ProviderError("X", category).transient

    def test_server_errors_are_transient(self) -> None:
        assert ProviderError.from_status("X", 503).transient

    @pytest.mark.parametrize("status_code", [400, 401, 402, 404])
    def test_client_errors_are_not_transient(self, status_code: int) -> None:
        assert not ProviderError.from_status("X", status_code).transient

    def test_internal_is_not_transient(self) -> None:
        assert not ProviderError("X", ErrorCategory.INTERNAL).transient
