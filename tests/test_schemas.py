"""Tests for request and response schemas."""

import pytest
from pydantic import ValidationError

from multichat.schemas import (
    AggregateResult,
    ChatRequest,
    ProviderId,
    SelectedServices,
    StreamEvent,
)


class TestChatRequest:
    def test_parses_wire_format(self) -> None:
        request = ChatRequest.model_validate(
            {
                "prompt": "Explain recursion",
                "selectedServices": {"chatgpt": True, "github": True},
            }
        )

        assert request.prompt == "Explain recursion"
        assert request.providers == [ProviderId.CHATGPT, ProviderId.GITHUB]

    def test_providers_follow_canonical_order(self) -> None:
        request = ChatRequest(
            prompt="hi",
            selected_services=SelectedServices(microsoft=True, chatgpt=True, deepseek=True),
        )

        assert request.providers == [
            ProviderId.CHATGPT,
            ProviderId.DEEPSEEK,
            ProviderId.MICROSOFT,
        ]

    @pytest.mark.parametrize("prompt", ["", "   ", "\n\t"])
    def test_blank_prompt_rejected(self, prompt: str) -> None:
        with pytest.raises(ValidationError, match="Prompt is required"):
            ChatRequest.model_validate({"prompt": prompt, "selectedServices": {"chatgpt": True}})

    def test_prompt_kept_verbatim(self) -> None:
        request = ChatRequest.model_validate(
            {"prompt": "  padded  ", "selectedServices": {"deepseek": True}}
        )
        assert request.prompt == "  padded  "

    def test_empty_selection_rejected(self) -> None:
        with pytest.raises(ValidationError, match="At least one service must be selected"):
            ChatRequest.model_validate(
                {"prompt": "hi", "selectedServices": {"chatgpt": False, "deepseek": False}}
            )

    def test_missing_selection_rejected(self) -> None:
        with pytest.raises(ValidationError, match="At least one service must be selected"):
            ChatRequest.model_validate({"prompt": "hi"})


class TestSelectedServices:
    def test_of_builds_selection(self) -> None:
        selection = SelectedServices.of("deepseek", ProviderId.MICROSOFT)

        assert selection.model_dump() == {
            "chatgpt": False,
            "deepseek": True,
            "github": False,
            "microsoft": True,
        }

    def test_of_rejects_unknown_provider(self) -> None:
        with pytest.raises(ValueError):
            SelectedServices.of("bard")


def test_display_names() -> None:
    assert [p.display_name for p in ProviderId] == [
        "ChatGPT",
        "DeepSeek",
        "GitHub Copilot",
        "Microsoft Copilot",
    ]


class TestStreamEvent:
    def test_wire_form_omits_unset_error(self) -> None:
        event = StreamEvent(service="ChatGPT", provider=ProviderId.CHATGPT, content="Hel")

        wire = event.to_wire()

        assert wire["service"] == "ChatGPT"
        assert wire["provider"] == "chatgpt"
        assert wire["content"] == "Hel"
        assert wire["done"] is False
        assert "error" not in wire
        assert "error_type" not in wire
        assert isinstance(wire["timestamp"], int)

    def test_wire_form_of_failed_terminal(self) -> None:
        event = StreamEvent(
            service="DeepSeek",
            provider=ProviderId.DEEPSEEK,
            done=True,
            error="DeepSeek Payment Required: Please add credits to your account",
            error_type="payment",
        )

        wire = event.to_wire()

        assert wire["done"] is True
        assert wire["content"] == ""
        assert wire["error_type"] == "payment"

    def test_events_are_immutable(self) -> None:
        event = StreamEvent(service="ChatGPT", provider=ProviderId.CHATGPT)
        with pytest.raises(ValidationError):
            event.content = "changed"


def test_aggregate_result_defaults() -> None:
    result = AggregateResult(service="ChatGPT", provider=ProviderId.CHATGPT, response="hi")

    assert result.error is None
    assert result.timestamp > 0
