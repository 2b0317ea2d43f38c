"""Tests for the multichat CLI."""

from __future__ import annotations

import json
from collections.abc import Iterator
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from multichat import __version__
from multichat.cli import app
from multichat.client import ClientError
from multichat.schemas import AggregateResult, ChatResponse, ProviderId, StreamEvent
from multichat.services.framing import DONE, encode_event


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def mock_client() -> Iterator[MagicMock]:
    """Patch the service client used by every command."""
    with patch("multichat.cli.main.MultiChatClient") as mock_client_class:
        client = MagicMock()
        mock_client_class.return_value.__enter__.return_value = client
        yield client


def answer(provider: ProviderId, text: str = "", error: str | None = None) -> AggregateResult:
    return AggregateResult(
        service=provider.display_name,
        provider=provider,
        response=text,
        error=error,
        error_type="payment" if error else None,
    )


def chunk(provider: ProviderId, content: str = "", **kwargs) -> StreamEvent:
    return StreamEvent(
        service=provider.display_name, provider=provider, content=content, **kwargs
    )


def test_version(runner: CliRunner) -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert f"multichat version {__version__}" in result.output


class TestAskCommand:
    """Tests for the ask command."""

    def test_ask_json(self, runner: CliRunner, mock_client: MagicMock) -> None:
        mock_client.complete.return_value = ChatResponse(
            results=[answer(ProviderId.CHATGPT, "Recursion is...")]
        )

        result = runner.invoke(app, ["ask", "-s", "chatgpt", "--json", "What is recursion?"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["results"][0]["response"] == "Recursion is..."
        mock_client.complete.assert_called_once_with("What is recursion?", [ProviderId.CHATGPT])

    def test_ask_defaults_to_all_services(
        self, runner: CliRunner, mock_client: MagicMock
    ) -> None:
        mock_client.complete.return_value = ChatResponse(results=[])

        result = runner.invoke(app, ["ask", "hi"])

        assert result.exit_code == 0
        mock_client.complete.assert_called_once_with("hi", None)

    def test_ask_renders_panels(self, runner: CliRunner, mock_client: MagicMock) -> None:
        mock_client.complete.return_value = ChatResponse(
            results=[
                answer(ProviderId.CHATGPT, "Short answer"),
                answer(ProviderId.DEEPSEEK, error="Out of credits"),
            ]
        )

        result = runner.invoke(app, ["ask", "hi"])

        assert result.exit_code == 0
        assert "ChatGPT" in result.output
        assert "Short answer" in result.output
        assert "Out of credits" in result.output

    def test_ask_service_error(self, runner: CliRunner, mock_client: MagicMock) -> None:
        mock_client.complete.side_effect = ClientError("Prompt is required", status_code=400)

        result = runner.invoke(app, ["ask", "--json", " "])

        assert result.exit_code == 1
        assert json.loads(result.output) == {
            "status": "error",
            "message": "[400] Prompt is required",
        }

    def test_unknown_service_rejected(self, runner: CliRunner, mock_client: MagicMock) -> None:
        result = runner.invoke(app, ["ask", "-s", "bard", "hi"])

        assert result.exit_code != 0
        mock_client.complete.assert_not_called()


class TestStreamCommand:
    """Tests for the stream command."""

    def test_stream_prints_tokens(self, runner: CliRunner, mock_client: MagicMock) -> None:
        mock_client.stream.return_value = iter(
            [
                chunk(ProviderId.CHATGPT, "Hello"),
                chunk(ProviderId.CHATGPT, " world"),
                chunk(ProviderId.CHATGPT, done=True),
                chunk(ProviderId.DEEPSEEK, done=True, error="DeepSeek timed out"),
            ]
        )

        result = runner.invoke(app, ["stream", "hi"])

        assert result.exit_code == 0
        assert "ChatGPT:" in result.output
        assert "Hello world" in result.output
        assert "DeepSeek: DeepSeek timed out" in result.output

    def test_stream_json_lines(self, runner: CliRunner, mock_client: MagicMock) -> None:
        mock_client.stream.return_value = iter(
            [chunk(ProviderId.GITHUB, "a"), chunk(ProviderId.GITHUB, done=True)]
        )

        result = runner.invoke(app, ["stream", "--json", "-s", "github", "hi"])

        assert result.exit_code == 0
        lines = [json.loads(line) for line in result.output.splitlines() if line]
        assert [line["done"] for line in lines] == [False, True]
        assert lines[0]["provider"] == "github"

    def test_stream_connection_error(self, runner: CliRunner, mock_client: MagicMock) -> None:
        mock_client.stream.side_effect = ClientError("Failed to connect to multichat: refused")

        result = runner.invoke(app, ["stream", "hi"])

        assert result.exit_code == 1
        assert "Failed to connect" in result.output


class TestCheckCommand:
    """Tests for the check command."""

    def test_check_queries_each_service(self, runner: CliRunner, mock_client: MagicMock) -> None:
        def complete(prompt: str, providers: list[ProviderId]) -> ChatResponse:
            provider = providers[0]
            if provider is ProviderId.DEEPSEEK:
                return ChatResponse(results=[answer(provider, error="Out of credits")])
            return ChatResponse(results=[answer(provider, "hello")])

        mock_client.complete.side_effect = complete

        result = runner.invoke(app, ["check", "--json"])

        assert result.exit_code == 0
        rows = json.loads(result.output)
        assert [row["service"] for row in rows] == [p.display_name for p in ProviderId]
        assert [row["ok"] for row in rows] == [True, False, True, True]
        assert rows[1]["error_type"] == "payment"
        assert rows[0]["detail"] == "5 chars"

    def test_check_table(self, runner: CliRunner, mock_client: MagicMock) -> None:
        mock_client.complete.return_value = ChatResponse(
            results=[answer(ProviderId.CHATGPT, "hello")]
        )

        result = runner.invoke(app, ["check", "-s", "chatgpt"])

        assert result.exit_code == 0
        assert "Service check" in result.output
        assert "ok" in result.output


class TestBenchCommand:
    """Tests for the bench command."""

    def test_bench_json(self, runner: CliRunner, mock_client: MagicMock) -> None:
        body = [
            encode_event(chunk(ProviderId.CHATGPT, "hi")).encode(),
            (encode_event(chunk(ProviderId.CHATGPT, done=True)) + DONE).encode(),
        ]
        mock_client.stream_raw.side_effect = lambda prompt, service: iter(body)

        result = runner.invoke(app, ["bench", "--json", "-n", "2", "hi"])

        assert result.exit_code == 0
        runs = json.loads(result.output)
        assert [run["run"] for run in runs] == [1, 2]
        assert runs[0]["chunks"] == 2
        assert runs[0]["events"] == 2
        assert runs[0]["bytes"] == sum(len(part) for part in body)

    def test_bench_counts_unterminated_last_record(
        self, runner: CliRunner, mock_client: MagicMock
    ) -> None:
        body = [
            encode_event(chunk(ProviderId.CHATGPT, "hi")).encode(),
            encode_event(chunk(ProviderId.CHATGPT, done=True)).rstrip("\n").encode(),
        ]
        mock_client.stream_raw.side_effect = lambda prompt, service: iter(body)

        result = runner.invoke(app, ["bench", "--json", "hi"])

        assert result.exit_code == 0
        assert json.loads(result.output)[0]["events"] == 2

    def test_bench_table(self, runner: CliRunner, mock_client: MagicMock) -> None:
        mock_client.stream_raw.side_effect = lambda prompt, service: iter([DONE.encode()])

        result = runner.invoke(app, ["bench", "hi", "--url", "http://example.test"])

        assert result.exit_code == 0
        assert "Streaming benchmark" in result.output
        assert "http://example.test" in result.output
