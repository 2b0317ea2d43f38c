"""Tests for the chat endpoints."""

import json
from collections.abc import Iterator
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import respx
from fastapi import FastAPI
from fastapi.testclient import TestClient

from multichat.api.dependencies import get_orchestrator
from multichat.observability.constants import CORRELATION_ID_HEADER
from multichat.services.framing import DONE, StreamDecoder

ALL_SERVICES = {"chatgpt": True, "deepseek": True, "github": True, "microsoft": True}


@pytest.fixture
def upstream() -> Iterator[respx.MockRouter]:
    with respx.mock(assert_all_called=False) as router:
        yield router


def read_stream(client: TestClient, payload: dict) -> tuple[httpx.Response, list]:
    with client.stream("POST", "/api/chat/stream", json=payload) as response:
        body = b"".join(response.iter_bytes())
    decoder = StreamDecoder()
    return response, decoder.feed(body) + decoder.flush()


class TestValidation:
    @pytest.mark.parametrize("path", ["/api/chat", "/api/chat/stream"])
    def test_blank_prompt(self, client: TestClient, path: str) -> None:
        response = client.post(path, json={"prompt": "   ", "selectedServices": ALL_SERVICES})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["message"] == "Prompt is required"

    @pytest.mark.parametrize("path", ["/api/chat", "/api/chat/stream"])
    def test_nothing_selected(self, client: TestClient, path: str) -> None:
        response = client.post(path, json={"prompt": "hi", "selectedServices": {}})

        assert response.status_code == 400
        assert response.json()["message"] == "At least one service must be selected"

    def test_missing_prompt(self, client: TestClient) -> None:
        response = client.post("/api/chat", json={"selectedServices": ALL_SERVICES})

        assert response.status_code == 400
        assert response.json()["message"] == "Prompt is required"

    def test_invalid_json(self, client: TestClient) -> None:
        response = client.post(
            "/api/chat", content=b"{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid request body"

    def test_rejected_request_makes_no_upstream_calls(
        self, app: FastAPI, settings, upstream: respx.MockRouter
    ) -> None:
        settings.openai_api_key = "sk-test"
        route = upstream.post("https://api.openai.com/v1/chat/completions")

        with TestClient(app) as client:
            response = client.post("/api/chat", json={"prompt": "", "selectedServices": {}})

        assert response.status_code == 400
        assert not route.called


class TestBatchChat:
    def test_all_services_simulated(self, client: TestClient) -> None:
        response = client.post(
            "/api/chat", json={"prompt": "Explain recursion", "selectedServices": ALL_SERVICES}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert isinstance(body["timestamp"], int)
        assert [r["service"] for r in body["results"]] == [
            "ChatGPT",
            "DeepSeek",
            "GitHub Copilot",
            "Microsoft Copilot",
        ]
        for result in body["results"]:
            assert result["response"]
            assert "error" not in result

    def test_failed_service_reported_inline(
        self, app: FastAPI, settings, upstream: respx.MockRouter
    ) -> None:
        settings.deepseek_api_key = "sk-ds"
        upstream.post("https://api.deepseek.com/v1/chat/completions").mock(
            return_value=httpx.Response(402, text="no credits")
        )

        with TestClient(app) as client:
            response = client.post(
                "/api/chat",
                json={"prompt": "hi", "selectedServices": {"chatgpt": True, "deepseek": True}},
            )

        assert response.status_code == 200
        chatgpt, deepseek = response.json()["results"]
        assert chatgpt["response"].startswith("ChatGPT (simulated)")
        assert deepseek["response"] == ""
        assert deepseek["error"] == "DeepSeek Payment Required: Please add credits to your account"
        assert deepseek["error_type"] == "payment"

    def test_unexpected_failure_is_500(self, app: FastAPI) -> None:
        orchestrator = MagicMock()
        orchestrator.process_chat = AsyncMock(side_effect=RuntimeError("database on fire"))
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator

        with TestClient(app) as client:
            response = client.post(
                "/api/chat", json={"prompt": "hi", "selectedServices": {"chatgpt": True}}
            )

        assert response.status_code == 500
        assert response.json() == {"error": "http_error", "message": "Internal server error"}
        assert "database on fire" not in response.text


class TestStreamingChat:
    def test_stream_headers(self, client: TestClient) -> None:
        response, _ = read_stream(
            client, {"prompt": "hi", "selectedServices": {"chatgpt": True}}
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"
        assert response.headers["x-accel-buffering"] == "no"

    def test_every_service_terminates_before_done(self, client: TestClient) -> None:
        _, records = read_stream(client, {"prompt": "hi", "selectedServices": ALL_SERVICES})

        assert records[-1].done
        assert not any(r.is_error for r in records)
        events = [r.event for r in records[:-1]]
        terminals = [e for e in events if e.done]
        assert sorted(e.service for e in terminals) == [
            "ChatGPT",
            "DeepSeek",
            "GitHub Copilot",
            "Microsoft Copilot",
        ]
        for service in ("ChatGPT", "DeepSeek", "GitHub Copilot", "Microsoft Copilot"):
            service_events = [e for e in events if e.service == service]
            assert service_events[-1].done
            assert sum(e.done for e in service_events) == 1

    def test_accumulated_text_matches_simulation(self, client: TestClient) -> None:
        _, records = read_stream(client, {"prompt": "hi", "selectedServices": {"deepseek": True}})

        text = "".join(r.event.content for r in records if r.event)
        assert text.startswith('DeepSeek (simulated): Regarding "hi":')

    def test_upstream_failure_is_terminal_event(
        self, app: FastAPI, settings, upstream: respx.MockRouter
    ) -> None:
        settings.openai_api_key = "sk-bad"
        upstream.post("https://api.openai.com/v1/chat/completions").mock(
            return_value=httpx.Response(401, json={})
        )

        with TestClient(app) as client:
            _, records = read_stream(
                client, {"prompt": "hi", "selectedServices": {"chatgpt": True}}
            )

        assert len(records) == 2
        failed = records[0].event
        assert failed.done
        assert failed.error_type == "authentication"
        assert records[1].done

    def test_raw_wire_format(self, client: TestClient) -> None:
        with client.stream(
            "POST", "/api/chat/stream", json={"prompt": "hi", "selectedServices": {"chatgpt": True}}
        ) as response:
            body = response.read().decode()

        assert body.endswith(DONE)
        first_record = body.split("\n\n")[0]
        assert first_record.startswith("data: ")
        assert json.loads(first_record[len("data: ") :])["provider"] == "chatgpt"


def test_correlation_id_is_echoed(client: TestClient) -> None:
    response = client.post(
        "/api/chat",
        json={"prompt": "hi", "selectedServices": {"chatgpt": True}},
        headers={CORRELATION_ID_HEADER: "req-123"},
    )

    assert response.headers[CORRELATION_ID_HEADER] == "req-123"
