"""Python client for a running multichat service.

Example:
    client = MultiChatClient("http://localhost:8000")
    for event in client.stream("Explain recursion", ["chatgpt", "deepseek"]):
        print(event.service, event.content)
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

import httpx

from multichat.observability.constants import LogEvents
from multichat.observability.logger import get_logger
from multichat.schemas import ChatResponse, ProviderId, SelectedServices, StreamEvent
from multichat.services.framing import DecodedRecord, StreamDecoder

logger = get_logger(__name__)

DEFAULT_URL = "http://localhost:8000"


class ClientError(Exception):
    """Raised when the service rejects a request or cannot be reached."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        detail: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail

    def __str__(self) -> str:
        if self.status_code:
            return f"[{self.status_code}] {self.message}"
        return self.message


def _selection(services: Iterable[ProviderId | str] | None) -> dict[str, bool]:
    if services is None:
        services = list(ProviderId)
    return SelectedServices.of(*services).model_dump()


class MultiChatClient:
    """Synchronous client for the batch and streaming chat endpoints.

    Args:
        base_url: Service root, e.g. ``http://localhost:8000``.
        timeout: Per-request timeout in seconds.
        http_client: Use this client instead of creating one.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_URL,
        timeout: float = 120.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._http = http_client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> MultiChatClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def complete(
        self,
        prompt: str,
        services: Iterable[ProviderId | str] | None = None,
    ) -> ChatResponse:
        """Ask every selected service and wait for all answers.

        Raises:
            ClientError: If the service answers non-2xx or is unreachable
        """
        try:
            response = self._http.post(
                f"{self.base_url}/api/chat",
                json={"prompt": prompt, "selectedServices": _selection(services)},
            )
        except httpx.RequestError as e:
            raise ClientError(f"Failed to connect to multichat: {e}", detail=str(e)) from e

        if response.status_code >= 400:
            self._raise_for_error(response)

        return ChatResponse.model_validate(response.json())

    def stream_raw(
        self,
        prompt: str,
        services: Iterable[ProviderId | str] | None = None,
    ) -> Iterator[bytes]:
        """Yield the streaming response body as received."""
        try:
            with self._http.stream(
                "POST",
                f"{self.base_url}/api/chat/stream",
                json={"prompt": prompt, "selectedServices": _selection(services)},
                headers={"Accept": "text/event-stream"},
            ) as response:
                if response.status_code >= 400:
                    response.read()
                    self._raise_for_error(response)

                yield from response.iter_bytes()
        except httpx.RequestError as e:
            raise ClientError(f"Failed to connect to multichat: {e}", detail=str(e)) from e

    def stream_records(
        self,
        prompt: str,
        services: Iterable[ProviderId | str] | None = None,
    ) -> Iterator[DecodedRecord]:
        """Yield every decoded record, including the terminator and malformed ones."""
        decoder = StreamDecoder()
        for chunk in self.stream_raw(prompt, services):
            yield from decoder.feed(chunk)
        yield from decoder.flush()

    def stream(
        self,
        prompt: str,
        services: Iterable[ProviderId | str] | None = None,
    ) -> Iterator[StreamEvent]:
        """Yield stream events until the ``[DONE]`` record.

        Malformed records are logged and skipped.

        Raises:
            ClientError: If the service answers non-2xx, is unreachable, or the
                stream ends before the ``[DONE]`` record
        """
        for record in self.stream_records(prompt, services):
            if record.done:
                return
            if record.is_error:
                logger.warning(
                    LogEvents.CLIENT_STREAM_MALFORMED, error=record.error, raw=record.raw
                )
                continue
            yield record.event
        raise ClientError("Stream ended before the [DONE] marker")

    @staticmethod
    def _raise_for_error(response: httpx.Response) -> None:
        try:
            data = response.json()
            message = data.get("message", data.get("error", str(data)))
        except (ValueError, AttributeError):
            message = response.text or f"HTTP {response.status_code}"

        raise ClientError(message, status_code=response.status_code, detail=response.text)
