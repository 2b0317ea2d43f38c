"""Client for OpenAI-compatible chat completion endpoints.

OpenAI, DeepSeek and Azure OpenAI all speak the same request/response shape;
they differ in URL, auth header and a few body fields, which callers supply.
"""

import json
import time
from collections.abc import AsyncGenerator
from typing import Any

import httpx

from multichat.core.errors import ErrorCategory, ProviderError
from multichat.observability.constants import LogEvents
from multichat.observability.logger import get_logger
from multichat.observability.sanitizer import sanitize_body, truncate_text
from multichat.schemas.internal import CompletionResult

logger = get_logger(__name__)

SSE_DATA_PREFIX = "data: "
SSE_DONE = "[DONE]"

NO_RESPONSE_TEXT = "No response generated"


def build_messages(prompt: str, system_prompt: str | None = None) -> list[dict[str, str]]:
    """Build the message list: optional system message, then the user prompt."""
    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    messages.append({"role": "user", "content": prompt})
    return messages


class ChatCompletionsClient:
    """Client for one chat completions endpoint.

    Args:
        label: Upstream name used in error messages ("OpenAI", "DeepSeek", ...).
        url: Full URL of the ``chat/completions`` endpoint.
        headers: Auth headers for the upstream.
        params: Query parameters (Azure needs ``api-version``).
        timeout: Bound on every network operation, in seconds.
    """

    def __init__(
        self,
        label: str,
        url: str,
        headers: dict[str, str],
        params: dict[str, str] | None = None,
        timeout: float = 30.0,
    ):
        self.label = label
        self.url = url
        self.headers = {"Content-Type": "application/json", **headers}
        self.params = params or {}
        self.timeout = httpx.Timeout(timeout)

    async def complete(self, payload: dict[str, Any]) -> CompletionResult:
        """
        Send one non-streaming completion request.

        Args:
            payload: Request body without the ``stream`` flag

        Returns:
            CompletionResult with the generated text and metadata

        Raises:
            ProviderError: On non-2xx, malformed body, timeout or network failure
        """
        start_time = time.perf_counter()

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(
                    self.url,
                    params=self.params,
                    json={**payload, "stream": False},
                    headers=self.headers,
                )
            except httpx.TimeoutException as e:
                raise ProviderError(self.label, ErrorCategory.TIMEOUT) from e
            except httpx.RequestError as e:
                raise ProviderError(self.label, ErrorCategory.NETWORK, detail=str(e)) from e

        latency_ms = int((time.perf_counter() - start_time) * 1000)

        if not response.is_success:
            self._log_failure(response.status_code, response.text)
            raise ProviderError.from_status(
                self.label, response.status_code, truncate_text(response.text, 200)
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(
                self.label, ErrorCategory.PROTOCOL, detail="response body is not JSON"
            ) from e

        content = self._extract_content(data)
        usage = data.get("usage")
        result = CompletionResult(
            content=content,
            latency_ms=latency_ms,
            usage=usage if isinstance(usage, dict) else None,
        )
        logger.info(
            LogEvents.UPSTREAM_REQUEST_COMPLETED,
            upstream=self.label,
            latency_ms=result.latency_ms,
            usage=result.usage,
        )
        return result

    async def stream(self, payload: dict[str, Any]) -> AsyncGenerator[str, None]:
        """
        Send a streaming completion request and yield content fragments.

        Empty deltas are skipped. The generator returns when the upstream
        sends ``data: [DONE]``; an upstream that closes the body before that
        is reported as a protocol error.

        Raises:
            ProviderError: On non-2xx, truncation, timeout or network failure
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                async with client.stream(
                    "POST",
                    self.url,
                    params=self.params,
                    json={**payload, "stream": True},
                    headers={**self.headers, "Accept": "text/event-stream"},
                ) as response:
                    if not response.is_success:
                        error_text = (await response.aread()).decode("utf-8", errors="replace")
                        self._log_failure(response.status_code, error_text)
                        raise ProviderError.from_status(
                            self.label, response.status_code, truncate_text(error_text, 200)
                        )

                    async for line in response.aiter_lines():
                        line = line.strip()
                        if not line.startswith(SSE_DATA_PREFIX):
                            continue

                        data = line[len(SSE_DATA_PREFIX) :]
                        if data == SSE_DONE:
                            return

                        fragment = self._parse_delta(data)
                        if fragment:
                            yield fragment

            except httpx.TimeoutException as e:
                raise ProviderError(self.label, ErrorCategory.TIMEOUT) from e
            except httpx.RequestError as e:
                raise ProviderError(self.label, ErrorCategory.NETWORK, detail=str(e)) from e

        raise ProviderError(
            self.label,
            ErrorCategory.PROTOCOL,
            detail="stream ended before the completion marker",
        )

    def _extract_content(self, data: Any) -> str:
        """Pull ``choices[0].message.content`` out of a completion body."""
        if not isinstance(data, dict) or not isinstance(data.get("choices"), list):
            raise self._malformed("response has no choices")
        choices = data["choices"]
        if not choices:
            return NO_RESPONSE_TEXT

        choice = choices[0]
        if not isinstance(choice, dict):
            raise self._malformed("choice is not an object")
        message = choice.get("message") or {}
        if not isinstance(message, dict):
            raise self._malformed("message is not an object")
        content = message.get("content")
        if content is not None and not isinstance(content, str):
            raise self._malformed("message content is not text")
        return content or NO_RESPONSE_TEXT

    def _parse_delta(self, data: str) -> str | None:
        """Extract ``choices[0].delta.content`` from one SSE payload.

        Lines that are not JSON are skipped; JSON of the wrong shape means
        the upstream is not speaking this protocol and ends the stream.
        """
        try:
            parsed = json.loads(data)
        except json.JSONDecodeError:
            logger.debug(LogEvents.UPSTREAM_STREAM_MALFORMED, upstream=self.label, data=data[:100])
            return None

        if not isinstance(parsed, dict):
            raise self._malformed("stream chunk is not an object")
        choices = parsed.get("choices")
        if not choices:
            return None
        if not isinstance(choices, list) or not isinstance(choices[0], dict):
            raise self._malformed("stream chunk has malformed choices")

        delta = choices[0].get("delta") or {}
        if not isinstance(delta, dict):
            raise self._malformed("stream delta is not an object")
        content = delta.get("content")
        if content is not None and not isinstance(content, str):
            raise self._malformed("stream delta content is not text")
        return content

    def _malformed(self, detail: str) -> ProviderError:
        return ProviderError(self.label, ErrorCategory.PROTOCOL, detail=detail)

    def _log_failure(self, status_code: int, body: str) -> None:
        logger.warning(
            LogEvents.UPSTREAM_REQUEST_FAILED,
            upstream=self.label,
            status_code=status_code,
            body=sanitize_body(body),
        )
