"""ChatGPT and DeepSeek adapters, plus the tier they share with Azure OpenAI."""

from collections.abc import AsyncGenerator
from contextlib import aclosing
from typing import Any

from multichat.clients.chat_completions import ChatCompletionsClient, build_messages
from multichat.core.config import Settings
from multichat.providers.base import FallbackChain, ProviderAdapter, Tier, transient_only
from multichat.providers.simulated import SimulatedTier, chatgpt_answer, deepseek_answer
from multichat.schemas.requests import ProviderId


class ChatCompletionsTier(Tier):
    """A tier backed by an OpenAI-compatible ``chat/completions`` endpoint.

    Args:
        name: Tier name used in logs and readiness checks.
        label: Upstream name used in error messages.
        url: Full endpoint URL, or None when not configured.
        api_key: Credential, or None when not configured.
        settings: Supplies timeout, ``max_tokens`` and ``temperature``.
        model: Model name sent in the body (Azure puts it in the URL instead).
        auth_header: Header carrying the credential.
        auth_scheme: Prefix for the credential value, e.g. "Bearer".
        system_prompt: Optional system message placed before the prompt.
        extra_body: Additional body fields.
        params: Query parameters.
    """

    def __init__(
        self,
        name: str,
        label: str,
        url: str | None,
        api_key: str | None,
        settings: Settings,
        model: str | None = None,
        auth_header: str = "Authorization",
        auth_scheme: str | None = "Bearer",
        system_prompt: str | None = None,
        extra_body: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ):
        self.name = name
        self.label = label
        self.url = url
        self.api_key = api_key
        self.settings = settings
        self.model = model
        self.auth_header = auth_header
        self.auth_scheme = auth_scheme
        self.system_prompt = system_prompt
        self.extra_body = extra_body or {}
        self.params = params

    def is_configured(self) -> bool:
        return bool(self.api_key and self.url)

    def client(self) -> ChatCompletionsClient:
        credential = f"{self.auth_scheme} {self.api_key}" if self.auth_scheme else self.api_key
        return ChatCompletionsClient(
            label=self.label,
            url=self.url,
            headers={self.auth_header: credential},
            params=self.params,
            timeout=self.settings.provider_timeout,
        )

    def payload(self, prompt: str) -> dict[str, Any]:
        body: dict[str, Any] = {
            "messages": build_messages(prompt, self.system_prompt),
            "max_tokens": self.settings.max_tokens,
            "temperature": self.settings.temperature,
            **self.extra_body,
        }
        if self.model:
            body["model"] = self.model
        return body

    async def complete(self, prompt: str) -> str:
        result = await self.client().complete(self.payload(prompt))
        return result.content

    async def stream(self, prompt: str) -> AsyncGenerator[str, None]:
        async with aclosing(self.client().stream(self.payload(prompt))) as fragments:
            async for fragment in fragments:
                yield fragment


def _endpoint(base_url: str) -> str:
    return f"{base_url.rstrip('/')}/chat/completions"


class ChatGPTAdapter(ProviderAdapter):
    """OpenAI chat completions, simulated when rate limited or unreachable."""

    provider = ProviderId.CHATGPT

    def build_chain(self) -> FallbackChain:
        s = self.settings
        return FallbackChain(
            self.service,
            [
                ChatCompletionsTier(
                    "openai",
                    "OpenAI",
                    _endpoint(s.openai_base_url),
                    s.openai_api_key,
                    s,
                    model=s.openai_model,
                ),
                SimulatedTier.from_settings(chatgpt_answer, s),
            ],
            fall_through=transient_only,
        )


class DeepSeekAdapter(ProviderAdapter):
    """DeepSeek chat completions, simulated when rate limited or unreachable."""

    provider = ProviderId.DEEPSEEK

    def build_chain(self) -> FallbackChain:
        s = self.settings
        return FallbackChain(
            self.service,
            [
                ChatCompletionsTier(
                    "deepseek",
                    "DeepSeek",
                    _endpoint(s.deepseek_base_url),
                    s.deepseek_api_key,
                    s,
                    model=s.deepseek_model,
                ),
                SimulatedTier.from_settings(deepseek_answer, s),
            ],
            fall_through=transient_only,
        )
