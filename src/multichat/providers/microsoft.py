"""Microsoft Copilot adapter: Azure OpenAI, then Microsoft Graph, then simulation."""

import asyncio
from collections.abc import AsyncGenerator

from multichat.clients.microsoft_graph import MicrosoftGraphClient
from multichat.core.config import Settings
from multichat.providers.base import FallbackChain, ProviderAdapter, Tier, any_error
from multichat.providers.openai_compatible import ChatCompletionsTier
from multichat.providers.simulated import (
    SimulatedTier,
    microsoft_answer,
    microsoft_graph_answer,
)
from multichat.schemas.requests import ProviderId

AZURE_SYSTEM_PROMPT = (
    "You are Microsoft Copilot, a helpful AI assistant powered by Azure OpenAI. "
    "Provide comprehensive, accurate, and helpful responses. "
    "When responding in Chinese, use simplified Chinese characters."
)


def azure_openai_tier(settings: Settings) -> ChatCompletionsTier:
    url = None
    if settings.azure_openai_endpoint:
        url = (
            f"{settings.azure_openai_endpoint.rstrip('/')}/openai/deployments/"
            f"{settings.azure_openai_deployment_name}/chat/completions"
        )
    return ChatCompletionsTier(
        "azure-openai",
        "Azure OpenAI",
        url,
        settings.azure_openai_api_key,
        settings,
        auth_header="api-key",
        auth_scheme=None,
        system_prompt=AZURE_SYSTEM_PROMPT,
        extra_body={"top_p": 0.95, "frequency_penalty": 0, "presence_penalty": 0},
        params={"api-version": settings.azure_openai_api_version},
    )


class MicrosoftGraphTier(Tier):
    """Confirms Graph access for the tenant, then answers from a template.

    Graph has no public chat endpoint for app-only tokens; a successful
    token exchange and probe call is what this tier can verify.
    """

    name = "microsoft-graph"

    def __init__(self, settings: Settings):
        self.settings = settings

    def is_configured(self) -> bool:
        return self.settings.microsoft_graph_configured

    async def _answer(self, prompt: str) -> list[str]:
        s = self.settings
        client = MicrosoftGraphClient(
            tenant_id=s.microsoft_tenant_id,
            client_id=s.microsoft_client_id,
            client_secret=s.microsoft_client_secret,
            login_url=s.microsoft_login_url,
            graph_url=s.microsoft_graph_url,
            timeout=s.provider_timeout,
        )
        token = await client.acquire_token()
        await client.probe(token, s.microsoft_graph_probe_path)
        return microsoft_graph_answer(prompt)

    async def complete(self, prompt: str) -> str:
        return "".join(await self._answer(prompt))

    async def stream(self, prompt: str) -> AsyncGenerator[str, None]:
        for chunk in await self._answer(prompt):
            yield chunk
            await asyncio.sleep(self.settings.stream_chunk_delay)


class MicrosoftCopilotAdapter(ProviderAdapter):
    """Azure OpenAI deployment, falling back to Graph and then simulation."""

    provider = ProviderId.MICROSOFT

    def build_chain(self) -> FallbackChain:
        return FallbackChain(
            self.service,
            [
                azure_openai_tier(self.settings),
                MicrosoftGraphTier(self.settings),
                SimulatedTier.from_settings(microsoft_answer, self.settings, per_character=True),
            ],
            fall_through=any_error,
        )
