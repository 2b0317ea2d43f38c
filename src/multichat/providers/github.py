"""GitHub Copilot adapter: code search results, or simulated advice."""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import aclosing
from urllib.parse import quote_plus

from multichat.clients.github import GitHubSearchClient
from multichat.core.config import Settings
from multichat.core.errors import ProviderError
from multichat.providers.base import FallbackChain, ProviderAdapter, Tier, any_error
from multichat.providers.simulated import SimulatedTier, github_answer
from multichat.schemas.internal import CodeSearchResult
from multichat.schemas.requests import ProviderId

ANALYZING_NOTICE = "🔍 Analyzing your question...\n\n"
SEARCHING_NOTICE = "🔗 Searching GitHub repositories...\n\n"
TOKEN_MISSING_NOTICE = "⚠️ GitHub token not configured, using simulation mode\n\n"

# Items shown from a search; the API is asked for a few more
SHOWN_ITEMS = 3

_SUGGESTIONS = [
    "• Review the examples above for implementation ideas\n",
    "• Keep readability and maintainability in mind\n",
    "• Follow the best practices of the chosen language\n",
    "• Add proper error handling and tests\n",
]

_GENERAL_SUGGESTIONS = [
    "• Use clear variable and function names\n",
    "• Write modular, reusable code\n",
    "• Comment complex logic\n",
    "• Consider performance and security\n",
    "• Write unit tests to ensure quality\n",
]


def fallback_notice(error: ProviderError) -> str:
    return f"❌ API call failed: {error.message}\n\nSwitching to simulation mode...\n\n"


def render_search_answer(prompt: str, result: CodeSearchResult) -> list[str]:
    """Turn search hits into answer chunks."""
    chunks = [f"📊 Found {result.total_count} related results\n\n"]

    if result.items:
        chunks.append("📋 **Related code examples:**\n\n")
        for index, item in enumerate(result.items[:SHOWN_ITEMS], start=1):
            chunks.append(
                f"{index}. **{item.name}** ({item.repository})\n"
                f"   📝 Language: {item.language or 'Unknown'}\n"
                f"   📁 Path: {item.path}\n\n"
            )
        chunks.append("💡 **Suggestions:**\n\n")
        chunks.extend(_SUGGESTIONS)
    else:
        chunks.append("💡 **General programming advice:**\n\n")
        chunks.extend(_GENERAL_SUGGESTIONS)

    chunks.append(
        "\n🔗 **More resources:**\n"
        f"• [Search more examples](https://github.com/search?q={quote_plus(prompt)}&type=code)\n"
        "• [GitHub Docs](https://docs.github.com)\n"
        "• [GitHub Community](https://github.community)\n"
    )
    return chunks


class GitHubSearchTier(Tier):
    """Answers with the most recently indexed code matching the prompt."""

    name = "github-search"

    def __init__(self, settings: Settings):
        self.settings = settings

    def is_configured(self) -> bool:
        return bool(self.settings.github_token)

    async def _search(self, prompt: str) -> list[str]:
        client = GitHubSearchClient(
            self.settings.github_api_url,
            self.settings.github_token,
            timeout=self.settings.provider_timeout,
        )
        result = await client.search_code(prompt)
        return render_search_answer(prompt, result)

    async def complete(self, prompt: str) -> str:
        return "".join(await self._search(prompt))

    async def stream(self, prompt: str) -> AsyncGenerator[str, None]:
        # The search is one request; pace its sections like the simulation
        for chunk in await self._search(prompt):
            yield chunk
            await asyncio.sleep(self.settings.stream_chunk_delay)


class GitHubCopilotAdapter(ProviderAdapter):
    """GitHub code search, simulated when the search is unavailable."""

    provider = ProviderId.GITHUB

    def build_chain(self) -> FallbackChain:
        self.search_tier = GitHubSearchTier(self.settings)
        return FallbackChain(
            self.service,
            [
                self.search_tier,
                SimulatedTier.from_settings(github_answer, self.settings),
            ],
            fall_through=any_error,
            on_fallback=fallback_notice,
        )

    async def stream_fragments(self, prompt: str) -> AsyncGenerator[str, None]:
        yield ANALYZING_NOTICE
        await asyncio.sleep(self.settings.stream_chunk_delay)
        yield SEARCHING_NOTICE if self.search_tier.is_configured() else TOKEN_MISSING_NOTICE

        async with aclosing(self.chain.stream(prompt)) as fragments:
            async for fragment in fragments:
                yield fragment
