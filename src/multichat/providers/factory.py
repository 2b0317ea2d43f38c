"""Build provider adapters for a request."""

from collections.abc import Iterable

from multichat.core.config import Settings
from multichat.providers.base import ProviderAdapter
from multichat.providers.github import GitHubCopilotAdapter
from multichat.providers.microsoft import MicrosoftCopilotAdapter
from multichat.providers.openai_compatible import ChatGPTAdapter, DeepSeekAdapter
from multichat.schemas.requests import ProviderId

ADAPTERS: dict[ProviderId, type[ProviderAdapter]] = {
    ProviderId.CHATGPT: ChatGPTAdapter,
    ProviderId.DEEPSEEK: DeepSeekAdapter,
    ProviderId.GITHUB: GitHubCopilotAdapter,
    ProviderId.MICROSOFT: MicrosoftCopilotAdapter,
}


class ProviderFactory:
    """Creates fresh adapters from the shared settings."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def create(self, providers: Iterable[ProviderId]) -> list[ProviderAdapter]:
        """One new adapter per provider, in the order given."""
        return [ADAPTERS[ProviderId(provider)](self.settings) for provider in providers]

    def readiness(self) -> dict[str, str | None]:
        """Map each provider to the tier that would answer first."""
        return {
            provider.value: adapter.chain.first_configured()
            for provider, adapter in zip(ProviderId, self.create(ProviderId))
        }
