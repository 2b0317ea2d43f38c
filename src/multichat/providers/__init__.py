"""Provider adapters and their fallback chains."""

from multichat.providers.base import (
    FallbackChain,
    ProviderAdapter,
    ProviderResult,
    Tier,
    any_error,
    transient_only,
)
from multichat.providers.factory import ADAPTERS, ProviderFactory
from multichat.providers.github import GitHubCopilotAdapter
from multichat.providers.microsoft import MicrosoftCopilotAdapter
from multichat.providers.openai_compatible import (
    ChatCompletionsTier,
    ChatGPTAdapter,
    DeepSeekAdapter,
)
from multichat.providers.simulated import SimulatedTier

__all__ = [
    "ADAPTERS",
    "ChatCompletionsTier",
    "ChatGPTAdapter",
    "DeepSeekAdapter",
    "FallbackChain",
    "GitHubCopilotAdapter",
    "MicrosoftCopilotAdapter",
    "ProviderAdapter",
    "ProviderFactory",
    "ProviderResult",
    "SimulatedTier",
    "Tier",
    "any_error",
    "transient_only",
]
