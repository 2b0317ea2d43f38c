"""HTTP clients for the upstream AI services."""

from multichat.clients.chat_completions import ChatCompletionsClient, build_messages
from multichat.clients.github import GitHubSearchClient
from multichat.clients.microsoft_graph import MicrosoftGraphClient

__all__ = [
    "ChatCompletionsClient",
    "GitHubSearchClient",
    "MicrosoftGraphClient",
    "build_messages",
]
