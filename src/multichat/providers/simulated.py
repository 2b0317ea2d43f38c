"""Local simulated answers, the last tier of every provider.

Simulated answers are built as a list of chunks so that batch mode (chunks
joined after a short pause) and streaming mode (chunks paced one by one)
produce the same text.
"""

import asyncio
import random
import re
from collections.abc import AsyncGenerator, Callable
from urllib.parse import quote_plus

from multichat.core.config import Settings
from multichat.providers.base import Tier

Composer = Callable[[str], list[str]]

_CODE_WORDS = re.compile(r"code|function|class|method|algorithm|programming|debug|error|syntax")
_WEB_WORDS = re.compile(r"html|css|javascript|react|vue|angular|web|frontend|backend")
_PYTHON_WORDS = re.compile(r"python|django|flask|pandas|numpy")
_JAVA_WORDS = re.compile(r"java|spring|maven|gradle")


class SimulatedTier(Tier):
    """Answers locally after a random pause; always configured.

    Args:
        compose: Builds the answer chunks for a prompt.
        min_delay: Lower bound of the batch-mode pause, in seconds.
        max_delay: Upper bound of the batch-mode pause, in seconds.
        chunk_delay: Pause between streamed chunks, in seconds.
        per_character: Stream one character at a time with a jittered
            ``chunk_delay`` to ``2 * chunk_delay`` pause before each.
    """

    name = "simulated"

    def __init__(
        self,
        compose: Composer,
        min_delay: float = 1.0,
        max_delay: float = 3.0,
        chunk_delay: float = 0.05,
        per_character: bool = False,
    ):
        self.compose = compose
        self.min_delay = min_delay
        self.max_delay = max(min_delay, max_delay)
        self.chunk_delay = chunk_delay
        self.per_character = per_character

    @classmethod
    def from_settings(
        cls, compose: Composer, settings: Settings, per_character: bool = False
    ) -> "SimulatedTier":
        if per_character:
            chunk_delay = settings.simulation_char_delay
        else:
            chunk_delay = settings.stream_chunk_delay
        return cls(
            compose,
            min_delay=settings.simulation_min_delay,
            max_delay=settings.simulation_max_delay,
            chunk_delay=chunk_delay,
            per_character=per_character,
        )

    async def complete(self, prompt: str) -> str:
        await asyncio.sleep(random.uniform(self.min_delay, self.max_delay))
        return "".join(self.compose(prompt))

    async def stream(self, prompt: str) -> AsyncGenerator[str, None]:
        if self.per_character:
            for char in "".join(self.compose(prompt)):
                await asyncio.sleep(random.uniform(self.chunk_delay, 2 * self.chunk_delay))
                yield char
            return

        for chunk in self.compose(prompt):
            yield chunk
            await asyncio.sleep(self.chunk_delay)


def chatgpt_answer(prompt: str) -> list[str]:
    return [
        f'ChatGPT (simulated): You asked "{prompt}".\n\n',
        "Here is how I would approach it:\n",
        "• Clarify the goal and the constraints\n",
        "• Break the problem into smaller steps\n",
        "• Check each step against a concrete example\n\n",
        "Note: this is a simulated response. Set OPENAI_API_KEY to get answers from OpenAI.",
    ]


def deepseek_answer(prompt: str) -> list[str]:
    return [
        f'DeepSeek (simulated): Regarding "{prompt}":\n\n',
        "• Start from the simplest working solution\n",
        "• Measure before optimizing\n",
        "• Keep the reasoning for each decision written down\n\n",
        "Note: this is a simulated response. Set DEEPSEEK_API_KEY to get answers from DeepSeek.",
    ]


def github_answer(prompt: str) -> list[str]:
    """Keyword-aware coding advice standing in for GitHub Copilot."""
    text = prompt.lower()
    chunks = [
        "🤖 **GitHub Copilot analysis**\n\n",
        f'For your question "{prompt}", here are some suggestions:\n\n',
    ]

    if _CODE_WORDS.search(text):
        chunks.append("🔧 **Implementation suggestions:**\n")
        if _WEB_WORDS.search(text):
            chunks += [
                "• Use a modern web framework (React, Vue, Angular)\n",
                "• Follow responsive design principles\n",
                "• Optimize performance and user experience\n",
                "• Ensure cross-browser compatibility\n\n",
            ]
        elif _PYTHON_WORDS.search(text):
            chunks += [
                "• Follow the PEP 8 style guide\n",
                "• Manage dependencies in a virtual environment\n",
                "• Lean on the rich third-party ecosystem\n",
                "• Write Pythonic code\n\n",
            ]
        elif _JAVA_WORDS.search(text):
            chunks += [
                "• Follow Java coding conventions\n",
                "• Manage the project with Maven or Gradle\n",
                "• Use what the Spring framework offers\n",
                "• Apply suitable design patterns\n\n",
            ]
        else:
            chunks += [
                "• Choose a suitable language and framework\n",
                "• Design a clear code architecture\n",
                "• Implement error handling\n",
                "• Write maintainable code\n\n",
            ]
    else:
        chunks += [
            "💡 **General suggestions:**\n",
            "• Pin down the concrete requirements\n",
            "• Research existing solutions\n",
            "• Consider scalability and maintainability\n",
            "• Ask the community for feedback\n\n",
        ]

    chunks += [
        "🛠 **Development best practices:**\n",
        "• Version control: manage code with Git\n",
        "• Code review: collaborate through pull requests\n",
        "• Testing: write unit and integration tests\n",
        "• Documentation: keep project docs up to date\n",
        "• Continuous integration: set up a CI/CD pipeline\n\n",
        "📚 **Resources:**\n",
        f"• Search examples: https://github.com/search?q={quote_plus(prompt)}&type=code\n",
        "• GitHub Docs: https://docs.github.com\n\n",
        "⚠️ **Note:** this is a simulated response. "
        "Set GITHUB_TOKEN to search real code on GitHub.",
    ]
    return chunks


def microsoft_answer(prompt: str) -> list[str]:
    return [
        f'Microsoft Copilot: For your question "{prompt}", here are my suggestions:\n\n',
        "• Analyze your requirements and their context\n",
        "• Follow best practices of the Microsoft ecosystem\n",
        "• Provide actionable solutions and steps\n",
        "• Take security and compliance requirements into account\n\n",
        "Configure the Azure OpenAI service for more accurate and personalized answers. "
        "You can create an OpenAI resource in the Azure portal and get an API key there.",
    ]


def microsoft_graph_answer(prompt: str) -> list[str]:
    return [
        f'Microsoft Copilot (via Microsoft Graph): Based on your question "{prompt}", '
        "I looked at your Microsoft 365 environment and suggest:\n\n",
        "• Use the integrations between Microsoft 365 applications\n",
        "• Streamline workflows and collaboration\n",
        "• Keep data secure and compliant\n",
        "• Automate with the Power Platform\n\n",
        "Note: this is a sample response. Full Microsoft Copilot integration "
        "requires appropriate licenses and configuration.",
    ]
