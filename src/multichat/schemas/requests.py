"""Request schemas for the multichat API."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ProviderId(str, Enum):
    """Closed set of supported providers, in canonical run order."""

    CHATGPT = "chatgpt"
    DEEPSEEK = "deepseek"
    GITHUB = "github"
    MICROSOFT = "microsoft"

    @property
    def display_name(self) -> str:
        return PROVIDER_DISPLAY_NAMES[self]


PROVIDER_DISPLAY_NAMES: dict[ProviderId, str] = {
    ProviderId.CHATGPT: "ChatGPT",
    ProviderId.DEEPSEEK: "DeepSeek",
    ProviderId.GITHUB: "GitHub Copilot",
    ProviderId.MICROSOFT: "Microsoft Copilot",
}


class SelectedServices(BaseModel):
    """Which providers the caller wants to fan the prompt out to."""

    chatgpt: bool = False
    deepseek: bool = False
    github: bool = False
    microsoft: bool = False

    def selected(self) -> list[ProviderId]:
        """Return the selected providers in canonical order."""
        return [provider for provider in ProviderId if getattr(self, provider.value)]

    @classmethod
    def of(cls, *providers: ProviderId | str) -> "SelectedServices":
        """Build a selection from provider ids."""
        return cls(**{ProviderId(p).value: True for p in providers})


class ChatRequest(BaseModel):
    """Request body shared by the batch and streaming chat endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    prompt: str = Field(..., description="The user's prompt")
    selected_services: SelectedServices = Field(
        default_factory=SelectedServices,
        alias="selectedServices",
        description="Providers to query",
    )

    @field_validator("prompt")
    @classmethod
    def validate_prompt(cls, prompt: str) -> str:
        if not prompt.strip():
            raise ValueError("Prompt is required")
        return prompt

    @model_validator(mode="after")
    def validate_selection(self) -> "ChatRequest":
        if not self.selected_services.selected():
            raise ValueError("At least one service must be selected")
        return self

    @property
    def providers(self) -> list[ProviderId]:
        return self.selected_services.selected()
