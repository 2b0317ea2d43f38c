"""Configuration settings for the multichat service."""

from functools import lru_cache
from typing import Any

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from multichat.core.errors import ConfigurationError


def _credential(*env_names: str) -> Any:
    """Declare a provider credential read from its upstream variable name."""
    return Field(default=None, validation_alias=AliasChoices(*env_names))


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Service settings use the ``MULTICHAT_`` prefix. Provider credentials keep
    the variable names the upstream services document (``OPENAI_API_KEY``,
    ``GITHUB_TOKEN``, ...) and may also be given with the prefix.
    """

    # Service identification
    service_name: str = "multichat"
    debug: bool = False

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"
    log_request_headers: bool = False

    # CORS configuration
    cors_origins: list[str] = ["*"]

    # Timeouts (seconds)
    provider_timeout: float = 30.0

    # Streaming behaviour
    stream_poll_interval: float = 0.0
    stream_chunk_delay: float = 0.05

    # Simulated tier latency (seconds)
    simulation_min_delay: float = 1.0
    simulation_max_delay: float = 3.0
    simulation_char_delay: float = 0.025

    # Upstream request defaults
    max_tokens: int = 1000
    temperature: float = 0.7

    # OpenAI
    openai_api_key: str | None = _credential("MULTICHAT_OPENAI_API_KEY", "OPENAI_API_KEY")
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-3.5-turbo"

    # DeepSeek
    deepseek_api_key: str | None = _credential("MULTICHAT_DEEPSEEK_API_KEY", "DEEPSEEK_API_KEY")
    deepseek_base_url: str = "https://api.deepseek.com/v1"
    deepseek_model: str = "deepseek-chat"

    # GitHub
    github_token: str | None = _credential("MULTICHAT_GITHUB_TOKEN", "GITHUB_TOKEN")
    github_api_url: str = Field(
        default="https://api.github.com",
        validation_alias=AliasChoices("MULTICHAT_GITHUB_API_URL", "GITHUB_API_URL"),
    )

    # Azure OpenAI
    azure_openai_api_key: str | None = _credential(
        "MULTICHAT_AZURE_OPENAI_API_KEY", "AZURE_OPENAI_API_KEY"
    )
    azure_openai_endpoint: str | None = _credential(
        "MULTICHAT_AZURE_OPENAI_ENDPOINT", "AZURE_OPENAI_ENDPOINT"
    )
    azure_openai_deployment_name: str = Field(
        default="gpt-35-turbo",
        validation_alias=AliasChoices(
            "MULTICHAT_AZURE_OPENAI_DEPLOYMENT_NAME", "AZURE_OPENAI_DEPLOYMENT_NAME"
        ),
    )
    azure_openai_api_version: str = "2024-02-15-preview"

    # Microsoft Graph (client credentials)
    microsoft_client_id: str | None = _credential(
        "MULTICHAT_MICROSOFT_CLIENT_ID", "MICROSOFT_CLIENT_ID"
    )
    microsoft_client_secret: str | None = _credential(
        "MULTICHAT_MICROSOFT_CLIENT_SECRET", "MICROSOFT_CLIENT_SECRET"
    )
    microsoft_tenant_id: str | None = _credential(
        "MULTICHAT_MICROSOFT_TENANT_ID", "MICROSOFT_TENANT_ID"
    )
    microsoft_login_url: str = "https://login.microsoftonline.com"
    microsoft_graph_url: str = "https://graph.microsoft.com"
    microsoft_graph_probe_path: str = "/v1.0/organization"

    # Sign-in (Google OAuth); only validated when auth is enabled
    auth_enabled: bool = False
    google_client_id: str | None = _credential("GOOGLE_CLIENT_ID")
    google_client_secret: str | None = _credential("GOOGLE_CLIENT_SECRET")
    nextauth_secret: str | None = _credential("NEXTAUTH_SECRET")

    model_config = SettingsConfigDict(
        env_prefix="MULTICHAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def azure_configured(self) -> bool:
        return bool(self.azure_openai_api_key and self.azure_openai_endpoint)

    @property
    def microsoft_graph_configured(self) -> bool:
        return bool(
            self.microsoft_client_id and self.microsoft_client_secret and self.microsoft_tenant_id
        )


# Variables the sign-in layer cannot start without
REQUIRED_AUTH_VARIABLES = {
    "GOOGLE_CLIENT_ID": "google_client_id",
    "GOOGLE_CLIENT_SECRET": "google_client_secret",
    "NEXTAUTH_SECRET": "nextauth_secret",
}


def validate_startup(settings: Settings) -> None:
    """Fail fast when sign-in is enabled without its secrets.

    Provider credentials are never checked here: a provider without
    credentials degrades to its next fallback tier at request time.

    Raises:
        ConfigurationError: If ``auth_enabled`` and any OAuth secret is unset.
    """
    if not settings.auth_enabled:
        return

    missing = [
        env_name
        for env_name, attr in REQUIRED_AUTH_VARIABLES.items()
        if not getattr(settings, attr)
    ]
    if missing:
        raise ConfigurationError(f"{', '.join(missing)} is not set")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
