"""Shared fixtures for the multichat test suite."""

from collections.abc import Iterator

import pytest
import structlog
from fastapi import FastAPI
from fastapi.testclient import TestClient

from multichat.core.config import Settings, get_settings
from multichat.main import create_app

# Importing the app configures structlog with logger caching, which would
# hide log entries from structlog.testing.capture_logs.
structlog.configure(cache_logger_on_first_use=False)

# Environment variables that would otherwise leak real credentials into tests
CREDENTIAL_ENV_VARS = [
    "OPENAI_API_KEY",
    "DEEPSEEK_API_KEY",
    "GITHUB_TOKEN",
    "GITHUB_API_URL",
    "AZURE_OPENAI_API_KEY",
    "AZURE_OPENAI_ENDPOINT",
    "AZURE_OPENAI_DEPLOYMENT_NAME",
    "MICROSOFT_CLIENT_ID",
    "MICROSOFT_CLIENT_SECRET",
    "MICROSOFT_TENANT_ID",
    "GOOGLE_CLIENT_ID",
    "GOOGLE_CLIENT_SECRET",
    "NEXTAUTH_SECRET",
]


def make_settings(**overrides) -> Settings:
    """Settings with no credentials and no artificial latency.

    Overrides are applied by field name after loading.
    """
    settings = Settings(
        _env_file=None,
        simulation_min_delay=0.0,
        simulation_max_delay=0.0,
        simulation_char_delay=0.0,
        stream_chunk_delay=0.0,
        provider_timeout=5.0,
    )
    return settings.model_copy(update=overrides)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run every test without provider credentials from the host."""
    for name in CREDENTIAL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
        monkeypatch.delenv(f"MULTICHAT_{name}", raising=False)
    monkeypatch.delenv("MULTICHAT_AUTH_ENABLED", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    test_app = create_app()
    test_app.dependency_overrides[get_settings] = lambda: settings
    return test_app


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client
