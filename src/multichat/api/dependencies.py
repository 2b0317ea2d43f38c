"""FastAPI dependencies for the multichat API."""

from typing import Annotated

from fastapi import Depends

from multichat.core.config import Settings, get_settings
from multichat.providers.factory import ProviderFactory
from multichat.services import BatchAggregator, ChatOrchestrator, StreamMultiplexer


def get_provider_factory(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ProviderFactory:
    """Get the factory that builds per-request provider adapters."""
    return ProviderFactory(settings)


def get_aggregator() -> BatchAggregator:
    """Get a batch aggregator instance."""
    return BatchAggregator()


def get_multiplexer(
    settings: Annotated[Settings, Depends(get_settings)],
) -> StreamMultiplexer:
    """Get a stream multiplexer instance."""
    return StreamMultiplexer(poll_interval=settings.stream_poll_interval)


def get_orchestrator(
    factory: Annotated[ProviderFactory, Depends(get_provider_factory)],
    aggregator: Annotated[BatchAggregator, Depends(get_aggregator)],
    multiplexer: Annotated[StreamMultiplexer, Depends(get_multiplexer)],
) -> ChatOrchestrator:
    """Get the orchestrator service."""
    return ChatOrchestrator(factory=factory, aggregator=aggregator, multiplexer=multiplexer)
