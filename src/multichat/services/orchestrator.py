"""Orchestrator service - ties chat requests to the aggregator and multiplexer."""

from collections.abc import AsyncGenerator
from contextlib import aclosing

from multichat.observability.constants import LogEvents
from multichat.observability.logger import get_logger
from multichat.observability.sanitizer import truncate_text
from multichat.providers.factory import ProviderFactory
from multichat.schemas.requests import ChatRequest
from multichat.schemas.responses import ChatResponse
from multichat.services.aggregator import BatchAggregator
from multichat.services.framing import DisconnectProbe, frame_events
from multichat.services.multiplexer import StreamMultiplexer

logger = get_logger(__name__)


class ChatOrchestrator:
    """
    Entry point for both delivery modes.

    Adapters are created per request by the factory, so no provider state
    outlives a request.
    """

    def __init__(
        self,
        factory: ProviderFactory,
        aggregator: BatchAggregator,
        multiplexer: StreamMultiplexer,
    ):
        self.factory = factory
        self.aggregator = aggregator
        self.multiplexer = multiplexer

    async def process_chat(self, request: ChatRequest) -> ChatResponse:
        """Run all selected providers to completion and combine their results."""
        providers = request.providers
        logger.info(
            LogEvents.CHAT_REQUEST_STARTED,
            mode="batch",
            providers=[p.value for p in providers],
            prompt=truncate_text(request.prompt, 100),
        )

        results = await self.aggregator.aggregate(request.prompt, self.factory.create(providers))
        return ChatResponse(results=results)

    async def process_chat_stream(
        self,
        request: ChatRequest,
        is_disconnected: DisconnectProbe | None = None,
    ) -> AsyncGenerator[str, None]:
        """
        Stream all selected providers as one framed event stream.

        Yields:
            ``data:`` records, one per event, then the ``[DONE]`` record
        """
        providers = request.providers
        logger.info(
            LogEvents.SSE_STREAM_STARTED,
            providers=[p.value for p in providers],
            prompt=truncate_text(request.prompt, 100),
        )

        events = self.multiplexer.multiplex(request.prompt, self.factory.create(providers))
        async with aclosing(frame_events(events, is_disconnected)) as records:
            async for record in records:
                yield record
