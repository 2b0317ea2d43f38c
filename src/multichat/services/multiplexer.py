"""Stream multiplexing: interleave several provider streams into one."""

import asyncio
from collections.abc import AsyncGenerator, Sequence

from multichat.core.errors import CATEGORY_TITLES, ErrorCategory
from multichat.observability.constants import LogEvents
from multichat.observability.logger import get_logger
from multichat.providers.base import ProviderAdapter
from multichat.schemas.responses import StreamEvent

logger = get_logger(__name__)


async def _next_event(producer: AsyncGenerator[StreamEvent, None]) -> StreamEvent | None:
    """Fetch one event; None once the producer is exhausted."""
    try:
        return await producer.__anext__()
    except StopAsyncIteration:
        return None


class StreamMultiplexer:
    """Merges provider event streams as fragments become available.

    Every producer has at most one fetch in flight. Whichever fetch finishes
    first has its event yielded before that producer is asked for the next
    one, so order within a provider is preserved while providers interleave
    freely. A provider is dropped after its terminal event.

    Args:
        poll_interval: Pause between rounds, in seconds. 0 just yields to
            the event loop.
    """

    def __init__(self, poll_interval: float = 0.0):
        self.poll_interval = poll_interval

    async def multiplex(
        self,
        prompt: str,
        adapters: Sequence[ProviderAdapter],
    ) -> AsyncGenerator[StreamEvent, None]:
        producers = [(adapter, adapter.stream(prompt)) for adapter in adapters]
        pending: dict[asyncio.Task, tuple[ProviderAdapter, AsyncGenerator]] = {}

        for adapter, producer in producers:
            pending[asyncio.create_task(_next_event(producer))] = (adapter, producer)

        try:
            while pending:
                done, _ = await asyncio.wait(
                    pending.keys(), return_when=asyncio.FIRST_COMPLETED
                )

                for task in done:
                    adapter, producer = pending.pop(task)
                    event = self._outcome(task, adapter)
                    yield event
                    if not event.done:
                        next_fetch = asyncio.create_task(_next_event(producer))
                        pending[next_fetch] = (adapter, producer)

                await asyncio.sleep(self.poll_interval)
        finally:
            await self._shutdown(pending, [producer for _, producer in producers])

    def _outcome(self, task: asyncio.Task, adapter: ProviderAdapter) -> StreamEvent:
        """Turn a finished fetch into the event to emit."""
        if task.cancelled():
            return self._synthetic_error(adapter, ErrorCategory.INTERNAL, "stream was cancelled")

        exc = task.exception()
        if exc is not None:
            logger.error(
                LogEvents.SSE_PRODUCER_FAILED,
                service=adapter.service,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return self._synthetic_error(
                adapter, ErrorCategory.INTERNAL, str(exc) or type(exc).__name__
            )

        event = task.result()
        if event is None:
            logger.error(
                LogEvents.SSE_PRODUCER_FAILED,
                service=adapter.service,
                error="stream ended without a terminal event",
            )
            return self._synthetic_error(
                adapter, ErrorCategory.PROTOCOL, "stream ended without a terminal event"
            )
        return event

    @staticmethod
    def _synthetic_error(
        adapter: ProviderAdapter, category: ErrorCategory, detail: str
    ) -> StreamEvent:
        return StreamEvent(
            service=adapter.service,
            provider=adapter.provider,
            done=True,
            error=f"{adapter.service} {CATEGORY_TITLES[category]}: {detail}",
            error_type=category.value,
        )

    @staticmethod
    async def _shutdown(
        pending: dict[asyncio.Task, tuple[ProviderAdapter, AsyncGenerator]],
        producers: list[AsyncGenerator],
    ) -> None:
        """Cancel outstanding fetches and close every producer."""
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        for producer in producers:
            try:
                await producer.aclose()
            except Exception:
                logger.exception(LogEvents.SSE_PRODUCER_FAILED, stage="close")
