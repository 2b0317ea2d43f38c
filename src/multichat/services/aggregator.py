"""Batch aggregation: run every provider to completion, in parallel."""

import asyncio
import time
from collections.abc import Sequence

from multichat.core.errors import ErrorCategory, ProviderError
from multichat.observability.constants import LogEvents
from multichat.observability.logger import get_logger
from multichat.providers.base import ProviderAdapter, ProviderResult
from multichat.schemas.responses import AggregateResult

logger = get_logger(__name__)


class BatchAggregator:
    """Fans a prompt out to all adapters and collects one result each."""

    async def aggregate(
        self,
        prompt: str,
        adapters: Sequence[ProviderAdapter],
    ) -> list[AggregateResult]:
        """
        Run ``complete`` on every adapter concurrently.

        Args:
            prompt: The user's prompt
            adapters: Adapters in the order results should be returned

        Returns:
            One AggregateResult per adapter, in the same order. A failing
            provider yields an entry with an error; it never affects siblings.
        """
        if not adapters:
            return []

        start_time = time.perf_counter()

        outcomes = await asyncio.gather(
            *(self._run(prompt, adapter) for adapter in adapters),
            return_exceptions=True,
        )

        results = []
        for adapter, outcome in zip(adapters, outcomes):
            if isinstance(outcome, BaseException):
                # Adapters convert their own failures; this is a broken adapter
                logger.error(
                    LogEvents.PROVIDER_UNEXPECTED_ERROR,
                    service=adapter.service,
                    error_type=type(outcome).__name__,
                    error=str(outcome),
                )
                outcome = self._to_result(
                    adapter,
                    ProviderResult(
                        error=ProviderError(
                            adapter.service, ErrorCategory.INTERNAL, detail=str(outcome)
                        )
                    ),
                )
            results.append(outcome)

        succeeded = sum(1 for r in results if r.error is None)
        logger.info(
            LogEvents.CHAT_REQUEST_COMPLETED,
            providers=len(results),
            succeeded=succeeded,
            duration_ms=int((time.perf_counter() - start_time) * 1000),
        )
        return results

    async def _run(self, prompt: str, adapter: ProviderAdapter) -> AggregateResult:
        return self._to_result(adapter, await adapter.complete(prompt))

    @staticmethod
    def _to_result(adapter: ProviderAdapter, result: ProviderResult) -> AggregateResult:
        if result.ok:
            return AggregateResult(
                service=adapter.service,
                provider=adapter.provider,
                response=result.text,
            )
        return AggregateResult(
            service=adapter.service,
            provider=adapter.provider,
            response="",
            error=result.error.message,
            error_type=result.error.category.value,
        )
