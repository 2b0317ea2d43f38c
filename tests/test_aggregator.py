"""Tests for batch aggregation."""

import time

import pytest

from multichat.core.errors import ProviderError
from multichat.schemas.requests import ProviderId
from multichat.services.aggregator import BatchAggregator
from tests.fakes import FakeAdapter, FakeTier, RaisingAdapter


@pytest.fixture
def aggregator() -> BatchAggregator:
    return BatchAggregator()


class TestBatchAggregator:
    @pytest.mark.asyncio
    async def test_results_follow_adapter_order(self, aggregator: BatchAggregator) -> None:
        adapters = [
            FakeAdapter(ProviderId.CHATGPT, [FakeTier("t", ["slow"], delay=0.05)]),
            FakeAdapter(ProviderId.DEEPSEEK, [FakeTier("t", ["fast"])]),
        ]

        results = await aggregator.aggregate("prompt", adapters)

        assert [r.service for r in results] == ["ChatGPT", "DeepSeek"]
        assert [r.response for r in results] == ["slow", "fast"]
        assert all(r.error is None for r in results)

    @pytest.mark.asyncio
    async def test_providers_run_concurrently(self, aggregator: BatchAggregator) -> None:
        adapters = [
            FakeAdapter(provider, [FakeTier("t", ["x"], delay=0.2)])
            for provider in ProviderId
        ]

        start = time.perf_counter()
        results = await aggregator.aggregate("prompt", adapters)

        assert len(results) == 4
        assert time.perf_counter() - start < 0.6

    @pytest.mark.asyncio
    async def test_failure_is_isolated(self, aggregator: BatchAggregator) -> None:
        adapters = [
            FakeAdapter(ProviderId.CHATGPT, [FakeTier("t", ["fine"])]),
            FakeAdapter(
                ProviderId.DEEPSEEK,
                [FakeTier("t", error=ProviderError.from_status("DeepSeek", 402))],
            ),
        ]

        ok, failed = await aggregator.aggregate("prompt", adapters)

        assert ok.response == "fine"
        assert failed.response == ""
        assert failed.error == "DeepSeek Payment Required: Please add credits to your account"
        assert failed.error_type == "payment"
        assert failed.provider is ProviderId.DEEPSEEK

    @pytest.mark.asyncio
    async def test_broken_adapter_becomes_internal_error(
        self, aggregator: BatchAggregator
    ) -> None:
        adapters = [
            RaisingAdapter(ProviderId.GITHUB, [FakeTier("t")]),
            FakeAdapter(ProviderId.MICROSOFT, [FakeTier("t", ["still here"])]),
        ]

        broken, ok = await aggregator.aggregate("prompt", adapters)

        assert broken.error_type == "internal"
        assert "adapter exploded" in broken.error
        assert ok.response == "still here"

    @pytest.mark.asyncio
    async def test_no_adapters(self, aggregator: BatchAggregator) -> None:
        assert await aggregator.aggregate("prompt", []) == []
