"""
Tests for SummaryService.

============================================================
PURPOSE
============================================================
Caller-side policy: queueing, de-duplication, soft timeout
and bounded retries. Sleeps are replaced with a recorder so
the tests do not wait in real time.

============================================================
"""

import asyncio
import random
from unittest.mock import AsyncMock, MagicMock

import pytest

from explorer_adapters.config import ExplorerConfig
from explorer_adapters.exceptions import FetchFailure, StateNotFoundError, TransportError
from explorer_adapters.models import AddressSummary
from explorer_adapters.service import SummaryService, is_transient


ADDRESS = "TR7NHqjeKQxGTCi8q8ZY4pL8otSzgjLj6t"


class SleepRecorder:
    """Stands in for asyncio.sleep; yields control without waiting."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)
        await asyncio.sleep(0)


def make_client(*outcomes) -> MagicMock:
    """Client whose fetch_slim_summary yields outcomes in order."""
    client = MagicMock()
    client.fetch_slim_summary = AsyncMock(side_effect=list(outcomes))
    return client


def make_service(client, **kwargs) -> tuple[SummaryService, SleepRecorder]:
    sleep = SleepRecorder()
    service = SummaryService(client, sleep=sleep, rng=random.Random(7), **kwargs)
    return service, sleep


# ============================================================
# CLASSIFICATION
# ============================================================

class TestIsTransient:
    """Tests for is_transient."""

    def test_transient_errors(self):
        assert is_transient(asyncio.TimeoutError())
        assert is_transient(TransportError("reset"))
        assert is_transient(FetchFailure("slow down", status_code=429))
        assert is_transient(FetchFailure("oops", status_code=503))

    def test_permanent_errors(self):
        assert not is_transient(FetchFailure("gone", status_code=404))
        assert not is_transient(StateNotFoundError("shape changed"))
        assert not is_transient(ValueError("bad address"))


# ============================================================
# GET SUMMARY
# ============================================================

class TestGetSummary:
    """Tests for SummaryService.get_summary."""

    @pytest.mark.asyncio
    async def test_success_pauses_queue(self):
        summary = AddressSummary(address=ADDRESS)
        client = make_client(summary)
        service, sleep = make_service(client, min_interval=1.0, max_interval=2.0)

        assert await service.get_summary(ADDRESS, "zh-hans") is summary

        client.fetch_slim_summary.assert_awaited_once_with(ADDRESS, "zh-hans")
        assert len(sleep.delays) == 1
        assert 1.0 <= sleep.delays[0] <= 2.0

    @pytest.mark.asyncio
    async def test_empty_address_returns_none(self):
        client = make_client()
        service, _ = make_service(client)

        assert await service.get_summary("") is None
        client.fetch_slim_summary.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transient_failure_retried(self):
        summary = AddressSummary(address=ADDRESS)
        client = make_client(FetchFailure("busy", status_code=503), summary)
        service, sleep = make_service(client, max_attempts=2)

        assert await service.get_summary(ADDRESS) is summary

        assert client.fetch_slim_summary.await_count == 2
        backoff = sleep.delays[0]
        assert SummaryService.BACKOFF_STEP <= backoff <= SummaryService.BACKOFF_STEP + SummaryService.BACKOFF_JITTER

    @pytest.mark.asyncio
    async def test_permanent_failure_not_retried(self):
        client = make_client(FetchFailure("gone", status_code=404))
        service, _ = make_service(client, max_attempts=3)

        assert await service.get_summary(ADDRESS) is None
        assert client.fetch_slim_summary.await_count == 1

    @pytest.mark.asyncio
    async def test_attempts_are_bounded(self):
        client = make_client(*[TransportError("reset")] * 5)
        service, _ = make_service(client, max_attempts=3)

        assert await service.get_summary(ADDRESS) is None
        assert client.fetch_slim_summary.await_count == 3

    @pytest.mark.asyncio
    async def test_soft_timeout_counts_as_transient(self):
        summary = AddressSummary(address=ADDRESS)
        calls = 0

        async def fetch(address, locale):
            nonlocal calls
            calls += 1
            if calls == 1:
                await asyncio.sleep(10)
            return summary

        client = MagicMock()
        client.fetch_slim_summary = AsyncMock(side_effect=fetch)
        service, _ = make_service(client, soft_timeout=0.01)

        assert await service.get_summary(ADDRESS) is summary
        assert calls == 2

    @pytest.mark.asyncio
    async def test_cancel_stops_attempts(self):
        client = make_client(AddressSummary())
        service, _ = make_service(client)

        service.cancel()

        assert service.cancelled
        assert await service.get_summary(ADDRESS) is None
        client.fetch_slim_summary.assert_not_awaited()

        service.reset()
        assert await service.get_summary(ADDRESS) == AddressSummary()

    @pytest.mark.asyncio
    async def test_concurrent_calls_share_one_request(self):
        summary = AddressSummary(address=ADDRESS)
        release = asyncio.Event()

        async def fetch(address, locale):
            await release.wait()
            return summary

        client = MagicMock()
        client.fetch_slim_summary = AsyncMock(side_effect=fetch)
        service, _ = make_service(client)

        first = asyncio.ensure_future(service.get_summary(ADDRESS))
        second = asyncio.ensure_future(service.get_summary(ADDRESS))
        await asyncio.sleep(0)
        release.set()

        assert await first is summary
        assert await second is summary
        assert client.fetch_slim_summary.await_count == 1

    @pytest.mark.asyncio
    async def test_different_locales_not_shared(self):
        release = asyncio.Event()

        async def fetch(address, locale):
            await release.wait()
            return AddressSummary(address=address, risk_tags=[locale])

        client = MagicMock()
        client.fetch_slim_summary = AsyncMock(side_effect=fetch)
        service, _ = make_service(client)

        preferred = asyncio.ensure_future(service.get_summary(ADDRESS, "zh-hans"))
        canonical = asyncio.ensure_future(service.get_summary(ADDRESS, ""))
        await asyncio.sleep(0)
        release.set()

        assert (await preferred).risk_tags == ["zh-hans"]
        assert (await canonical).risk_tags == [""]
        assert client.fetch_slim_summary.await_count == 2

    @pytest.mark.asyncio
    async def test_queue_serializes_addresses(self):
        active = 0
        peak = 0

        async def fetch(address, locale):
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0)
            active -= 1
            return AddressSummary(address=address)

        client = MagicMock()
        client.fetch_slim_summary = AsyncMock(side_effect=fetch)
        service, _ = make_service(client)

        await asyncio.gather(*(service.get_summary(f"T{i}") for i in range(4)))

        assert peak == 1
        assert client.fetch_slim_summary.await_count == 4


class TestSummarizeMany:
    """Tests for SummaryService.summarize_many."""

    @pytest.mark.asyncio
    async def test_deduplicates_and_keeps_order(self):
        async def fetch(address, locale):
            if address == "Tbad":
                raise FetchFailure("gone", status_code=404)
            return AddressSummary(address=address)

        client = MagicMock()
        client.fetch_slim_summary = AsyncMock(side_effect=fetch)
        service, _ = make_service(client)

        results = await service.summarize_many(["Ta", "Tbad", "Ta", "", "Tb"])

        assert list(results) == ["Ta", "Tbad", "Tb"]
        assert results["Ta"] == AddressSummary(address="Ta")
        assert results["Tbad"] is None
        assert client.fetch_slim_summary.await_count == 3


class TestFromConfig:
    """Tests for SummaryService.from_config."""

    def test_policy_values_copied(self):
        config = ExplorerConfig(
            max_attempts=4,
            soft_timeout_seconds=3.0,
            min_interval_seconds=0.5,
            max_interval_seconds=0.75,
        )

        service = SummaryService.from_config(MagicMock(), config)

        assert service._max_attempts == 4
        assert service._soft_timeout == 3.0
        assert service._min_interval == 0.5
        assert service._max_interval == 0.75
