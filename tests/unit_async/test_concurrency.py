from __future__ import annotations

import asyncio

import pytest

from bigcommerce_api_client.core.concurrency import (
    ConcurrencyExecutor,
    chunk_batches,
    resolve_concurrency,
)
from bigcommerce_api_client.core.errors import (
    BigCommerceConfigurationError,
    BigCommerceRequestError,
)
from bigcommerce_api_client.core.models import RequestDescriptor


def descriptors(count: int) -> list[RequestDescriptor]:
    return [RequestDescriptor(f"/items/{i}") for i in range(count)]


class TrackingFetch:
    """Fake fetch that records peak in-flight requests and fails selected endpoints."""

    def __init__(self, *, failing: set[str] = frozenset(), delays: dict[str, float] | None = None):
        self.failing = failing
        self.delays = delays or {}
        self.in_flight = 0
        self.peak = 0
        self.started: list[str] = []

    async def __call__(self, descriptor: RequestDescriptor):
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        self.started.append(descriptor.endpoint)
        try:
            await asyncio.sleep(self.delays.get(descriptor.endpoint, 0))
            if descriptor.endpoint in self.failing:
                raise BigCommerceRequestError(f"failed {descriptor.endpoint}", http_status=500)
            return descriptor.endpoint
        finally:
            self.in_flight -= 1


def test_chunk_batches_splits_into_fixed_sizes():
    batches = chunk_batches(descriptors(5), batch_size=2)
    assert [len(batch) for batch in batches] == [2, 2, 1]


def test_chunk_batches_rejects_non_positive_size():
    with pytest.raises(ValueError):
        chunk_batches(descriptors(1), batch_size=0)


@pytest.mark.asyncio
async def test_run_bounds_in_flight_requests_to_batch_size():
    fetch = TrackingFetch()
    executor = ConcurrencyExecutor(fetch, concurrency=3)

    result = await executor.run(descriptors(7))

    assert result == [f"/items/{i}" for i in range(7)]
    assert fetch.peak == 3


@pytest.mark.asyncio
async def test_results_keep_request_order_regardless_of_completion_order():
    fetch = TrackingFetch(delays={"/items/0": 0.02, "/items/1": 0.0})
    executor = ConcurrencyExecutor(fetch, concurrency=2)

    assert await executor.run(descriptors(2)) == ["/items/0", "/items/1"]


@pytest.mark.asyncio
async def test_fail_fast_raises_first_failure_and_skips_later_batches():
    fetch = TrackingFetch(failing={"/items/1", "/items/2"})
    executor = ConcurrencyExecutor(fetch, concurrency=3)

    with pytest.raises(BigCommerceRequestError, match="failed /items/1"):
        await executor.run(descriptors(6))

    # the whole first batch settled, the second never started
    assert fetch.started == ["/items/0", "/items/1", "/items/2"]


@pytest.mark.asyncio
async def test_skip_errors_returns_exactly_the_successful_subset(caplog):
    fetch = TrackingFetch(failing={"/items/1", "/items/4"})
    executor = ConcurrencyExecutor(fetch, concurrency=2, skip_errors=True)

    with caplog.at_level("WARNING", logger="bigcommerce_api_client"):
        result = await executor.run(descriptors(5))

    assert result == ["/items/0", "/items/2", "/items/3"]
    assert sum("skipping failed request" in record.getMessage() for record in caplog.records) == 2


@pytest.mark.asyncio
async def test_per_call_overrides_take_precedence():
    fetch = TrackingFetch(failing={"/items/0"})
    executor = ConcurrencyExecutor(fetch, concurrency=10, skip_errors=False)

    result = await executor.run(descriptors(4), concurrency=1, skip_errors=True)

    assert result == ["/items/1", "/items/2", "/items/3"]
    assert fetch.peak == 1


@pytest.mark.asyncio
async def test_run_settled_reports_every_outcome():
    fetch = TrackingFetch(failing={"/items/2"})
    executor = ConcurrencyExecutor(fetch, concurrency=2)

    outcomes = await executor.run_settled(descriptors(4))

    assert [outcome.ok for outcome in outcomes] == [True, True, False, True]
    assert outcomes[0].value == "/items/0"
    assert isinstance(outcomes[2].error, BigCommerceRequestError)
    assert outcomes[2].descriptor.endpoint == "/items/2"


@pytest.mark.asyncio
async def test_empty_request_list_returns_empty_results():
    executor = ConcurrencyExecutor(TrackingFetch())
    assert await executor.run([]) == []
    assert await executor.run_settled([]) == []


@pytest.mark.asyncio
async def test_cancellation_is_not_turned_into_an_outcome():
    async def fetch(descriptor: RequestDescriptor):
        raise asyncio.CancelledError()

    executor = ConcurrencyExecutor(fetch, skip_errors=True)
    with pytest.raises(asyncio.CancelledError):
        await executor.run(descriptors(1))


def test_resolve_concurrency_prefers_explicit_override():
    assert resolve_concurrency(None, 10) == 10
    assert resolve_concurrency(3, 10) == 3


@pytest.mark.parametrize("override", [0, -1, True, 2.5])
def test_resolve_concurrency_rejects_invalid_override(override):
    with pytest.raises(BigCommerceConfigurationError, match="concurrency must be"):
        resolve_concurrency(override, 10)


@pytest.mark.asyncio
@pytest.mark.parametrize("override", [0, -1])
async def test_invalid_concurrency_override_fails_before_any_request(override: int):
    fetch = TrackingFetch()
    executor = ConcurrencyExecutor(fetch, concurrency=2)

    with pytest.raises(BigCommerceConfigurationError):
        await executor.run(descriptors(3), concurrency=override)
    with pytest.raises(BigCommerceConfigurationError):
        await executor.run_settled(descriptors(3), concurrency=override)
    assert fetch.started == []
