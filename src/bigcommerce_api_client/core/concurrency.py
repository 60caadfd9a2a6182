"""Batched concurrent execution of independent requests."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from .async_transport import LOGGER_NAME
from .errors import BigCommerceConfigurationError
from .models import RequestDescriptor, SettledOutcome

Fetch = Callable[[RequestDescriptor], Awaitable[Any]]


def resolve_concurrency(override: int | None, default: int) -> int:
    if override is None:
        return default
    if isinstance(override, bool) or not isinstance(override, int) or override < 1:
        raise BigCommerceConfigurationError(f"concurrency must be an integer >= 1, got {override!r}")
    return override


def chunk_batches(
    descriptors: Sequence[RequestDescriptor],
    *,
    batch_size: int,
) -> tuple[tuple[RequestDescriptor, ...], ...]:
    if batch_size <= 0:
        raise ValueError("batch_size must be > 0")
    return tuple(
        tuple(descriptors[i : i + batch_size])
        for i in range(0, len(descriptors), batch_size)
    )


async def settle_batch(
    fetch: Fetch,
    batch: Sequence[RequestDescriptor],
) -> list[SettledOutcome]:
    """Run one batch concurrently and wait for every outcome."""

    results = await asyncio.gather(
        *(fetch(descriptor) for descriptor in batch),
        return_exceptions=True,
    )
    outcomes: list[SettledOutcome] = []
    for descriptor, result in zip(batch, results):
        if isinstance(result, Exception):
            outcomes.append(SettledOutcome(descriptor=descriptor, error=result))
        elif isinstance(result, BaseException):
            raise result
        else:
            outcomes.append(SettledOutcome(descriptor=descriptor, value=result))
    return outcomes


class ConcurrencyExecutor:
    """Runs requests in fixed-size batches, one batch in flight at a time.

    Outcomes are reported in request order. ``run`` either re-raises the first
    failure of a settled batch (fail-fast) or logs and drops failures
    (skip-errors).
    """

    def __init__(
        self,
        fetch: Fetch,
        *,
        concurrency: int = 10,
        skip_errors: bool = False,
        logger: logging.Logger | None = None,
    ) -> None:
        self._fetch = fetch
        self._concurrency = concurrency
        self._skip_errors = skip_errors
        self._logger = logger or logging.getLogger(LOGGER_NAME)

    async def run_settled(
        self,
        descriptors: Sequence[RequestDescriptor],
        *,
        concurrency: int | None = None,
    ) -> list[SettledOutcome]:
        outcomes: list[SettledOutcome] = []
        batch_size = resolve_concurrency(concurrency, self._concurrency)
        batches = chunk_batches(descriptors, batch_size=batch_size)
        for index, batch in enumerate(batches):
            self._logger.debug(
                "batch start batch_index=%s batch_size=%s total_batches=%s",
                index + 1,
                len(batch),
                len(batches),
            )
            outcomes.extend(await settle_batch(self._fetch, batch))
        return outcomes

    async def run(
        self,
        descriptors: Sequence[RequestDescriptor],
        *,
        concurrency: int | None = None,
        skip_errors: bool | None = None,
    ) -> list[Any]:
        skip = self._skip_errors if skip_errors is None else skip_errors
        values: list[Any] = []
        batch_size = resolve_concurrency(concurrency, self._concurrency)
        batches = chunk_batches(descriptors, batch_size=batch_size)
        for batch in batches:
            for outcome in await settle_batch(self._fetch, batch):
                if outcome.error is None:
                    values.append(outcome.value)
                    continue
                if not skip:
                    raise outcome.error
                self._logger.warning(
                    "skipping failed request endpoint=%s query=%s error=%s",
                    outcome.descriptor.endpoint,
                    dict(outcome.descriptor.query),
                    outcome.error,
                )
        return values


__all__ = [
    "Fetch",
    "resolve_concurrency",
    "chunk_batches",
    "settle_batch",
    "ConcurrencyExecutor",
]
