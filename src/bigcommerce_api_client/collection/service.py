"""Full-dataset collection over v3/v2 listings and value-set filtering."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from ..config import ConcurrencyConfig, RetryConfig
from ..core.async_transport import LOGGER_NAME, AsyncTransport
from ..core.chunking import chunk_str_length
from ..core.concurrency import ConcurrencyExecutor, resolve_concurrency
from ..core.errors import BigCommerceConfigurationError, BigCommerceRequestError
from ..core.models import RequestDescriptor, SettledOutcome
from ..core.pagination import (
    DEFAULT_PAGE_SIZE,
    extract_items,
    iterate_page_windows,
    parse_total_pages,
    remaining_pages,
)
from ..core.urls import MAX_URL_LENGTH, encoded_length

NOT_FOUND_STATUS = 404


def is_end_of_stream(outcome: SettledOutcome) -> bool:
    """v2 listings end with an empty body; older endpoints 404 past the last page."""

    if outcome.error is not None:
        return (
            isinstance(outcome.error, BigCommerceRequestError)
            and outcome.error.http_status == NOT_FOUND_STATUS
        )
    return outcome.value is None or outcome.value == []


def page_size_from(query: Mapping[str, str]) -> int:
    raw = query.get("limit")
    if raw is None:
        return DEFAULT_PAGE_SIZE
    text = str(raw).strip()
    if not (text.isascii() and text.isdigit()) or int(text) <= 0:
        raise BigCommerceConfigurationError(f"limit must be a positive integer, got {raw!r}")
    return int(text)


class CollectionService:
    """Collector and value-set querier on top of the transport."""

    def __init__(
        self,
        transport: AsyncTransport,
        *,
        concurrency: ConcurrencyConfig | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._transport = transport
        self._concurrency = concurrency or ConcurrencyConfig()
        self._logger = logger or logging.getLogger(LOGGER_NAME)

    def executor(
        self,
        *,
        retry: RetryConfig | None = None,
        concurrency: int | None = None,
        skip_errors: bool | None = None,
    ) -> ConcurrencyExecutor:
        async def fetch(descriptor: RequestDescriptor) -> Any:
            return await self._transport.request(descriptor, retry=retry)

        return ConcurrencyExecutor(
            fetch,
            concurrency=resolve_concurrency(concurrency, self._concurrency.concurrency),
            skip_errors=self._concurrency.skip_errors if skip_errors is None else skip_errors,
            logger=self._logger,
        )

    async def collect(
        self,
        endpoint: str,
        *,
        query: Mapping[str, str] | None = None,
        concurrency: int | None = None,
        skip_errors: bool | None = None,
        retry: RetryConfig | None = None,
    ) -> list[Any]:
        base = RequestDescriptor(endpoint, version="v3", query=query or {})
        if "limit" not in base.query:
            base = base.with_query({"limit": str(DEFAULT_PAGE_SIZE)})

        executor = self.executor(retry=retry, concurrency=concurrency, skip_errors=skip_errors)
        first = await self._transport.request(base.with_query({"page": "1"}), retry=retry)
        items = list(extract_items(first))
        pages = remaining_pages(parse_total_pages(first))
        self._logger.info(
            "collect start endpoint=%s total_pages=%s first_page_items=%s",
            endpoint,
            len(pages) + 1,
            len(items),
        )
        if not pages:
            return items

        payloads = await executor.run([base.with_query({"page": str(page)}) for page in pages])
        for payload in payloads:
            items.extend(extract_items(payload))
        self._logger.info("collect done endpoint=%s items=%s", endpoint, len(items))
        return items

    async def collect_v2(
        self,
        endpoint: str,
        *,
        query: Mapping[str, str] | None = None,
        concurrency: int | None = None,
        skip_errors: bool | None = None,
        retry: RetryConfig | None = None,
    ) -> list[Any]:
        base = RequestDescriptor(endpoint, version="v2", query=query or {})
        if "limit" not in base.query:
            base = base.with_query({"limit": str(DEFAULT_PAGE_SIZE)})

        executor = self.executor(retry=retry, concurrency=concurrency, skip_errors=skip_errors)
        skip = self._concurrency.skip_errors if skip_errors is None else skip_errors
        window_size = resolve_concurrency(concurrency, self._concurrency.concurrency)
        items: list[Any] = []

        for window in iterate_page_windows(window_size=window_size):
            outcomes = await executor.run_settled(
                [base.with_query({"page": str(page)}) for page in window]
            )
            # Outcomes are in page order; anything after the end marker is past the last page.
            ended = False
            for outcome in outcomes:
                if is_end_of_stream(outcome):
                    ended = True
                    break
                if outcome.error is not None:
                    if not skip:
                        raise outcome.error
                    self._logger.warning(
                        "skipping failed page endpoint=%s page=%s error=%s",
                        endpoint,
                        outcome.descriptor.query.get("page"),
                        outcome.error,
                    )
                    continue
                items.extend(extract_items(outcome.value))
            if ended:
                self._logger.info(
                    "collect_v2 done endpoint=%s last_window=%s items=%s",
                    endpoint,
                    f"{window[0]}-{window[-1]}",
                    len(items),
                )
                return items
        return items

    async def query(
        self,
        endpoint: str,
        *,
        key: str,
        values: Iterable[object],
        query: Mapping[str, str] | None = None,
        concurrency: int | None = None,
        skip_errors: bool | None = None,
        retry: RetryConfig | None = None,
    ) -> list[Any]:
        """Fetch items matching any of ``values`` for filter ``key`` (e.g. ``sku:in``)."""

        normalized = [str(value) for value in values]
        if not normalized:
            return []

        other = {k: v for k, v in dict(query or {}).items() if k != key}
        chunk_length = page_size_from(other)
        base = RequestDescriptor(
            endpoint,
            version="v3",
            query={**other, "limit": str(chunk_length)},
        )
        offset = len(self._transport.build_url(base.with_query({key: ""})))
        try:
            chunks = chunk_str_length(
                normalized,
                max_length=MAX_URL_LENGTH,
                chunk_length=chunk_length,
                offset=offset,
                separator_size=1,
                measure=encoded_length,
            )
        except ValueError as exc:
            raise BigCommerceConfigurationError(str(exc)) from exc

        self._logger.info(
            "query start endpoint=%s key=%s values=%s chunks=%s",
            endpoint,
            key,
            len(normalized),
            len(chunks),
        )
        executor = self.executor(retry=retry, concurrency=concurrency, skip_errors=skip_errors)
        payloads = await executor.run(
            [base.with_query({key: ",".join(chunk)}) for chunk in chunks]
        )
        items: list[Any] = []
        for payload in payloads:
            items.extend(extract_items(payload))
        return items


__all__ = [
    "NOT_FOUND_STATUS",
    "is_end_of_stream",
    "page_size_from",
    "CollectionService",
]
