"""Public async client entrypoint."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from types import TracebackType
from typing import Any

from .client_shared import validate_config
from .collection.service import CollectionService
from .config import BigCommerceClientConfig, RetryConfig, StoreConfig
from .core.async_transport import LOGGER_NAME, AsyncTransport
from .core.errors import BigCommerceClientClosedError
from .core.models import ApiVersion, RequestDescriptor, SettledOutcome


class BigCommerceClient:
    """Store-scoped BigCommerce management API client."""

    def __init__(
        self,
        *,
        config: BigCommerceClientConfig | None = None,
        store_hash: str | None = None,
        access_token: str | None = None,
        transport: AsyncTransport | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        if config is None:
            config = BigCommerceClientConfig(
                store=StoreConfig(store_hash=store_hash or "", access_token=access_token or "")
            )
        self._config = config
        validate_config(self._config)

        self._logger = logger or logging.getLogger(LOGGER_NAME)
        self._transport = transport or AsyncTransport(self._config, logger=self._logger)
        self._collections = CollectionService(
            self._transport,
            concurrency=self._config.concurrency,
            logger=self._logger,
        )
        self._closed = False

    @property
    def config(self) -> BigCommerceClientConfig:
        return self._config

    def _ensure_open(self) -> None:
        if self._closed:
            raise BigCommerceClientClosedError("BigCommerceClient is already closed")

    async def request(
        self,
        descriptor: RequestDescriptor,
        *,
        retry: RetryConfig | None = None,
    ) -> Any:
        self._ensure_open()
        return await self._transport.request(descriptor, retry=retry)

    async def get(
        self,
        endpoint: str,
        *,
        query: Mapping[str, str] | None = None,
        version: ApiVersion = "v3",
        retry: RetryConfig | None = None,
    ) -> Any:
        return await self.request(
            RequestDescriptor(endpoint, method="GET", version=version, query=query or {}),
            retry=retry,
        )

    async def post(
        self,
        endpoint: str,
        *,
        body: Any,
        query: Mapping[str, str] | None = None,
        version: ApiVersion = "v3",
        retry: RetryConfig | None = None,
    ) -> Any:
        return await self.request(
            RequestDescriptor(endpoint, method="POST", body=body, version=version, query=query or {}),
            retry=retry,
        )

    async def put(
        self,
        endpoint: str,
        *,
        body: Any,
        query: Mapping[str, str] | None = None,
        version: ApiVersion = "v3",
        retry: RetryConfig | None = None,
    ) -> Any:
        return await self.request(
            RequestDescriptor(endpoint, method="PUT", body=body, version=version, query=query or {}),
            retry=retry,
        )

    async def delete(
        self,
        endpoint: str,
        *,
        query: Mapping[str, str] | None = None,
        version: ApiVersion = "v3",
        retry: RetryConfig | None = None,
    ) -> None:
        await self.request(
            RequestDescriptor(endpoint, method="DELETE", version=version, query=query or {}),
            retry=retry,
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
        """Fetch every page of a v3 listing."""

        self._ensure_open()
        return await self._collections.collect(
            endpoint,
            query=query,
            concurrency=concurrency,
            skip_errors=skip_errors,
            retry=retry,
        )

    async def collect_v2(
        self,
        endpoint: str,
        *,
        query: Mapping[str, str] | None = None,
        concurrency: int | None = None,
        skip_errors: bool | None = None,
        retry: RetryConfig | None = None,
    ) -> list[Any]:
        """Fetch every page of a v2 listing, probing until an empty page."""

        self._ensure_open()
        return await self._collections.collect_v2(
            endpoint,
            query=query,
            concurrency=concurrency,
            skip_errors=skip_errors,
            retry=retry,
        )

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
        """Filter a v3 listing by many values, split across URL-safe requests."""

        self._ensure_open()
        return await self._collections.query(
            endpoint,
            key=key,
            values=values,
            query=query,
            concurrency=concurrency,
            skip_errors=skip_errors,
            retry=retry,
        )

    async def concurrent(
        self,
        requests: Sequence[RequestDescriptor],
        *,
        concurrency: int | None = None,
        skip_errors: bool | None = None,
        retry: RetryConfig | None = None,
    ) -> list[Any]:
        self._ensure_open()
        executor = self._collections.executor(
            retry=retry,
            concurrency=concurrency,
            skip_errors=skip_errors,
        )
        return await executor.run(requests)

    async def concurrent_settled(
        self,
        requests: Sequence[RequestDescriptor],
        *,
        concurrency: int | None = None,
        retry: RetryConfig | None = None,
    ) -> list[SettledOutcome]:
        self._ensure_open()
        executor = self._collections.executor(retry=retry, concurrency=concurrency)
        return await executor.run_settled(requests)

    async def close(self) -> None:
        if self._closed:
            return
        await self._transport.close()
        self._closed = True

    async def __aenter__(self) -> "BigCommerceClient":
        self._ensure_open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        await self.close()
        return False


__all__ = [
    "BigCommerceClient",
]
