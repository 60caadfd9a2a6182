"""Async HTTP transport with URL guard, status evaluation and rate-limit retry."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Protocol

import httpx

from ..config import BigCommerceClientConfig, RetryConfig
from .errors import (
    BigCommerceRateLimitError,
    BigCommerceRequestError,
    BigCommerceTransportError,
)
from .models import RequestDescriptor
from .response_parsing import (
    TextResponse,
    build_http_error,
    is_success,
    parse_success_payload,
)
from .retry import REQUESTS_LEFT_HEADER, RETRY_AFTER_HEADER, can_retry, header_value, parse_retry_after_ms
from .urls import build_url, ensure_url_length

LOGGER_NAME = "bigcommerce_api_client"


class AsyncHttpClient(Protocol):
    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        json: Any = None,
    ) -> TextResponse: ...

    async def aclose(self) -> None: ...


def build_default_headers(config: BigCommerceClientConfig) -> dict[str, str]:
    return {
        "Accept": "application/json",
        "Content-Type": "application/json",
        "User-Agent": config.user_agent,
        "X-Auth-Token": config.store.access_token,
    }


def build_default_timeout(config: BigCommerceClientConfig) -> httpx.Timeout:
    return httpx.Timeout(
        connect=config.transport.timeout_connect_seconds,
        read=config.transport.timeout_read_seconds,
        write=config.transport.timeout_write_seconds,
        pool=config.transport.timeout_pool_seconds,
    )


class AsyncTransport:
    """Asynchronous transport for the store-scoped management API."""

    def __init__(
        self,
        config: BigCommerceClientConfig,
        *,
        client: AsyncHttpClient | None = None,
        sleeper: Callable[[float], Awaitable[None]] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._sleep = sleeper or _default_sleep
        self._logger = logger or logging.getLogger(LOGGER_NAME)
        self._headers = build_default_headers(config)
        self._closed = False

        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=build_default_timeout(config))

    @property
    def config(self) -> BigCommerceClientConfig:
        return self._config

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_client and hasattr(self._client, "aclose"):
            await self._client.aclose()

    def build_url(self, descriptor: RequestDescriptor) -> str:
        return build_url(
            base_url=self._config.base_url,
            store_hash=self._config.store.store_hash,
            version=descriptor.version,
            endpoint=descriptor.endpoint,
            query=descriptor.query,
        )

    async def request(
        self,
        descriptor: RequestDescriptor,
        *,
        retry: RetryConfig | None = None,
    ) -> Any:
        """Send one request, waiting out rate limits per the retry policy."""

        if self._closed:
            raise BigCommerceTransportError("transport is already closed", cause="network")

        policy = retry or self._config.retry
        attempt = 0
        last_error: BigCommerceRequestError | None = None

        while can_retry(attempt=attempt, max_retries=policy.max_retries):
            attempt += 1
            try:
                return await self._send(descriptor, attempt=attempt)
            except BigCommerceRateLimitError as exc:
                last_error = exc
                delay_ms = self._reset_delay_ms(descriptor, exc, attempt=attempt, policy=policy)
                if not can_retry(attempt=attempt, max_retries=policy.max_retries):
                    break
                await self._sleep(delay_ms / 1000.0)

        self._logger.error(
            "request failed after maximum retries endpoint=%s attempts=%s",
            descriptor.endpoint,
            attempt,
        )
        raise last_error or BigCommerceRequestError(
            "Failed to make request",
            data="Too many retries after rate limit",
            cause="rate_limit",
        )

    def _reset_delay_ms(
        self,
        descriptor: RequestDescriptor,
        error: BigCommerceRateLimitError,
        *,
        attempt: int,
        policy: RetryConfig,
    ) -> int:
        headers = error.data.get("headers") if isinstance(error.data, Mapping) else None
        retry_after_ms = parse_retry_after_ms(headers)
        self._logger.debug(
            "rate limit hit endpoint=%s attempt=%s retry_after_ms=%s remaining=%s",
            descriptor.endpoint,
            attempt,
            retry_after_ms,
            header_value(headers, REQUESTS_LEFT_HEADER),
        )
        if retry_after_ms is None:
            raise BigCommerceRateLimitError(
                f"Failed to parse retry after: {header_value(headers, RETRY_AFTER_HEADER)}, {error.message}",
                http_status=error.http_status,
                data=error.data,
                cause="rate_limit",
            ) from error
        if retry_after_ms > policy.max_delay_ms:
            self._logger.warning(
                "rate limit delay exceeds maximum endpoint=%s retry_after_ms=%s max_delay_ms=%s",
                descriptor.endpoint,
                retry_after_ms,
                policy.max_delay_ms,
            )
            raise BigCommerceRateLimitError(
                f"Rate limit exceeded: {retry_after_ms}ms, {error.message}",
                http_status=error.http_status,
                data=error.data,
                cause="rate_limit",
            ) from error
        return retry_after_ms

    async def _send(self, descriptor: RequestDescriptor, *, attempt: int) -> Any:
        url = self.build_url(descriptor)
        try:
            ensure_url_length(url)
        except BigCommerceRequestError:
            self._logger.error(
                "url length exceeds maximum endpoint=%s url_length=%s",
                descriptor.endpoint,
                len(url),
            )
            raise

        self._logger.debug(
            "request start method=%s endpoint=%s attempt=%s",
            descriptor.method,
            descriptor.endpoint,
            attempt,
        )
        kwargs: dict[str, Any] = {"headers": self._headers}
        if descriptor.body is not None:
            kwargs["json"] = descriptor.body
        try:
            response = await self._client.request(descriptor.method, url, **kwargs)
        except Exception as exc:
            self._logger.error(
                "request network error endpoint=%s attempt=%s error=%s",
                descriptor.endpoint,
                attempt,
                exc.__class__.__name__,
            )
            raise BigCommerceTransportError(
                "network/transport error",
                data=str(exc),
                cause="network",
            ) from exc

        http_status = response.status_code
        if not is_success(http_status):
            error = build_http_error(response)
            if not isinstance(error, BigCommerceRateLimitError):
                self._logger.error(
                    "request failed endpoint=%s attempt=%s http_status=%s message=%s",
                    descriptor.endpoint,
                    attempt,
                    http_status,
                    error.message,
                )
            raise error

        try:
            payload = parse_success_payload(response)
        except BigCommerceRequestError:
            self._logger.error(
                "response parse error endpoint=%s attempt=%s http_status=%s",
                descriptor.endpoint,
                attempt,
                http_status,
            )
            raise
        self._logger.info(
            "request success method=%s endpoint=%s attempt=%s http_status=%s",
            descriptor.method,
            descriptor.endpoint,
            attempt,
            http_status,
        )
        return payload


async def _default_sleep(seconds: float) -> None:
    await asyncio.sleep(seconds)


__all__ = [
    "LOGGER_NAME",
    "AsyncHttpClient",
    "AsyncTransport",
    "build_default_headers",
    "build_default_timeout",
]
