"""Response classification and body parsing."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Protocol

from .errors import (
    BigCommerceRateLimitError,
    BigCommerceRequestError,
    BigCommerceResponseParseError,
    extract_message,
)
from .retry import RATE_LIMIT_STATUS

NO_CONTENT_STATUS = 204


class TextResponse(Protocol):
    status_code: int
    headers: Mapping[str, str]

    @property
    def text(self) -> str: ...


def is_success(http_status: int) -> bool:
    return 200 <= http_status < 300


def normalize_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    if not headers:
        return {}
    return {str(key).lower(): str(value) for key, value in headers.items()}


def parse_success_payload(response: TextResponse) -> Any:
    """Parse a 2xx response; 204 yields None."""

    http_status = response.status_code
    if http_status == NO_CONTENT_STATUS:
        return None
    text = response.text
    try:
        return json.loads(text)
    except ValueError as exc:
        raise BigCommerceResponseParseError(
            f"Failed to parse response: {text}",
            http_status=http_status,
            data=text,
            cause="parse",
        ) from exc


def build_http_error(response: TextResponse) -> BigCommerceRequestError:
    """Map a non-2xx response to a structured request error."""

    http_status = response.status_code
    try:
        text = response.text
    except Exception:
        text = "Failed to read error response"
    data: object = text
    try:
        data = json.loads(text)
    except ValueError:
        pass

    message = extract_message(data) or f"HTTP {http_status} error"
    diagnostic = {"data": data, "headers": normalize_headers(response.headers)}
    if http_status == RATE_LIMIT_STATUS:
        return BigCommerceRateLimitError(
            message,
            http_status=http_status,
            data=diagnostic,
            cause="rate_limit",
        )
    return BigCommerceRequestError(
        message,
        http_status=http_status,
        data=diagnostic,
        cause="http",
    )


__all__ = [
    "NO_CONTENT_STATUS",
    "TextResponse",
    "is_success",
    "normalize_headers",
    "parse_success_payload",
    "build_http_error",
]
