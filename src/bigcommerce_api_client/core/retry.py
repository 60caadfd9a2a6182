"""Rate-limit retry helpers."""

from __future__ import annotations

from collections.abc import Mapping

RATE_LIMIT_STATUS = 429

RETRY_AFTER_HEADER = "x-rate-limit-time-reset-ms"
REQUESTS_LEFT_HEADER = "x-rate-limit-requests-left"


def header_value(headers: Mapping[str, str] | None, name: str) -> str | None:
    if not headers:
        return None
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None


def parse_retry_after_ms(headers: Mapping[str, str] | None) -> int | None:
    """Return the reset delay in milliseconds, or None when absent/unparseable."""

    raw = header_value(headers, RETRY_AFTER_HEADER)
    if raw is None:
        return None
    text = str(raw).strip()
    if not (text.isascii() and text.isdigit()):
        return None
    return int(text)


def can_retry(*, attempt: int, max_retries: int) -> bool:
    return attempt < max_retries


__all__ = [
    "RATE_LIMIT_STATUS",
    "RETRY_AFTER_HEADER",
    "REQUESTS_LEFT_HEADER",
    "header_value",
    "parse_retry_after_ms",
    "can_retry",
]
