"""Pagination helpers for v3 (meta.pagination) and v2 (probe until empty) listings."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from .errors import BigCommerceRequestError

DEFAULT_PAGE_SIZE = 250
MAX_V2_PAGES = 10_000


def _to_int(value: object) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.isascii() and text.isdigit():
            return int(text)
    return None


def parse_total_pages(payload: object) -> int | None:
    """Read ``meta.pagination.total_pages`` from a v3 envelope."""

    if not isinstance(payload, Mapping):
        return None
    meta = payload.get("meta")
    if not isinstance(meta, Mapping):
        return None
    pagination = meta.get("pagination")
    if not isinstance(pagination, Mapping):
        return None
    raw = pagination.get("total_pages")
    if raw is None:
        return None
    total_pages = _to_int(raw)
    if total_pages is None:
        raise BigCommerceRequestError(
            "meta.pagination.total_pages is not a valid integer",
            data=payload,
            cause="parse",
        )
    return total_pages


def extract_items(payload: object) -> list[Any]:
    """Items of a v3 envelope (``data``); a non-collection payload is one item."""

    if payload is None:
        return []
    data = payload.get("data", payload) if isinstance(payload, Mapping) else payload
    if data is None:
        return []
    if isinstance(data, list):
        return data
    return [data]


def remaining_pages(total_pages: int | None) -> list[int]:
    if total_pages is None or total_pages <= 1:
        return []
    return list(range(2, total_pages + 1))


def iterate_page_windows(
    *,
    window_size: int,
    start_page: int = 1,
    max_pages: int = MAX_V2_PAGES,
) -> Iterator[list[int]]:
    """Yield consecutive windows of page numbers for v2 end-of-stream probing."""

    if window_size <= 0:
        raise ValueError("window_size must be > 0")
    current = start_page
    last_page = start_page + max_pages - 1
    while current <= last_page:
        stop = min(current + window_size - 1, last_page)
        yield list(range(current, stop + 1))
        current = stop + 1
    raise BigCommerceRequestError(
        "Exceeded pagination guardrail (max_pages)",
        cause="parse",
    )


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "MAX_V2_PAGES",
    "parse_total_pages",
    "extract_items",
    "remaining_pages",
    "iterate_page_windows",
]
