"""Store-scoped URL assembly."""

from __future__ import annotations

from collections.abc import Mapping
from urllib.parse import quote_plus, urlencode

from .errors import BigCommerceUrlTooLongError

MAX_URL_LENGTH = 2048

# BigCommerce filters such as ``id:in`` take comma lists; keep commas literal.
QUERY_SAFE_CHARS = ","


def encode_query(query: Mapping[str, str] | None) -> str:
    if not query:
        return ""
    return urlencode(list(query.items()), safe=QUERY_SAFE_CHARS)


def encoded_length(value: str) -> int:
    return len(quote_plus(value, safe=QUERY_SAFE_CHARS))


def build_url(
    *,
    base_url: str,
    store_hash: str,
    version: str,
    endpoint: str,
    query: Mapping[str, str] | None = None,
) -> str:
    url = f"{base_url.rstrip('/')}/{store_hash}/{version}/{endpoint.lstrip('/')}"
    search = encode_query(query)
    return f"{url}?{search}" if search else url


def ensure_url_length(url: str, *, max_length: int = MAX_URL_LENGTH) -> str:
    if len(url) > max_length:
        raise BigCommerceUrlTooLongError(
            "URL too long",
            data=f"URL length {len(url)} exceeds maximum allowed length of {max_length}",
            cause="url_length",
        )
    return url


__all__ = [
    "MAX_URL_LENGTH",
    "QUERY_SAFE_CHARS",
    "encode_query",
    "encoded_length",
    "build_url",
    "ensure_url_length",
]
