"""Error types and error-message extraction."""

from __future__ import annotations

from collections.abc import Mapping


def extract_message(payload: object) -> str | None:
    """Pick the remote-provided message out of an error body.

    v3 error documents carry ``title``/``message`` on an object, v2 errors
    are a list of objects with ``message``.
    """

    if isinstance(payload, list) and payload:
        payload = payload[0]
    if not isinstance(payload, Mapping):
        return None
    for key in ("message", "title"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
    return None


class BigCommerceApiError(Exception):
    """Base exception for this package."""

    def __init__(
        self,
        message: str,
        *,
        http_status: int | None = None,
        data: object = None,
        cause: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.http_status = http_status
        self.data = data
        self.cause = cause


class BigCommerceRequestError(BigCommerceApiError):
    """Request failed with a non-2xx status."""


class BigCommerceRateLimitError(BigCommerceRequestError):
    """Request was rate limited (HTTP 429)."""


class BigCommerceUrlTooLongError(BigCommerceRequestError):
    """Assembled URL exceeds the maximum length; nothing was sent."""


class BigCommerceTransportError(BigCommerceRequestError):
    """Network/transport-level failure."""


class BigCommerceResponseParseError(BigCommerceRequestError):
    """Successful response whose body is not valid JSON."""


class BigCommerceConfigurationError(BigCommerceApiError):
    """Invalid configuration or request shape, detected locally."""


class BigCommerceClientClosedError(BigCommerceApiError):
    """Raised when client is used after close."""


class BigCommerceAuthError(BigCommerceApiError):
    """Base exception for OAuth and session verification failures."""


class BigCommerceMissingFieldError(BigCommerceAuthError):
    """Auth callback query lacks a required field."""

    def __init__(self, field: str) -> None:
        super().__init__(f"No {field} found in query string")
        self.field = field


class BigCommerceScopeMismatchError(BigCommerceAuthError):
    """Granted scopes do not cover the expected scopes."""

    def __init__(self, granted: str, expected: str) -> None:
        super().__init__(f"Scope mismatch: {granted}; expected: {expected}")
        self.granted = granted
        self.expected = expected


class BigCommerceTokenRequestError(BigCommerceAuthError):
    """Token exchange with the OAuth endpoint failed."""


class BigCommerceInvalidPayloadError(BigCommerceAuthError):
    """Signed session payload could not be verified."""


__all__ = [
    "BigCommerceApiError",
    "BigCommerceRequestError",
    "BigCommerceRateLimitError",
    "BigCommerceUrlTooLongError",
    "BigCommerceTransportError",
    "BigCommerceResponseParseError",
    "BigCommerceConfigurationError",
    "BigCommerceClientClosedError",
    "BigCommerceAuthError",
    "BigCommerceMissingFieldError",
    "BigCommerceScopeMismatchError",
    "BigCommerceTokenRequestError",
    "BigCommerceInvalidPayloadError",
    "extract_message",
]
