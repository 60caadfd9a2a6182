"""Public package exports for BigCommerce API client."""

import logging

from .auth import AuthCallbackQuery, BigCommerceAuth, TokenResponse, TokenUser
from .client import BigCommerceClient
from .config import (
    AuthConfig,
    BigCommerceClientConfig,
    ConcurrencyConfig,
    RetryConfig,
    StoreConfig,
    TransportConfig,
)
from .core.errors import (
    BigCommerceApiError,
    BigCommerceAuthError,
    BigCommerceClientClosedError,
    BigCommerceConfigurationError,
    BigCommerceInvalidPayloadError,
    BigCommerceMissingFieldError,
    BigCommerceRateLimitError,
    BigCommerceRequestError,
    BigCommerceResponseParseError,
    BigCommerceScopeMismatchError,
    BigCommerceTokenRequestError,
    BigCommerceTransportError,
    BigCommerceUrlTooLongError,
)
from .core.models import RequestDescriptor, SettledOutcome

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "BigCommerceClient",
    "BigCommerceAuth",
    "BigCommerceClientConfig",
    "StoreConfig",
    "TransportConfig",
    "RetryConfig",
    "ConcurrencyConfig",
    "AuthConfig",
    "AuthCallbackQuery",
    "TokenResponse",
    "TokenUser",
    "RequestDescriptor",
    "SettledOutcome",
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
]
