"""Client configuration."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_BASE_URL = "https://api.bigcommerce.com/stores"
DEFAULT_TOKEN_URL = "https://login.bigcommerce.com/oauth2/token"


@dataclass(slots=True, frozen=True)
class StoreConfig:
    """Store the client is scoped to."""

    store_hash: str
    access_token: str

    def validate(self) -> None:
        if not self.store_hash:
            raise ValueError("store.store_hash must not be empty")
        if not self.access_token:
            raise ValueError("store.access_token must not be empty")


@dataclass(slots=True, frozen=True)
class TransportConfig:
    """Transport-related settings."""

    timeout_connect_seconds: float = 5.0
    timeout_read_seconds: float = 30.0
    timeout_write_seconds: float = 30.0
    timeout_pool_seconds: float = 5.0

    def validate(self) -> None:
        for field_name in (
            "timeout_connect_seconds",
            "timeout_read_seconds",
            "timeout_write_seconds",
            "timeout_pool_seconds",
        ):
            if getattr(self, field_name) <= 0:
                raise ValueError(f"transport.{field_name} must be > 0")


@dataclass(slots=True, frozen=True)
class RetryConfig:
    """Rate-limit retry settings.

    max_retries bounds the total number of attempts for one request.
    """

    max_delay_ms: int = 60_000
    max_retries: int = 5

    def validate(self) -> None:
        if self.max_delay_ms < 0:
            raise ValueError("retry.max_delay_ms must be >= 0")
        if self.max_retries < 1:
            raise ValueError("retry.max_retries must be >= 1")


@dataclass(slots=True, frozen=True)
class ConcurrencyConfig:
    """Batch fan-out settings."""

    concurrency: int = 10
    skip_errors: bool = False

    def validate(self) -> None:
        if self.concurrency < 1:
            raise ValueError("concurrency.concurrency must be >= 1")
        if not isinstance(self.skip_errors, bool):
            raise ValueError("concurrency.skip_errors must be bool")


@dataclass(slots=True, frozen=True)
class BigCommerceClientConfig:
    """Runtime configuration for the BigCommerce client."""

    store: StoreConfig
    base_url: str = DEFAULT_BASE_URL
    user_agent: str = "bigcommerce-api-client/0.1.0"

    transport: TransportConfig = field(default_factory=TransportConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    concurrency: ConcurrencyConfig = field(default_factory=ConcurrencyConfig)

    def validate(self) -> None:
        if not self.base_url:
            raise ValueError("base_url must not be empty")
        self.store.validate()
        self.transport.validate()
        self.retry.validate()
        self.concurrency.validate()


@dataclass(slots=True, frozen=True)
class AuthConfig:
    """OAuth app credentials used by BigCommerceAuth."""

    client_id: str
    secret: str
    redirect_uri: str
    # Expected scopes; when empty the granted scopes are not checked.
    scopes: tuple[str, ...] = ()
    token_url: str = DEFAULT_TOKEN_URL
    transport: TransportConfig = field(default_factory=TransportConfig)

    def __post_init__(self) -> None:
        if isinstance(self.scopes, str):
            raise TypeError("scopes must be a sequence of str, not str")
        object.__setattr__(self, "scopes", tuple(self.scopes))

    def validate(self) -> None:
        if not self.client_id:
            raise ValueError("client_id must not be empty")
        if not self.secret:
            raise ValueError("secret must not be empty")
        if not self.token_url:
            raise ValueError("token_url must not be empty")
        self.transport.validate()


__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_TOKEN_URL",
    "StoreConfig",
    "TransportConfig",
    "RetryConfig",
    "ConcurrencyConfig",
    "BigCommerceClientConfig",
    "AuthConfig",
]
