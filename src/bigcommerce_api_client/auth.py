"""OAuth token exchange and signed session (JWT) verification."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import TracebackType
from typing import Any

import httpx
import jwt

from .client_shared import validate_config
from .config import AuthConfig
from .core.async_transport import LOGGER_NAME, AsyncHttpClient
from .core.errors import (
    BigCommerceConfigurationError,
    BigCommerceInvalidPayloadError,
    BigCommerceMissingFieldError,
    BigCommerceScopeMismatchError,
    BigCommerceTokenRequestError,
    extract_message,
)
from .core.response_parsing import is_success

GRANT_TYPE = "authorization_code"
ISSUER = "bc"
JWT_ALGORITHMS = ("HS256",)


@dataclass(slots=True, frozen=True)
class AuthCallbackQuery:
    """Normalized OAuth callback parameters."""

    code: str
    scope: str
    context: str
    account_uuid: str | None = None


@dataclass(slots=True, frozen=True)
class TokenUser:
    id: int | None
    username: str | None
    email: str | None

    @classmethod
    def from_payload(cls, payload: object) -> "TokenUser":
        if not isinstance(payload, Mapping):
            return cls(id=None, username=None, email=None)
        return cls(
            id=payload.get("id"),
            username=payload.get("username"),
            email=payload.get("email"),
        )


@dataclass(slots=True, frozen=True)
class TokenResponse:
    access_token: str
    scope: str
    user: TokenUser
    owner: TokenUser
    context: str
    account_uuid: str | None
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False)

    @property
    def store_hash(self) -> str | None:
        prefix = "stores/"
        if self.context.startswith(prefix):
            return self.context[len(prefix) :]
        return None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "TokenResponse":
        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise ValueError("token response has no access_token")
        return cls(
            access_token=access_token,
            scope=str(payload.get("scope") or ""),
            user=TokenUser.from_payload(payload.get("user")),
            owner=TokenUser.from_payload(payload.get("owner")),
            context=str(payload.get("context") or ""),
            account_uuid=payload.get("account_uuid"),
            raw=dict(payload),
        )


def _first(value: object) -> str | None:
    # parse_qs-style mappings hold lists of values.
    if isinstance(value, Sequence) and not isinstance(value, str):
        value = value[0] if value else None
    if value is None:
        return None
    return str(value)


def parse_callback_query(
    query: str | Mapping[str, Any] | httpx.QueryParams | AuthCallbackQuery,
) -> AuthCallbackQuery:
    """Normalize any supported callback representation, failing on missing fields."""

    if isinstance(query, AuthCallbackQuery):
        fields: dict[str, str | None] = {
            "code": query.code,
            "scope": query.scope,
            "context": query.context,
            "account_uuid": query.account_uuid,
        }
    else:
        if isinstance(query, str):
            params: Mapping[str, Any] = httpx.QueryParams(query.lstrip("?"))
        elif isinstance(query, Mapping):
            params = query
        else:
            raise TypeError("query must be str, Mapping, httpx.QueryParams or AuthCallbackQuery")
        fields = {
            name: _first(params.get(name))
            for name in ("code", "scope", "context", "account_uuid")
        }

    for name in ("code", "scope", "context"):
        if not fields[name]:
            raise BigCommerceMissingFieldError(name)
    return AuthCallbackQuery(
        code=str(fields["code"]),
        scope=str(fields["scope"]),
        context=str(fields["context"]),
        account_uuid=fields["account_uuid"] or None,
    )


def validate_redirect_uri(redirect_uri: str) -> None:
    try:
        url = httpx.URL(redirect_uri)
    except (httpx.InvalidURL, TypeError) as exc:
        raise BigCommerceConfigurationError("Invalid redirect URI") from exc
    if not url.is_absolute_url or not url.host:
        raise BigCommerceConfigurationError("Invalid redirect URI")


class BigCommerceAuth:
    """App-side helper for the OAuth install flow and signed session payloads."""

    def __init__(
        self,
        config: AuthConfig,
        *,
        client: AsyncHttpClient | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        validate_config(config)
        validate_redirect_uri(config.redirect_uri)
        self._config = config
        self._logger = logger or logging.getLogger(LOGGER_NAME)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(
                connect=config.transport.timeout_connect_seconds,
                read=config.transport.timeout_read_seconds,
                write=config.transport.timeout_write_seconds,
                pool=config.transport.timeout_pool_seconds,
            )
        )
        self._closed = False

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_client and hasattr(self._client, "aclose"):
            await self._client.aclose()

    async def __aenter__(self) -> "BigCommerceAuth":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        await self.close()
        return False

    def validate_scopes(self, granted: str) -> None:
        expected = self._config.scopes
        if not expected:
            return
        granted_scopes = set(granted.split())
        if any(scope not in granted_scopes for scope in expected):
            raise BigCommerceScopeMismatchError(granted, " ".join(expected))

    async def request_token(
        self,
        query: str | Mapping[str, Any] | httpx.QueryParams | AuthCallbackQuery,
    ) -> TokenResponse:
        """Exchange an auth callback for a store access token."""

        callback = parse_callback_query(query)
        self.validate_scopes(callback.scope)

        body = {
            "client_id": self._config.client_id,
            "client_secret": self._config.secret,
            "code": callback.code,
            "context": callback.context,
            "scope": callback.scope,
            "grant_type": GRANT_TYPE,
            "redirect_uri": self._config.redirect_uri,
        }
        try:
            response = await self._client.request(
                "POST",
                self._config.token_url,
                headers={"Accept": "application/json", "Content-Type": "application/json"},
                json=body,
            )
        except Exception as exc:
            self._logger.error(
                "token request network error context=%s error=%s",
                callback.context,
                exc.__class__.__name__,
            )
            raise BigCommerceTokenRequestError(
                "Failed to request token",
                data=str(exc),
                cause="network",
            ) from exc

        text = response.text
        try:
            payload: object = json.loads(text)
        except ValueError:
            payload = text

        if not is_success(response.status_code):
            remote = extract_message(payload) or text
            self._logger.error(
                "token request failed context=%s http_status=%s",
                callback.context,
                response.status_code,
            )
            raise BigCommerceTokenRequestError(
                f"Failed to request token: {remote}",
                http_status=response.status_code,
                data=payload,
                cause="http",
            )

        try:
            if not isinstance(payload, Mapping):
                raise ValueError("token response is not a JSON object")
            token = TokenResponse.from_payload(payload)
        except ValueError as exc:
            raise BigCommerceTokenRequestError(
                f"Failed to parse token response: {exc}",
                http_status=response.status_code,
                data=payload,
                cause="parse",
            ) from exc
        self._logger.info("token request success context=%s", token.context)
        return token

    def verify(self, token: str, store_hash: str) -> dict[str, Any]:
        """Verify a signed session payload for ``store_hash`` and return its claims."""

        try:
            claims = jwt.decode(
                token,
                self._config.secret,
                algorithms=list(JWT_ALGORITHMS),
                audience=self._config.client_id,
                issuer=ISSUER,
                options={"require": ["aud", "iss", "sub", "exp"]},
            )
            expected_subject = f"stores/{store_hash}"
            if claims.get("sub") != expected_subject:
                raise jwt.InvalidTokenError("subject mismatch")
        except jwt.PyJWTError as exc:
            self._logger.warning("jwt verification failed error=%s", exc.__class__.__name__)
            raise BigCommerceInvalidPayloadError("Invalid JWT payload", cause="jwt") from exc
        return claims


__all__ = [
    "GRANT_TYPE",
    "ISSUER",
    "AuthCallbackQuery",
    "TokenUser",
    "TokenResponse",
    "parse_callback_query",
    "validate_redirect_uri",
    "BigCommerceAuth",
]
