from __future__ import annotations

import json

import httpx
import pytest

from bigcommerce_api_client.auth import BigCommerceAuth
from bigcommerce_api_client.config import AuthConfig
from bigcommerce_api_client.core.errors import (
    BigCommerceMissingFieldError,
    BigCommerceScopeMismatchError,
    BigCommerceTokenRequestError,
)
from tests.shared.transport import AsyncSequencedClient, Response

CALLBACK = "code=qr6h3thvbvag2ffq&scope=store_v2_orders+store_v2_products&context=stores/abc123"

TOKEN_PAYLOAD = {
    "access_token": "g3y3ab5mbj0e4e0q9t0l7hpoe",
    "scope": "store_v2_orders store_v2_products",
    "user": {"id": 24654, "username": "merchant", "email": "merchant@example.test"},
    "owner": {"id": 24654, "username": "merchant", "email": "merchant@example.test"},
    "context": "stores/abc123",
    "account_uuid": "9d2c-11aa",
}


def auth_config(*, scopes: tuple[str, ...] = ()) -> AuthConfig:
    return AuthConfig(
        client_id="app-client-id",
        secret="app-secret",
        redirect_uri="https://app.example.test/auth/callback",
        scopes=scopes,
    )


@pytest.mark.asyncio
async def test_request_token_posts_grant_and_parses_response():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=TOKEN_PAYLOAD)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    async with BigCommerceAuth(auth_config(), client=http_client) as auth:
        token = await auth.request_token(CALLBACK)
    await http_client.aclose()

    assert token.access_token == "g3y3ab5mbj0e4e0q9t0l7hpoe"
    assert token.store_hash == "abc123"
    assert token.owner.id == 24654

    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "https://login.bigcommerce.com/oauth2/token"
    assert json.loads(request.content) == {
        "client_id": "app-client-id",
        "client_secret": "app-secret",
        "code": "qr6h3thvbvag2ffq",
        "context": "stores/abc123",
        "scope": "store_v2_orders store_v2_products",
        "grant_type": "authorization_code",
        "redirect_uri": "https://app.example.test/auth/callback",
    }


@pytest.mark.asyncio
async def test_missing_code_fails_before_any_network_call():
    client = AsyncSequencedClient([])
    auth = BigCommerceAuth(auth_config(), client=client)

    with pytest.raises(BigCommerceMissingFieldError, match="No code found in query string"):
        await auth.request_token("scope=store_v2_orders&context=stores/abc123")
    assert client.calls == []


@pytest.mark.asyncio
async def test_scope_mismatch_fails_before_any_network_call():
    client = AsyncSequencedClient([])
    auth = BigCommerceAuth(auth_config(scopes=("store_v2_customers",)), client=client)

    with pytest.raises(BigCommerceScopeMismatchError):
        await auth.request_token(CALLBACK)
    assert client.calls == []


@pytest.mark.asyncio
async def test_remote_rejection_is_wrapped_with_remote_message():
    client = AsyncSequencedClient([Response(400, {"error": "invalid_grant", "message": "Invalid code"})])
    auth = BigCommerceAuth(auth_config(), client=client)

    with pytest.raises(BigCommerceTokenRequestError) as info:
        await auth.request_token(CALLBACK)
    assert str(info.value) == "Failed to request token: Invalid code"
    assert info.value.http_status == 400
    assert info.value.cause == "http"


@pytest.mark.asyncio
async def test_network_failure_is_wrapped():
    client = AsyncSequencedClient([httpx.ConnectError("dns failure")])
    auth = BigCommerceAuth(auth_config(), client=client)

    with pytest.raises(BigCommerceTokenRequestError) as info:
        await auth.request_token(CALLBACK)
    assert info.value.cause == "network"
    assert isinstance(info.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_unparseable_token_response_is_wrapped():
    client = AsyncSequencedClient([Response(200, text="<html>maintenance</html>")])
    auth = BigCommerceAuth(auth_config(), client=client)

    with pytest.raises(BigCommerceTokenRequestError) as info:
        await auth.request_token(CALLBACK)
    assert info.value.cause == "parse"


@pytest.mark.asyncio
async def test_close_leaves_injected_client_open():
    client = AsyncSequencedClient([])
    auth = BigCommerceAuth(auth_config(), client=client)
    await auth.close()
    assert client.closed is False
