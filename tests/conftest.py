from __future__ import annotations

import pytest

JWT_SECRET = "test-secret-key-for-hs256-signing-0123456789"


@pytest.fixture(scope="session")
def jwt_secret() -> str:
    return JWT_SECRET
