"""
Pytest configuration for line_login. Channel credentials are set before the app
modules are imported, since config reads env at import time.
"""
import os
import time

import jwt
import pytest

TEST_CLIENT_ID = "1234567890"
TEST_CLIENT_SECRET = "test-channel-secret-0123456789abcdef"
TEST_ISSUER = "https://access.line.me"

os.environ["LINE_LOGIN_CLIENT_ID"] = TEST_CLIENT_ID
os.environ["LINE_LOGIN_CLIENT_SECRET"] = TEST_CLIENT_SECRET
os.environ["LINE_LOGIN_ISSUER"] = TEST_ISSUER
os.environ["LINE_LOGIN_SESSION_SECRET"] = "test-session-secret"
# Derive redirect_uri from the request and keep reference nonce behavior
os.environ.pop("LINE_LOGIN_REDIRECT_URI", None)
os.environ.pop("LINE_LOGIN_CONSUME_NONCE", None)
os.environ.pop("LINE_LOGIN_MAX_PENDING_NONCES", None)


@pytest.fixture
def make_id_token():
    """Factory for HS256 ID tokens shaped like LINE's; overrides replace or drop (None) claims."""

    def _make(nonce: str, /, *, secret: str = TEST_CLIENT_SECRET, **overrides) -> str:
        now = int(time.time())
        payload = {
            "iss": TEST_ISSUER,
            "sub": "U1234567890abcdef",
            "aud": TEST_CLIENT_ID,
            "exp": now + 3600,
            "iat": now,
            "nonce": nonce,
            "amr": ["linesso"],
            "name": "Taro Line",
            "picture": "https://profile.line-scdn.net/abcdefghijklmn",
        }
        for key, value in overrides.items():
            if value is None:
                payload.pop(key, None)
            else:
                payload[key] = value
        token = jwt.encode(payload, secret, algorithm="HS256")
        if isinstance(token, bytes):
            token = token.decode("utf-8")
        return token

    return _make


@pytest.fixture
def token_payload():
    """Factory for a token endpoint success body around a given id_token."""

    def _payload(id_token: str) -> dict:
        return {
            "access_token": "at",
            "expires_in": 2592000,
            "id_token": id_token,
            "refresh_token": "rt",
            "scope": "openid profile",
            "token_type": "Bearer",
        }

    return _payload
