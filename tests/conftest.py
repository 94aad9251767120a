"""Shared test fixtures."""

import os
import time

# weather_mcp.config builds Settings at import time
os.environ.setdefault("ROLE_NAME", "Weather.Read")
os.environ.setdefault("TENANT_ID", "11111111-2222-3333-4444-555555555555")
os.environ.setdefault("CLIENT_ID", "aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee")
os.environ.setdefault("AGENT_OBSERVABILITY_ENABLED", "false")

import httpx  # noqa: E402
import jwt  # noqa: E402
import pytest  # noqa: E402
from cryptography.hazmat.primitives.asymmetric import rsa  # noqa: E402
from jwt.algorithms import RSAAlgorithm  # noqa: E402

from weather_mcp.security.token_verifier import (  # noqa: E402
    JwksCache,
    TokenVerifier,
    entra_jwks_uri,
    entra_trusted_issuers,
)

ROLE_NAME = os.environ["ROLE_NAME"]
TENANT_ID = os.environ["TENANT_ID"]
CLIENT_ID = os.environ["CLIENT_ID"]
TEST_KID = "test-signing-key"

API_ISSUER = f"https://sts.windows.net/{TENANT_ID}/"
API_AUDIENCE = f"api://{CLIENT_ID}"
APP_SERVICE_ISSUER = f"https://login.microsoftonline.com/{TENANT_ID}/v2.0"
APP_SERVICE_AUDIENCE = CLIENT_ID


@pytest.fixture(scope="session")
def rsa_private_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def jwks_document(rsa_private_key):
    jwk = RSAAlgorithm.to_jwk(rsa_private_key.public_key(), as_dict=True)
    jwk.update({"kid": TEST_KID, "use": "sig", "alg": "RS256"})
    return {"keys": [jwk]}


@pytest.fixture
def jwks_transport(jwks_document):
    """MockTransport serving the test key set; ``.calls`` records each fetch."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=jwks_document)

    transport = httpx.MockTransport(handler)
    transport.calls = calls
    return transport


@pytest.fixture
def verifier(jwks_transport):
    return TokenVerifier(
        jwks=JwksCache(entra_jwks_uri(TENANT_ID), transport=jwks_transport),
        trusted_issuers=entra_trusted_issuers(TENANT_ID, CLIENT_ID),
    )


@pytest.fixture
def make_token(rsa_private_key):
    """Factory for signed tokens; pass ``claim=None`` to drop a default claim."""

    def _make(kid: str = TEST_KID, key=None, **overrides) -> str:
        now = int(time.time())
        claims = {
            "iss": API_ISSUER,
            "aud": API_AUDIENCE,
            "iat": now,
            "exp": now + 3600,
            "roles": [ROLE_NAME],
        }
        claims.update(overrides)
        claims = {name: value for name, value in claims.items() if value is not None}
        return jwt.encode(
            claims,
            key or rsa_private_key,
            algorithm="RS256",
            headers={"kid": kid},
        )

    return _make
