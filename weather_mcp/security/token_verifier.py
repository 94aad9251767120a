"""
Bearer token verification against Microsoft Entra ID.

Tokens are RS256 JWTs signed by a key from the tenant's JWKS endpoint. Two
issuer/audience pairings are trusted:
- API-scope tokens requested through MSAL:
  iss ``https://sts.windows.net/{tenant}/``, aud ``api://{client}``
- App Service authentication (token store) tokens:
  iss ``https://login.microsoftonline.com/{tenant}/v2.0``, aud ``{client}``

Signing keys are cached by ``kid``. The key set is refetched only when a token
names an unknown ``kid``, and no more often than the configured number of
times per rolling minute.
"""

import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable

import httpx
import jwt
from jwt.exceptions import PyJWKError, PyJWKSetError
from loguru import logger

LOGIN_BASE_URL = "https://login.microsoftonline.com"
STS_BASE_URL = "https://sts.windows.net"
ALGORITHMS = ("RS256",)


class AuthenticationError(Exception):
    """The bearer token could not be verified; the message is safe to return."""


@dataclass(frozen=True)
class TrustedIssuer:
    issuer: str
    audience: str


def entra_jwks_uri(tenant_id: str) -> str:
    return f"{LOGIN_BASE_URL}/{tenant_id}/discovery/v2.0/keys"


def entra_trusted_issuers(tenant_id: str, client_id: str) -> list[TrustedIssuer]:
    return [
        TrustedIssuer(issuer=f"{STS_BASE_URL}/{tenant_id}/", audience=f"api://{client_id}"),
        TrustedIssuer(issuer=f"{LOGIN_BASE_URL}/{tenant_id}/v2.0", audience=client_id),
    ]


class JwksCache:
    """Signing keys from a JWKS endpoint, cached by key id.

    The whole key set is dropped once it is older than ``max_age`` seconds, so a
    key the tenant has rotated out stops verifying tokens. Every fetch, whether
    for an unknown ``kid`` or an expired set, counts against the per-minute limit.
    """

    def __init__(
        self,
        jwks_uri: str,
        requests_per_minute: int = 5,
        max_age: float = 600.0,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._jwks_uri = jwks_uri
        self._requests_per_minute = requests_per_minute
        self._max_age = max_age
        self._clock = clock
        self._client = httpx.AsyncClient(transport=transport)
        self._keys: dict[str, jwt.PyJWK] = {}
        self._loaded_at: float | None = None
        self._fetch_times: deque[float] = deque()

    def _is_expired(self) -> bool:
        return self._loaded_at is not None and self._clock() - self._loaded_at >= self._max_age

    async def get_signing_key(self, kid: str) -> jwt.PyJWK:
        refreshed = False
        if self._is_expired():
            logger.debug(f"Signing keys older than {self._max_age:.0f}s, refetching")
            self._keys = {}
            await self._refresh()
            refreshed = True

        key = self._keys.get(kid)
        if key is None and not refreshed:
            await self._refresh()
            key = self._keys.get(kid)
        if key is None:
            raise AuthenticationError(f"Unable to find a signing key that matches '{kid}'")
        return key

    async def _refresh(self) -> None:
        now = self._clock()
        while self._fetch_times and now - self._fetch_times[0] >= 60:
            self._fetch_times.popleft()
        if len(self._fetch_times) >= self._requests_per_minute:
            logger.warning(f"JWKS refetch limit of {self._requests_per_minute}/min reached")
            raise AuthenticationError("Too many requests to the signing key endpoint")
        self._fetch_times.append(now)

        logger.debug(f"Fetching signing keys from {self._jwks_uri}")
        try:
            response = await self._client.get(self._jwks_uri)
            response.raise_for_status()
            key_set = jwt.PyJWKSet.from_dict(response.json())
        except (httpx.HTTPError, ValueError, PyJWKError, PyJWKSetError) as e:
            logger.error(f"Failed to load signing keys from {self._jwks_uri}: {e!r}")
            raise AuthenticationError("Unable to retrieve signing keys") from e

        self._keys = {key.key_id: key for key in key_set.keys if key.key_id}
        self._loaded_at = now
        logger.info(f"Loaded {len(self._keys)} signing keys")

    async def aclose(self) -> None:
        await self._client.aclose()


class TokenVerifier:
    def __init__(
        self,
        jwks: JwksCache,
        trusted_issuers: list[TrustedIssuer],
        algorithms: tuple[str, ...] = ALGORITHMS,
    ) -> None:
        self._jwks = jwks
        self._trusted_issuers = trusted_issuers
        self._algorithms = algorithms

    async def verify(self, token: str) -> dict[str, Any]:
        """Return the token's claims, or raise AuthenticationError."""
        try:
            header = jwt.get_unverified_header(token)
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(f"Malformed token: {e}") from e

        algorithm = header.get("alg")
        if algorithm not in self._algorithms:
            raise AuthenticationError(f"Unexpected signing algorithm: {algorithm}")
        kid = header.get("kid")
        if not kid:
            raise AuthenticationError("Token header carries no key id")

        signing_key = await self._jwks.get_signing_key(kid)
        try:
            claims = jwt.decode(
                token,
                signing_key.key,
                algorithms=list(self._algorithms),
                audience=[trusted.audience for trusted in self._trusted_issuers],
                options={"require": ["exp", "iss", "aud"]},
            )
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(f"Invalid token: {e}") from e

        if not self._is_trusted(claims):
            raise AuthenticationError("Token issuer and audience do not match a trusted configuration")
        return claims

    def _is_trusted(self, claims: dict[str, Any]) -> bool:
        audiences = claims.get("aud")
        if isinstance(audiences, str):
            audiences = [audiences]
        return any(
            claims.get("iss") == trusted.issuer and trusted.audience in audiences
            for trusted in self._trusted_issuers
        )

    async def aclose(self) -> None:
        await self._jwks.aclose()


def build_entra_verifier(
    tenant_id: str,
    client_id: str,
    requests_per_minute: int = 5,
    cache_max_age: float = 600.0,
) -> TokenVerifier:
    return TokenVerifier(
        jwks=JwksCache(
            entra_jwks_uri(tenant_id),
            requests_per_minute=requests_per_minute,
            max_age=cache_max_age,
        ),
        trusted_issuers=entra_trusted_issuers(tenant_id, client_id),
    )
