"""
ASGI authentication gate.

BearerAuthMiddleware verifies the bearer token on every HTTP request except
exempt paths (the liveness probe) and stores the claims on the request state.
RequireRole wraps individual endpoints that also need an app role.
"""

from typing import Iterable

from loguru import logger
from starlette.responses import PlainTextResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from weather_mcp.security.token_verifier import AuthenticationError, TokenVerifier

AUTH_STATE_KEY = "auth"


def _unauthorized(reason: str) -> PlainTextResponse:
    return PlainTextResponse(
        reason,
        status_code=401,
        headers={"WWW-Authenticate": 'Bearer error="invalid_token"'},
    )


def _bearer_token(scope: Scope) -> str | None:
    for name, value in scope.get("headers", []):
        if name == b"authorization":
            scheme, _, token = value.decode("latin-1").partition(" ")
            if scheme.lower() == "bearer" and token.strip():
                return token.strip()
            return None
    return None


class BearerAuthMiddleware:
    def __init__(
        self,
        app: ASGIApp,
        verifier: TokenVerifier,
        exempt_paths: Iterable[str] = ("/health",),
    ) -> None:
        self.app = app
        self.verifier = verifier
        self.exempt_paths = frozenset(exempt_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["path"] in self.exempt_paths:
            await self.app(scope, receive, send)
            return

        token = _bearer_token(scope)
        if token is None:
            logger.warning(f"Rejected {scope['method']} {scope['path']}: no bearer token")
            await _unauthorized("No authorization token was found")(scope, receive, send)
            return

        try:
            claims = await self.verifier.verify(token)
        except AuthenticationError as e:
            logger.warning(f"Rejected {scope['method']} {scope['path']}: {e}")
            await _unauthorized(str(e))(scope, receive, send)
            return

        scope.setdefault("state", {})[AUTH_STATE_KEY] = claims
        await self.app(scope, receive, send)


def has_role(roles: list[str] | None, role_name: str) -> bool:
    return isinstance(roles, list) and role_name in roles


class RequireRole:
    """Admit only callers whose verified ``roles`` claim contains ``role_name``."""

    def __init__(self, app: ASGIApp, role_name: str) -> None:
        self.app = app
        self.role_name = role_name

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        claims = scope.get("state", {}).get(AUTH_STATE_KEY) or {}
        roles = claims.get("roles")
        if not has_role(roles, self.role_name):
            logger.warning(f"Rejected {scope['path']}: role {self.role_name!r} missing from {roles}")
            await _unauthorized(
                "You are not authorized to access this endpoint. "
                f"Your current roles are {roles}"
            )(scope, receive, send)
            return
        await self.app(scope, receive, send)
