"""
Starlette application serving the weather MCP server over SSE.

Routes:
- GET  /health     liveness probe, no authentication
- GET  /sse        bearer token + ROLE_NAME, opens an MCP SSE stream
- POST /messages   bearer token + ROLE_NAME, delivers a message to a stream
"""

from contextlib import asynccontextmanager

from loguru import logger
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.routing import Route

from weather_mcp.config import Settings
from weather_mcp.security.middleware import BearerAuthMiddleware, RequireRole
from weather_mcp.security.token_verifier import TokenVerifier, build_entra_verifier
from weather_mcp.servers.tool_registry import McpServersRegistry
from weather_mcp.servers.weather_server import close_client
from weather_mcp.transport.sse_bridge import SseTransportBridge

HEALTH_PATH = "/health"
SSE_PATH = "/sse"
MESSAGE_PATH = "/messages"


async def health(request: Request) -> PlainTextResponse:
    return PlainTextResponse("Hello World, i'm healthy!!")


def create_app(
    settings: Settings,
    verifier: TokenVerifier | None = None,
    registry: McpServersRegistry | None = None,
) -> Starlette:
    registry = registry or McpServersRegistry()
    verifier = verifier or build_entra_verifier(
        tenant_id=settings.TENANT_ID,
        client_id=settings.CLIENT_ID,
        requests_per_minute=settings.JWKS_REQUESTS_PER_MINUTE,
        cache_max_age=settings.JWKS_CACHE_MAX_AGE_SECONDS,
    )
    # FastMCP keeps its protocol engine on _mcp_server; its own SSE app runs it the same way
    bridge = SseTransportBridge(registry.get_registry()._mcp_server, message_path=MESSAGE_PATH)

    @asynccontextmanager
    async def lifespan(app: Starlette):
        await registry.initialize()
        logger.info(f"Weather MCP server ready on {SSE_PATH} (role {settings.ROLE_NAME!r} required)")
        try:
            yield
        finally:
            await close_client()
            await verifier.aclose()

    app = Starlette(
        routes=[
            Route(HEALTH_PATH, health, methods=["GET"]),
            Route(SSE_PATH, RequireRole(bridge.handle_sse, settings.ROLE_NAME), methods=["GET"]),
            Route(MESSAGE_PATH, RequireRole(bridge.handle_post_message, settings.ROLE_NAME), methods=["POST"]),
        ],
        middleware=[
            Middleware(BearerAuthMiddleware, verifier=verifier, exempt_paths=(HEALTH_PATH,)),
        ],
        lifespan=lifespan,
    )
    app.state.sessions = bridge.registry
    return app
