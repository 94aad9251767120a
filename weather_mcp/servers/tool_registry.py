"""
MCP Tool Registry.

Owns the FastMCP instance served over SSE and performs one-time startup work:
observability initialization and a log line listing the registered tools.
"""

from fastmcp import FastMCP
from loguru import logger

from weather_mcp.infrastructure.observability import initialize_observability
from weather_mcp.servers.weather_server import weather_mcp


class McpServersRegistry:
    def __init__(self, server: FastMCP = weather_mcp) -> None:
        self.registry = server
        self._is_initialized = False

    async def initialize(self) -> None:
        if self._is_initialized:
            return

        logger.info("Initializing MCP tool registry...")

        from weather_mcp.config import settings

        initialize_observability(
            service_name=settings.OTEL_SERVICE_NAME,
            enabled=settings.AGENT_OBSERVABILITY_ENABLED,
        )

        self._is_initialized = True

        tools = await self.registry.get_tools()
        logger.info(f"Registry initialized with {len(tools)} tools: {sorted(tools)}")

    @property
    def is_initialized(self) -> bool:
        return self._is_initialized

    def get_registry(self) -> FastMCP:
        return self.registry
