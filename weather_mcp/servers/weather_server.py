"""
Weather MCP Server.

FastMCP instance exposing the NWS alert and forecast tools. Every tool path
answers with a single text block; arguments are validated by
ToolInputValidationMiddleware before a tool body runs.
"""

from fastmcp import FastMCP
from fastmcp.tools.tool import ToolResult
from mcp.types import TextContent

from weather_mcp.clients.nws_client import NWSClient
from weather_mcp.config import settings
from weather_mcp.infrastructure.trace_decorator import traced
from weather_mcp.schemas.tools import AlertsInput, ForecastInput, Latitude, Longitude, StateCode
from weather_mcp.servers.validation_middleware import ToolInputValidationMiddleware
from weather_mcp.utils.weather_formatters import format_alerts, format_forecast, format_number

weather_mcp = FastMCP("weather-server")
weather_mcp.add_middleware(
    ToolInputValidationMiddleware({
        "get-alerts": AlertsInput,
        "get-forecast": ForecastInput,
    })
)

READ_ONLY_ANNOTATIONS = {
    "readOnlyHint": True,
    "destructiveHint": False,
    "idempotentHint": True,
    "openWorldHint": True,
}

# ---------------------------------------------------------------------------
# Lazy client singleton
# ---------------------------------------------------------------------------

_client: NWSClient | None = None


def _get_client() -> NWSClient:
    global _client
    if _client is None:
        _client = NWSClient(
            base_url=settings.NWS_API_BASE,
            user_agent=settings.NWS_USER_AGENT,
        )
    return _client


async def close_client() -> None:
    global _client
    if _client is not None:
        await _client.close()
        _client = None


def _text(text: str) -> ToolResult:
    return ToolResult(content=[TextContent(type="text", text=text)])


# ---------------------------------------------------------------------------
# MCP Tools
# ---------------------------------------------------------------------------


@weather_mcp.tool(
    name="get-alerts",
    description="Get weather alerts for a state",
    tags={"weather", "alerts", "nws"},
    annotations={"title": "Get Weather Alerts", **READ_ONLY_ANNOTATIONS},
    output_schema=None,
)
@traced("mcp.tool.get_alerts")
async def get_alerts(state: StateCode) -> ToolResult:
    """Get active weather alerts for a US state.

    Args:
        state: Two-letter state code (e.g. CA, NY).
    """
    state_code = state.upper()
    alerts = await _get_client().get_alerts(state_code)

    if alerts is None:
        return _text("Failed to retrieve alerts data")
    if not alerts.features:
        return _text(f"No active alerts for {state_code}")
    return _text(format_alerts(state_code, alerts.features))


@weather_mcp.tool(
    name="get-forecast",
    description="Get weather forecast for a location",
    tags={"weather", "forecast", "nws"},
    annotations={"title": "Get Weather Forecast", **READ_ONLY_ANNOTATIONS},
    output_schema=None,
)
@traced("mcp.tool.get_forecast")
async def get_forecast(latitude: Latitude, longitude: Longitude) -> ToolResult:
    """Get the gridpoint forecast for a US location.

    Args:
        latitude: Latitude of the location.
        longitude: Longitude of the location.
    """
    client = _get_client()

    points = await client.get_points(latitude, longitude)
    if points is None:
        return _text(
            "Failed to retrieve grid point data for coordinates: "
            f"{format_number(latitude)}, {format_number(longitude)}. "
            "This location may not be supported by the NWS API "
            "(only US locations are supported)."
        )

    forecast_url = points.properties.forecast
    if not forecast_url:
        return _text("Failed to get forecast URL from grid point data")

    forecast = await client.get_forecast(forecast_url)
    if forecast is None:
        return _text("Failed to retrieve forecast data")

    periods = forecast.properties.periods
    if not periods:
        return _text("No forecast periods available")
    return _text(format_forecast(latitude, longitude, periods))
