"""
National Weather Service API HTTP client.

Wraps the endpoints the weather tools need:
- GET /alerts?area={STATE}        (active alerts for a state)
- GET /points/{lat},{lon}         (grid point metadata, carries the forecast URL)
- GET {forecast URL}              (gridpoint forecast periods)

Every failure is logged and reported as None so tools can degrade to text.
"""

from typing import TypeVar

import httpx
from loguru import logger
from pydantic import BaseModel

from weather_mcp.schemas.weather import AlertsResponse, ForecastResponse, PointsResponse

BASE_URL = "https://api.weather.gov"
USER_AGENT = "weather-app/1.0"

ModelT = TypeVar("ModelT", bound=BaseModel)


class NWSClient:
    """Async client for the NWS API."""

    def __init__(
        self,
        base_url: str = BASE_URL,
        user_agent: str = USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            headers={
                "User-Agent": user_agent,
                "Accept": "application/geo+json",
            },
            transport=transport,
        )

    async def fetch(self, url: str, model: type[ModelT]) -> ModelT | None:
        """GET ``url`` and parse it into ``model``; None on any failure."""
        try:
            response = await self._client.get(url)
            response.raise_for_status()
            return model.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            logger.error(f"Error making NWS request: HTTP error! status: {e.response.status_code} ({url})")
        except httpx.HTTPError as e:
            logger.error(f"Error making NWS request: {e!r} ({url})")
        except ValueError as e:
            # JSONDecodeError and pydantic's ValidationError are both ValueErrors
            logger.error(f"Error making NWS request: invalid payload from {url}: {e}")
        return None

    async def get_alerts(self, state_code: str) -> AlertsResponse | None:
        """Active alerts for a two-letter state code."""
        logger.debug(f"Alerts: state={state_code}")
        return await self.fetch(f"{self._base_url}/alerts?area={state_code}", AlertsResponse)

    async def get_points(self, latitude: float, longitude: float) -> PointsResponse | None:
        """Grid point metadata for a coordinate pair."""
        logger.debug(f"Points: lat={latitude}, lng={longitude}")
        return await self.fetch(
            f"{self._base_url}/points/{latitude:.4f},{longitude:.4f}",
            PointsResponse,
        )

    async def get_forecast(self, forecast_url: str) -> ForecastResponse | None:
        """Forecast periods from the URL advertised by the points endpoint."""
        logger.debug(f"Forecast: url={forecast_url}")
        return await self.fetch(forecast_url, ForecastResponse)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
