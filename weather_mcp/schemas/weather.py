"""Pydantic models for the National Weather Service API payloads."""

from pydantic import BaseModel, ConfigDict, Field


class NWSModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class AlertProperties(NWSModel):
    event: str | None = Field(None, description="Alert event type (e.g. Flood Warning).")
    area_desc: str | None = Field(None, alias="areaDesc", description="Affected area description.")
    severity: str | None = Field(None, description="Alert severity (e.g. Severe).")
    status: str | None = Field(None, description="Alert status (e.g. Actual).")
    headline: str | None = Field(None, description="One-line alert headline.")


class AlertFeature(NWSModel):
    properties: AlertProperties = Field(default_factory=AlertProperties)


class AlertsResponse(NWSModel):
    features: list[AlertFeature] = Field(default_factory=list)


class ForecastPeriod(NWSModel):
    name: str | None = Field(None, description="Period name (e.g. Tonight).")
    temperature: float | None = Field(None, description="Forecast temperature.")
    temperature_unit: str | None = Field(None, alias="temperatureUnit", description="F or C.")
    wind_speed: str | None = Field(None, alias="windSpeed", description="Wind speed text (e.g. 5 to 10 mph).")
    wind_direction: str | None = Field(None, alias="windDirection", description="Cardinal wind direction.")
    short_forecast: str | None = Field(None, alias="shortForecast", description="Short forecast text.")


class PointsProperties(NWSModel):
    forecast: str | None = Field(None, description="URL of the gridpoint forecast resource.")


class PointsResponse(NWSModel):
    properties: PointsProperties = Field(default_factory=PointsProperties)


class ForecastProperties(NWSModel):
    periods: list[ForecastPeriod] = Field(default_factory=list)


class ForecastResponse(NWSModel):
    properties: ForecastProperties = Field(default_factory=ForecastProperties)
