"""Formatting helpers for NWS alert and forecast payloads."""

from decimal import Decimal

from weather_mcp.schemas.weather import AlertFeature, ForecastPeriod


def format_number(value: float) -> str:
    """Render a number the way JavaScript prints it (40 not 40.0, 0.00001 not 1e-05)."""
    value = float(value)
    magnitude = abs(value)
    if value.is_integer() and magnitude < 1e21:
        return str(int(value))
    text = repr(value)
    # fixed-point between 1e-6 and 1e21, shortest round-trip digits either way
    if "e" in text and 1e-6 <= magnitude < 1e21:
        text = format(Decimal(text), "f")
    return text


def format_alert(feature: AlertFeature) -> str:
    """Format a single alert feature into a readable block."""
    props = feature.properties
    return "\n".join([
        f"Event: {props.event or 'Unknown'}",
        f"Area: {props.area_desc or 'Unknown'}",
        f"Severity: {props.severity or 'Unknown'}",
        f"Status: {props.status or 'Unknown'}",
        f"Headline: {props.headline or 'No headline'}",
        "---",
    ])


def format_forecast_period(period: ForecastPeriod) -> str:
    """Format a single forecast period into a readable block."""
    temperature = "Unknown" if period.temperature is None else format_number(period.temperature)
    return "\n".join([
        f"{period.name or 'Unknown'}:",
        f"Temperature: {temperature}°{period.temperature_unit or 'F'}",
        f"Wind: {period.wind_speed or 'Unknown'} {period.wind_direction or ''}",
        f"{period.short_forecast or 'No forecast available'}",
        "---",
    ])


def format_alerts(state_code: str, features: list[AlertFeature]) -> str:
    """Format all alerts for a state under a header line."""
    formatted = [format_alert(feature) for feature in features]
    return f"Active alerts for {state_code}:\n\n" + "\n".join(formatted)


def format_forecast(latitude: float, longitude: float, periods: list[ForecastPeriod]) -> str:
    """Format all forecast periods for a location under a header line."""
    formatted = [format_forecast_period(period) for period in periods]
    return (
        f"Forecast for {format_number(latitude)}, {format_number(longitude)}:\n\n"
        + "\n".join(formatted)
    )
