"""Tests for the alert and forecast text formatters."""

from weather_mcp.schemas.weather import AlertFeature, ForecastPeriod
from weather_mcp.utils.weather_formatters import (
    format_alert,
    format_alerts,
    format_forecast,
    format_forecast_period,
    format_number,
)


def test_format_alert_renders_every_field():
    feature = AlertFeature.model_validate({
        "properties": {
            "event": "Flood Warning",
            "areaDesc": "Sacramento County",
            "severity": "Severe",
            "status": "Actual",
            "headline": "Flood Warning issued for the Sacramento River",
        }
    })
    assert format_alert(feature) == "\n".join([
        "Event: Flood Warning",
        "Area: Sacramento County",
        "Severity: Severe",
        "Status: Actual",
        "Headline: Flood Warning issued for the Sacramento River",
        "---",
    ])


def test_format_alert_falls_back_for_missing_fields():
    text = format_alert(AlertFeature.model_validate({"properties": {}}))
    assert text == "\n".join([
        "Event: Unknown",
        "Area: Unknown",
        "Severity: Unknown",
        "Status: Unknown",
        "Headline: No headline",
        "---",
    ])


def test_format_alert_treats_empty_strings_as_missing():
    text = format_alert(AlertFeature.model_validate({"properties": {"event": "", "headline": ""}}))
    assert "Event: Unknown" in text
    assert "Headline: No headline" in text


def test_format_forecast_period_renders_every_field():
    period = ForecastPeriod.model_validate({
        "name": "Tonight",
        "temperature": 45,
        "temperatureUnit": "F",
        "windSpeed": "5 to 10 mph",
        "windDirection": "NW",
        "shortForecast": "Mostly Clear",
    })
    assert format_forecast_period(period) == "\n".join([
        "Tonight:",
        "Temperature: 45°F",
        "Wind: 5 to 10 mph NW",
        "Mostly Clear",
        "---",
    ])


def test_format_forecast_period_falls_back_for_missing_fields():
    assert format_forecast_period(ForecastPeriod()) == "\n".join([
        "Unknown:",
        "Temperature: Unknown°F",
        "Wind: Unknown ",
        "No forecast available",
        "---",
    ])


def test_zero_temperature_is_a_reading_not_a_gap():
    period = ForecastPeriod.model_validate({"temperature": 0, "temperatureUnit": "C"})
    assert "Temperature: 0°C" in format_forecast_period(period)


def test_format_alerts_adds_header():
    features = [
        AlertFeature.model_validate({"properties": {"event": "Heat Advisory"}}),
        AlertFeature.model_validate({"properties": {"event": "Red Flag Warning"}}),
    ]
    text = format_alerts("CA", features)
    assert text.startswith("Active alerts for CA:\n\nEvent: Heat Advisory")
    assert "---\nEvent: Red Flag Warning" in text


def test_format_forecast_adds_header():
    periods = [ForecastPeriod.model_validate({"name": "Today", "temperature": 70})]
    text = format_forecast(40.7128, -74.0, periods)
    assert text.startswith("Forecast for 40.7128, -74:\n\nToday:")


def test_format_number():
    assert format_number(40.0) == "40"
    assert format_number(-74.006) == "-74.006"
    assert format_number(72) == "72"


def test_format_number_keeps_fixed_point_for_small_and_large_values():
    assert format_number(0.00001) == "0.00001"
    assert format_number(-0.000123) == "-0.000123"
    assert format_number(1.5e17) == "150000000000000000"
    assert format_number(1e21) == "1e+21"
