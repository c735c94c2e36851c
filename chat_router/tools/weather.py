"""
Weather Lookup Tool

Current conditions for a location via the wttr.in JSON API.
"""

import logging
from urllib.parse import quote

import requests

from ..config import config
from .registry import ToolDefinition

logger = logging.getLogger(__name__)

UNITS = ("celsius", "fahrenheit")


def _first_value(entries: list) -> str:
    """wttr.in wraps most strings as [{"value": "..."}]."""
    return entries[0]["value"] if entries else ""


def get_weather(location: str, unit: str = "celsius") -> dict:
    """
    Get current weather information for a location.

    Args:
        location: City name or location, e.g. "Beijing", "New York"
        unit: "celsius" or "fahrenheit"; anything else falls back to celsius

    Returns:
        Dictionary with current conditions, or an ``error`` entry
    """
    if not location or not str(location).strip():
        return {
            "error": 'Location is empty. Please provide a location in format: {"location": "city name"}',
        }

    if unit not in UNITS:
        unit = "celsius"
    fahrenheit = unit == "fahrenheit"

    url = f"{config.tools.weather_url.rstrip('/')}/{quote(location.strip(), safe='')}"

    try:
        response = requests.get(
            url,
            params={"format": "j1"},
            timeout=config.tools.timeout,
        )
        if not response.ok:
            logger.warning(f"Weather service returned {response.status_code} for '{location}'")
            return {"error": "Failed to fetch weather data"}

        data = response.json()
        current = data["current_condition"][0]
        area = data["nearest_area"][0]

        temp = int(current["temp_F"] if fahrenheit else current["temp_C"])
        symbol = "°F" if fahrenheit else "°C"
        feels_like = current["FeelsLikeF"] if fahrenheit else current["FeelsLikeC"]

        return {
            "location": f"{_first_value(area['areaName'])}, {_first_value(area['country'])}",
            "temperature": f"{temp}{symbol}",
            "feels_like": f"{feels_like}{symbol}",
            "condition": _first_value(current["weatherDesc"]),
            "humidity": f"{current['humidity']}%",
            "wind_speed": f"{current['windspeedKmph']} km/h",
            "wind_direction": current["winddir16Point"],
            "visibility": f"{current['visibility']} km",
            "pressure": f"{current['pressure']} mb",
            "uv_index": current["uvIndex"],
        }

    except requests.exceptions.RequestException as e:
        logger.error(f"Weather lookup failed: {e}")
        return {"error": f"Weather lookup failed: {e}"}
    except (KeyError, IndexError, TypeError, ValueError) as e:
        logger.error(f"Unexpected weather payload for '{location}': {e}")
        return {"error": f"Weather lookup failed: unexpected response ({e})"}


def _handle_weather(params: dict) -> dict:
    """Handle get_weather tool invocation."""
    return get_weather(
        location=params.get("location", ""),
        unit=params.get("unit") or "celsius",
    )


TOOL = ToolDefinition(
    name="get_weather",
    description="Get current weather information for a specific location",
    parameters={
        "type": "object",
        "properties": {
            "location": {
                "type": "string",
                "description": 'The city name or location, e.g. "Beijing", "New York"',
            },
            "unit": {
                "type": ["string", "null"],
                "enum": list(UNITS),
                "description": "Temperature unit",
                "default": "celsius",
            },
        },
        "required": ["location"],
    },
    handler=_handle_weather,
)
