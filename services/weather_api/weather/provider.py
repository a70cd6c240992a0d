"""
OpenWeatherMap current-weather client.

Requests metric units, so the payload already carries Celsius and m/s:

  {
    "weather": [{"id": 500, "main": "Rain", "description": "light rain"}],
    "main":    {"temp": 15.2, "humidity": 80, ...},
    "wind":    {"speed": 4.1, ...},
    "name":    "Dublin",
    ...
  }

Outcomes:
  - 2xx with a well-formed body  -> WeatherReading
  - 404                          -> None (unknown city)
  - anything else                -> ProviderUnavailable
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from services.weather_api.weather.errors import ConfigurationError, ProviderUnavailable
from services.weather_api.weather.models import UNKNOWN_DESCRIPTION, WeatherReading

logger = logging.getLogger(__name__)

# API endpoint
_OWM_BASE = "https://api.openweathermap.org/data/2.5"
_WEATHER_ENDPOINT = f"{_OWM_BASE}/weather"

_DEFAULT_TIMEOUT_S = 8.0


class WeatherProvider(Protocol):
    async def fetch(self, city_name: str) -> WeatherReading | None:
        """Return a fresh reading, None for an unknown city, or raise ProviderUnavailable."""
        ...


def parse_reading(owm_payload: dict[str, Any]) -> WeatherReading:
    """
    Normalize an OpenWeatherMap /weather response into a WeatherReading.

    main.temp, main.humidity and wind.speed are required. A missing or malformed
    weather[0].description falls back to UNKNOWN_DESCRIPTION.

    Raises:
        ProviderUnavailable: the payload does not have the expected shape.
    """
    try:
        main = owm_payload["main"]
        temperature = float(main["temp"])
        humidity = int(main["humidity"])
        wind_speed = float(owm_payload["wind"]["speed"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ProviderUnavailable(f"malformed OpenWeatherMap payload: {exc!r}") from exc

    weather_list = owm_payload.get("weather")
    primary = weather_list[0] if isinstance(weather_list, list) and weather_list else None
    description = primary.get("description") if isinstance(primary, dict) else None
    if not isinstance(description, str) or not description:
        description = UNKNOWN_DESCRIPTION

    return WeatherReading(
        temperature=temperature,
        description=description,
        humidity=humidity,
        wind_speed=wind_speed,
    )


class OpenWeatherMapProvider:
    """
    Stateless OpenWeatherMap client.

    Usage:
        provider = OpenWeatherMapProvider(api_key="...")
        reading = await provider.fetch("Dublin")
    """

    def __init__(self, api_key: str, timeout_s: float = _DEFAULT_TIMEOUT_S) -> None:
        """
        Args:
            api_key:   OpenWeatherMap API key (OPENWEATHERMAP_API_KEY env var).
            timeout_s: HTTP timeout for the whole request.
        """
        self._api_key = api_key
        self._timeout_s = timeout_s

    async def fetch(self, city_name: str) -> WeatherReading | None:
        if not self._api_key:
            raise ConfigurationError(
                "OpenWeatherMap API key not found. Set OPENWEATHERMAP_API_KEY environment variable."
            )

        try:
            async with httpx.AsyncClient(timeout=self._timeout_s) as client:
                resp = await client.get(
                    _WEATHER_ENDPOINT,
                    params={
                        "q": city_name,
                        "appid": self._api_key,
                        "units": "metric",
                    },
                )
        except httpx.HTTPError as exc:
            logger.error("OpenWeatherMap request failed for city=%r: %s", city_name, exc)
            raise ProviderUnavailable(f"request failed: {exc!r}") from exc

        if resp.status_code == 404:
            logger.warning("City not found upstream: %r", city_name)
            return None

        if not resp.is_success:
            logger.error(
                "OpenWeatherMap returned %d for city=%r: %s",
                resp.status_code,
                city_name,
                resp.text[:200],
            )
            raise ProviderUnavailable(f"HTTP {resp.status_code}")

        try:
            payload = resp.json()
        except ValueError as exc:
            logger.error("OpenWeatherMap returned non-JSON body for city=%r", city_name)
            raise ProviderUnavailable("invalid JSON body") from exc

        if not isinstance(payload, dict):
            raise ProviderUnavailable("unexpected JSON body")

        return parse_reading(payload)
