"""
Weather package.

Cache-or-fetch orchestration (WeatherService) over a record store, with
OpenWeatherMap as the upstream provider.
"""

from services.weather_api.weather.errors import (
    ConfigurationError,
    ProviderUnavailable,
    StoreUnavailable,
    WeatherError,
    WeatherRetrievalError,
)
from services.weather_api.weather.models import WeatherReading, WeatherRecord
from services.weather_api.weather.provider import OpenWeatherMapProvider
from services.weather_api.weather.service import WeatherService

__all__ = [
    "ConfigurationError",
    "ProviderUnavailable",
    "StoreUnavailable",
    "WeatherError",
    "WeatherRetrievalError",
    "WeatherReading",
    "WeatherRecord",
    "OpenWeatherMapProvider",
    "WeatherService",
]
