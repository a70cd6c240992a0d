"""
Weather domain types.

WeatherReading is what the provider hands back (metric units, no timestamp).
WeatherRecord is the stored unit of cached knowledge, one per city.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

# Used when the provider omits the condition text
UNKNOWN_DESCRIPTION = "Unknown"


@dataclass(frozen=True)
class WeatherReading:
    temperature: float  # Celsius
    description: str
    humidity: int  # percent
    wind_speed: float  # m/s

    def to_record(self, city_name: str, fetched_at: datetime) -> WeatherRecord:
        """Build an unsaved record stamped with the observation time."""
        return WeatherRecord(
            id=None,
            city_name=city_name,
            temperature=self.temperature,
            description=self.description,
            humidity=self.humidity,
            wind_speed=self.wind_speed,
            fetched_at=fetched_at,
        )


@dataclass(frozen=True)
class WeatherRecord:
    """
    Stored weather for one city.

    id is None until the store assigns one. city_name is the case-sensitive
    upsert key. fetched_at is timezone-aware UTC and is the only input to the
    freshness decision.
    """

    id: int | None
    city_name: str
    temperature: float
    description: str
    humidity: int
    wind_speed: float
    fetched_at: datetime

    def with_id(self, record_id: int) -> WeatherRecord:
        return replace(self, id=record_id)

    def to_dict(self) -> dict[str, Any]:
        """camelCase wire shape used by the HTTP surface."""
        return {
            "id": self.id,
            "cityName": self.city_name,
            "temperature": self.temperature,
            "description": self.description,
            "humidity": self.humidity,
            "windSpeed": self.wind_speed,
            "fetchedAt": self.fetched_at.isoformat(),
        }
