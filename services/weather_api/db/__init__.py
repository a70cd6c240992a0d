"""
asyncpg persistence for the weather cache.

Re-exports the pool factory and the record store.
"""

from services.weather_api.db.pool import create_pool, normalize_dsn
from services.weather_api.db.weather_store import PostgresWeatherStore, WeatherStore, row_to_record

__all__ = [
    "create_pool",
    "normalize_dsn",
    "PostgresWeatherStore",
    "WeatherStore",
    "row_to_record",
]
