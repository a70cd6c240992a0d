"""
Record store for cached weather, one row per city in weather_data.

The upsert is a single INSERT ... ON CONFLICT ("cityName") DO UPDATE ...
RETURNING id, so concurrent writers for the same city can never produce two
rows and the id survives every overwrite.

Failure mapping:
  pool is None                                      -> ConfigurationError
  asyncpg.PostgresError / OSError / TimeoutError    -> StoreUnavailable
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Protocol

import asyncpg

from services.weather_api.weather.errors import ConfigurationError, StoreUnavailable
from services.weather_api.weather.models import WeatherRecord

logger = logging.getLogger(__name__)

_TRANSIENT_ERRORS = (asyncpg.PostgresError, OSError, asyncio.TimeoutError)

# id is SERIAL (int4); larger ids cannot exist
_MAX_RECORD_ID = 2**31 - 1

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS weather_data (
    id SERIAL PRIMARY KEY,
    "cityName" TEXT NOT NULL UNIQUE,
    temperature DOUBLE PRECISION NOT NULL,
    description TEXT NOT NULL,
    humidity INTEGER NOT NULL,
    "windSpeed" DOUBLE PRECISION NOT NULL,
    "fetchedAt" TIMESTAMPTZ NOT NULL
)
"""

_COLUMNS = 'id, "cityName", temperature, description, humidity, "windSpeed", "fetchedAt"'

_SELECT_BY_ID_SQL = f"""
SELECT {_COLUMNS}
FROM weather_data
WHERE id = $1
"""

_SELECT_BY_CITY_SQL = f"""
SELECT {_COLUMNS}
FROM weather_data
WHERE "cityName" = $1
"""

_SELECT_ALL_SQL = f"""
SELECT {_COLUMNS}
FROM weather_data
ORDER BY "fetchedAt" DESC
"""

_UPSERT_SQL = """
INSERT INTO weather_data ("cityName", temperature, description, humidity, "windSpeed", "fetchedAt")
VALUES ($1, $2, $3, $4, $5, $6)
ON CONFLICT ("cityName") DO UPDATE
SET temperature = EXCLUDED.temperature,
    description = EXCLUDED.description,
    humidity = EXCLUDED.humidity,
    "windSpeed" = EXCLUDED."windSpeed",
    "fetchedAt" = EXCLUDED."fetchedAt"
RETURNING id
"""


class WeatherStore(Protocol):
    async def read_by_id(self, record_id: int) -> WeatherRecord | None: ...

    async def read_by_city(self, city_name: str) -> WeatherRecord | None: ...

    async def read_all(self) -> list[WeatherRecord]: ...

    async def upsert_by_city(self, record: WeatherRecord) -> int: ...


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def row_to_record(row: Mapping[str, Any]) -> WeatherRecord:
    """Map a weather_data row (asyncpg.Record or dict) to a WeatherRecord."""
    return WeatherRecord(
        id=int(row["id"]),
        city_name=row["cityName"],
        temperature=float(row["temperature"]),
        description=row["description"],
        humidity=int(row["humidity"]),
        wind_speed=float(row["windSpeed"]),
        fetched_at=_as_utc(row["fetchedAt"]),
    )


class PostgresWeatherStore:
    """
    asyncpg-backed WeatherStore.

    Usage:
        store = PostgresWeatherStore(pool)
        await store.ensure_schema()
        record_id = await store.upsert_by_city(record)
    """

    def __init__(self, pool: asyncpg.Pool | None) -> None:
        """
        Args:
            pool: asyncpg pool, or None when DATABASE_URL is not configured.
        """
        self._pool = pool

    def _require_pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise ConfigurationError("Connection string not found. Set DATABASE_URL environment variable.")
        return self._pool

    async def ensure_schema(self) -> None:
        pool = self._require_pool()
        try:
            await pool.execute(_CREATE_TABLE_SQL)
        except _TRANSIENT_ERRORS as exc:
            logger.error("Could not create weather_data table: %s", exc, exc_info=True)
            raise StoreUnavailable("schema setup failed") from exc

    async def read_by_id(self, record_id: int) -> WeatherRecord | None:
        pool = self._require_pool()
        if not 0 < record_id <= _MAX_RECORD_ID:
            return None
        try:
            row = await pool.fetchrow(_SELECT_BY_ID_SQL, record_id)
        except _TRANSIENT_ERRORS as exc:
            logger.error("Database error while fetching weather by id=%d", record_id, exc_info=True)
            raise StoreUnavailable(f"read_by_id failed: {exc!r}") from exc
        return row_to_record(row) if row is not None else None

    async def read_by_city(self, city_name: str) -> WeatherRecord | None:
        pool = self._require_pool()
        try:
            row = await pool.fetchrow(_SELECT_BY_CITY_SQL, city_name)
        except _TRANSIENT_ERRORS as exc:
            logger.error("Database error while fetching weather for city=%r", city_name, exc_info=True)
            raise StoreUnavailable(f"read_by_city failed: {exc!r}") from exc
        return row_to_record(row) if row is not None else None

    async def read_all(self) -> list[WeatherRecord]:
        pool = self._require_pool()
        try:
            rows = await pool.fetch(_SELECT_ALL_SQL)
        except _TRANSIENT_ERRORS as exc:
            logger.error("Database error while fetching all weather data", exc_info=True)
            raise StoreUnavailable(f"read_all failed: {exc!r}") from exc
        return [row_to_record(r) for r in rows]

    async def upsert_by_city(self, record: WeatherRecord) -> int:
        """Insert or overwrite the row for record.city_name; returns its id."""
        pool = self._require_pool()
        try:
            record_id = await pool.fetchval(
                _UPSERT_SQL,
                record.city_name,
                record.temperature,
                record.description,
                record.humidity,
                record.wind_speed,
                record.fetched_at,
            )
        except _TRANSIENT_ERRORS as exc:
            logger.error(
                "Database error while upserting weather for city=%r", record.city_name, exc_info=True
            )
            raise StoreUnavailable(f"upsert_by_city failed: {exc!r}") from exc
        return int(record_id)
