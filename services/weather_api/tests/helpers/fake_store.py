"""
InMemoryWeatherStore -- test double for the WeatherStore contract.

Honours the same semantics as PostgresWeatherStore:
  - one row per city_name (upsert keeps the first-assigned id)
  - read_all ordered by fetched_at descending
  - ids start at 1 and are never reused

Every call is recorded in .calls so tests can assert the store was (or was
not) touched:

    store = InMemoryWeatherStore()
    await service.get_by_id(-1)
    assert store.calls == [("read_by_id", -1)]
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from services.weather_api.weather.models import WeatherRecord


class InMemoryWeatherStore:
    def __init__(self) -> None:
        self._rows: dict[str, WeatherRecord] = {}
        self._next_id = 1
        self.calls: list[tuple[str, Any]] = []

    def seed(self, record: WeatherRecord) -> WeatherRecord:
        """Insert a record directly (bypassing .calls); returns it with its id."""
        existing = self._rows.get(record.city_name)
        record_id = existing.id if existing is not None else self._allocate_id()
        stored = replace(record, id=record_id)
        self._rows[record.city_name] = stored
        return stored

    def _allocate_id(self) -> int:
        record_id = self._next_id
        self._next_id += 1
        return record_id

    async def read_by_id(self, record_id: int) -> WeatherRecord | None:
        self.calls.append(("read_by_id", record_id))
        for row in self._rows.values():
            if row.id == record_id:
                return row
        return None

    async def read_by_city(self, city_name: str) -> WeatherRecord | None:
        self.calls.append(("read_by_city", city_name))
        return self._rows.get(city_name)

    async def read_all(self) -> list[WeatherRecord]:
        self.calls.append(("read_all", None))
        return sorted(self._rows.values(), key=lambda r: r.fetched_at, reverse=True)

    async def upsert_by_city(self, record: WeatherRecord) -> int:
        self.calls.append(("upsert_by_city", record.city_name))
        return self.seed(record).id
