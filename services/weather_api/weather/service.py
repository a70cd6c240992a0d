"""
WeatherService: cache-or-fetch orchestration over the record store.

Policy for get_by_city:
  1. Read the stored record for the city.
  2. Fresh (age < 30 min, strict)      -> return it unchanged.
  3. Missing or stale                  -> ask the provider:
       unknown city                    -> None (a stale record is NOT served)
       ProviderUnavailable             -> propagates (no stale fallback)
       reading                         -> stamp fetched_at=now, upsert, return
                                          the record with the store's id

get_by_id and get_all are straight passthroughs: no freshness check, no
provider call.

There is no in-process record cache; every decision re-reads the store.
Two concurrent misses for the same city both call the provider and both
upsert (last write wins, still one row). dedupe_inflight=True makes them share
one in-flight task per city instead.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from functools import partial
from typing import TYPE_CHECKING, Callable

from services.weather_api.weather.models import WeatherRecord

if TYPE_CHECKING:
    from services.weather_api.db.weather_store import WeatherStore
    from services.weather_api.weather.provider import WeatherProvider

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class WeatherService:
    """
    Usage:
        service = WeatherService(store=PostgresWeatherStore(pool),
                                 provider=OpenWeatherMapProvider(api_key="..."))
        record = await service.get_by_city("Dublin")
    """

    FRESHNESS_WINDOW = timedelta(minutes=30)

    def __init__(
        self,
        store: WeatherStore,
        provider: WeatherProvider,
        *,
        clock: Callable[[], datetime] = _utc_now,
        dedupe_inflight: bool = False,
    ) -> None:
        """
        Args:
            store:           Record store (read by id/city, read-all, upsert-by-city).
            provider:        Weather provider returning readings for a city name.
            clock:           Returns the current time as an aware UTC datetime.
            dedupe_inflight: Share one refresh task between concurrent requests
                             for the same city.
        """
        self._store = store
        self._provider = provider
        self._clock = clock
        self._dedupe_inflight = dedupe_inflight
        self._inflight: dict[str, asyncio.Task] = {}

    def is_fresh(self, record: WeatherRecord, now: datetime) -> bool:
        """True while now - fetched_at is strictly below the freshness window."""
        return now - record.fetched_at < self.FRESHNESS_WINDOW

    async def get_by_id(self, record_id: int) -> WeatherRecord | None:
        try:
            return await self._store.read_by_id(record_id)
        except Exception:
            logger.exception("Error retrieving weather data by id=%d", record_id)
            raise

    async def get_all(self) -> list[WeatherRecord]:
        try:
            return await self._store.read_all()
        except Exception:
            logger.exception("Error retrieving all weather data")
            raise

    async def get_by_city(self, city_name: str) -> WeatherRecord | None:
        if not self._dedupe_inflight:
            return await self._get_by_city(city_name)

        task = self._inflight.get(city_name)
        if task is None:
            task = asyncio.ensure_future(self._get_by_city(city_name))
            self._inflight[city_name] = task
            task.add_done_callback(partial(self._inflight_done, city_name))
        else:
            logger.debug("Joining in-flight weather lookup for city=%r", city_name)
        # shield: one caller disconnecting must not cancel the others' lookup
        return await asyncio.shield(task)

    async def _get_by_city(self, city_name: str) -> WeatherRecord | None:
        try:
            cached = await self._store.read_by_city(city_name)
            now = self._clock()

            if cached is not None and self.is_fresh(cached, now):
                logger.info("Returning cached weather for city=%r", city_name)
                return cached

            logger.info(
                "Fetching fresh weather for city=%r (%s)",
                city_name,
                "stale" if cached is not None else "miss",
            )
            reading = await self._provider.fetch(city_name)
            if reading is None:
                return None

            record = reading.to_record(city_name, self._clock())
            record_id = await self._store.upsert_by_city(record)
            return record.with_id(record_id)
        except Exception:
            logger.exception("Error retrieving weather data for city=%r", city_name)
            raise

    def _inflight_done(self, city_name: str, task: asyncio.Task) -> None:
        self._inflight.pop(city_name, None)
        # every waiter may have been cancelled; mark the outcome retrieved
        if not task.cancelled():
            task.exception()
