"""
Weather router: HTTP surface over WeatherService.

GET /api/weather                  -- all stored records, newest fetch first
GET /api/weather/{city_name}      -- cached-or-fresh weather for a city
GET /api/weather/id/{record_id}   -- stored record by id (never refreshed)

Input validation happens here, before the service is called:
  blank city name -> 400, non-integer or non-positive record_id -> 400.
Service outcomes:
  None -> 404, ConfigurationError -> 500 CONFIGURATION_ERROR,
  anything else -> 500 INTERNAL_ERROR.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel
from starlette.responses import JSONResponse

from services.weather_api.weather.errors import ConfigurationError
from services.weather_api.weather.models import WeatherRecord
from services.weather_api.weather.service import WeatherService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/weather", tags=["weather"])


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class WeatherRecordOut(BaseModel):
    id: int
    cityName: str
    temperature: float
    description: str
    humidity: int
    windSpeed: float
    fetchedAt: datetime


class WeatherRecordResponse(BaseModel):
    success: bool
    data: WeatherRecordOut
    requestId: str


class WeatherRecordListResponse(BaseModel):
    success: bool
    data: list[WeatherRecordOut]
    requestId: str


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", str(uuid.uuid4()))


def _service(request: Request) -> WeatherService:
    return request.app.state.weather_service


def _error(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {"code": code, "message": message},
            "requestId": _request_id(request),
        },
    )


def _retrieval_failed(request: Request) -> JSONResponse:
    return _error(request, 500, "INTERNAL_ERROR", "An error occurred while retrieving weather data.")


def _configuration_failed(request: Request) -> JSONResponse:
    return _error(request, 500, "CONFIGURATION_ERROR", "Service configuration error.")


def _out(record: WeatherRecord) -> WeatherRecordOut:
    return WeatherRecordOut.model_validate(record.to_dict())


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("", response_model=WeatherRecordListResponse)
async def get_all_weather(request: Request):
    """All stored weather records, most recently fetched first."""
    try:
        records = await _service(request).get_all()
    except ConfigurationError:
        logger.error("Configuration error while listing weather data", exc_info=True)
        return _configuration_failed(request)
    except Exception:
        logger.exception("Error occurred while fetching all weather data")
        return _retrieval_failed(request)

    return WeatherRecordListResponse(
        success=True,
        data=[_out(r) for r in records],
        requestId=_request_id(request),
    )


@router.get("/id/{record_id}", response_model=WeatherRecordResponse)
async def get_weather_by_id(record_id: str, request: Request):
    """A stored record by id. Never triggers a provider call."""
    try:
        parsed_id = int(record_id)
    except ValueError:
        parsed_id = 0
    if parsed_id <= 0:
        return _error(request, 400, "VALIDATION_ERROR", "Invalid ID.")

    try:
        record = await _service(request).get_by_id(parsed_id)
    except ConfigurationError:
        logger.error("Configuration error while fetching weather by id=%d", parsed_id, exc_info=True)
        return _configuration_failed(request)
    except Exception:
        logger.exception("Error occurred while fetching weather by id=%d", parsed_id)
        return _retrieval_failed(request)

    if record is None:
        return _error(request, 404, "NOT_FOUND", f"Weather data not found for ID: {parsed_id}")

    return WeatherRecordResponse(success=True, data=_out(record), requestId=_request_id(request))


@router.get("/", include_in_schema=False)
async def get_weather_without_city(request: Request):
    return _error(request, 400, "VALIDATION_ERROR", "City name is required.")


@router.get("/{city_name}", response_model=WeatherRecordResponse)
async def get_weather_by_city(city_name: str, request: Request):
    """Weather for a city: stored if fresh, otherwise refreshed from the provider."""
    if not city_name.strip():
        return _error(request, 400, "VALIDATION_ERROR", "City name is required.")

    try:
        record = await _service(request).get_by_city(city_name)
    except ConfigurationError:
        logger.error("Configuration error while fetching weather for city=%r", city_name, exc_info=True)
        return _configuration_failed(request)
    except Exception:
        logger.exception("Error occurred while fetching weather for city=%r", city_name)
        return _retrieval_failed(request)

    if record is None:
        return _error(request, 404, "NOT_FOUND", f"Weather data not found for city: {city_name}")

    return WeatherRecordResponse(success=True, data=_out(record), requestId=_request_id(request))
