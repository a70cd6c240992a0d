"""
Weather cache FastAPI service: cached-or-fresh current weather per city.

Entrypoint: uvicorn services.weather_api.main:app --host 0.0.0.0 --port 8000
        or: weather-cache-api   (console script, see run())
"""

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from starlette.responses import JSONResponse

from services.weather_api.config import settings
from services.weather_api.db.pool import create_pool
from services.weather_api.db.weather_store import PostgresWeatherStore
from services.weather_api.middleware.cors import setup_cors
from services.weather_api.middleware.sentry import setup_sentry
from services.weather_api.routers import health, weather
from services.weather_api.weather.provider import OpenWeatherMapProvider
from services.weather_api.weather.service import WeatherService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    setup_sentry()

    missing = settings.missing_required()
    if missing:
        # Not fatal: the affected requests fail with ConfigurationError instead
        logger.error("Configuration error: missing required settings: %s", ", ".join(missing))

    db_pool = None
    if settings.database_url:
        try:
            db_pool = await create_pool(settings.database_url)
        except Exception:
            logger.exception("DB pool failed to connect")
            raise

    store = PostgresWeatherStore(db_pool)
    if db_pool is not None:
        await store.ensure_schema()

    app.state.settings = settings
    app.state.db = db_pool
    app.state.weather_service = WeatherService(
        store=store,
        provider=OpenWeatherMapProvider(
            api_key=settings.openweathermap_api_key,
            timeout_s=settings.weather_api_timeout_s,
        ),
        dedupe_inflight=settings.weather_dedupe_inflight,
    )

    yield

    if db_pool is not None:
        await db_pool.close()


app = FastAPI(
    title="Weather Cache API",
    version=settings.app_version,
    docs_url="/docs" if settings.environment == "development" else None,
    redoc_url=None,
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(weather.router)

# CORS (needs to be outermost to handle preflight)
setup_cors(app)


# Request ID injection
@app.middleware("http")
async def request_id_middleware(request: Request, call_next) -> Response:
    request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# -- Exception Handlers --

@app.exception_handler(404)
async def not_found_handler(request: Request, exc) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={
            "success": False,
            "error": {"code": "NOT_FOUND", "message": "Resource not found."},
            "requestId": getattr(request.state, "request_id", str(uuid.uuid4())),
        },
    )


@app.exception_handler(422)
async def validation_error_handler(request: Request, exc) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "error": {
                "code": "VALIDATION_ERROR",
                "message": str(exc.detail) if hasattr(exc, "detail") else "Validation error.",
            },
            "requestId": getattr(request.state, "request_id", str(uuid.uuid4())),
        },
    )


@app.exception_handler(500)
async def internal_error_handler(request: Request, exc) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": {"code": "INTERNAL_ERROR", "message": "An unexpected error occurred."},
            "requestId": getattr(request.state, "request_id", str(uuid.uuid4())),
        },
    )


def run() -> None:
    """Console entry point: configure logging and serve with uvicorn."""
    import uvicorn

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    uvicorn.run(app, host="0.0.0.0", port=8000, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
