"""
Application configuration via pydantic-settings.
All config read from environment variables with sensible defaults for local dev.

DATABASE_URL and OPENWEATHERMAP_API_KEY have no usable default; when either is
missing the service still boots, logs a configuration error, and every request
that needs it fails with ConfigurationError.
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    app_name: str = "weather-cache-api"
    app_version: str = "0.1.0"
    environment: str = Field(default="development", pattern=r"^(development|staging|production|test)$")
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = ""
    db_pool_min_size: int = Field(default=1, ge=0)
    db_pool_max_size: int = Field(default=10, ge=1)

    # Weather (OpenWeatherMap)
    openweathermap_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("openweathermap_api_key", "openweather_api_key"),
    )
    weather_api_timeout_s: float = 8.0
    # Share one provider call between concurrent requests for the same city
    weather_dedupe_inflight: bool = False

    # CORS
    cors_origins: list[str] = Field(default=["http://localhost:3000"])

    # Sentry
    sentry_dsn: str = ""
    sentry_traces_sample_rate: float = Field(default=0.1, ge=0.0, le=1.0)

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}

    def missing_required(self) -> list[str]:
        """Names of required settings that are unset (empty)."""
        missing = []
        if not self.database_url:
            missing.append("DATABASE_URL")
        if not self.openweathermap_api_key:
            missing.append("OPENWEATHERMAP_API_KEY")
        return missing


settings = Settings()
