"""
asyncpg pool factory.

DATABASE_URL may be written SQLAlchemy-style (postgresql+asyncpg://); asyncpg
only understands the plain postgresql:// scheme.
"""

import asyncpg

from services.weather_api.config import settings
from services.weather_api.weather.errors import ConfigurationError


def normalize_dsn(database_url: str) -> str:
    return database_url.replace("postgresql+asyncpg://", "postgresql://", 1)


async def create_pool(database_url: str | None = None) -> asyncpg.Pool:
    """
    Create the connection pool for the record store.

    Raises:
        ConfigurationError: no connection target is configured.
    """
    url = database_url if database_url is not None else settings.database_url
    if not url:
        raise ConfigurationError("Connection string not found. Set DATABASE_URL environment variable.")

    return await asyncpg.create_pool(
        normalize_dsn(url),
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        command_timeout=30,
    )
