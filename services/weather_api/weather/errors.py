"""
Failure kinds raised by the weather store, provider and orchestrator.

Not-found is never an exception: lookups return None.
"""

from __future__ import annotations


class WeatherError(Exception):
    """Base class for weather service failures."""


class ConfigurationError(WeatherError):
    """A required setting (API key, connection target) is missing."""


class WeatherRetrievalError(WeatherError):
    """Transient infrastructure failure while reading or refreshing weather."""


class StoreUnavailable(WeatherRetrievalError):
    """The record store could not be read or written."""


class ProviderUnavailable(WeatherRetrievalError):
    """The upstream provider failed, timed out, or returned a malformed payload."""
