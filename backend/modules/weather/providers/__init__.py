"""Weather provider adapters."""

from modules.weather.providers.base import (
    RawCurrentPayload,
    RawForecastPayload,
    RawObservation,
    WeatherProvider,
)
from modules.weather.providers.open_meteo import OpenMeteoProvider
from modules.weather.providers.openweather import OpenWeatherProvider

__all__ = [
    "OpenMeteoProvider",
    "OpenWeatherProvider",
    "RawCurrentPayload",
    "RawForecastPayload",
    "RawObservation",
    "WeatherProvider",
]
