"""Base provider interface for weather data sources.

Each provider (Open-Meteo, OpenWeatherMap, ...) implements this interface and
hands back provider-neutral raw payloads, so the normalizer and the tools
layer never branch on provider identity.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from pydantic import ValidationError

from modules.weather.conditions import ConditionCode
from modules.weather.models import Location


@dataclass(frozen=True)
class RawObservation:
    """One observation or forecast period as reported upstream.

    Every field is optional; the normalizer substitutes defaults. Units are
    already metric (Celsius, m/s, hPa, metres).
    """

    timestamp_unix: int | None = None
    time_text: str | None = None  # provider-local ISO date or date-time
    temperature: float | None = None
    feels_like: float | None = None
    temperature_min: float | None = None
    temperature_max: float | None = None
    pressure: float | None = None
    humidity: float | None = None
    wind_speed: float | None = None
    wind_direction: float | None = None
    visibility: float | None = None
    cloud_cover: float | None = None
    condition_code: ConditionCode | None = None
    sunrise: int | str | None = None
    sunset: int | str | None = None


@dataclass(frozen=True)
class RawCurrentPayload:
    observation: RawObservation
    location: Location | None = None


@dataclass(frozen=True)
class RawForecastPayload:
    observations: tuple[RawObservation, ...] = field(default_factory=tuple)
    location: Location | None = None


class WeatherProvider(ABC):
    """Abstract base class for weather providers."""

    name: str = "provider"

    # True when fetches need a geocoded Location rather than a place name.
    requires_location: bool = False

    @abstractmethod
    async def fetch_current(self, target: Location | str, language: str = "en") -> RawCurrentPayload:
        """Fetch current conditions for a location or place name."""

    @abstractmethod
    async def fetch_forecast(self, target: Location | str, language: str = "en") -> RawForecastPayload:
        """Fetch the multi-day forecast for a location or place name."""


def safe_float(value: object) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def safe_index(values: list | None, index: int) -> object:
    """Return ``values[index]`` or None when the list is missing or short."""
    if not isinstance(values, (list, tuple)):
        return None
    try:
        return values[index]
    except IndexError:
        return None


def as_dict(value: object) -> dict:
    """``value`` when it is a JSON object, else an empty dict."""
    return value if isinstance(value, dict) else {}


# Raised while reading a response body whose shape is not the documented one.
MALFORMED_ERRORS = (TypeError, ValueError, AttributeError, KeyError, ValidationError)
