"""Open-Meteo provider — key-less, geocode-then-fetch by coordinates."""

from __future__ import annotations

import structlog

from modules.weather.conditions import WMO, ConditionCode
from modules.weather.errors import UpstreamError
from modules.weather.geocoding import Geocoder
from modules.weather.models import Location
from modules.weather.providers.base import (
    MALFORMED_ERRORS,
    RawCurrentPayload,
    RawForecastPayload,
    RawObservation,
    WeatherProvider,
    as_dict,
    safe_float,
    safe_index,
)
from modules.weather.transport import fetch_json

logger = structlog.get_logger()

WEATHER_API_URL = "https://api.open-meteo.com/v1/forecast"

MAX_FORECAST_DAYS = 14

DAILY_FIELDS = "temperature_2m_max,temperature_2m_min,weathercode,sunrise,sunset"
HOURLY_FIELDS = "apparent_temperature,temperature_2m,weathercode"


def _kmh_to_ms(value: float | None) -> float | None:
    if value is None:
        return None
    return round(value / 3.6, 2)


def _wmo(value: object) -> ConditionCode | None:
    if value is None:
        return None
    try:
        return ConditionCode(WMO, int(value))
    except (TypeError, ValueError):
        return None


def _feels_like(current: dict, hourly: dict, temperature: float | None) -> float | None:
    """Apparent temperature from the hourly slice matching the current time.

    The match is exact string equality on the timestamp; when nothing matches
    the instantaneous temperature is used instead.
    """
    times = hourly.get("time")
    current_time = current.get("time")
    if not isinstance(times, list) or not current_time or current_time not in times:
        return temperature
    apparent = safe_float(safe_index(hourly.get("apparent_temperature"), times.index(current_time)))
    return apparent if apparent is not None else temperature


def _current_observation(current: dict, daily: dict, hourly: dict) -> RawObservation:
    temperature = safe_float(current.get("temperature"))
    # Day-0 aggregates describe "today"; fall back to the point reading.
    temp_max = safe_float(safe_index(daily.get("temperature_2m_max"), 0))
    temp_min = safe_float(safe_index(daily.get("temperature_2m_min"), 0))
    code = safe_index(daily.get("weathercode"), 0)
    if code is None:
        code = current.get("weathercode", 0)

    return RawObservation(
        time_text=current.get("time"),
        temperature=temperature,
        feels_like=_feels_like(current, hourly, temperature),
        temperature_min=temp_min if temp_min is not None else temperature,
        temperature_max=temp_max if temp_max is not None else temperature,
        wind_speed=_kmh_to_ms(safe_float(current.get("windspeed"))),
        wind_direction=safe_float(current.get("winddirection")),
        condition_code=_wmo(code),
        sunrise=safe_index(daily.get("sunrise"), 0),
        sunset=safe_index(daily.get("sunset"), 0),
    )


def _daily_observations(daily: dict) -> tuple[RawObservation, ...]:
    days = daily.get("time")
    if not isinstance(days, list):
        return ()
    # Daily rows carry no point temperature; the normalizer derives it from
    # the min/max pair.
    return tuple(
        RawObservation(
            time_text=day,
            temperature_min=safe_float(safe_index(daily.get("temperature_2m_min"), i)),
            temperature_max=safe_float(safe_index(daily.get("temperature_2m_max"), i)),
            condition_code=_wmo(safe_index(daily.get("weathercode"), i)),
            sunrise=safe_index(daily.get("sunrise"), i),
            sunset=safe_index(daily.get("sunset"), i),
        )
        for i, day in enumerate(days)
    )


class OpenMeteoProvider(WeatherProvider):
    """Open-Meteo forecast API; needs coordinates from a geocoder."""

    name = "open_meteo"
    requires_location = True

    def __init__(
        self,
        geocoder: Geocoder | None = None,
        url: str = WEATHER_API_URL,
        timeout: float = 15.0,
        forecast_days: int = MAX_FORECAST_DAYS,
    ):
        self.geocoder = geocoder or Geocoder()
        self.url = url
        self.timeout = timeout
        self.forecast_days = max(1, min(forecast_days, MAX_FORECAST_DAYS))

    async def _location(self, target: Location | str, language: str) -> Location:
        if isinstance(target, Location):
            return target
        return await self.geocoder.resolve(target, language)

    async def fetch_current(self, target: Location | str, language: str = "en") -> RawCurrentPayload:
        location = await self._location(target, language)
        params = {
            "latitude": location.latitude,
            "longitude": location.longitude,
            "current_weather": "true",
            "daily": DAILY_FIELDS,
            "hourly": HOURLY_FIELDS,
            "timezone": "UTC",
            "forecast_days": self.forecast_days,
        }
        data = await self._fetch(params)

        current = data.get("current_weather")
        if not isinstance(current, dict):
            logger.error("open_meteo_missing_current", latitude=location.latitude, longitude=location.longitude)
            raise UpstreamError("Open-Meteo response is missing current weather")

        try:
            observation = _current_observation(current, as_dict(data.get("daily")), as_dict(data.get("hourly")))
        except MALFORMED_ERRORS as e:
            logger.error("open_meteo_malformed_response", kind="current", error=str(e))
            raise UpstreamError("Open-Meteo returned a malformed current weather response") from e
        return RawCurrentPayload(observation=observation, location=location)

    async def fetch_forecast(self, target: Location | str, language: str = "en") -> RawForecastPayload:
        location = await self._location(target, language)
        params = {
            "latitude": location.latitude,
            "longitude": location.longitude,
            "daily": DAILY_FIELDS,
            "timezone": "UTC",
            "forecast_days": self.forecast_days,
        }
        data = await self._fetch(params)

        try:
            observations = _daily_observations(as_dict(data.get("daily")))
        except MALFORMED_ERRORS as e:
            logger.error("open_meteo_malformed_response", kind="forecast", error=str(e))
            raise UpstreamError("Open-Meteo returned a malformed forecast response") from e
        return RawForecastPayload(observations=observations, location=location)

    async def _fetch(self, params: dict) -> dict:
        """Make a request to the Open-Meteo API."""
        return await fetch_json(self.url, params, source="open_meteo", timeout=self.timeout)
