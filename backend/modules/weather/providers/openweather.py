"""OpenWeatherMap provider — key-based, queried directly by place name."""

from __future__ import annotations

import structlog

from modules.weather.conditions import OWM, ConditionCode, normalize_language
from modules.weather.errors import MissingCredentialsError, UpstreamError
from modules.weather.models import Location
from modules.weather.providers.base import (
    MALFORMED_ERRORS,
    RawCurrentPayload,
    RawForecastPayload,
    RawObservation,
    WeatherProvider,
    as_dict,
    safe_float,
)
from modules.weather.transport import fetch_json

logger = structlog.get_logger()

# OpenWeatherMap API base
_DEFAULT_BASE = "https://api.openweathermap.org/data/2.5"


def _condition(item: dict) -> ConditionCode | None:
    weather = item.get("weather")
    first = as_dict(weather[0]) if isinstance(weather, list) and weather else {}
    if first.get("id") is None:
        return None
    try:
        return ConditionCode(OWM, int(first["id"]))
    except (TypeError, ValueError):
        return None


def _observation(item: dict, **extra) -> RawObservation:
    """Build a RawObservation from a /weather body or a /forecast list item."""
    main = as_dict(item.get("main"))
    wind = as_dict(item.get("wind"))
    clouds = as_dict(item.get("clouds"))
    return RawObservation(
        timestamp_unix=item.get("dt"),
        time_text=item.get("dt_txt"),
        temperature=safe_float(main.get("temp")),
        feels_like=safe_float(main.get("feels_like")),
        temperature_min=safe_float(main.get("temp_min")),
        temperature_max=safe_float(main.get("temp_max")),
        pressure=safe_float(main.get("pressure")),
        humidity=safe_float(main.get("humidity")),
        wind_speed=safe_float(wind.get("speed")),
        wind_direction=safe_float(wind.get("deg")),
        visibility=safe_float(item.get("visibility")),
        cloud_cover=safe_float(clouds.get("all")),
        condition_code=_condition(item),
        **extra,
    )


class OpenWeatherProvider(WeatherProvider):
    """OpenWeatherMap current weather + 5 day / 3 hour forecast API."""

    name = "openweather"
    requires_location = False

    def __init__(self, api_key: str, base_url: str = _DEFAULT_BASE, timeout: float = 15.0):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _params(self, target: Location | str, language: str) -> dict:
        if isinstance(target, Location):
            params = {"lat": target.latitude, "lon": target.longitude}
        else:
            params = {"q": target.strip()}
        return {
            **params,
            "units": "metric",
            "appid": self.api_key,
            "lang": normalize_language(language),
        }

    async def _get(self, path: str, target: Location | str, language: str) -> dict:
        # Fail before touching the network when misconfigured.
        if not self.api_key:
            logger.error("openweather_missing_api_key", path=path)
            raise MissingCredentialsError("OpenWeatherMap API key is not configured")
        return await fetch_json(
            f"{self.base_url}{path}",
            self._params(target, language),
            source="openweather",
            timeout=self.timeout,
        )

    # ------------------------------------------------------------------
    # Provider interface
    # ------------------------------------------------------------------

    async def fetch_current(self, target: Location | str, language: str = "en") -> RawCurrentPayload:
        data = await self._get("/weather", target, language)
        sys_info = as_dict(data.get("sys"))

        try:
            location = _location(data, sys_info.get("country"), target)
            observation = _observation(data, sunrise=sys_info.get("sunrise"), sunset=sys_info.get("sunset"))
        except MALFORMED_ERRORS as e:
            logger.error("openweather_malformed_response", kind="current", error=str(e))
            raise UpstreamError("OpenWeatherMap returned a malformed current weather response") from e
        return RawCurrentPayload(observation=observation, location=location)

    async def fetch_forecast(self, target: Location | str, language: str = "en") -> RawForecastPayload:
        data = await self._get("/forecast", target, language)
        city = as_dict(data.get("city"))
        items = data.get("list")

        try:
            location = _location(city, city.get("country"), target)
            observations = tuple(
                _observation(as_dict(item)) for item in (items if isinstance(items, list) else ())
            )
        except MALFORMED_ERRORS as e:
            logger.error("openweather_malformed_response", kind="forecast", error=str(e))
            raise UpstreamError("OpenWeatherMap returned a malformed forecast response") from e
        return RawForecastPayload(observations=observations, location=location)


def _location(body: dict, country: str | None, target: Location | str) -> Location:
    """Location as reported by OpenWeatherMap, falling back to the request target."""
    coord = as_dict(body.get("coord"))
    if isinstance(target, Location):
        name, lat, lon = target.name, target.latitude, target.longitude
    else:
        name, lat, lon = target.strip(), 0.0, 0.0
    return Location(
        name=body.get("name") or name,
        country=country or "",
        latitude=coord.get("lat", lat),
        longitude=coord.get("lon", lon),
        id=body.get("id") or 0,
    )
