"""Weather module tool implementations.

``WeatherTools`` is the fetch orchestrator: it geocodes once when the
configured provider needs coordinates, runs the current and forecast fetches
concurrently and hands back both results or a single failure.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, NoReturn, TypeVar

import structlog

from modules.weather.conditions import normalize_language
from modules.weather.errors import NotFoundError, UpstreamError, WeatherError, WeatherFetchFailed
from modules.weather.geocoding import Geocoder
from modules.weather.models import DashboardWeather, ForecastSeries, Location, WeatherSnapshot
from modules.weather.normalizer import normalize_current, normalize_forecast
from modules.weather.providers.base import WeatherProvider

logger = structlog.get_logger()

T = TypeVar("T")

FAILURE_MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "error": "Failed to load weather data. Please try again.",
        "not_found": "City not found. Please try another search.",
    },
    "fa": {
        "error": "خطا در بارگذاری اطلاعات. لطفا دوباره تلاش کنید.",
        "not_found": "شهر یافت نشد. لطفا دوباره جستجو کنید.",
    },
}


def failure_message(error: BaseException, language: str = "en") -> str:
    """Pick the most specific user-safe message for a failure."""
    messages = FAILURE_MESSAGES[normalize_language(language)]
    if isinstance(error, NotFoundError):
        return messages["not_found"]
    if isinstance(error, UpstreamError) and error.provider_message:
        return error.provider_message
    return messages["error"]


def _most_specific(errors: list[BaseException], language: str) -> BaseException:
    """The failure worth reporting when more than one fetch failed.

    Programming errors win outright, then any error with its own message.
    """
    for error in errors:
        if not isinstance(error, WeatherError):
            return error
    generic = FAILURE_MESSAGES[normalize_language(language)]["error"]
    for error in errors:
        if failure_message(error, language) != generic:
            return error
    return errors[0]


class WeatherTools:
    """Tool implementations for weather data retrieval."""

    def __init__(self, provider: WeatherProvider, geocoder: Geocoder | None = None):
        self.provider = provider
        self.geocoder = geocoder or Geocoder()

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------

    async def get_weather_and_forecast(
        self, city: str, language: str = "en", request_id: str | None = None
    ) -> DashboardWeather:
        """Current conditions and forecast for ``city``, or neither.

        Raises:
            WeatherFetchFailed: If geocoding or either fetch failed.
        """
        language = normalize_language(language)
        target = await self._guard(self._target(city, language), city, language)

        # Both fetches always run to completion; one failing never cancels
        # the other.
        current, forecast = await asyncio.gather(
            self.provider.fetch_current(target, language),
            self.provider.fetch_forecast(target, language),
            return_exceptions=True,
        )
        errors = [r for r in (current, forecast) if isinstance(r, BaseException)]
        if errors:
            self._fail(_most_specific(errors, language), city, language)

        location = target if isinstance(target, Location) else None
        return DashboardWeather(
            snapshot=normalize_current(current, location, language),
            forecast=normalize_forecast(forecast, location, language),
            request_id=request_id,
        )

    async def get_current(self, city: str, language: str = "en") -> WeatherSnapshot:
        language = normalize_language(language)
        target = await self._guard(self._target(city, language), city, language)
        raw = await self._guard(self.provider.fetch_current(target, language), city, language)
        return normalize_current(raw, target if isinstance(target, Location) else None, language)

    async def get_forecast(self, city: str, language: str = "en") -> ForecastSeries:
        language = normalize_language(language)
        target = await self._guard(self._target(city, language), city, language)
        raw = await self._guard(self.provider.fetch_forecast(target, language), city, language)
        return normalize_forecast(raw, target if isinstance(target, Location) else None, language)

    async def get_current_by_coords(
        self, latitude: float, longitude: float, language: str = "en"
    ) -> WeatherSnapshot:
        """Current conditions for raw coordinates, skipping the geocoder."""
        language = normalize_language(language)
        location = Location(
            name=f"{latitude},{longitude}",
            country="",
            latitude=latitude,
            longitude=longitude,
        )
        raw = await self._guard(
            self.provider.fetch_current(location, language), location.name, language
        )
        return normalize_current(raw, location, language)

    # ------------------------------------------------------------------
    # Tool entry points (JSON-ready results for /execute)
    # ------------------------------------------------------------------

    async def weather_dashboard(
        self, location: str, language: str = "en", request_id: str | None = None
    ) -> dict:
        """Get current weather and the daily forecast for a location."""
        result = await self.get_weather_and_forecast(location, language, request_id)
        return result.model_dump(mode="json")

    async def weather_current(self, location: str, language: str = "en") -> dict:
        """Get current weather for a location."""
        return (await self.get_current(location, language)).model_dump(mode="json")

    async def weather_forecast(self, location: str, language: str = "en") -> dict:
        """Get the daily forecast for a location."""
        return (await self.get_forecast(location, language)).model_dump(mode="json")

    async def weather_current_by_coords(
        self, latitude: float, longitude: float, language: str = "en"
    ) -> dict:
        """Get current weather for a latitude/longitude pair."""
        snapshot = await self.get_current_by_coords(latitude, longitude, language)
        return snapshot.model_dump(mode="json")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _target(self, city: str, language: str) -> Location | str:
        """Geocoded Location for providers that need one, else the place name."""
        if self.provider.requires_location:
            return await self.geocoder.resolve(city, language)
        return city.strip()

    async def _guard(self, call: Awaitable[T], city: str, language: str) -> T:
        try:
            return await call
        except WeatherError as e:
            self._fail(e, city, language)

    def _fail(self, error: BaseException, city: str, language: str) -> NoReturn:
        if not isinstance(error, WeatherError):
            raise error
        logger.error(
            "weather_fetch_failed",
            provider=self.provider.name,
            city=city,
            language=language,
            error_type=type(error).__name__,
            error=str(error),
        )
        raise WeatherFetchFailed(failure_message(error, language), cause=error) from error

