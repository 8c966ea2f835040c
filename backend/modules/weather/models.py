"""Pydantic models for the normalized weather schema and service requests."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Location(BaseModel):
    """A geocoded place."""

    model_config = ConfigDict(frozen=True)

    name: str
    country: str = ""
    latitude: float
    longitude: float
    id: int = 0
    admin1: str | None = None  # state/province


class NormalizedCondition(BaseModel):
    model_config = ConfigDict(frozen=True)

    icon_key: str
    main_category: str
    description: str


class ForecastEntry(BaseModel):
    """Conditions for one forecast period.

    Units: Celsius, hPa, percent, metres per second, degrees, metres.
    """

    model_config = ConfigDict(frozen=True)

    location: Location
    observed_at_unix: int
    temperature_c: float
    feels_like_c: float
    temperature_min_c: float
    temperature_max_c: float
    pressure: float = 0
    humidity: float = 0
    wind_speed: float = 0
    wind_direction_deg: float = 0
    visibility_m: float = 10000
    cloud_cover_pct: float = 0
    condition: NormalizedCondition


class WeatherSnapshot(ForecastEntry):
    """Current ("today") conditions for one location."""

    sunrise_unix: int
    sunset_unix: int


class ForecastSeries(BaseModel):
    model_config = ConfigDict(frozen=True)

    location: Location
    entries: tuple[ForecastEntry, ...] = ()


class DashboardWeather(BaseModel):
    """Combined current + forecast result for one dashboard request."""

    model_config = ConfigDict(frozen=True)

    snapshot: WeatherSnapshot
    forecast: ForecastSeries
    request_id: str | None = None


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class DashboardRequest(BaseModel):
    location: str = Field(min_length=1)
    language: str = "en"
    request_id: str | None = None


class CurrentWeatherRequest(BaseModel):
    location: str = Field(min_length=1)
    language: str = "en"


class ForecastRequest(BaseModel):
    location: str = Field(min_length=1)
    language: str = "en"


class CoordinatesRequest(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    language: str = "en"
