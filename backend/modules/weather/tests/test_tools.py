"""Tests for WeatherTools — verifies orchestration, atomicity and error surfacing."""

from __future__ import annotations

import asyncio
import copy
from unittest.mock import AsyncMock

import pytest

from modules.weather.conditions import WMO, ConditionCode
from modules.weather.errors import (
    MissingCredentialsError,
    NotFoundError,
    TransportError,
    UpstreamError,
    WeatherFetchFailed,
)
from modules.weather.geocoding import GEOCODING_URL, Geocoder
from modules.weather.models import Location
from modules.weather.providers import OpenMeteoProvider, OpenWeatherProvider
from modules.weather.providers.base import (
    RawCurrentPayload,
    RawForecastPayload,
    RawObservation,
    WeatherProvider,
)
from modules.weather.tests.fixtures import (
    GEOCODING_RESPONSE,
    OPEN_METEO_CURRENT_RESPONSE,
    OPEN_METEO_FORECAST_RESPONSE,
    OPENWEATHER_CURRENT_RESPONSE,
    mock_response,
    patched_http,
    unix,
)
from modules.weather.tools import WeatherTools, failure_message

TOKYO = Location(name="Tokyo", country="Japan", latitude=35.68, longitude=139.76, id=1850147)
LONDON = Location(name="London", country="GB", latitude=51.5085, longitude=-0.1257, id=2643743)

CURRENT = RawCurrentPayload(
    observation=RawObservation(
        time_text="2026-02-15T12:00",
        temperature=18.0,
        condition_code=ConditionCode(WMO, 1),
    ),
)
FORECAST = RawForecastPayload(
    observations=(
        RawObservation(time_text="2026-02-15", temperature_min=20.0, temperature_max=30.0),
        RawObservation(time_text="2026-02-16", temperature_min=10.0, temperature_max=20.0),
    ),
)


class FakeProvider(WeatherProvider):
    """Provider returning canned payloads, or raising configured errors."""

    name = "fake"

    def __init__(self, requires_location=True, current_error=None, forecast_error=None, delay=0.0):
        self.requires_location = requires_location
        # Name-based providers report the location themselves.
        self.reported_location = None if requires_location else LONDON
        self.current_error = current_error
        self.forecast_error = forecast_error
        self.delay = delay
        self.targets = []
        self.current_completed = False

    async def fetch_current(self, target, language="en"):
        self.targets.append(target)
        await asyncio.sleep(self.delay)
        if self.current_error:
            raise self.current_error
        self.current_completed = True
        return RawCurrentPayload(observation=CURRENT.observation, location=self.reported_location)

    async def fetch_forecast(self, target, language="en"):
        self.targets.append(target)
        if self.forecast_error:
            raise self.forecast_error
        return RawForecastPayload(observations=FORECAST.observations, location=self.reported_location)


@pytest.fixture
def geocoder():
    geo = AsyncMock(spec=Geocoder)
    geo.resolve.return_value = TOKYO
    return geo


# ---------------------------------------------------------------------------
# get_weather_and_forecast
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_dashboard_success(geocoder):
    provider = FakeProvider()
    tools = WeatherTools(provider, geocoder)

    result = await tools.get_weather_and_forecast("Tokyo", "en", request_id="7")

    assert result.request_id == "7"
    assert result.snapshot.location == TOKYO
    assert result.snapshot.temperature_c == 18.0
    assert result.snapshot.condition.main_category == "Mainly clear"
    assert [e.temperature_c for e in result.forecast.entries] == [25.0, 15.0]
    assert result.forecast.location == TOKYO


@pytest.mark.asyncio
async def test_dashboard_geocodes_once(geocoder):
    provider = FakeProvider()
    tools = WeatherTools(provider, geocoder)

    await tools.get_weather_and_forecast("Tokyo", "fa")

    geocoder.resolve.assert_awaited_once_with("Tokyo", "fa")
    assert provider.targets == [TOKYO, TOKYO]


@pytest.mark.asyncio
async def test_dashboard_skips_geocoder_for_name_based_provider(geocoder):
    provider = FakeProvider(requires_location=False)
    tools = WeatherTools(provider, geocoder)

    result = await tools.get_weather_and_forecast(" London ")

    geocoder.resolve.assert_not_called()
    assert provider.targets == ["London", "London"]
    assert result.snapshot.location == LONDON
    assert result.forecast.location == LONDON


@pytest.mark.asyncio
async def test_dashboard_fails_when_forecast_fails(geocoder):
    error = UpstreamError("Open-Meteo API error: 500", status_code=500)
    provider = FakeProvider(forecast_error=error)
    tools = WeatherTools(provider, geocoder)

    with pytest.raises(WeatherFetchFailed) as exc_info:
        await tools.get_weather_and_forecast("Tokyo")

    assert exc_info.value.cause is error
    assert exc_info.value.message == "Failed to load weather data. Please try again."
    # The current fetch still ran to completion; its result is discarded.
    assert provider.current_completed is True


@pytest.mark.asyncio
async def test_dashboard_failure_does_not_cancel_sibling(geocoder):
    provider = FakeProvider(forecast_error=TransportError("timeout"), delay=0.05)
    tools = WeatherTools(provider, geocoder)

    with pytest.raises(WeatherFetchFailed):
        await tools.get_weather_and_forecast("Tokyo")

    assert provider.current_completed is True


@pytest.mark.asyncio
async def test_dashboard_fails_when_current_fails(geocoder):
    provider = FakeProvider(current_error=MissingCredentialsError("no key"))
    tools = WeatherTools(provider, geocoder)

    with pytest.raises(WeatherFetchFailed) as exc_info:
        await tools.get_weather_and_forecast("Tokyo")

    assert isinstance(exc_info.value.cause, MissingCredentialsError)


@pytest.mark.asyncio
async def test_dashboard_fetches_run_concurrently(geocoder):
    forecast_started = asyncio.Event()

    class Waiting(FakeProvider):
        async def fetch_current(self, target, language="en"):
            # Deadlocks unless the forecast fetch is already in flight.
            await asyncio.wait_for(forecast_started.wait(), timeout=1.0)
            return CURRENT

        async def fetch_forecast(self, target, language="en"):
            forecast_started.set()
            return FORECAST

    tools = WeatherTools(Waiting(), geocoder)
    result = await tools.get_weather_and_forecast("Tokyo")
    assert len(result.forecast.entries) == 2


@pytest.mark.asyncio
async def test_dashboard_city_not_found(geocoder):
    geocoder.resolve.side_effect = NotFoundError("Nonexistentville")
    provider = FakeProvider()
    tools = WeatherTools(provider, geocoder)

    with pytest.raises(WeatherFetchFailed) as exc_info:
        await tools.get_weather_and_forecast("Nonexistentville", "fa")

    assert exc_info.value.not_found is True
    assert exc_info.value.message == "شهر یافت نشد. لطفا دوباره جستجو کنید."
    assert provider.targets == []


@pytest.mark.asyncio
async def test_dashboard_surfaces_provider_message(geocoder):
    error = UpstreamError("openweather API error", status_code=404, provider_message="city not found")
    tools = WeatherTools(FakeProvider(requires_location=False, current_error=error), geocoder)

    with pytest.raises(WeatherFetchFailed) as exc_info:
        await tools.get_weather_and_forecast("Atlantis")

    assert exc_info.value.message == "city not found"


@pytest.mark.asyncio
async def test_dashboard_reports_most_specific_failure(geocoder):
    provider = FakeProvider(
        requires_location=False,
        current_error=TransportError("dns"),
        forecast_error=UpstreamError("openweather API error", 404, provider_message="city not found"),
    )
    tools = WeatherTools(provider, geocoder)

    with pytest.raises(WeatherFetchFailed) as exc_info:
        await tools.get_weather_and_forecast("Atlantis")

    assert exc_info.value.message == "city not found"
    assert exc_info.value.cause is provider.forecast_error


@pytest.mark.asyncio
async def test_dashboard_both_generic_failures_report_current(geocoder):
    provider = FakeProvider(current_error=TransportError("dns"), forecast_error=TransportError("timeout"))
    tools = WeatherTools(provider, geocoder)

    with pytest.raises(WeatherFetchFailed) as exc_info:
        await tools.get_weather_and_forecast("Tokyo", "fa")

    assert exc_info.value.cause is provider.current_error
    assert exc_info.value.message == "خطا در بارگذاری اطلاعات. لطفا دوباره تلاش کنید."


@pytest.mark.asyncio
async def test_dashboard_malformed_body_is_user_safe_failure(geocoder):
    body = copy.deepcopy(OPENWEATHER_CURRENT_RESPONSE)
    body["coord"] = {"lat": None, "lon": None}
    tools = WeatherTools(OpenWeatherProvider(api_key="secret"), geocoder)

    with patched_http(side_effect=lambda url, params: mock_response(body)):
        with pytest.raises(WeatherFetchFailed) as exc_info:
            await tools.get_weather_and_forecast("London")

    assert isinstance(exc_info.value.cause, UpstreamError)
    assert exc_info.value.message == "Failed to load weather data. Please try again."


@pytest.mark.asyncio
async def test_dashboard_does_not_hide_programming_errors(geocoder):
    tools = WeatherTools(FakeProvider(forecast_error=KeyError("oops")), geocoder)

    with pytest.raises(KeyError):
        await tools.get_weather_and_forecast("Tokyo")


@pytest.mark.asyncio
async def test_dashboard_end_to_end_open_meteo():
    async def _route(url, params):
        if url == GEOCODING_URL:
            return mock_response(GEOCODING_RESPONSE)
        if "current_weather" in params:
            return mock_response(OPEN_METEO_CURRENT_RESPONSE)
        return mock_response(OPEN_METEO_FORECAST_RESPONSE)

    geocoder = Geocoder()
    tools = WeatherTools(OpenMeteoProvider(geocoder=geocoder), geocoder)

    with patched_http(side_effect=_route) as client:
        result = await tools.get_weather_and_forecast("Tokyo", "en")

    geocode_calls = [c for c in client.get.call_args_list if c.args[0] == GEOCODING_URL]
    assert len(geocode_calls) == 1
    assert client.get.call_count == 3

    snapshot = result.snapshot
    assert snapshot.location.latitude == 35.68
    assert snapshot.location.longitude == 139.76
    assert snapshot.temperature_c == 18
    assert snapshot.condition.main_category == "Mainly clear"
    assert snapshot.feels_like_c == 16.5
    assert snapshot.temperature_min_c == 12.0
    assert snapshot.temperature_max_c == 21.0
    assert snapshot.pressure == 0
    assert snapshot.humidity == 0
    assert snapshot.visibility_m == 10000
    assert snapshot.observed_at_unix == unix("2026-02-15T12:00")
    assert snapshot.sunrise_unix == unix("2026-02-15T06:20")

    entries = result.forecast.entries
    assert len(entries) == 14
    assert entries[0].temperature_c == 25.0
    assert [e.observed_at_unix for e in entries] == sorted(e.observed_at_unix for e in entries)


# ---------------------------------------------------------------------------
# Single-part operations
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_get_current(geocoder):
    tools = WeatherTools(FakeProvider(), geocoder)
    snapshot = await tools.get_current("Tokyo", "fa")
    assert snapshot.location == TOKYO
    assert snapshot.condition.description == "نیمه‌آسمان صاف"


@pytest.mark.asyncio
async def test_get_forecast_failure(geocoder):
    tools = WeatherTools(FakeProvider(forecast_error=TransportError("dns")), geocoder)
    with pytest.raises(WeatherFetchFailed):
        await tools.get_forecast("Tokyo")


@pytest.mark.asyncio
async def test_get_current_by_coords(geocoder):
    provider = FakeProvider()
    tools = WeatherTools(provider, geocoder)

    snapshot = await tools.get_current_by_coords(35.68, 139.76)

    geocoder.resolve.assert_not_called()
    assert snapshot.location.name == "35.68,139.76"
    assert snapshot.location.country == ""
    assert provider.targets[0].latitude == 35.68


@pytest.mark.asyncio
async def test_weather_dashboard_tool_returns_json(geocoder):
    tools = WeatherTools(FakeProvider(), geocoder)

    result = await tools.weather_dashboard("Tokyo", "en", "abc")

    assert result["request_id"] == "abc"
    assert result["snapshot"]["condition"]["icon_key"] == "02d"
    assert len(result["forecast"]["entries"]) == 2


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def test_failure_message():
    assert failure_message(NotFoundError("x")) == "City not found. Please try another search."
    assert failure_message(TransportError("x"), "fa") == "خطا در بارگذاری اطلاعات. لطفا دوباره تلاش کنید."
    assert failure_message(UpstreamError("x", 500)) == "Failed to load weather data. Please try again."
    assert failure_message(UpstreamError("x", 401, provider_message="Invalid API key")) == "Invalid API key"
