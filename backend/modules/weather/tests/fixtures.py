"""Test fixtures and mock data for weather module tests."""

from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch


def unix(text: str) -> int:
    """Epoch seconds for a naive ISO date/date-time read as UTC."""
    return int(datetime.fromisoformat(text).replace(tzinfo=timezone.utc).timestamp())


# ---------------------------------------------------------------------------
# Open-Meteo geocoding
# ---------------------------------------------------------------------------

GEOCODING_RESPONSE = {
    "results": [
        {
            "id": 1850147,
            "name": "Tokyo",
            "latitude": 35.68,
            "longitude": 139.76,
            "country": "Japan",
            "admin1": "Tokyo",
        }
    ]
}

GEOCODING_RESPONSE_EMPTY = {"generationtime_ms": 0.4}

# ---------------------------------------------------------------------------
# Open-Meteo forecast
# ---------------------------------------------------------------------------

_DAYS = [(datetime(2026, 2, 15) + timedelta(days=i)).date().isoformat() for i in range(14)]

OPEN_METEO_CURRENT_RESPONSE = {
    "latitude": 35.68,
    "longitude": 139.76,
    "timezone": "UTC",
    "current_weather": {
        "time": "2026-02-15T12:00",
        "temperature": 18.0,
        "windspeed": 18.0,
        "winddirection": 90,
        "weathercode": 1,
    },
    "daily": {
        "time": _DAYS[:2],
        "temperature_2m_max": [21.0, 19.5],
        "temperature_2m_min": [12.0, 11.0],
        "weathercode": [1, 3],
        "sunrise": ["2026-02-15T06:20", "2026-02-16T06:19"],
        "sunset": ["2026-02-15T17:25", "2026-02-16T17:26"],
    },
    "hourly": {
        "time": ["2026-02-15T11:00", "2026-02-15T12:00", "2026-02-15T13:00"],
        "apparent_temperature": [16.0, 16.5, 17.0],
        "temperature_2m": [17.5, 18.0, 18.4],
        "weathercode": [1, 1, 1],
    },
}

OPEN_METEO_FORECAST_RESPONSE = {
    "latitude": 35.68,
    "longitude": 139.76,
    "timezone": "UTC",
    "daily": {
        "time": _DAYS,
        "temperature_2m_max": [30.0] + [20.0 + i for i in range(13)],
        "temperature_2m_min": [20.0] + [10.0 + i for i in range(13)],
        "weathercode": [1, 3, 61, 0, 2, 45, 95, 71, 80, 1, 2, 3, 63, 0],
        "sunrise": [f"{d}T06:20" for d in _DAYS],
        "sunset": [f"{d}T17:25" for d in _DAYS],
    },
}

# ---------------------------------------------------------------------------
# OpenWeatherMap
# ---------------------------------------------------------------------------

OPENWEATHER_CURRENT_RESPONSE = {
    "coord": {"lon": -0.1257, "lat": 51.5085},
    "weather": [{"id": 803, "main": "Clouds", "description": "broken clouds", "icon": "04d"}],
    "base": "stations",
    "main": {
        "temp": 8.5,
        "feels_like": 5.9,
        "temp_min": 7.2,
        "temp_max": 9.8,
        "pressure": 1012,
        "humidity": 81,
    },
    "visibility": 9000,
    "wind": {"speed": 4.1, "deg": 240},
    "clouds": {"all": 75},
    "dt": 1771156800,
    "sys": {"country": "GB", "sunrise": 1771140000, "sunset": 1771176000},
    "timezone": 0,
    "id": 2643743,
    "name": "London",
    "cod": 200,
}


def _owm_item(dt_txt: str, temp: float, code: int = 500) -> dict:
    return {
        "dt": unix(dt_txt),
        "main": {
            "temp": temp,
            "feels_like": temp - 2,
            "temp_min": temp - 1,
            "temp_max": temp + 1,
            "pressure": 1010,
            "humidity": 70,
        },
        "weather": [{"id": code, "main": "Rain", "description": "light rain", "icon": "10d"}],
        "clouds": {"all": 90},
        "wind": {"speed": 5.0, "deg": 200},
        "visibility": 10000,
        "pop": 0.4,
        "dt_txt": dt_txt,
    }


OPENWEATHER_FORECAST_RESPONSE = {
    "cod": "200",
    "list": [
        _owm_item("2026-02-15 06:00:00", 6.0),
        _owm_item("2026-02-15 12:00:00", 10.0, 800),
        _owm_item("2026-02-15 18:00:00", 8.0),
        _owm_item("2026-02-16 06:00:00", 5.0, 801),
        _owm_item("2026-02-16 18:00:00", 7.0),
    ],
    "city": {
        "id": 2643743,
        "name": "London",
        "coord": {"lat": 51.5085, "lon": -0.1257},
        "country": "GB",
        "timezone": 0,
        "sunrise": 1771140000,
        "sunset": 1771176000,
    },
}

OPENWEATHER_NOT_FOUND = {"cod": "404", "message": "city not found"}


# ---------------------------------------------------------------------------
# HTTP mocking
# ---------------------------------------------------------------------------


def mock_response(json_data: object = None, status_code: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = json_data
    resp.text = json.dumps(json_data)
    return resp


@contextmanager
def patched_http(*responses, side_effect=None):
    """Patch ``httpx.AsyncClient`` as used by the transport helper.

    Responses are returned in call order unless ``side_effect`` is given.
    Yields the mock client so tests can inspect ``get`` calls.
    """
    with patch("modules.weather.transport.httpx.AsyncClient") as mock_client_cls:
        mock_client = AsyncMock()
        mock_client.get.side_effect = side_effect if side_effect is not None else list(responses)
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=False)
        mock_client_cls.return_value = mock_client
        yield mock_client
