"""Reshape raw provider payloads into the normalized weather schema.

Everything here is a pure function of its arguments. The only clock access is
the documented fallback for observations that carry no timestamp at all, and
the clock is injectable through ``now``.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Callable, Iterable

from modules.weather.conditions import translate
from modules.weather.models import ForecastEntry, ForecastSeries, Location, WeatherSnapshot
from modules.weather.providers.base import RawCurrentPayload, RawForecastPayload, RawObservation

Clock = Callable[[], float]

MAX_FORECAST_ENTRIES = 14
REPRESENTATIVE_HOUR = 12

# Defaults for fields a provider does not report.
DEFAULT_TEMPERATURE = 0.0
DEFAULT_PRESSURE = 0
DEFAULT_HUMIDITY = 0
DEFAULT_WIND_SPEED = 0
DEFAULT_WIND_DIRECTION = 0
DEFAULT_VISIBILITY_M = 10000
DEFAULT_CLOUD_COVER = 0


# ---------------------------------------------------------------------------
# Time handling
# ---------------------------------------------------------------------------


def parse_time(text: str | None) -> datetime | None:
    """Parse an ISO date or date-time; naive values are taken as UTC.

    A bare date (``2026-02-15``) becomes midnight UTC of that date.
    """
    if not isinstance(text, str) or not text:
        return None
    text = text.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_unix(value: int | float | str | None, now: Clock = time.time) -> int:
    """Seconds since epoch for an epoch number or ISO text.

    Falls back to ``now()`` only when no usable value is given.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(value)
    if isinstance(value, str):
        parsed = parse_time(value)
        if parsed is not None:
            return int(parsed.timestamp())
    return int(now())


def _observed_at(obs: RawObservation, now: Clock) -> int:
    if obs.timestamp_unix is not None:
        return to_unix(obs.timestamp_unix, now)
    return to_unix(obs.time_text, now)


def _day_and_hour(obs: RawObservation, now: Clock) -> tuple[str, int | None]:
    """Provider-local calendar date string and hour of an observation."""
    parsed = parse_time(obs.time_text)
    if parsed is not None:
        has_time = len(obs.time_text.strip()) > 10
        return obs.time_text.strip()[:10], parsed.hour if has_time else None
    moment = datetime.fromtimestamp(_observed_at(obs, now), tz=timezone.utc)
    return moment.date().isoformat(), moment.hour


# ---------------------------------------------------------------------------
# Forecast grouping
# ---------------------------------------------------------------------------


def group_by_day(
    observations: Iterable[RawObservation],
    limit: int = MAX_FORECAST_ENTRIES,
    now: Clock = time.time,
) -> list[RawObservation]:
    """Collapse sub-daily observations to one per calendar date.

    The noon observation represents its day when there is one, otherwise the
    first observation seen for that date does. Days come back in ascending
    order, at most ``limit`` of them.
    """
    chosen: dict[str, tuple[RawObservation, int | None]] = {}
    for obs in observations:
        day, hour = _day_and_hour(obs, now)
        if day not in chosen:
            chosen[day] = (obs, hour)
        elif hour == REPRESENTATIVE_HOUR and chosen[day][1] != REPRESENTATIVE_HOUR:
            chosen[day] = (obs, hour)

    return [chosen[day][0] for day in sorted(chosen)][:limit]


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def _resolve_location(raw_location: Location | None, location: Location | None) -> Location:
    resolved = location or raw_location
    if resolved is None:
        raise ValueError("Cannot normalize a payload without a location")
    return resolved


def _or(value: float | None, default: float) -> float:
    return default if value is None else value


def _entry_fields(obs: RawObservation, location: Location, language: str, now: Clock) -> dict:
    temperature = obs.temperature
    if temperature is None:
        # Daily aggregates: the day's temperature is the mean of min and max.
        known = [t for t in (obs.temperature_min, obs.temperature_max) if t is not None]
        temperature = sum(known) / len(known) if known else DEFAULT_TEMPERATURE

    # Bounds default to the point temperature and always enclose it.
    t_min = temperature if obs.temperature_min is None else min(obs.temperature_min, temperature)
    t_max = temperature if obs.temperature_max is None else max(obs.temperature_max, temperature)

    return {
        "location": location,
        "observed_at_unix": _observed_at(obs, now),
        "temperature_c": temperature,
        "feels_like_c": _or(obs.feels_like, temperature),
        "temperature_min_c": t_min,
        "temperature_max_c": t_max,
        "pressure": _or(obs.pressure, DEFAULT_PRESSURE),
        "humidity": _or(obs.humidity, DEFAULT_HUMIDITY),
        "wind_speed": _or(obs.wind_speed, DEFAULT_WIND_SPEED),
        "wind_direction_deg": _or(obs.wind_direction, DEFAULT_WIND_DIRECTION),
        "visibility_m": _or(obs.visibility, DEFAULT_VISIBILITY_M),
        "cloud_cover_pct": _or(obs.cloud_cover, DEFAULT_CLOUD_COVER),
        "condition": translate(obs.condition_code, language),
    }


def normalize_current(
    raw: RawCurrentPayload,
    location: Location | None = None,
    language: str = "en",
    now: Clock = time.time,
) -> WeatherSnapshot:
    """Build a WeatherSnapshot from a raw current-conditions payload."""
    obs = raw.observation
    return WeatherSnapshot(
        **_entry_fields(obs, _resolve_location(raw.location, location), language, now),
        sunrise_unix=to_unix(obs.sunrise, now),
        sunset_unix=to_unix(obs.sunset, now),
    )


def normalize_forecast(
    raw: RawForecastPayload,
    location: Location | None = None,
    language: str = "en",
    now: Clock = time.time,
) -> ForecastSeries:
    """Build a ForecastSeries with one entry per day, oldest first."""
    resolved = _resolve_location(raw.location, location)
    entries = tuple(
        ForecastEntry(**_entry_fields(obs, resolved, language, now))
        for obs in group_by_day(raw.observations, now=now)
    )
    return ForecastSeries(location=resolved, entries=entries)


def normalize(
    raw: RawCurrentPayload | RawForecastPayload,
    location: Location | None = None,
    language: str = "en",
    now: Clock = time.time,
) -> WeatherSnapshot | ForecastSeries:
    """Normalize either kind of raw payload."""
    if isinstance(raw, RawCurrentPayload):
        return normalize_current(raw, location, language, now)
    if isinstance(raw, RawForecastPayload):
        return normalize_forecast(raw, location, language, now)
    raise TypeError(f"Unsupported payload type: {type(raw).__name__}")
