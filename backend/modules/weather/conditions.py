"""Weather condition code translation.

Both providers report conditions as numeric codes from different
vocabularies: Open-Meteo uses WMO weather interpretation codes, OpenWeatherMap
uses its own condition ids. Each code is tagged with its scheme so the two
never collide, and every code maps to one provider-independent
``NormalizedCondition``.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, NamedTuple

from modules.weather.models import NormalizedCondition

WMO = "wmo"
OWM = "owm"

BASE_LANGUAGE = "en"
SUPPORTED_LANGUAGES = ("en", "fa")

ICON_URL_TEMPLATE = "https://openweathermap.org/img/wn/{icon_key}@{size}.png"


class ConditionCode(NamedTuple):
    """A provider condition code tagged with the vocabulary it belongs to."""

    scheme: str
    value: int


class _Entry(NamedTuple):
    icon_key: str
    main_category: str
    description: str


# WMO weather interpretation codes (Open-Meteo)
_WMO_TABLE: dict[int, _Entry] = {
    0: _Entry("01d", "Clear", "Clear sky"),
    1: _Entry("02d", "Mainly clear", "Mainly clear"),
    2: _Entry("03d", "Partly cloudy", "Partly cloudy"),
    3: _Entry("04d", "Overcast", "Overcast"),
    45: _Entry("50d", "Fog", "Fog"),
    48: _Entry("50d", "Depositing rime fog", "Depositing rime fog"),
    51: _Entry("09d", "Drizzle", "Light drizzle"),
    53: _Entry("09d", "Drizzle", "Moderate drizzle"),
    55: _Entry("09d", "Drizzle", "Dense drizzle"),
    56: _Entry("13d", "Freezing Drizzle", "Freezing drizzle"),
    57: _Entry("13d", "Freezing Drizzle", "Dense freezing drizzle"),
    61: _Entry("10d", "Rain", "Slight rain"),
    63: _Entry("10d", "Rain", "Moderate rain"),
    65: _Entry("10d", "Rain", "Heavy rain"),
    66: _Entry("13d", "Freezing Rain", "Light freezing rain"),
    67: _Entry("13d", "Freezing Rain", "Heavy freezing rain"),
    71: _Entry("13d", "Snow", "Slight snow fall"),
    73: _Entry("13d", "Snow", "Moderate snow fall"),
    75: _Entry("13d", "Snow", "Heavy snow fall"),
    77: _Entry("13d", "Snow grains", "Snow grains"),
    80: _Entry("09d", "Rain showers", "Slight rain showers"),
    81: _Entry("09d", "Rain showers", "Moderate rain showers"),
    82: _Entry("09d", "Rain showers", "Violent rain showers"),
    85: _Entry("13d", "Snow showers", "Slight snow showers"),
    86: _Entry("13d", "Snow showers", "Heavy snow showers"),
    95: _Entry("11d", "Thunderstorm", "Thunderstorm"),
    96: _Entry("11d", "Thunderstorm with hail", "Thunderstorm with slight hail"),
    99: _Entry("11d", "Thunderstorm with hail", "Thunderstorm with heavy hail"),
}

# OpenWeatherMap condition ids
_OWM_TABLE: dict[int, _Entry] = {
    200: _Entry("11d", "Thunderstorm", "Thunderstorm with light rain"),
    201: _Entry("11d", "Thunderstorm", "Thunderstorm with rain"),
    202: _Entry("11d", "Thunderstorm", "Thunderstorm with heavy rain"),
    210: _Entry("11d", "Thunderstorm", "Light thunderstorm"),
    211: _Entry("11d", "Thunderstorm", "Thunderstorm"),
    212: _Entry("11d", "Thunderstorm", "Heavy thunderstorm"),
    221: _Entry("11d", "Thunderstorm", "Ragged thunderstorm"),
    230: _Entry("11d", "Thunderstorm", "Thunderstorm with light drizzle"),
    231: _Entry("11d", "Thunderstorm", "Thunderstorm with drizzle"),
    232: _Entry("11d", "Thunderstorm", "Thunderstorm with heavy drizzle"),
    300: _Entry("09d", "Drizzle", "Light intensity drizzle"),
    301: _Entry("09d", "Drizzle", "Drizzle"),
    302: _Entry("09d", "Drizzle", "Heavy intensity drizzle"),
    310: _Entry("09d", "Drizzle", "Light intensity drizzle rain"),
    311: _Entry("09d", "Drizzle", "Drizzle rain"),
    312: _Entry("09d", "Drizzle", "Heavy intensity drizzle rain"),
    313: _Entry("09d", "Drizzle", "Shower rain and drizzle"),
    314: _Entry("09d", "Drizzle", "Heavy shower rain and drizzle"),
    321: _Entry("09d", "Drizzle", "Shower drizzle"),
    500: _Entry("10d", "Rain", "Light rain"),
    501: _Entry("10d", "Rain", "Moderate rain"),
    502: _Entry("10d", "Rain", "Heavy intensity rain"),
    503: _Entry("10d", "Rain", "Very heavy rain"),
    504: _Entry("10d", "Rain", "Extreme rain"),
    511: _Entry("13d", "Rain", "Freezing rain"),
    520: _Entry("09d", "Rain", "Light intensity shower rain"),
    521: _Entry("09d", "Rain", "Shower rain"),
    522: _Entry("09d", "Rain", "Heavy intensity shower rain"),
    531: _Entry("09d", "Rain", "Ragged shower rain"),
    600: _Entry("13d", "Snow", "Light snow"),
    601: _Entry("13d", "Snow", "Snow"),
    602: _Entry("13d", "Snow", "Heavy snow"),
    611: _Entry("13d", "Snow", "Sleet"),
    612: _Entry("13d", "Snow", "Light shower sleet"),
    613: _Entry("13d", "Snow", "Shower sleet"),
    615: _Entry("13d", "Snow", "Light rain and snow"),
    616: _Entry("13d", "Snow", "Rain and snow"),
    620: _Entry("13d", "Snow", "Light shower snow"),
    621: _Entry("13d", "Snow", "Shower snow"),
    622: _Entry("13d", "Snow", "Heavy shower snow"),
    701: _Entry("50d", "Mist", "Mist"),
    711: _Entry("50d", "Smoke", "Smoke"),
    721: _Entry("50d", "Haze", "Haze"),
    731: _Entry("50d", "Dust", "Sand/dust whirls"),
    741: _Entry("50d", "Fog", "Fog"),
    751: _Entry("50d", "Sand", "Sand"),
    761: _Entry("50d", "Dust", "Dust"),
    762: _Entry("50d", "Ash", "Volcanic ash"),
    771: _Entry("50d", "Squall", "Squalls"),
    781: _Entry("50d", "Tornado", "Tornado"),
    800: _Entry("01d", "Clear", "Clear sky"),
    801: _Entry("02d", "Clouds", "Few clouds"),
    802: _Entry("03d", "Clouds", "Scattered clouds"),
    803: _Entry("04d", "Clouds", "Broken clouds"),
    804: _Entry("04d", "Clouds", "Overcast clouds"),
}

_WMO_FA: dict[int, str] = {
    0: "آسمان صاف",
    1: "نیمه‌آسمان صاف",
    2: "کمی ابری",
    3: "پوشیده از ابر",
    45: "مه",
    48: "مه همراه با یخ",
    51: "نم نم باران",
    53: "باران نم نم",
    55: "باران شدید",
    56: "نم نم یخبندان",
    57: "یخبندان شدید",
    61: "باران خفیف",
    63: "باران متوسط",
    65: "باران سنگین",
    66: "باران یخی خفیف",
    67: "باران یخی سنگین",
    71: "برف خفیف",
    73: "برف متوسط",
    75: "برف سنگین",
    77: "ذرات برف",
    80: "رگبار خفیف",
    81: "رگبار متوسط",
    82: "رگبار شدید",
    85: "بارش برف خفیف",
    86: "بارش برف سنگین",
    95: "طوفان همراه با رعد و برق",
    96: "طوفان با تگرگ خفیف",
    99: "طوفان با تگرگ شدید",
}

# Partial: ids missing here fall back to the English description.
_OWM_FA: dict[int, str] = {
    211: "طوفان همراه با رعد و برق",
    300: "نم نم باران",
    500: "باران خفیف",
    501: "باران متوسط",
    502: "باران شدید",
    600: "برف خفیف",
    601: "برف",
    602: "برف سنگین",
    701: "مه رقیق",
    741: "مه",
    800: "آسمان صاف",
    801: "کمی ابری",
    802: "ابرهای پراکنده",
    803: "نیمه ابری",
    804: "پوشیده از ابر",
}

UNKNOWN_CONDITION = _Entry("03d", "Unknown", "Unknown")
_UNKNOWN_LOCALIZED: dict[str, str] = {"fa": "نامشخص"}


def _build_tables() -> tuple[
    Mapping[ConditionCode, _Entry], Mapping[tuple[ConditionCode, str], str]
]:
    conditions: dict[ConditionCode, _Entry] = {}
    localized: dict[tuple[ConditionCode, str], str] = {}
    for scheme, table, fa_table in ((WMO, _WMO_TABLE, _WMO_FA), (OWM, _OWM_TABLE, _OWM_FA)):
        for value, entry in table.items():
            conditions[ConditionCode(scheme, value)] = entry
        for value, text in fa_table.items():
            localized[(ConditionCode(scheme, value), "fa")] = text
    return MappingProxyType(conditions), MappingProxyType(localized)


CONDITIONS, LOCALIZED_DESCRIPTIONS = _build_tables()


def normalize_language(language: str | None) -> str:
    """Reduce a language tag like ``fa-IR`` to a supported base language."""
    if not language:
        return BASE_LANGUAGE
    base = language.replace("_", "-").split("-")[0].lower()
    return base if base in SUPPORTED_LANGUAGES else BASE_LANGUAGE


def translate(code: ConditionCode | None, language: str = BASE_LANGUAGE) -> NormalizedCondition:
    """Translate a provider condition code into a normalized condition.

    Never raises: unknown codes map to the "Unknown" condition and missing
    translations fall back to English.
    """
    language = normalize_language(language)
    entry = CONDITIONS.get(code) if code is not None else None

    if entry is None:
        description = _UNKNOWN_LOCALIZED.get(language, UNKNOWN_CONDITION.description)
        return NormalizedCondition(
            icon_key=UNKNOWN_CONDITION.icon_key,
            main_category=UNKNOWN_CONDITION.main_category,
            description=description,
        )

    description = entry.description
    if language != BASE_LANGUAGE:
        description = LOCALIZED_DESCRIPTIONS.get((code, language), entry.description)

    return NormalizedCondition(
        icon_key=entry.icon_key,
        main_category=entry.main_category,
        description=description,
    )


def resolve_icon_url(icon_key: str, size: str = "4x") -> str:
    """Build the icon image URL for an icon key."""
    return ICON_URL_TEMPLATE.format(icon_key=icon_key, size=size)
