"""Geocoding — resolve place names to coordinates using Open-Meteo Geocoding API."""

from __future__ import annotations

import structlog

from modules.weather.conditions import normalize_language
from modules.weather.errors import NotFoundError, TransportError, UpstreamError
from modules.weather.models import Location
from modules.weather.transport import fetch_json

logger = structlog.get_logger()

GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"


class Geocoder:
    """Resolves free-text place names to a single ``Location``.

    Holds configuration only, so one instance can serve concurrent lookups.
    """

    def __init__(self, url: str = GEOCODING_URL, timeout: float = 10.0):
        self.url = url
        self.timeout = timeout

    async def resolve(self, place_name: str, language: str = "en") -> Location:
        """Return the top geocoding result for ``place_name``.

        Raises:
            NotFoundError: The lookup returned no results.
            TransportError: The request failed or returned a non-2xx status.
            UpstreamError: The response body could not be understood.
        """
        place_name = place_name.strip()
        if not place_name:
            raise NotFoundError(place_name)

        params = {
            "name": place_name,
            "count": 1,
            "language": normalize_language(language),
            "format": "json",
        }
        data = await fetch_json(
            self.url,
            params,
            source="geocoding",
            timeout=self.timeout,
            status_error=TransportError,
        )

        results = data.get("results")
        if not results:
            logger.info("geocoding_no_results", location=place_name)
            raise NotFoundError(place_name)

        item = results[0]
        try:
            return Location(
                name=item.get("name") or place_name,
                country=item.get("country") or "",
                latitude=item["latitude"],
                longitude=item["longitude"],
                id=item.get("id") or 0,
                admin1=item.get("admin1"),
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.error("geocoding_malformed_result", location=place_name, error=str(e))
            raise UpstreamError(f"Geocoding returned a malformed result for '{place_name}'") from e
