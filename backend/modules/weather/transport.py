"""HTTP helper shared by the geocoder and the provider adapters."""

from __future__ import annotations

import httpx
import structlog

from modules.weather.errors import TransportError, UpstreamError

logger = structlog.get_logger()


def _error_message(resp: httpx.Response) -> str | None:
    """Pull the provider's own error text out of an error body, if any."""
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        # OpenWeatherMap uses "message", Open-Meteo uses "reason"
        for key in ("message", "reason"):
            if body.get(key):
                return str(body[key])
    return None


async def fetch_json(
    url: str,
    params: dict,
    *,
    source: str,
    timeout: float = 15.0,
    status_error: type[Exception] = UpstreamError,
) -> dict:
    """GET ``url`` and return the decoded JSON object.

    Raises:
        TransportError: The request never completed (timeout, DNS, refused).
        UpstreamError: Non-2xx status or a body that is not a JSON object.
            Callers may swap this for ``TransportError`` via ``status_error``.
    """
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.get(url, params=params)
    except httpx.RequestError as e:
        logger.error(f"{source}_request_error", url=url, error=str(e))
        raise TransportError(f"Failed to connect to {source}: {e}") from e

    if resp.status_code >= 400:
        message = _error_message(resp)
        logger.error(
            f"{source}_http_error",
            status=resp.status_code,
            body=resp.text[:500],
        )
        if status_error is UpstreamError:
            raise UpstreamError(
                message or f"{source} API error: {resp.status_code}",
                status_code=resp.status_code,
                provider_message=message,
            )
        raise status_error(message or f"{source} API error: {resp.status_code}")

    try:
        data = resp.json()
    except ValueError as e:
        logger.error(f"{source}_invalid_json", body=resp.text[:500])
        raise UpstreamError(f"{source} returned invalid JSON", status_code=resp.status_code) from e

    if not isinstance(data, dict):
        raise UpstreamError(f"{source} returned an unexpected payload", status_code=resp.status_code)
    return data
