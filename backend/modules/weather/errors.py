"""Error taxonomy for weather acquisition.

Adapters and the geocoder raise the typed errors below; ``WeatherTools``
catches them and re-raises a single :class:`WeatherFetchFailed` carrying a
user-safe message.
"""

from __future__ import annotations


class WeatherError(RuntimeError):
    """Base class for every weather acquisition failure."""


class NotFoundError(WeatherError):
    """The place name resolved to no geocoding result."""

    def __init__(self, place_name: str):
        super().__init__(f"Location not found: '{place_name}'")
        self.place_name = place_name


class MissingCredentialsError(WeatherError):
    """A key-based provider was used without an API key configured."""


class TransportError(WeatherError):
    """The network call itself failed (timeout, DNS, connection, non-2xx)."""


class UpstreamError(WeatherError):
    """The provider answered with an error status or a malformed body."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        provider_message: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        # Error text as sent by the provider itself, if it sent any.
        self.provider_message = provider_message


class WeatherFetchFailed(WeatherError):
    """Aggregated failure surfaced to callers of the orchestrator.

    ``message`` is safe to show to the user; ``cause`` keeps the original
    error for diagnostics.
    """

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    @property
    def not_found(self) -> bool:
        return isinstance(self.cause, NotFoundError)
