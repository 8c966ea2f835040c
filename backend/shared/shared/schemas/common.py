"""Common schemas used across services."""

from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response naming the active weather provider."""

    status: str = "ok"
    provider: str | None = None
