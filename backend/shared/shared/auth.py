"""Inter-service authentication for the weather backend.

Callers of the tool endpoints (``/manifest``, ``/execute``) present the shared
``SERVICE_AUTH_TOKEN`` as ``Authorization: Bearer <token>``. The
browser-facing ``/weather`` and ``/health`` routes stay open.
"""

from __future__ import annotations

import hmac

import structlog
from fastapi import HTTPException, Request

from shared.config import get_settings

logger = structlog.get_logger()

_BEARER = "Bearer "


async def require_service_auth(request: Request) -> None:
    """FastAPI dependency that validates the inter-service auth token.

    Raises 401 if the token is missing or incorrect. Skips validation when
    ``service_auth_token`` is empty (dev mode).
    """
    expected = get_settings().service_auth_token
    if not expected:
        logger.warning("service_auth_disabled", path=request.url.path)
        return

    auth_header = request.headers.get("authorization", "")
    if not auth_header.startswith(_BEARER):
        raise HTTPException(status_code=401, detail="Missing service auth token")

    if not hmac.compare_digest(auth_header[len(_BEARER):], expected):
        logger.warning(
            "service_auth_failed",
            path=request.url.path,
            remote=request.client.host if request.client else "unknown",
        )
        raise HTTPException(status_code=401, detail="Invalid service auth token")
