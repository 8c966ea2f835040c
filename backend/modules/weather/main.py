"""Weather module — FastAPI service."""

from __future__ import annotations

import structlog
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from modules.weather.errors import WeatherFetchFailed
from modules.weather.geocoding import Geocoder
from modules.weather.manifest import MANIFEST
from modules.weather.models import (
    CoordinatesRequest,
    CurrentWeatherRequest,
    DashboardRequest,
    DashboardWeather,
    ForecastRequest,
)
from modules.weather.providers import OpenMeteoProvider, OpenWeatherProvider, WeatherProvider
from modules.weather.tools import WeatherTools
from shared.auth import require_service_auth
from shared.config import Settings, get_settings, parse_list
from shared.schemas.common import HealthResponse
from shared.schemas.tools import ModuleManifest, ToolCall, ToolResult

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(),
    ],
)

logger = structlog.get_logger()
app = FastAPI(title="Weather Module", version="1.0.0")

settings = get_settings()

app.add_middleware(
    CORSMiddleware,
    allow_origins=parse_list(settings.cors_origins) or ["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# Tool name -> (request model, WeatherTools method)
TOOL_MAP = {
    "weather_dashboard": (DashboardRequest, "weather_dashboard"),
    "weather_current": (CurrentWeatherRequest, "weather_current"),
    "weather_forecast": (ForecastRequest, "weather_forecast"),
    "weather_current_by_coords": (CoordinatesRequest, "weather_current_by_coords"),
}

tools: WeatherTools | None = None


def build_provider(settings: Settings, geocoder: Geocoder) -> WeatherProvider:
    """Create the configured provider."""
    if settings.weather_provider == "openweather":
        return OpenWeatherProvider(
            api_key=settings.openweather_api_key,
            base_url=settings.openweather_base_url,
            timeout=settings.weather_http_timeout,
        )
    if settings.weather_provider == "open_meteo":
        return OpenMeteoProvider(
            geocoder=geocoder,
            url=settings.open_meteo_forecast_url,
            timeout=settings.weather_http_timeout,
            forecast_days=settings.weather_forecast_days,
        )
    raise ValueError(f"Unknown weather provider: {settings.weather_provider}")


def build_tools(settings: Settings) -> WeatherTools:
    geocoder = Geocoder(url=settings.open_meteo_geocoding_url, timeout=settings.geocoding_timeout)
    return WeatherTools(build_provider(settings, geocoder), geocoder)


@app.on_event("startup")
async def startup():
    global tools
    tools = build_tools(settings)
    if tools.provider.name == "openweather" and not settings.openweather_api_key:
        logger.warning("weather_provider_missing_api_key", provider=tools.provider.name)
    logger.info("weather_module_ready", provider=tools.provider.name)


@app.get("/manifest", response_model=ModuleManifest)
async def manifest(_=Depends(require_service_auth)):
    """Return the module manifest."""
    return MANIFEST


@app.post("/execute", response_model=ToolResult)
async def execute(call: ToolCall, _=Depends(require_service_auth)):
    """Execute a tool call."""
    if tools is None:
        return ToolResult(tool_name=call.tool_name, success=False, error="Module not ready")

    tool_name = call.tool_name.split(".")[-1]
    if tool_name not in TOOL_MAP:
        return ToolResult(
            tool_name=call.tool_name,
            success=False,
            error=f"Unknown tool: {call.tool_name}",
        )

    request_model, method_name = TOOL_MAP[tool_name]
    try:
        args = request_model(**call.arguments).model_dump()
    except ValidationError as e:
        return ToolResult(tool_name=call.tool_name, success=False, error=f"Invalid arguments: {e}")

    try:
        result = await getattr(tools, method_name)(**args)
    except WeatherFetchFailed as e:
        return ToolResult(tool_name=call.tool_name, success=False, error=e.message)
    except Exception as e:
        logger.error("tool_execution_error", tool=call.tool_name, error=str(e), exc_info=True)
        return ToolResult(tool_name=call.tool_name, success=False, error=str(e))

    return ToolResult(tool_name=call.tool_name, success=True, result=result)


@app.get("/weather", response_model=DashboardWeather)
async def weather(
    city: str = Query(min_length=1),
    language: str = Query(default=settings.default_language),
    request_id: str | None = None,
):
    """Current conditions and forecast for the dashboard, or one error."""
    if tools is None:
        raise HTTPException(status_code=503, detail="Module not ready")
    try:
        return await tools.get_weather_and_forecast(city, language, request_id)
    except WeatherFetchFailed as e:
        raise HTTPException(status_code=404 if e.not_found else 502, detail=e.message)


@app.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse(status="ok", provider=tools.provider.name if tools else None)
