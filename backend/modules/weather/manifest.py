"""Weather module manifest — tool definitions."""

from shared.schemas.tools import ModuleManifest, ToolDefinition, ToolParameter

_LANGUAGE = ToolParameter(
    name="language",
    type="string",
    description="Language for condition descriptions: 'en' or 'fa'. Default: en",
    required=False,
    enum=["en", "fa"],
)

_LOCATION = ToolParameter(
    name="location",
    type="string",
    description="City name or place (e.g. 'Tokyo', 'Tehran', 'San Francisco')",
)

MANIFEST = ModuleManifest(
    module_name="weather",
    description="Current conditions and a 14-day daily forecast for any city, normalized across weather providers.",
    tools=[
        ToolDefinition(
            name="weather.weather_dashboard",
            description=(
                "Get current conditions and the daily forecast for a city in one call. "
                "Either both are returned or the call fails as a whole. "
                "Example: 'Show me the weather in Tokyo.'"
            ),
            parameters=[
                _LOCATION,
                _LANGUAGE,
                ToolParameter(
                    name="request_id",
                    type="string",
                    description="Opaque id echoed back so the caller can discard superseded results",
                    required=False,
                ),
            ],
        ),
        ToolDefinition(
            name="weather.weather_current",
            description=(
                "Get current weather conditions for a city: temperature, feels-like, "
                "min/max, wind, sunrise and sunset."
            ),
            parameters=[_LOCATION, _LANGUAGE],
        ),
        ToolDefinition(
            name="weather.weather_forecast",
            description="Get the daily forecast for a city, one entry per day (up to 14 days).",
            parameters=[_LOCATION, _LANGUAGE],
        ),
        ToolDefinition(
            name="weather.weather_current_by_coords",
            description="Get current weather conditions for a latitude/longitude pair.",
            parameters=[
                ToolParameter(name="latitude", type="number", description="Latitude in degrees (-90 to 90)"),
                ToolParameter(name="longitude", type="number", description="Longitude in degrees (-180 to 180)"),
                _LANGUAGE,
            ],
        ),
    ],
)
