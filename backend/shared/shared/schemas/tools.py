"""Tool-call protocol schemas: the manifest a module publishes and the
call/result envelopes of ``/execute``."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class ToolParameter(BaseModel):
    name: str
    type: str  # string, integer, number, boolean
    description: str
    required: bool = True
    enum: list[str] | None = None


class ToolDefinition(BaseModel):
    name: str  # e.g. "weather.weather_dashboard"
    description: str
    parameters: list[ToolParameter]


class ModuleManifest(BaseModel):
    module_name: str
    description: str
    tools: list[ToolDefinition]


class ToolCall(BaseModel):
    tool_name: str
    arguments: dict[str, Any] = {}


class ToolResult(BaseModel):
    tool_name: str
    success: bool
    result: Any = None
    error: str | None = None
