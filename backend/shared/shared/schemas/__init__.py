"""Pydantic schemas shared by the weather backend services."""

from shared.schemas.common import HealthResponse
from shared.schemas.tools import (
    ModuleManifest,
    ToolCall,
    ToolDefinition,
    ToolParameter,
    ToolResult,
)

__all__ = [
    "HealthResponse",
    "ModuleManifest",
    "ToolCall",
    "ToolDefinition",
    "ToolParameter",
    "ToolResult",
]
