"""The complete tool catalog, in listing order."""

from __future__ import annotations

from typing import Dict, List

from aseprite_mcp.mcp.tools import (
    cel,
    drawing,
    effects,
    export,
    frame,
    layer,
    palette,
    scripting,
    selection,
    slice,
    sprite,
)
from aseprite_mcp.mcp.tools.common import ToolDefinition

_MODULES = (sprite, layer, frame, slice, cel, drawing, palette, selection, export, effects, scripting)


def all_tools() -> List[ToolDefinition]:
    tools: List[ToolDefinition] = []
    for module in _MODULES:
        tools.extend(module.TOOLS)
    return tools


def build_registry() -> Dict[str, ToolDefinition]:
    registry: Dict[str, ToolDefinition] = {}
    for tool in all_tools():
        if tool.name in registry:
            raise ValueError(f"Duplicate tool name: {tool.name}")
        registry[tool.name] = tool
    return registry
