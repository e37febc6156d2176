"""Cel tools."""

from __future__ import annotations

from typing import Any, Dict, Optional

from aseprite_mcp.mcp.tools.common import (
    FILE_PATH,
    ToolDefinition,
    file_path_arg,
    frame_arg,
    integer,
    layer_arg,
    object_schema,
    string,
)
from aseprite_mcp.mcp.validation import expect_int, expect_name
from aseprite_mcp.templates import cel as templates

_LAYER = string("Layer name.")
_FRAME = integer("Frame number (1-based).", minimum=1)


def _target(args: Dict[str, Any]):
    return (
        file_path_arg(args),
        expect_name(args["layer"], "layer"),
        expect_int(args["frame"], "frame", minimum=1),
    )


def _list_cels(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    return controller.run_script(
        templates.list_cels(file_path_arg(args), layer_arg(args), frame_arg(args, default=None))
    )


def _move_cel(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path, layer, frame_number = _target(args)
    x = expect_int(args["x"], "x")
    y = expect_int(args["y"], "y")
    return controller.run_script(templates.move_cel(file_path, layer, frame_number, x, y))


def _set_cel_opacity(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path, layer, frame_number = _target(args)
    opacity = expect_int(args["opacity"], "opacity", minimum=0, maximum=255)
    return controller.run_script(templates.set_cel_opacity(file_path, layer, frame_number, opacity))


def _clear_cel(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    return controller.run_script(templates.clear_cel(*_target(args)))


def _new_cel(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    return controller.run_script(templates.new_cel(*_target(args)))


def _cel_schema(extra: Optional[Dict[str, Any]] = None, required=()) -> Dict[str, Any]:
    properties = {"filePath": FILE_PATH, "layer": _LAYER, "frame": _FRAME}
    properties.update(extra or {})
    return object_schema(properties, required=("filePath", "layer", "frame", *required))


TOOLS = [
    ToolDefinition(
        name="list_cels",
        description="List cels with position, size and opacity, optionally filtered by layer and frame.",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "layer": string("Only cels on this layer."),
                "frame": integer("Only cels in this frame (1-based).", minimum=1),
            },
            required=("filePath",),
        ),
        handler=_list_cels,
    ),
    ToolDefinition(
        name="move_cel",
        description="Move a cel to a new canvas position.",
        input_schema=_cel_schema(
            {"x": integer("New left position."), "y": integer("New top position.")},
            required=("x", "y"),
        ),
        handler=_move_cel,
    ),
    ToolDefinition(
        name="set_cel_opacity",
        description="Set the opacity of one cel.",
        input_schema=_cel_schema(
            {"opacity": integer("Cel opacity.", minimum=0, maximum=255)},
            required=("opacity",),
        ),
        handler=_set_cel_opacity,
    ),
    ToolDefinition(
        name="clear_cel",
        description="Remove the content of a cel.",
        input_schema=_cel_schema(),
        handler=_clear_cel,
    ),
    ToolDefinition(
        name="new_cel",
        description="Create an empty cel on a layer at a frame.",
        input_schema=_cel_schema(),
        handler=_new_cel,
    ),
]
