"""Selection tools."""

from __future__ import annotations

from typing import Any, Dict

from aseprite_mcp.mcp.tools.common import (
    COLOR,
    FILE_PATH,
    ToolDefinition,
    color_arg,
    enum,
    file_path_arg,
    integer,
    object_schema,
    optional_int,
)
from aseprite_mcp.mcp.validation import expect_choice, expect_int
from aseprite_mcp.templates import selection as templates

MODE_CHOICES = tuple(templates.SELECTION_MODES)


def _select_region(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    x = expect_int(args["x"], "x")
    y = expect_int(args["y"], "y")
    width = expect_int(args["width"], "width", minimum=1)
    height = expect_int(args["height"], "height", minimum=1)
    mode = expect_choice(args.get("mode", "replace"), "mode", MODE_CHOICES)
    return controller.run_script(templates.select_region(file_path, x, y, width, height, mode))


def _deselect(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    return controller.run_script(templates.deselect(file_path_arg(args)))


def _select_all(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    return controller.run_script(templates.select_all(file_path_arg(args)))


def _invert_selection(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    return controller.run_script(templates.invert_selection(file_path_arg(args)))


def _select_by_color(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    tolerance = optional_int(args, "tolerance", 0, minimum=0, maximum=255)
    return controller.run_script(templates.select_by_color(file_path, color_arg(args), tolerance))


_FILE_ONLY = object_schema({"filePath": FILE_PATH}, required=("filePath",))

TOOLS = [
    ToolDefinition(
        name="select_region",
        description="Select a rectangle, replacing, adding to, subtracting from or intersecting the selection.",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "x": integer("Left edge."),
                "y": integer("Top edge."),
                "width": integer("Width.", minimum=1),
                "height": integer("Height.", minimum=1),
                "mode": enum("How to combine with the current selection. Defaults to replace.", MODE_CHOICES),
            },
            required=("filePath", "x", "y", "width", "height"),
        ),
        handler=_select_region,
    ),
    ToolDefinition(
        name="deselect",
        description="Clear the selection.",
        input_schema=_FILE_ONLY,
        handler=_deselect,
    ),
    ToolDefinition(
        name="select_all",
        description="Select the whole canvas.",
        input_schema=_FILE_ONLY,
        handler=_select_all,
    ),
    ToolDefinition(
        name="invert_selection",
        description="Invert the selection.",
        input_schema=_FILE_ONLY,
        handler=_invert_selection,
    ),
    ToolDefinition(
        name="select_by_color",
        description="Select all pixels matching a color within a tolerance.",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "color": COLOR,
                "tolerance": integer("Color tolerance. Defaults to 0.", minimum=0, maximum=255),
            },
            required=("filePath", "color"),
        ),
        handler=_select_by_color,
    ),
]
