"""Slice tools."""

from __future__ import annotations

from typing import Any, Dict

from aseprite_mcp.mcp.tools.common import (
    COLOR,
    FILE_PATH,
    POINT,
    RECT,
    ToolDefinition,
    file_path_arg,
    integer,
    object_schema,
    string,
)
from aseprite_mcp.mcp.validation import (
    expect_color,
    expect_int,
    expect_name,
    expect_point,
    expect_rect,
    expect_string,
)
from aseprite_mcp.templates import slice as templates


def _list_slices(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    return controller.run_script(templates.list_slices(file_path_arg(args)))


def _create_slice(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    name = expect_name(args["name"], "name")
    bounds = (
        expect_int(args["x"], "x"),
        expect_int(args["y"], "y"),
        expect_int(args["width"], "width", minimum=1),
        expect_int(args["height"], "height", minimum=1),
    )
    return controller.run_script(
        templates.create_slice(
            file_path,
            name,
            bounds,
            center=expect_rect(args["center"], "center") if "center" in args else None,
            pivot=expect_point(args["pivot"], "pivot") if "pivot" in args else None,
            color=expect_color(args["color"], "color") if "color" in args else None,
            data=expect_string(args["data"], "data") if "data" in args else None,
        )
    )


def _delete_slice(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    name = expect_name(args["name"], "name")
    return controller.run_script(templates.delete_slice(file_path, name))


TOOLS = [
    ToolDefinition(
        name="list_slices",
        description="List slices with bounds, 9-slice center, pivot, color and user data.",
        input_schema=object_schema({"filePath": FILE_PATH}, required=("filePath",)),
        handler=_list_slices,
    ),
    ToolDefinition(
        name="create_slice",
        description="Create a named slice (hitbox, 9-slice region or pivot marker).",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "name": string("Slice name."),
                "x": integer("Left edge."),
                "y": integer("Top edge."),
                "width": integer("Width.", minimum=1),
                "height": integer("Height.", minimum=1),
                "center": RECT,
                "pivot": POINT,
                "color": COLOR,
                "data": string("Free-form user data."),
            },
            required=("filePath", "name", "x", "y", "width", "height"),
        ),
        handler=_create_slice,
    ),
    ToolDefinition(
        name="delete_slice",
        description="Delete a slice by name.",
        input_schema=object_schema(
            {"filePath": FILE_PATH, "name": string("Slice name.")},
            required=("filePath", "name"),
        ),
        handler=_delete_slice,
    ),
]
