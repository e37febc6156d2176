"""Drawing tools. Coordinates are canvas-relative pixels."""

from __future__ import annotations

from typing import Any, Dict, List

from aseprite_mcp.mcp.tools.common import (
    COLOR,
    FILE_PATH,
    FRAME,
    LAYER,
    POINT,
    ToolDefinition,
    color_arg,
    enum,
    file_path_arg,
    frame_arg,
    integer,
    layer_arg,
    object_schema,
    optional_int,
)
from aseprite_mcp.mcp.validation import (
    ToolValidationError,
    expect_choice,
    expect_color,
    expect_int,
    expect_list,
    expect_object,
    expect_point,
    validate_allowed_keys,
)
from aseprite_mcp.templates import drawing as templates

MAX_PIXELS = 65536
MAX_BRUSH_SIZE = 64


def _parse_pixels(raw: Any) -> List[templates.Pixel]:
    pixels: List[templates.Pixel] = []
    for index, item in enumerate(expect_list(raw, "pixels", max_items=MAX_PIXELS)):
        label = f"pixels[{index}]"
        entry = expect_object(item, label)
        validate_allowed_keys(entry, allowed={"x", "y", "color"}, required={"x", "y", "color"}, label=f"Field '{label}'")
        pixels.append(
            (
                expect_int(entry["x"], f"{label}.x"),
                expect_int(entry["y"], f"{label}.y"),
                expect_color(entry["color"], f"{label}.color"),
            )
        )
    return pixels


def _draw_pixels(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    pixels = _parse_pixels(args["pixels"])
    return controller.run_script(
        templates.draw_pixels(
            file_path,
            pixels,
            layer=layer_arg(args),
            frame_number=frame_arg(args),
        )
    )


def _use_tool(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    tool = expect_choice(args["tool"], "tool", templates.TOOLS)
    points = [
        expect_point(item, f"points[{index}]")
        for index, item in enumerate(expect_list(args["points"], "points"))
    ]
    return controller.run_script(
        templates.use_tool(
            file_path,
            tool,
            points,
            color_arg(args),
            brush_size=optional_int(args, "brushSize", 1, minimum=1, maximum=MAX_BRUSH_SIZE),
            opacity=optional_int(args, "opacity", 255, minimum=0, maximum=255),
            layer=layer_arg(args),
            frame_number=frame_arg(args),
        )
    )


def _get_pixel_data(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    x = expect_int(args["x"], "x", minimum=0)
    y = expect_int(args["y"], "y", minimum=0)
    width = expect_int(args["width"], "width", minimum=1)
    height = expect_int(args["height"], "height", minimum=1)
    if width * height > MAX_PIXELS:
        raise ToolValidationError(
            f"Requested area is {width * height} pixels; at most {MAX_PIXELS} can be read at once.",
            "width",
        )
    return controller.run_script(
        templates.get_pixel_data(
            file_path,
            x,
            y,
            width,
            height,
            layer=layer_arg(args),
            frame_number=frame_arg(args),
        )
    )


TOOLS = [
    ToolDefinition(
        name="draw_pixels",
        description="Set individual pixels on a layer and frame in one undoable step.",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "pixels": {
                    "type": "array",
                    "minItems": 1,
                    "maxItems": MAX_PIXELS,
                    "items": object_schema(
                        {"x": {"type": "integer"}, "y": {"type": "integer"}, "color": COLOR},
                        required=("x", "y", "color"),
                    ),
                },
                "layer": LAYER,
                "frame": FRAME,
            },
            required=("filePath", "pixels"),
        ),
        handler=_draw_pixels,
    ),
    ToolDefinition(
        name="use_tool",
        description="Apply a drawing tool (pencil, line, shapes, bucket, eraser, ...) along points.",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "tool": enum("Drawing tool.", templates.TOOLS),
                "points": {"type": "array", "minItems": 1, "items": POINT},
                "color": COLOR,
                "brushSize": integer("Brush size in pixels. Defaults to 1.", minimum=1, maximum=MAX_BRUSH_SIZE),
                "opacity": integer("Tool opacity. Defaults to 255.", minimum=0, maximum=255),
                "layer": LAYER,
                "frame": FRAME,
            },
            required=("filePath", "tool", "points", "color"),
        ),
        handler=_use_tool,
    ),
    ToolDefinition(
        name="get_pixel_data",
        description="Read the colors of a rectangular area, from one layer or the flattened image.",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "x": integer("Left edge.", minimum=0),
                "y": integer("Top edge.", minimum=0),
                "width": integer("Area width.", minimum=1),
                "height": integer("Area height.", minimum=1),
                "layer": LAYER,
                "frame": FRAME,
            },
            required=("filePath", "x", "y", "width", "height"),
        ),
        handler=_get_pixel_data,
    ),
]
