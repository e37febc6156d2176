"""Sprite-level tools."""

from __future__ import annotations

from typing import Any, Dict

from aseprite_mcp.core import config
from aseprite_mcp.mcp.tools.common import (
    FILE_PATH,
    OUTPUT_PATH,
    ToolDefinition,
    enum,
    file_path_arg,
    integer,
    object_schema,
    optional_int,
    output_path_arg,
    string,
)
from aseprite_mcp.mcp.validation import (
    ToolValidationError,
    expect_choice,
    expect_document_path,
    expect_int,
)
from aseprite_mcp.templates import sprite as templates

COLOR_MODE_CHOICES = tuple(templates.COLOR_MODES)
FLIP_DIRECTIONS = ("horizontal", "vertical")
ROTATION_ANGLES = (90, 180, 270)


def _create_sprite(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = config.resolve_output_path(expect_document_path(args["filePath"], "filePath"))
    width = expect_int(args["width"], "width", minimum=1)
    height = expect_int(args["height"], "height", minimum=1)
    color_mode = expect_choice(args.get("colorMode", "rgb"), "colorMode", COLOR_MODE_CHOICES)
    return controller.run_script(templates.create_sprite(file_path, width, height, color_mode))


def _get_sprite_info(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    return controller.run_script(templates.get_sprite_info(file_path_arg(args)))


def _resize_sprite(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    width = expect_int(args["width"], "width", minimum=1)
    height = expect_int(args["height"], "height", minimum=1)
    return controller.run_script(
        templates.resize_sprite(file_path, width, height, output_path_arg(args))
    )


def _crop_sprite(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    x = expect_int(args["x"], "x")
    y = expect_int(args["y"], "y")
    width = expect_int(args["width"], "width", minimum=1)
    height = expect_int(args["height"], "height", minimum=1)
    return controller.run_script(
        templates.crop_sprite(file_path, x, y, width, height, output_path_arg(args))
    )


def _flip_sprite(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    direction = expect_choice(args["direction"], "direction", FLIP_DIRECTIONS)
    return controller.run_script(templates.flip_sprite(file_path, direction, output_path_arg(args)))


def _rotate_sprite(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    angle = expect_int(args["angle"], "angle")
    if angle not in ROTATION_ANGLES:
        raise ToolValidationError("Field 'angle' must be one of: 90, 180, 270.", "angle")
    return controller.run_script(templates.rotate_sprite(file_path, angle, output_path_arg(args)))


def _canvas_size(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    # negative margins shrink the canvas; the script checks the resulting size
    left = optional_int(args, "left", 0)
    top = optional_int(args, "top", 0)
    right = optional_int(args, "right", 0)
    bottom = optional_int(args, "bottom", 0)
    if not any((left, top, right, bottom)):
        raise ToolValidationError("Provide at least one non-zero margin: left, top, right, bottom.")
    return controller.run_script(
        templates.canvas_size(file_path, left, top, right, bottom, output_path_arg(args))
    )


def _duplicate_sprite(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    return controller.run_script(templates.duplicate_sprite(file_path, output_path_arg(args)))


def _auto_crop_sprite(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    return controller.run_script(
        templates.auto_crop_sprite(file_path_arg(args), output_path_arg(args))
    )


def _change_color_mode(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    color_mode = expect_choice(args["colorMode"], "colorMode", COLOR_MODE_CHOICES)
    return controller.run_script(
        templates.change_color_mode(file_path, color_mode, output_path_arg(args))
    )


def _reverse_frames(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    from_frame = optional_int(args, "fromFrame", minimum=1)
    to_frame = optional_int(args, "toFrame", minimum=1)
    if from_frame is not None and to_frame is not None and to_frame < from_frame:
        raise ToolValidationError("Field 'toFrame' must be >= fromFrame.", "toFrame")
    return controller.run_script(templates.reverse_frames(file_path, from_frame, to_frame))


TOOLS = [
    ToolDefinition(
        name="create_sprite",
        description="Create a new sprite file with the given size and color mode.",
        input_schema=object_schema(
            {
                "filePath": string("Where to save the new sprite."),
                "width": integer("Canvas width in pixels.", minimum=1),
                "height": integer("Canvas height in pixels.", minimum=1),
                "colorMode": enum("Color mode. Defaults to rgb.", COLOR_MODE_CHOICES),
            },
            required=("filePath", "width", "height"),
        ),
        handler=_create_sprite,
    ),
    ToolDefinition(
        name="get_sprite_info",
        description="Read size, color mode, layers, frames, tags and slices of a sprite.",
        input_schema=object_schema({"filePath": FILE_PATH}, required=("filePath",)),
        handler=_get_sprite_info,
    ),
    ToolDefinition(
        name="resize_sprite",
        description="Scale the whole sprite to a new size.",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "width": integer("New width in pixels.", minimum=1),
                "height": integer("New height in pixels.", minimum=1),
                "outputPath": OUTPUT_PATH,
            },
            required=("filePath", "width", "height"),
        ),
        handler=_resize_sprite,
    ),
    ToolDefinition(
        name="crop_sprite",
        description="Crop the sprite to a rectangle.",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "x": integer("Left edge of the crop rectangle."),
                "y": integer("Top edge of the crop rectangle."),
                "width": integer("Crop width.", minimum=1),
                "height": integer("Crop height.", minimum=1),
                "outputPath": OUTPUT_PATH,
            },
            required=("filePath", "x", "y", "width", "height"),
        ),
        handler=_crop_sprite,
    ),
    ToolDefinition(
        name="flip_sprite",
        description="Flip the whole canvas horizontally or vertically.",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "direction": enum("Flip direction.", FLIP_DIRECTIONS),
                "outputPath": OUTPUT_PATH,
            },
            required=("filePath", "direction"),
        ),
        handler=_flip_sprite,
    ),
    ToolDefinition(
        name="rotate_sprite",
        description="Rotate the whole canvas by 90, 180 or 270 degrees.",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "angle": {"type": "integer", "enum": list(ROTATION_ANGLES), "description": "Rotation angle in degrees."},
                "outputPath": OUTPUT_PATH,
            },
            required=("filePath", "angle"),
        ),
        handler=_rotate_sprite,
    ),
    ToolDefinition(
        name="canvas_size",
        description="Grow or shrink the canvas by per-side margins without scaling pixels.",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "left": integer("Pixels added on the left (negative removes)."),
                "top": integer("Pixels added on top (negative removes)."),
                "right": integer("Pixels added on the right (negative removes)."),
                "bottom": integer("Pixels added at the bottom (negative removes)."),
                "outputPath": OUTPUT_PATH,
            },
            required=("filePath",),
        ),
        handler=_canvas_size,
    ),
    ToolDefinition(
        name="duplicate_sprite",
        description="Save a copy of a sprite to a new file.",
        input_schema=object_schema(
            {"filePath": FILE_PATH, "outputPath": string("Path of the copy.")},
            required=("filePath", "outputPath"),
        ),
        handler=_duplicate_sprite,
    ),
    ToolDefinition(
        name="auto_crop_sprite",
        description="Trim transparent borders from the sprite.",
        input_schema=object_schema(
            {"filePath": FILE_PATH, "outputPath": OUTPUT_PATH},
            required=("filePath",),
        ),
        handler=_auto_crop_sprite,
    ),
    ToolDefinition(
        name="change_color_mode",
        description="Convert the sprite to rgb, grayscale or indexed color.",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "colorMode": enum("Target color mode.", COLOR_MODE_CHOICES),
                "outputPath": OUTPUT_PATH,
            },
            required=("filePath", "colorMode"),
        ),
        handler=_change_color_mode,
    ),
    ToolDefinition(
        name="reverse_frames",
        description="Reverse the order of a range of frames (all frames by default).",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "fromFrame": integer("First frame of the range (1-based).", minimum=1),
                "toFrame": integer("Last frame of the range (1-based).", minimum=1),
            },
            required=("filePath",),
        ),
        handler=_reverse_frames,
    ),
]
