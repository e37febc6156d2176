"""Color effects and filter tools."""

from __future__ import annotations

from typing import Any, Dict

from aseprite_mcp.mcp.tools.common import (
    COLOR,
    FILE_PATH,
    FRAME,
    LAYER,
    ToolDefinition,
    color_arg,
    file_path_arg,
    frame_arg,
    integer,
    layer_arg,
    object_schema,
    optional_int,
)
from aseprite_mcp.mcp.validation import expect_int
from aseprite_mcp.templates import effects as templates

MAX_DESPECKLE_SIZE = 32


def _replace_color(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    from_color = color_arg(args, "fromColor")
    to_color = color_arg(args, "toColor")
    tolerance = optional_int(args, "tolerance", 0, minimum=0, maximum=255)
    return controller.run_script(templates.replace_color(file_path, from_color, to_color, tolerance))


def _outline(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    return controller.run_script(
        templates.outline(
            file_path_arg(args),
            color_arg(args),
            layer=layer_arg(args),
            frame_number=frame_arg(args),
        )
    )


def _brightness_contrast(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    brightness = expect_int(args["brightness"], "brightness", minimum=-100, maximum=100)
    contrast = expect_int(args["contrast"], "contrast", minimum=-100, maximum=100)
    return controller.run_script(templates.brightness_contrast(file_path, brightness, contrast))


def _hue_saturation(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    hue = expect_int(args["hue"], "hue", minimum=-180, maximum=180)
    saturation = expect_int(args["saturation"], "saturation", minimum=-100, maximum=100)
    lightness = optional_int(args, "lightness", 0, minimum=-100, maximum=100)
    return controller.run_script(templates.hue_saturation(file_path, hue, saturation, lightness))


def _invert_color(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    return controller.run_script(templates.invert_color(file_path_arg(args)))


def _despeckle(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    width = optional_int(args, "width", 3, minimum=1, maximum=MAX_DESPECKLE_SIZE)
    height = optional_int(args, "height", 3, minimum=1, maximum=MAX_DESPECKLE_SIZE)
    return controller.run_script(templates.despeckle(file_path, width, height))


TOOLS = [
    ToolDefinition(
        name="replace_color",
        description="Replace one color with another across the sprite.",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "fromColor": COLOR,
                "toColor": COLOR,
                "tolerance": integer("Match tolerance. Defaults to 0.", minimum=0, maximum=255),
            },
            required=("filePath", "fromColor", "toColor"),
        ),
        handler=_replace_color,
    ),
    ToolDefinition(
        name="outline",
        description="Draw an outline around the opaque pixels of a layer.",
        input_schema=object_schema(
            {"filePath": FILE_PATH, "color": COLOR, "layer": LAYER, "frame": FRAME},
            required=("filePath", "color"),
        ),
        handler=_outline,
    ),
    ToolDefinition(
        name="brightness_contrast",
        description="Adjust brightness and contrast.",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "brightness": integer("Brightness change.", minimum=-100, maximum=100),
                "contrast": integer("Contrast change.", minimum=-100, maximum=100),
            },
            required=("filePath", "brightness", "contrast"),
        ),
        handler=_brightness_contrast,
    ),
    ToolDefinition(
        name="hue_saturation",
        description="Shift hue and adjust saturation and lightness (HSL).",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "hue": integer("Hue shift in degrees.", minimum=-180, maximum=180),
                "saturation": integer("Saturation change.", minimum=-100, maximum=100),
                "lightness": integer("Lightness change. Defaults to 0.", minimum=-100, maximum=100),
            },
            required=("filePath", "hue", "saturation"),
        ),
        handler=_hue_saturation,
    ),
    ToolDefinition(
        name="invert_color",
        description="Invert all colors.",
        input_schema=object_schema({"filePath": FILE_PATH}, required=("filePath",)),
        handler=_invert_color,
    ),
    ToolDefinition(
        name="despeckle",
        description="Remove noise with a median filter.",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "width": integer("Filter width. Defaults to 3.", minimum=1, maximum=MAX_DESPECKLE_SIZE),
                "height": integer("Filter height. Defaults to 3.", minimum=1, maximum=MAX_DESPECKLE_SIZE),
            },
            required=("filePath",),
        ),
        handler=_despeckle,
    ),
]
