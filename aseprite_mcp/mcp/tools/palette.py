"""Palette tools. Indices are 0-based."""

from __future__ import annotations

from typing import Any, Dict

from aseprite_mcp.mcp.tools.common import (
    COLOR,
    FILE_PATH,
    ToolDefinition,
    boolean,
    file_path_arg,
    integer,
    object_schema,
    optional_int,
    output_path_arg,
    string,
)
from aseprite_mcp.mcp.validation import (
    expect_bool,
    expect_color,
    expect_int,
    expect_list,
    expect_non_empty_string,
    expect_object,
    validate_allowed_keys,
)
from aseprite_mcp.templates import palette as templates

MAX_PALETTE_SIZE = 256


def _get_palette(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    return controller.run_script(
        templates.get_palette(file_path_arg(args), optional_int(args, "maxColors", minimum=1))
    )


def _set_palette_color(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    entries = []
    for index, item in enumerate(expect_list(args["colors"], "colors", max_items=MAX_PALETTE_SIZE)):
        label = f"colors[{index}]"
        entry = expect_object(item, label)
        validate_allowed_keys(entry, allowed={"index", "color"}, required={"index", "color"}, label=f"Field '{label}'")
        entries.append(
            (
                expect_int(entry["index"], f"{label}.index", minimum=0, maximum=MAX_PALETTE_SIZE - 1),
                expect_color(entry["color"], f"{label}.color"),
            )
        )
    return controller.run_script(templates.set_palette_color(file_path, entries))


def _resize_palette(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    size = expect_int(args["size"], "size", minimum=1, maximum=MAX_PALETTE_SIZE)
    return controller.run_script(templates.resize_palette(file_path, size))


def _load_palette(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    palette_path = expect_non_empty_string(args["palettePath"], "palettePath")
    return controller.run_script(templates.load_palette(file_path, palette_path))


def _save_palette(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    return controller.run_script(
        templates.save_palette(file_path_arg(args), output_path_arg(args))
    )


def _color_quantization(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    max_colors = optional_int(args, "maxColors", MAX_PALETTE_SIZE, minimum=2, maximum=MAX_PALETTE_SIZE)
    with_alpha = expect_bool(args["withAlpha"], "withAlpha") if "withAlpha" in args else False
    return controller.run_script(templates.color_quantization(file_path, max_colors, with_alpha))


TOOLS = [
    ToolDefinition(
        name="get_palette",
        description="Read the palette colors as hex strings and channels.",
        input_schema=object_schema(
            {"filePath": FILE_PATH, "maxColors": integer("Return at most this many entries.", minimum=1)},
            required=("filePath",),
        ),
        handler=_get_palette,
    ),
    ToolDefinition(
        name="set_palette_color",
        description="Set one or more palette entries by index in a single undoable step.",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "colors": {
                    "type": "array",
                    "minItems": 1,
                    "maxItems": MAX_PALETTE_SIZE,
                    "items": object_schema(
                        {
                            "index": {"type": "integer", "minimum": 0, "maximum": MAX_PALETTE_SIZE - 1},
                            "color": COLOR,
                        },
                        required=("index", "color"),
                    ),
                },
            },
            required=("filePath", "colors"),
        ),
        handler=_set_palette_color,
    ),
    ToolDefinition(
        name="resize_palette",
        description="Change the number of palette entries.",
        input_schema=object_schema(
            {"filePath": FILE_PATH, "size": integer("New palette size.", minimum=1, maximum=MAX_PALETTE_SIZE)},
            required=("filePath", "size"),
        ),
        handler=_resize_palette,
    ),
    ToolDefinition(
        name="load_palette",
        description="Replace the sprite palette with one loaded from a file (.gpl, .pal, .act, image...).",
        input_schema=object_schema(
            {"filePath": FILE_PATH, "palettePath": string("Palette file to load.")},
            required=("filePath", "palettePath"),
        ),
        handler=_load_palette,
    ),
    ToolDefinition(
        name="save_palette",
        description="Save the sprite palette to a file.",
        input_schema=object_schema(
            {"filePath": FILE_PATH, "outputPath": string("Palette file to write.")},
            required=("filePath", "outputPath"),
        ),
        handler=_save_palette,
    ),
    ToolDefinition(
        name="color_quantization",
        description="Generate a palette from the sprite's colors.",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "maxColors": integer("Palette size to generate. Defaults to 256.", minimum=2, maximum=MAX_PALETTE_SIZE),
                "withAlpha": boolean("Take alpha into account."),
            },
            required=("filePath",),
        ),
        handler=_color_quantization,
    ),
]
