"""Export tools, run as plain command-line invocations."""

from __future__ import annotations

from typing import Any, Dict

from aseprite_mcp.mcp.tools.common import (
    FILE_PATH,
    ToolDefinition,
    boolean,
    enum,
    file_path_arg,
    integer,
    layer_arg,
    object_schema,
    optional_int,
    output_path_arg,
    string,
)
from aseprite_mcp.mcp.validation import expect_bool, expect_choice, expect_name
from aseprite_mcp.templates import export as templates

MAX_SCALE = 64


def _run_export(controller, invocation: templates.CliInvocation, status: str) -> Dict[str, Any]:
    result = controller.run_cli(invocation.args)
    return {
        "status": status,
        "outputs": list(invocation.outputs),
        "stdout": result.get("stdout", ""),
        "stderr": result.get("stderr", ""),
    }


def _export_sprite(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    invocation = templates.export_sprite(
        file_path,
        output_path_arg(args),
        scale=optional_int(args, "scale", minimum=1, maximum=MAX_SCALE),
        layer=layer_arg(args),
        tag=expect_name(args["tag"], "tag") if "tag" in args else None,
    )
    return _run_export(controller, invocation, "exported")


def _export_spritesheet(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    sheet_type = (
        expect_choice(args["sheetType"], "sheetType", templates.SHEET_TYPES)
        if "sheetType" in args
        else None
    )
    invocation = templates.export_spritesheet(
        file_path,
        output_path_arg(args, "outputImage"),
        output_data=output_path_arg(args, "outputData"),
        sheet_type=sheet_type,
        columns=optional_int(args, "columns", minimum=1),
        trim=expect_bool(args["trim"], "trim") if "trim" in args else False,
    )
    return _run_export(controller, invocation, "exported")


TOOLS = [
    ToolDefinition(
        name="export_sprite",
        description="Export a sprite to an image or animation file (png, gif, ...), optionally scaled or limited to one layer or tag.",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "outputPath": string("Output file; the extension picks the format. Use {frame} for per-frame files."),
                "scale": integer("Integer scale factor.", minimum=1, maximum=MAX_SCALE),
                "layer": string("Export only this layer."),
                "tag": string("Export only the frames of this tag."),
            },
            required=("filePath", "outputPath"),
        ),
        handler=_export_sprite,
    ),
    ToolDefinition(
        name="export_spritesheet",
        description="Export all frames as a sprite sheet image with optional JSON data.",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "outputImage": string("Sheet image file."),
                "outputData": string("JSON data file describing the frames."),
                "sheetType": enum("Sheet layout.", templates.SHEET_TYPES),
                "columns": integer("Number of columns.", minimum=1),
                "trim": boolean("Trim transparent borders from each frame."),
            },
            required=("filePath", "outputImage"),
        ),
        handler=_export_spritesheet,
    ),
]
