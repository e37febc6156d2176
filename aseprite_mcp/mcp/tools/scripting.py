"""Escape hatches: arbitrary Lua and raw command-line runs."""

from __future__ import annotations

from typing import Any, Dict

from aseprite_mcp.mcp.tools.common import FILE_PATH, ToolDefinition, object_schema, string
from aseprite_mcp.mcp.validation import (
    expect_document_path,
    expect_list,
    expect_non_empty_string,
    expect_string,
)
from aseprite_mcp.templates import scripting as templates


def _run_lua_script(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    script = expect_non_empty_string(args["script"], "script")
    file_path = expect_document_path(args["filePath"], "filePath") if "filePath" in args else None
    return controller.run_script(
        templates.run_lua_script(script, file_path),
        allow_plain_output=True,
    )


def _execute_cli(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    cli_args = [
        expect_string(item, f"args[{index}]")
        for index, item in enumerate(expect_list(args["args"], "args"))
    ]
    return controller.run_cli(cli_args)


TOOLS = [
    ToolDefinition(
        name="run_lua_script",
        description=(
            "Run a Lua script in batch mode, optionally with a sprite opened. Print a JSON "
            "object (json.encode) as the last output to return structured data; plain "
            "output is returned as {\"output\": ...}. Print {error = ...} to report failure."
        ),
        input_schema=object_schema(
            {"script": string("Lua source."), "filePath": FILE_PATH},
            required=("script",),
        ),
        handler=_run_lua_script,
    ),
    ToolDefinition(
        name="execute_cli",
        description="Run the editor's command line in batch mode with the given arguments.",
        input_schema=object_schema(
            {
                "args": {
                    "type": "array",
                    "minItems": 1,
                    "items": {"type": "string"},
                    "description": "Arguments after --batch.",
                }
            },
            required=("args",),
        ),
        handler=_execute_cli,
    ),
]
