"""Shared pieces of the tool catalog: the definition record and schema fragments."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional

from aseprite_mcp.core import config
from aseprite_mcp.mcp.validation import (
    expect_color,
    expect_document_path,
    expect_int,
    expect_name,
    validate_allowed_keys,
)

ToolHandler = Callable[[Any, Dict[str, Any]], Dict[str, Any]]


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    input_schema: Dict[str, Any]
    handler: ToolHandler

    def check_arguments(self, arguments: Dict[str, Any]) -> None:
        """Reject unknown and missing fields as declared by the input schema."""
        validate_allowed_keys(
            arguments,
            allowed=set(self.input_schema.get("properties", {})),
            required=set(self.input_schema.get("required", ())),
            label=f"{self.name} arguments",
        )


def object_schema(properties: Dict[str, Any], required: Iterable[str] = ()) -> Dict[str, Any]:
    schema: Dict[str, Any] = {
        "type": "object",
        "additionalProperties": False,
        "properties": properties,
    }
    required = list(required)
    if required:
        schema["required"] = required
    return schema


def string(description: str) -> Dict[str, Any]:
    return {"type": "string", "description": description}


def integer(description: str, minimum: Optional[int] = None, maximum: Optional[int] = None) -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": "integer", "description": description}
    if minimum is not None:
        schema["minimum"] = minimum
    if maximum is not None:
        schema["maximum"] = maximum
    return schema


def boolean(description: str) -> Dict[str, Any]:
    return {"type": "boolean", "description": description}


def enum(description: str, values: Iterable[str]) -> Dict[str, Any]:
    return {"type": "string", "enum": list(values), "description": description}


FILE_PATH = string("Path to the sprite file (.aseprite, .ase, .png, ...).")
OUTPUT_PATH = string("Write the result to this path instead of saving in place.")
LAYER = string("Layer name (searched recursively through groups). Defaults to the active layer.")
FRAME = integer("Frame number (1-based). Defaults to 1.", minimum=1)
COLOR = {
    "type": "string",
    "pattern": "^#?([0-9a-fA-F]{6}|[0-9a-fA-F]{8})$",
    "description": "Hex color, #rrggbb or #rrggbbaa.",
}
POINT = object_schema(
    {"x": {"type": "integer"}, "y": {"type": "integer"}},
    required=("x", "y"),
)
RECT = object_schema(
    {
        "x": {"type": "integer"},
        "y": {"type": "integer"},
        "width": {"type": "integer", "minimum": 1},
        "height": {"type": "integer", "minimum": 1},
    },
    required=("x", "y", "width", "height"),
)


def file_path_arg(args: Dict[str, Any]) -> str:
    return expect_document_path(args["filePath"], "filePath")


def output_path_arg(args: Dict[str, Any], field_name: str = "outputPath") -> Optional[str]:
    """Validated write target, resolved against the configured output directory."""
    if field_name not in args:
        return None
    return config.resolve_output_path(expect_document_path(args[field_name], field_name))


def layer_arg(args: Dict[str, Any], field_name: str = "layer") -> Optional[str]:
    if field_name not in args:
        return None
    return expect_name(args[field_name], field_name)


def frame_arg(args: Dict[str, Any], field_name: str = "frame", default: Optional[int] = 1) -> Optional[int]:
    if field_name not in args:
        return default
    return expect_int(args[field_name], field_name, minimum=1)


def optional_int(
    args: Dict[str, Any],
    field_name: str,
    default: Optional[int] = None,
    *,
    minimum: Optional[int] = None,
    maximum: Optional[int] = None,
) -> Optional[int]:
    if field_name not in args:
        return default
    return expect_int(args[field_name], field_name, minimum=minimum, maximum=maximum)


def color_arg(args: Dict[str, Any], field_name: str = "color"):
    return expect_color(args[field_name], field_name)
