"""Layer tools."""

from __future__ import annotations

from typing import Any, Dict

from aseprite_mcp.mcp.tools.common import (
    FILE_PATH,
    OUTPUT_PATH,
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
from aseprite_mcp.mcp.validation import (
    ToolValidationError,
    expect_bool,
    expect_choice,
    expect_name,
)
from aseprite_mcp.templates import layer as templates

BLEND_MODE_CHOICES = tuple(templates.BLEND_MODES)

_NAME = string("Layer name (searched recursively through groups).")


def _list_layers(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    return controller.run_script(templates.list_layers(file_path_arg(args)))


def _add_layer(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    name = expect_name(args["name"], "name")
    is_group = expect_bool(args["isGroup"], "isGroup") if "isGroup" in args else False
    return controller.run_script(
        templates.add_layer(
            file_path,
            name,
            is_group=is_group,
            after_layer=layer_arg(args, "afterLayer"),
        )
    )


def _remove_layer(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    name = expect_name(args["name"], "name")
    return controller.run_script(templates.remove_layer(file_path, name))


def _set_layer_property(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    name = expect_name(args["name"], "name")
    properties = {"newName", "visible", "opacity", "blendMode"}
    if not properties & set(args):
        raise ToolValidationError(
            "Provide at least one property to change: newName, visible, opacity, blendMode."
        )
    new_name = expect_name(args["newName"], "newName") if "newName" in args else None
    visible = expect_bool(args["visible"], "visible") if "visible" in args else None
    blend_mode = (
        expect_choice(args["blendMode"], "blendMode", BLEND_MODE_CHOICES)
        if "blendMode" in args
        else None
    )
    return controller.run_script(
        templates.set_layer_property(
            file_path,
            name,
            new_name=new_name,
            visible=visible,
            opacity=optional_int(args, "opacity", minimum=0, maximum=255),
            blend_mode=blend_mode,
        )
    )


def _duplicate_layer(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    name = expect_name(args["name"], "name")
    return controller.run_script(
        templates.duplicate_layer(file_path, name, layer_arg(args, "newName"))
    )


def _merge_down_layer(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    name = expect_name(args["name"], "name")
    return controller.run_script(templates.merge_down_layer(file_path, name))


def _flatten_layers(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    return controller.run_script(
        templates.flatten_layers(file_path_arg(args), output_path_arg(args))
    )


TOOLS = [
    ToolDefinition(
        name="list_layers",
        description="List all layers, including nested group members, with their properties.",
        input_schema=object_schema({"filePath": FILE_PATH}, required=("filePath",)),
        handler=_list_layers,
    ),
    ToolDefinition(
        name="add_layer",
        description="Add a new layer or layer group.",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "name": string("Name of the new layer."),
                "isGroup": boolean("Create a group instead of an image layer."),
                "afterLayer": string("Place the new layer directly above this layer."),
            },
            required=("filePath", "name"),
        ),
        handler=_add_layer,
    ),
    ToolDefinition(
        name="remove_layer",
        description="Delete a layer by name.",
        input_schema=object_schema({"filePath": FILE_PATH, "name": _NAME}, required=("filePath", "name")),
        handler=_remove_layer,
    ),
    ToolDefinition(
        name="set_layer_property",
        description="Rename a layer or change its visibility, opacity or blend mode.",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "name": _NAME,
                "newName": string("New layer name."),
                "visible": boolean("Layer visibility."),
                "opacity": integer("Layer opacity.", minimum=0, maximum=255),
                "blendMode": enum("Layer blend mode.", BLEND_MODE_CHOICES),
            },
            required=("filePath", "name"),
        ),
        handler=_set_layer_property,
    ),
    ToolDefinition(
        name="duplicate_layer",
        description="Duplicate a layer, optionally naming the copy.",
        input_schema=object_schema(
            {"filePath": FILE_PATH, "name": _NAME, "newName": string("Name for the copy.")},
            required=("filePath", "name"),
        ),
        handler=_duplicate_layer,
    ),
    ToolDefinition(
        name="merge_down_layer",
        description="Merge a layer into the layer below it.",
        input_schema=object_schema({"filePath": FILE_PATH, "name": _NAME}, required=("filePath", "name")),
        handler=_merge_down_layer,
    ),
    ToolDefinition(
        name="flatten_layers",
        description="Flatten all layers into one.",
        input_schema=object_schema(
            {"filePath": FILE_PATH, "outputPath": OUTPUT_PATH},
            required=("filePath",),
        ),
        handler=_flatten_layers,
    ),
]
