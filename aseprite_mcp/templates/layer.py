"""Layer scripts."""

from __future__ import annotations

from typing import Optional

from aseprite_mcp.templates.lua import (
    COLLECT_LAYERS,
    FIND_LAYER,
    GeneratedScript,
    emit,
    lua_bool,
    lua_string,
    render,
    require_layer,
    save_statement,
    transaction,
)

BLEND_MODES = {
    "normal": "BlendMode.NORMAL",
    "multiply": "BlendMode.MULTIPLY",
    "screen": "BlendMode.SCREEN",
    "overlay": "BlendMode.OVERLAY",
    "darken": "BlendMode.DARKEN",
    "lighten": "BlendMode.LIGHTEN",
    "color_dodge": "BlendMode.COLOR_DODGE",
    "color_burn": "BlendMode.COLOR_BURN",
    "hard_light": "BlendMode.HARD_LIGHT",
    "soft_light": "BlendMode.SOFT_LIGHT",
    "difference": "BlendMode.DIFFERENCE",
    "exclusion": "BlendMode.EXCLUSION",
    "addition": "BlendMode.ADDITION",
    "subtract": "BlendMode.SUBTRACT",
    "divide": "BlendMode.DIVIDE",
}


def list_layers(file_path: str) -> GeneratedScript:
    body = COLLECT_LAYERS + emit("{ layers = layers, total = #layers }") + "\n"
    return render(body, file_path=file_path)


def add_layer(
    file_path: str,
    name: str,
    *,
    is_group: bool = False,
    after_layer: Optional[str] = None,
) -> GeneratedScript:
    create_fn = "newGroup" if is_group else "newLayer"
    edits = [f"new_layer = spr:{create_fn}()", f"new_layer.name = {lua_string(name)}"]
    lookup = ""
    if after_layer is not None:
        lookup = FIND_LAYER + require_layer(after_layer, "after")
        edits.append("new_layer.stackIndex = after.stackIndex + 1")
    body = f"""{lookup}local new_layer
{transaction("Add Layer", edits)}{save_statement(None)}{emit('{ status = "created", name = new_layer.name, isGroup = new_layer.isGroup, stackIndex = new_layer.stackIndex }')}
"""
    return render(body, file_path=file_path)


def remove_layer(file_path: str, name: str) -> GeneratedScript:
    body = f"""{FIND_LAYER}{require_layer(name)}spr:deleteLayer(layer)
{save_statement(None)}{emit('{ status = "deleted", layer = ' + lua_string(name) + ' }')}
"""
    return render(body, file_path=file_path)


def set_layer_property(
    file_path: str,
    name: str,
    *,
    new_name: Optional[str] = None,
    visible: Optional[bool] = None,
    opacity: Optional[int] = None,
    blend_mode: Optional[str] = None,
) -> GeneratedScript:
    edits = []
    if new_name is not None:
        edits.append(f"layer.name = {lua_string(new_name)}")
    if visible is not None:
        edits.append(f"layer.isVisible = {lua_bool(visible)}")
    if opacity is not None:
        edits.append(f"layer.opacity = {opacity}")
    if blend_mode is not None:
        edits.append(f"layer.blendMode = {BLEND_MODES[blend_mode]}")
    body = f"""{FIND_LAYER}{require_layer(name)}{transaction("Set Layer Properties", edits)}{save_statement(None)}local result = {{}}
result.status = "updated"
result.name = layer.name
result.isVisible = layer.isVisible
if layer.opacity then result.opacity = layer.opacity end
if layer.blendMode then result.blendMode = tostring(layer.blendMode) end
{emit("result")}
"""
    return render(body, file_path=file_path)


def duplicate_layer(file_path: str, name: str, new_name: Optional[str] = None) -> GeneratedScript:
    edits = ["app.layer = layer", "app.command.DuplicateLayer()"]
    if new_name is not None:
        edits.append(f"app.layer.name = {lua_string(new_name)}")
    body = f"""{FIND_LAYER}{require_layer(name)}{transaction("Duplicate Layer", edits)}{save_statement(None)}{emit('{ status = "duplicated", name = app.layer.name, isGroup = app.layer.isGroup, stackIndex = app.layer.stackIndex }')}
"""
    return render(body, file_path=file_path)


def merge_down_layer(file_path: str, name: str) -> GeneratedScript:
    body = f"""{FIND_LAYER}{require_layer(name)}if layer.stackIndex == 1 then
    return fail("Layer has no layer below it to merge into: " .. {lua_string(name)})
end
app.layer = layer
app.command.MergeDownLayer()
{save_statement(None)}{emit('{ status = "merged", name = app.layer.name, numLayers = #spr.layers }')}
"""
    return render(body, file_path=file_path)


def flatten_layers(file_path: str, output_path: Optional[str] = None) -> GeneratedScript:
    body = f"""app.command.FlattenLayers()
{save_statement(output_path)}{emit('{ status = "flattened", numLayers = #spr.layers }')}
"""
    return render(body, file_path=file_path)
