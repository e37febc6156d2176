"""Cel scripts: the image content of one layer at one frame."""

from __future__ import annotations

from typing import Optional

from aseprite_mcp.templates.lua import (
    FIND_LAYER,
    GeneratedScript,
    emit,
    lua_string,
    render,
    require_frame,
    require_layer,
    save_statement,
)

_CEL_TABLE = """
local function cel_table(cel)
    local c = {}
    c.layer = cel.layer.name
    c.frame = cel.frameNumber
    c.x = cel.position.x
    c.y = cel.position.y
    c.width = cel.image.width
    c.height = cel.image.height
    c.opacity = cel.opacity
    c.zIndex = cel.zIndex
    if cel.data and cel.data ~= "" then c.data = cel.data end
    return c
end
"""


def _require_cel(layer: str, frame_number: int) -> str:
    return f"""{FIND_LAYER}{require_layer(layer)}{require_frame(frame_number)}local cel = layer:cel(frame)
if not cel then
    return fail("No cel at frame {frame_number} on layer " .. {lua_string(layer)})
end
"""


def list_cels(file_path: str, layer: Optional[str] = None, frame_number: Optional[int] = None) -> GeneratedScript:
    lookup = FIND_LAYER + require_layer(layer, "target_layer") if layer is not None else "local target_layer = nil\n"
    frame_filter = str(frame_number) if frame_number is not None else "nil"
    body = f"""{_CEL_TABLE}{lookup}local target_frame = {frame_filter}
local cels = {{}}
for _, cel in ipairs(spr.cels) do
    local include = true
    if target_layer and cel.layer ~= target_layer then include = false end
    if target_frame and cel.frameNumber ~= target_frame then include = false end
    if include then
        table.insert(cels, cel_table(cel))
    end
end
{emit("{ cels = cels, total = #cels }")}
"""
    return render(body, file_path=file_path)


def move_cel(file_path: str, layer: str, frame_number: int, x: int, y: int) -> GeneratedScript:
    body = f"""{_CEL_TABLE}{_require_cel(layer, frame_number)}cel.position = Point({x}, {y})
{save_statement(None)}local result = cel_table(cel)
result.status = "moved"
{emit("result")}
"""
    return render(body, file_path=file_path)


def set_cel_opacity(file_path: str, layer: str, frame_number: int, opacity: int) -> GeneratedScript:
    body = f"""{_CEL_TABLE}{_require_cel(layer, frame_number)}cel.opacity = {opacity}
{save_statement(None)}local result = cel_table(cel)
result.status = "updated"
{emit("result")}
"""
    return render(body, file_path=file_path)


def clear_cel(file_path: str, layer: str, frame_number: int) -> GeneratedScript:
    """Delete the cel if there is one; an already empty cel is not an error."""
    body = f"""{FIND_LAYER}{require_layer(layer)}{require_frame(frame_number)}local cel = layer:cel(frame)
local existed = cel ~= nil
if cel then
    spr:deleteCel(cel)
end
{save_statement(None)}{emit(f'{{ status = "cleared", layer = {lua_string(layer)}, frame = {frame_number}, existed = existed }}')}
"""
    return render(body, file_path=file_path)


def new_cel(file_path: str, layer: str, frame_number: int) -> GeneratedScript:
    body = f"""{_CEL_TABLE}{FIND_LAYER}{require_layer(layer)}{require_frame(frame_number)}if layer.isGroup then
    return fail("Cannot create a cel on a group layer: " .. {lua_string(layer)})
end
local cel = spr:newCel(layer, frame)
{save_statement(None)}local result = cel_table(cel)
result.status = "created"
{emit("result")}
"""
    return render(body, file_path=file_path)
