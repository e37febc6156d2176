"""Slice scripts."""

from __future__ import annotations

from typing import Optional, Tuple

from aseprite_mcp.core.colors import Color
from aseprite_mcp.templates.lua import (
    COLOR_HEX,
    RECT_TABLE,
    GeneratedScript,
    emit,
    lua_color,
    lua_string,
    render,
    save_statement,
    transaction,
)

Rect = Tuple[int, int, int, int]

_SLICE_TABLE = COLOR_HEX + RECT_TABLE + """
local function slice_table(slice)
    local s = { name = slice.name }
    if slice.bounds then s.bounds = rect_table(slice.bounds) end
    if slice.center then s.center = rect_table(slice.center) end
    if slice.pivot then s.pivot = { x = slice.pivot.x, y = slice.pivot.y } end
    if slice.color then s.color = color_hex(slice.color) end
    if slice.data and slice.data ~= "" then s.data = slice.data end
    return s
end
"""


def list_slices(file_path: str) -> GeneratedScript:
    body = _SLICE_TABLE + """local slices = {}
for _, slice in ipairs(spr.slices) do
    table.insert(slices, slice_table(slice))
end
""" + emit("{ slices = slices, total = #slices }") + "\n"
    return render(body, file_path=file_path)


def create_slice(
    file_path: str,
    name: str,
    bounds: Rect,
    *,
    center: Optional[Rect] = None,
    pivot: Optional[Tuple[int, int]] = None,
    color: Optional[Color] = None,
    data: Optional[str] = None,
) -> GeneratedScript:
    x, y, width, height = bounds
    edits = [
        f"slice = spr:newSlice(Rectangle({x}, {y}, {width}, {height}))",
        f"slice.name = {lua_string(name)}",
    ]
    if center is not None:
        edits.append("slice.center = Rectangle({}, {}, {}, {})".format(*center))
    if pivot is not None:
        edits.append("slice.pivot = Point({}, {})".format(*pivot))
    if color is not None:
        edits.append(f"slice.color = {lua_color(color)}")
    if data is not None:
        edits.append(f"slice.data = {lua_string(data)}")
    body = f"""{_SLICE_TABLE}local slice
{transaction("New Slice", edits)}{save_statement(None)}local result = slice_table(slice)
result.status = "created"
{emit("result")}
"""
    return render(body, file_path=file_path)


def delete_slice(file_path: str, name: str) -> GeneratedScript:
    quoted = lua_string(name)
    body = f"""local slice = nil
for _, s in ipairs(spr.slices) do
    if s.name == {quoted} then slice = s break end
end
if not slice then
    return fail("Slice not found: " .. {quoted})
end
spr:deleteSlice(slice)
{save_statement(None)}{emit('{ status = "deleted", slice = ' + quoted + ' }')}
"""
    return render(body, file_path=file_path)
