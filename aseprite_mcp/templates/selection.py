"""Selection scripts. The selection is stored with the document, so each one saves."""

from __future__ import annotations

from aseprite_mcp.core.colors import Color
from aseprite_mcp.templates.lua import (
    RECT_TABLE,
    GeneratedScript,
    emit,
    lua_color,
    lua_string,
    render,
    save_statement,
)

SELECTION_MODES = {
    "replace": "select",
    "add": "add",
    "subtract": "subtract",
    "intersect": "intersect",
}

_SELECTION_RESULT = """local sel = spr.selection
local result = { isEmpty = sel.isEmpty }
if not sel.isEmpty then
    result.bounds = rect_table(sel.bounds)
end
"""


def _finish(status: str) -> str:
    return (
        save_statement(None)
        + _SELECTION_RESULT
        + f"result.status = {lua_string(status)}\n"
    )


def select_region(file_path: str, x: int, y: int, width: int, height: int, mode: str = "replace") -> GeneratedScript:
    body = f"""{RECT_TABLE}spr.selection:{SELECTION_MODES[mode]}(Rectangle({x}, {y}, {width}, {height}))
{_finish("selected")}result.mode = {lua_string(mode)}
{emit("result")}
"""
    return render(body, file_path=file_path)


def deselect(file_path: str) -> GeneratedScript:
    body = f"""{RECT_TABLE}spr.selection:deselect()
{_finish("deselected")}{emit("result")}
"""
    return render(body, file_path=file_path)


def select_all(file_path: str) -> GeneratedScript:
    body = f"""{RECT_TABLE}app.command.MaskAll()
{_finish("selected_all")}{emit("result")}
"""
    return render(body, file_path=file_path)


def invert_selection(file_path: str) -> GeneratedScript:
    body = f"""{RECT_TABLE}app.command.InvertMask()
{_finish("inverted")}{emit("result")}
"""
    return render(body, file_path=file_path)


def select_by_color(file_path: str, color: Color, tolerance: int = 0) -> GeneratedScript:
    body = f"""{RECT_TABLE}app.fgColor = {lua_color(color)}
app.command.MaskByColor {{
    ui = false,
    tolerance = {tolerance}
}}
{_finish("selected_by_color")}result.color = {lua_string(color.to_hex())}
result.tolerance = {tolerance}
{emit("result")}
"""
    return render(body, file_path=file_path)
