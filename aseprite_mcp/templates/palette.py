"""Palette scripts. Palette indices are 0-based, as in the application."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from aseprite_mcp.core.colors import Color
from aseprite_mcp.templates.lua import (
    COLOR_HEX,
    GeneratedScript,
    emit,
    lua_bool,
    lua_color,
    lua_path,
    render,
    save_statement,
    transaction,
)

PaletteEntry = Tuple[int, Color]


def get_palette(file_path: str, max_colors: Optional[int] = None) -> GeneratedScript:
    limit = str(max_colors) if max_colors is not None else "#pal"
    body = f"""{COLOR_HEX}local pal = spr.palettes[1]
local count = math.min({limit}, #pal)
local colors = {{}}
for i = 0, count - 1 do
    local c = pal:getColor(i)
    table.insert(colors, {{
        index = i,
        color = color_hex(c),
        red = c.red,
        green = c.green,
        blue = c.blue,
        alpha = c.alpha
    }})
end
{emit("{ colors = colors, total = #pal }")}
"""
    return render(body, file_path=file_path)


def set_palette_color(file_path: str, entries: Sequence[PaletteEntry]) -> GeneratedScript:
    highest = max(index for index, _ in entries)
    edits = [f"pal:setColor({index}, {lua_color(color)})" for index, color in entries]
    body = f"""local pal = spr.palettes[1]
if {highest} >= #pal then
    return fail("Palette index {highest} is out of range (palette has " .. #pal .. " colors)")
end
{transaction("Set Palette Colors", edits)}{save_statement(None)}{emit(f'{{ status = "updated", colorsSet = {len(entries)} }}')}
"""
    return render(body, file_path=file_path)


def resize_palette(file_path: str, size: int) -> GeneratedScript:
    body = f"""local oldSize = #spr.palettes[1]
app.command.PaletteSize {{
    ui = false,
    size = {size}
}}
{save_statement(None)}{emit('{ status = "resized", oldSize = oldSize, newSize = #spr.palettes[1] }')}
"""
    return render(body, file_path=file_path)


def load_palette(file_path: str, palette_path: str) -> GeneratedScript:
    body = f"""spr:loadPalette({lua_path(palette_path)})
{save_statement(None)}{emit('{ status = "loaded", paletteSize = #spr.palettes[1] }')}
"""
    return render(body, file_path=file_path)


def save_palette(file_path: str, output_path: str) -> GeneratedScript:
    out = lua_path(output_path)
    body = f"""local pal = spr.palettes[1]
pal:saveAs({out})
{emit(f'{{ status = "saved", paletteSize = #pal, filename = {out} }}')}
"""
    return render(body, file_path=file_path)


def color_quantization(file_path: str, max_colors: int = 256, with_alpha: bool = False) -> GeneratedScript:
    body = f"""app.command.ColorQuantization {{
    ui = false,
    withAlpha = {lua_bool(with_alpha)},
    maxColors = {max_colors}
}}
{save_statement(None)}{emit(f'{{ status = "quantized", paletteSize = #spr.palettes[1], maxColors = {max_colors} }}')}
"""
    return render(body, file_path=file_path)
