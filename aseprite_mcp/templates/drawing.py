"""Drawing scripts.

Coordinates given to these templates are canvas coordinates. A cel's image
only covers its own bounding box, so ``draw_pixels`` composes the existing
cel onto a full-canvas image, draws there and stores the result back at the
origin; ``get_pixel_data`` offsets by the cel position when reading.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence, Tuple

from aseprite_mcp.core.colors import Color
from aseprite_mcp.templates.lua import (
    FIND_LAYER,
    GeneratedScript,
    emit,
    lua_color,
    lua_string,
    render,
    require_layer,
    save_statement,
    select_target,
    transaction,
)

Pixel = Tuple[int, int, Color]
Point = Tuple[int, int]

TOOLS = (
    "pencil",
    "line",
    "rectangle",
    "filled_rectangle",
    "ellipse",
    "filled_ellipse",
    "paint_bucket",
    "spray",
    "eraser",
    "contour",
    "polygon",
)

_PIXEL_HEX = """
local function pixel_hex(pv)
    local mode = spr.colorMode
    if mode == ColorMode.INDEXED then
        local c = spr.palettes[1]:getColor(pv)
        return string.format("#%02x%02x%02x%02x", c.red, c.green, c.blue, c.alpha)
    elseif mode == ColorMode.GRAYSCALE then
        local v = app.pixelColor.grayaV(pv)
        return string.format("#%02x%02x%02x%02x", v, v, v, app.pixelColor.grayaA(pv))
    end
    return string.format("#%02x%02x%02x%02x",
        app.pixelColor.rgbaR(pv), app.pixelColor.rgbaG(pv),
        app.pixelColor.rgbaB(pv), app.pixelColor.rgbaA(pv))
end
"""

_NOT_A_GROUP = """if target_layer.isGroup then
    return fail("Cannot draw on a group layer: " .. target_layer.name)
end
"""


def _pixel_rows(pixels: Iterable[Pixel]) -> str:
    rows = (
        f"    {{ {x}, {y}, {c.red}, {c.green}, {c.blue}, {c.alpha} }},"
        for x, y, c in pixels
    )
    return "\n".join(rows)


def _target_layer(layer: Optional[str], frame_number: int) -> str:
    if layer is None:
        return select_target(None, frame_number) + "local target_layer = app.layer\n"
    return FIND_LAYER + select_target(layer, frame_number)


def draw_pixels(
    file_path: str,
    pixels: Sequence[Pixel],
    *,
    layer: Optional[str] = None,
    frame_number: int = 1,
) -> GeneratedScript:
    """Set individual pixels; those outside the canvas are skipped and not counted."""
    edits = [
        """local cel = target_layer:cel(target_frame)
local canvas = Image(spr.spec)
if cel then
    canvas:drawImage(cel.image, cel.position)
end
for _, p in ipairs(pixels) do
    if p[1] >= 0 and p[1] < spr.width and p[2] >= 0 and p[2] < spr.height then
        canvas:drawPixel(p[1], p[2], Color(p[3], p[4], p[5], p[6]))
        drawn = drawn + 1
    end
end
if cel then
    cel.image = canvas
    cel.position = Point(0, 0)
else
    spr:newCel(target_layer, target_frame, canvas, Point(0, 0))
end"""
    ]
    body = f"""{_target_layer(layer, frame_number)}{_NOT_A_GROUP}local pixels = {{
{_pixel_rows(pixels)}
}}
local drawn = 0
{transaction("Draw Pixels", edits)}{save_statement(None)}{emit(f'{{ status = "drawn", pixelCount = drawn, requested = {len(pixels)}, layer = target_layer.name, frame = target_frame.frameNumber }}')}
"""
    return render(body, file_path=file_path)


def use_tool(
    file_path: str,
    tool: str,
    points: Sequence[Point],
    color: Color,
    *,
    brush_size: int = 1,
    opacity: int = 255,
    layer: Optional[str] = None,
    frame_number: int = 1,
) -> GeneratedScript:
    point_list = ", ".join(f"Point({x}, {y})" for x, y in points)
    edits = [
        f"""app.useTool {{
    tool = {lua_string(tool)},
    color = {lua_color(color)},
    brush = Brush {{ size = {brush_size} }},
    points = {{ {point_list} }},
    opacity = {opacity},
    layer = target_layer,
    frame = target_frame
}}"""
    ]
    body = f"""{_target_layer(layer, frame_number)}{_NOT_A_GROUP}{transaction("Use Tool", edits)}{save_statement(None)}{emit(f'{{ status = "drawn", tool = {lua_string(tool)}, points = {len(points)}, layer = target_layer.name, frame = target_frame.frameNumber }}')}
"""
    return render(body, file_path=file_path)


def get_pixel_data(
    file_path: str,
    x: int,
    y: int,
    width: int,
    height: int,
    *,
    layer: Optional[str] = None,
    frame_number: int = 1,
) -> GeneratedScript:
    """Read a canvas rectangle as hex colors, row by row.

    Without a layer the flattened frame is read. Pixels outside the source
    image come back as fully transparent.
    """
    if layer is None:
        source = f"""local target_frame = spr.frames[{frame_number}]
if not target_frame then
    return fail("Frame {frame_number} does not exist (sprite has " .. #spr.frames .. " frames)")
end
local img = Image(spr.spec)
img:drawSprite(spr, target_frame)
local offX, offY = 0, 0
"""
    else:
        source = f"""{FIND_LAYER}{require_layer(layer, "target_layer")}local target_frame = spr.frames[{frame_number}]
if not target_frame then
    return fail("Frame {frame_number} does not exist (sprite has " .. #spr.frames .. " frames)")
end
local cel = target_layer:cel(target_frame)
if not cel then
    return fail("No cel at frame {frame_number} on layer " .. {lua_string(layer)})
end
local img = cel.image
local offX, offY = cel.position.x, cel.position.y
"""
    body = f"""{_PIXEL_HEX}{source}local pixels = {{}}
for py = {y}, {y + height - 1} do
    for px = {x}, {x + width - 1} do
        local ix = px - offX
        local iy = py - offY
        local color = "#00000000"
        if ix >= 0 and ix < img.width and iy >= 0 and iy < img.height then
            color = pixel_hex(img:getPixel(ix, iy))
        end
        table.insert(pixels, {{ x = px, y = py, color = color }})
    end
end
{emit(f"{{ pixels = pixels, x = {x}, y = {y}, width = {width}, height = {height} }}")}
"""
    return render(body, file_path=file_path)
