"""Whole-document scripts: create, inspect, resize, transform."""

from __future__ import annotations

from typing import Optional

from aseprite_mcp.templates.lua import (
    COLLECT_LAYERS,
    RECT_TABLE,
    GeneratedScript,
    emit,
    lua_path,
    lua_string,
    render,
    save_statement,
)

COLOR_MODES = {
    "rgb": "ColorMode.RGB",
    "grayscale": "ColorMode.GRAYSCALE",
    "indexed": "ColorMode.INDEXED",
}

# ChangePixelFormat takes its own spelling of the modes
PIXEL_FORMATS = {
    "rgb": "rgb",
    "grayscale": "gray",
    "indexed": "indexed",
}


def create_sprite(file_path: str, width: int, height: int, color_mode: str = "rgb") -> GeneratedScript:
    body = f"""local spr = Sprite({width}, {height}, {COLOR_MODES[color_mode]})
spr:saveAs({lua_path(file_path)})
{emit('{ status = "created", width = spr.width, height = spr.height, filename = spr.filename, colorMode = tostring(spr.colorMode) }')}
"""
    return render(body, requires_sprite=False)


def get_sprite_info(file_path: str) -> GeneratedScript:
    body = (
        COLLECT_LAYERS
        + RECT_TABLE
        + """
local frames = {}
for _, frame in ipairs(spr.frames) do
    table.insert(frames, { frameNumber = frame.frameNumber, duration = frame.duration })
end

local tags = {}
for _, tag in ipairs(spr.tags) do
    table.insert(tags, {
        name = tag.name,
        fromFrame = tag.fromFrame.frameNumber,
        toFrame = tag.toFrame.frameNumber,
        frames = tag.frames,
        aniDir = tostring(tag.aniDir),
        repeats = tag.repeats
    })
end

local slices = {}
for _, slice in ipairs(spr.slices) do
    local s = { name = slice.name }
    if slice.bounds then s.bounds = rect_table(slice.bounds) end
    table.insert(slices, s)
end

local pal = spr.palettes[1]
local result = {}
result.filename = spr.filename
result.width = spr.width
result.height = spr.height
result.colorMode = tostring(spr.colorMode)
result.numFrames = #spr.frames
result.numLayers = #layers
result.numCels = #spr.cels
result.numTags = #spr.tags
result.numSlices = #spr.slices
result.paletteSize = pal and #pal or 0
result.isModified = spr.isModified
result.gridBounds = rect_table(spr.gridBounds)
result.pixelRatio = { width = spr.pixelRatio.width, height = spr.pixelRatio.height }
result.layers = layers
result.frames = frames
result.tags = tags
result.slices = slices
print(json.encode(result))
"""
    )
    return render(body, file_path=file_path)


def resize_sprite(file_path: str, width: int, height: int, output_path: Optional[str] = None) -> GeneratedScript:
    body = f"""local oldWidth, oldHeight = spr.width, spr.height
spr:resize({width}, {height})
{save_statement(output_path)}{emit('{ status = "resized", oldWidth = oldWidth, oldHeight = oldHeight, width = spr.width, height = spr.height }')}
"""
    return render(body, file_path=file_path)


def crop_sprite(
    file_path: str,
    x: int,
    y: int,
    width: int,
    height: int,
    output_path: Optional[str] = None,
) -> GeneratedScript:
    body = f"""spr:crop({x}, {y}, {width}, {height})
{save_statement(output_path)}{emit('{ status = "cropped", width = spr.width, height = spr.height }')}
"""
    return render(body, file_path=file_path)


def flip_sprite(file_path: str, direction: str, output_path: Optional[str] = None) -> GeneratedScript:
    body = f"""app.command.Flip {{
    ui = false,
    target = "canvas",
    orientation = {lua_string(direction)}
}}
{save_statement(output_path)}{emit('{ status = "flipped", direction = ' + lua_string(direction) + ' }')}
"""
    return render(body, file_path=file_path)


def rotate_sprite(file_path: str, angle: int, output_path: Optional[str] = None) -> GeneratedScript:
    body = f"""app.command.Rotate {{
    ui = false,
    target = "canvas",
    angle = "{angle}"
}}
{save_statement(output_path)}{emit(f'{{ status = "rotated", angle = {angle}, width = spr.width, height = spr.height }}')}
"""
    return render(body, file_path=file_path)


def canvas_size(
    file_path: str,
    left: int,
    top: int,
    right: int,
    bottom: int,
    output_path: Optional[str] = None,
) -> GeneratedScript:
    body = f"""local newWidth = spr.width + {left} + {right}
local newHeight = spr.height + {top} + {bottom}
if newWidth < 1 or newHeight < 1 then
    return fail("Resulting canvas would be " .. newWidth .. "x" .. newHeight .. "; both sides must be at least 1 pixel")
end
app.command.CanvasSize {{
    ui = false,
    left = {left},
    top = {top},
    right = {right},
    bottom = {bottom}
}}
{save_statement(output_path)}{emit('{ status = "canvas_resized", width = spr.width, height = spr.height }')}
"""
    return render(body, file_path=file_path)


def duplicate_sprite(file_path: str, output_path: str) -> GeneratedScript:
    body = f"""local copy = Sprite(spr)
copy:saveAs({lua_path(output_path)})
{emit('{ status = "duplicated", width = copy.width, height = copy.height, filename = copy.filename, numLayers = #copy.layers, numFrames = #copy.frames }')}
"""
    return render(body, file_path=file_path)


def auto_crop_sprite(file_path: str, output_path: Optional[str] = None) -> GeneratedScript:
    body = f"""local oldWidth, oldHeight = spr.width, spr.height
app.command.AutocropSprite()
{save_statement(output_path)}{emit('{ status = "auto_cropped", oldWidth = oldWidth, oldHeight = oldHeight, width = spr.width, height = spr.height }')}
"""
    return render(body, file_path=file_path)


def change_color_mode(file_path: str, color_mode: str, output_path: Optional[str] = None) -> GeneratedScript:
    body = f"""app.command.ChangePixelFormat {{
    ui = false,
    format = {lua_string(PIXEL_FORMATS[color_mode])}
}}
{save_statement(output_path)}{emit('{ status = "color_mode_changed", colorMode = tostring(spr.colorMode), width = spr.width, height = spr.height }')}
"""
    return render(body, file_path=file_path)


def reverse_frames(file_path: str, from_frame: Optional[int] = None, to_frame: Optional[int] = None) -> GeneratedScript:
    to_expr = str(to_frame) if to_frame is not None else "#spr.frames"
    body = f"""local fromFrame = {from_frame if from_frame is not None else 1}
local toFrame = {to_expr}
if toFrame > #spr.frames then
    return fail("Frame " .. toFrame .. " does not exist (sprite has " .. #spr.frames .. " frames)")
end
if fromFrame > toFrame then
    return fail("fromFrame must not be after toFrame")
end
local rangeFrames = {{}}
for i = fromFrame, toFrame do
    table.insert(rangeFrames, spr.frames[i])
end
app.frame = spr.frames[fromFrame]
app.range.frames = rangeFrames
app.command.ReverseFrames()
{save_statement(None)}{emit('{ status = "reversed", fromFrame = fromFrame, toFrame = toFrame, numFrames = #spr.frames }')}
"""
    return render(body, file_path=file_path)
