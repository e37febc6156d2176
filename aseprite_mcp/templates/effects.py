"""Color effects and image filters, applied through the application's commands."""

from __future__ import annotations

from typing import Optional

from aseprite_mcp.core.colors import Color
from aseprite_mcp.templates.lua import (
    FIND_LAYER,
    GeneratedScript,
    emit,
    lua_color,
    lua_string,
    render,
    save_statement,
    select_target,
)


def _apply(command: str, params: str, status: str, extra: str = "") -> str:
    """Run one ``app.command`` with ``ui = false`` and report ``status``."""
    fields = f'status = {lua_string(status)}{extra}'
    return f"""app.command.{command} {{
    ui = false{params}
}}
{save_statement(None)}{emit("{ " + fields + " }")}
"""


def replace_color(file_path: str, from_color: Color, to_color: Color, tolerance: int = 0) -> GeneratedScript:
    params = f""",
    from = {lua_color(from_color)},
    to = {lua_color(to_color)},
    tolerance = {tolerance}"""
    extra = (
        f", from = {lua_string(from_color.to_hex())}"
        f", to = {lua_string(to_color.to_hex())}"
        f", tolerance = {tolerance}"
    )
    return render(_apply("ReplaceColor", params, "replaced", extra), file_path=file_path)


def outline(
    file_path: str,
    color: Color,
    *,
    layer: Optional[str] = None,
    frame_number: int = 1,
) -> GeneratedScript:
    lookup = FIND_LAYER if layer is not None else ""
    params = f""",
    color = {lua_color(color)}"""
    extra = f", color = {lua_string(color.to_hex())}, layer = app.layer.name, frame = target_frame.frameNumber"
    body = lookup + select_target(layer, frame_number) + _apply("Outline", params, "outlined", extra)
    return render(body, file_path=file_path)


def brightness_contrast(file_path: str, brightness: int, contrast: int) -> GeneratedScript:
    params = f""",
    brightness = {brightness},
    contrast = {contrast}"""
    extra = f', filter = "brightness_contrast", brightness = {brightness}, contrast = {contrast}'
    return render(_apply("BrightnessContrast", params, "applied", extra), file_path=file_path)


def hue_saturation(file_path: str, hue: int, saturation: int, lightness: int = 0) -> GeneratedScript:
    params = (
        f",\n    hue = {hue},\n    saturation = {saturation},"
        f'\n    lightness = {lightness},\n    mode = "hsl"'
    )
    extra = (
        f', filter = "hue_saturation", hue = {hue}'
        f", saturation = {saturation}, lightness = {lightness}"
    )
    return render(_apply("HueSaturation", params, "applied", extra), file_path=file_path)


def invert_color(file_path: str) -> GeneratedScript:
    return render(_apply("InvertColor", "", "applied", ', filter = "invert_color"'), file_path=file_path)


def despeckle(file_path: str, width: int = 3, height: int = 3) -> GeneratedScript:
    params = f""",
    width = {width},
    height = {height}"""
    extra = f', filter = "despeckle", width = {width}, height = {height}'
    return render(_apply("Despeckle", params, "applied", extra), file_path=file_path)
