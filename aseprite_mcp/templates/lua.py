"""Building blocks shared by the script templates.

Every generated script runs its body inside ``pcall`` so that any fault
raised by the Aseprite API is reported as ``{"error": ...}`` on stdout
instead of an uncaught Lua error. The body sees two locals: ``spr`` (the
document opened on the command line, when the script needs one) and
``fail(message)``, which prints the error object; call it as
``return fail(...)``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from aseprite_mcp.core.colors import Color


@dataclass(frozen=True)
class GeneratedScript:
    """Lua source for one request plus the document it opens, if any."""

    source: str
    file_path: Optional[str] = None


_HARNESS = """-- generated by aseprite-mcp
local function fail(message)
    print(json.encode({{ error = tostring(message) }}))
end

local function run()
{prelude}{body}
end

local ok, err = pcall(run)
if not ok then
    fail(err)
end
"""

_SPRITE_PRELUDE = """local spr = app.sprite
if not spr then
    return fail("No sprite loaded")
end
"""

FIND_LAYER = """
local function find_layer(lyrs, name)
    for _, l in ipairs(lyrs) do
        if l.name == name then return l end
        if l.isGroup and l.layers then
            local found = find_layer(l.layers, name)
            if found then return found end
        end
    end
    return nil
end
"""

# Flattens the layer tree (depth-first, bottom to top) into ``layers``.
COLLECT_LAYERS = """
local layers = {}
local function collect_layers(lyrs, depth, parent_name)
    for _, layer in ipairs(lyrs) do
        local l = {}
        l.name = layer.name
        l.isVisible = layer.isVisible
        l.isEditable = layer.isEditable
        l.isGroup = layer.isGroup
        l.stackIndex = layer.stackIndex
        l.depth = depth
        l.parent = parent_name
        if layer.opacity then l.opacity = layer.opacity end
        if layer.blendMode then l.blendMode = tostring(layer.blendMode) end
        l.isBackground = layer.isBackground or false
        l.isTilemap = layer.isTilemap or false
        l.numCels = #layer.cels
        table.insert(layers, l)
        if layer.isGroup and layer.layers then
            collect_layers(layer.layers, depth + 1, layer.name)
        end
    end
end
collect_layers(spr.layers, 0, nil)
"""

COLOR_HEX = """
local function color_hex(c)
    return string.format("#%02x%02x%02x%02x", c.red, c.green, c.blue, c.alpha)
end
"""

RECT_TABLE = """
local function rect_table(r)
    return { x = r.x, y = r.y, width = r.width, height = r.height }
end
"""


def lua_string(value: str) -> str:
    """Quote ``value`` as a Lua string literal."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\0", "\\0")
    )
    return f'"{escaped}"'


def normalize_path(path: str) -> str:
    return path.replace("\\", "/")


def lua_path(path: str) -> str:
    return lua_string(normalize_path(path))


def lua_bool(value: bool) -> str:
    return "true" if value else "false"


def lua_color(color: Color) -> str:
    return f"Color({color.red}, {color.green}, {color.blue}, {color.alpha})"


def emit(table: str) -> str:
    """Statement printing ``table`` as the script's JSON result line."""
    return f"print(json.encode({table}))"


def require_layer(name: str, var: str = "layer") -> str:
    """Look ``name`` up (groups included) into ``var``; fail when missing.

    Needs ``FIND_LAYER`` earlier in the script.
    """
    quoted = lua_string(name)
    return f"""local {var} = find_layer(spr.layers, {quoted})
if not {var} then
    return fail("Layer not found: " .. {quoted})
end
"""


def require_frame(frame_number: int, var: str = "frame") -> str:
    return f"""local {var} = spr.frames[{frame_number}]
if not {var} then
    return fail("Frame {frame_number} does not exist (sprite has " .. #spr.frames .. " frames)")
end
"""


def select_target(layer: Optional[str], frame_number: int) -> str:
    """Make ``frame_number`` and, when given, ``layer`` the active frame/layer."""
    parts = [require_frame(frame_number, "target_frame"), "app.frame = target_frame\n"]
    if layer is not None:
        parts.append(require_layer(layer, "target_layer"))
        parts.append("app.layer = target_layer\n")
    return "".join(parts)


def transaction(label: str, statements: Iterable[str]) -> str:
    """Group edits so they register as one undo step."""
    body = "\n".join(f"    {line}" for stmt in statements for line in stmt.splitlines())
    return f"app.transaction({lua_string(label)}, function()\n{body}\nend)\n"


def save_statement(output_path: Optional[str]) -> str:
    """Save in place, or write a copy to ``output_path`` when one is given."""
    if output_path is None:
        return "spr:saveAs(spr.filename)\n"
    return f"spr:saveCopyAs({lua_path(output_path)})\n"


def render(body: str, *, file_path: Optional[str] = None, requires_sprite: bool = True) -> GeneratedScript:
    prelude = _SPRITE_PRELUDE if requires_sprite else ""
    return GeneratedScript(
        source=_HARNESS.format(prelude=prelude, body=body),
        file_path=file_path,
    )
