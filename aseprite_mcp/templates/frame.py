"""Frame and tag scripts. Frame numbers are 1-based throughout."""

from __future__ import annotations

from typing import Optional

from aseprite_mcp.core.colors import Color
from aseprite_mcp.templates.lua import (
    GeneratedScript,
    emit,
    lua_color,
    lua_string,
    render,
    require_frame,
    save_statement,
    transaction,
)

ANI_DIRECTIONS = {
    "forward": "AniDir.FORWARD",
    "reverse": "AniDir.REVERSE",
    "ping_pong": "AniDir.PING_PONG",
    "ping_pong_reverse": "AniDir.PING_PONG_REVERSE",
}

_TAG_TABLE = """
local function tag_table(tag)
    return {
        name = tag.name,
        fromFrame = tag.fromFrame.frameNumber,
        toFrame = tag.toFrame.frameNumber,
        frames = tag.frames,
        aniDir = tostring(tag.aniDir),
        repeats = tag.repeats
    }
end
"""


def _find_tag(name: str) -> str:
    quoted = lua_string(name)
    return f"""local tag = nil
for _, t in ipairs(spr.tags) do
    if t.name == {quoted} then tag = t break end
end
if not tag then
    return fail("Tag not found: " .. {quoted})
end
"""


def list_frames(file_path: str) -> GeneratedScript:
    body = """local frames = {}
for _, frame in ipairs(spr.frames) do
    table.insert(frames, { frameNumber = frame.frameNumber, duration = frame.duration })
end
""" + emit("{ frames = frames, total = #frames }") + "\n"
    return render(body, file_path=file_path)


def add_frame(file_path: str, count: int = 1, empty: bool = False) -> GeneratedScript:
    frame_fn = "newEmptyFrame" if empty else "newFrame"
    edits = [f"for i = 1, {count} do", f"    spr:{frame_fn}(#spr.frames + 1)", "end"]
    body = f"""{transaction("Add Frames", edits)}{save_statement(None)}{emit(f'{{ status = "added", count = {count}, totalFrames = #spr.frames }}')}
"""
    return render(body, file_path=file_path)


def remove_frame(file_path: str, frame_number: int) -> GeneratedScript:
    body = f"""{require_frame(frame_number)}if #spr.frames == 1 then
    return fail("Cannot remove the only frame of a sprite")
end
spr:deleteFrame(frame)
{save_statement(None)}{emit(f'{{ status = "deleted", frameNumber = {frame_number}, totalFrames = #spr.frames }}')}
"""
    return render(body, file_path=file_path)


def set_frame_duration(file_path: str, frame_number: int, duration_ms: int) -> GeneratedScript:
    # the API stores durations in seconds
    seconds = duration_ms / 1000.0
    body = f"""{require_frame(frame_number)}frame.duration = {seconds!r}
{save_statement(None)}{emit(f'{{ status = "updated", frameNumber = {frame_number}, durationMs = {duration_ms}, duration = frame.duration }}')}
"""
    return render(body, file_path=file_path)


def list_tags(file_path: str) -> GeneratedScript:
    body = _TAG_TABLE + """local tags = {}
for _, tag in ipairs(spr.tags) do
    table.insert(tags, tag_table(tag))
end
""" + emit("{ tags = tags, total = #tags }") + "\n"
    return render(body, file_path=file_path)


def create_tag(
    file_path: str,
    name: str,
    from_frame: int,
    to_frame: int,
    *,
    ani_dir: str = "forward",
    color: Optional[Color] = None,
) -> GeneratedScript:
    edits = [
        f"tag = spr:newTag({from_frame}, {to_frame})",
        f"tag.name = {lua_string(name)}",
        f"tag.aniDir = {ANI_DIRECTIONS[ani_dir]}",
    ]
    if color is not None:
        edits.append(f"tag.color = {lua_color(color)}")
    body = f"""{_TAG_TABLE}if {to_frame} > #spr.frames then
    return fail("Frame {to_frame} does not exist (sprite has " .. #spr.frames .. " frames)")
end
local tag
{transaction("New Tag", edits)}{save_statement(None)}local result = tag_table(tag)
result.status = "created"
{emit("result")}
"""
    return render(body, file_path=file_path)


def delete_tag(file_path: str, name: str) -> GeneratedScript:
    body = f"""{_find_tag(name)}spr:deleteTag(tag)
{save_statement(None)}{emit('{ status = "deleted", tag = ' + lua_string(name) + ' }')}
"""
    return render(body, file_path=file_path)
