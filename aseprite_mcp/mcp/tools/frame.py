"""Frame and tag tools. Frame numbers are 1-based."""

from __future__ import annotations

from typing import Any, Dict

from aseprite_mcp.mcp.tools.common import (
    COLOR,
    FILE_PATH,
    ToolDefinition,
    boolean,
    enum,
    file_path_arg,
    integer,
    object_schema,
    optional_int,
    string,
)
from aseprite_mcp.mcp.validation import (
    ToolValidationError,
    expect_bool,
    expect_choice,
    expect_color,
    expect_int,
    expect_name,
)
from aseprite_mcp.templates import frame as templates

ANI_DIR_CHOICES = tuple(templates.ANI_DIRECTIONS)
MAX_FRAMES_PER_CALL = 256
MAX_DURATION_MS = 65535


def _list_frames(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    return controller.run_script(templates.list_frames(file_path_arg(args)))


def _add_frame(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    count = optional_int(args, "count", 1, minimum=1, maximum=MAX_FRAMES_PER_CALL)
    empty = expect_bool(args["empty"], "empty") if "empty" in args else False
    return controller.run_script(templates.add_frame(file_path, count, empty))


def _remove_frame(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    frame_number = expect_int(args["frameNumber"], "frameNumber", minimum=1)
    return controller.run_script(templates.remove_frame(file_path, frame_number))


def _set_frame_duration(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    frame_number = expect_int(args["frameNumber"], "frameNumber", minimum=1)
    duration_ms = expect_int(args["durationMs"], "durationMs", minimum=1, maximum=MAX_DURATION_MS)
    return controller.run_script(templates.set_frame_duration(file_path, frame_number, duration_ms))


def _list_tags(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    return controller.run_script(templates.list_tags(file_path_arg(args)))


def _create_tag(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    name = expect_name(args["name"], "name")
    from_frame = expect_int(args["fromFrame"], "fromFrame", minimum=1)
    to_frame = expect_int(args["toFrame"], "toFrame", minimum=1)
    if to_frame < from_frame:
        raise ToolValidationError("Field 'toFrame' must be >= fromFrame.", "toFrame")
    ani_dir = expect_choice(args.get("aniDir", "forward"), "aniDir", ANI_DIR_CHOICES)
    color = expect_color(args["color"], "color") if "color" in args else None
    return controller.run_script(
        templates.create_tag(file_path, name, from_frame, to_frame, ani_dir=ani_dir, color=color)
    )


def _delete_tag(controller, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = file_path_arg(args)
    name = expect_name(args["name"], "name")
    return controller.run_script(templates.delete_tag(file_path, name))


TOOLS = [
    ToolDefinition(
        name="list_frames",
        description="List frames with their durations (seconds).",
        input_schema=object_schema({"filePath": FILE_PATH}, required=("filePath",)),
        handler=_list_frames,
    ),
    ToolDefinition(
        name="add_frame",
        description="Append frames, copying the last frame's content unless empty is set.",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "count": integer("Number of frames to add. Defaults to 1.", minimum=1, maximum=MAX_FRAMES_PER_CALL),
                "empty": boolean("Add empty frames instead of copies."),
            },
            required=("filePath",),
        ),
        handler=_add_frame,
    ),
    ToolDefinition(
        name="remove_frame",
        description="Delete a frame.",
        input_schema=object_schema(
            {"filePath": FILE_PATH, "frameNumber": integer("Frame number (1-based).", minimum=1)},
            required=("filePath", "frameNumber"),
        ),
        handler=_remove_frame,
    ),
    ToolDefinition(
        name="set_frame_duration",
        description="Set how long a frame is shown, in milliseconds.",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "frameNumber": integer("Frame number (1-based).", minimum=1),
                "durationMs": integer("Duration in milliseconds.", minimum=1, maximum=MAX_DURATION_MS),
            },
            required=("filePath", "frameNumber", "durationMs"),
        ),
        handler=_set_frame_duration,
    ),
    ToolDefinition(
        name="list_tags",
        description="List animation tags.",
        input_schema=object_schema({"filePath": FILE_PATH}, required=("filePath",)),
        handler=_list_tags,
    ),
    ToolDefinition(
        name="create_tag",
        description="Create an animation tag over a frame range.",
        input_schema=object_schema(
            {
                "filePath": FILE_PATH,
                "name": string("Tag name."),
                "fromFrame": integer("First frame (1-based).", minimum=1),
                "toFrame": integer("Last frame (1-based).", minimum=1),
                "aniDir": enum("Playback direction. Defaults to forward.", ANI_DIR_CHOICES),
                "color": COLOR,
            },
            required=("filePath", "name", "fromFrame", "toFrame"),
        ),
        handler=_create_tag,
    ),
    ToolDefinition(
        name="delete_tag",
        description="Delete an animation tag by name.",
        input_schema=object_schema(
            {"filePath": FILE_PATH, "name": string("Tag name.")},
            required=("filePath", "name"),
        ),
        handler=_delete_tag,
    ),
]
