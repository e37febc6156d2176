"""Command-line arguments for exports.

Exports use the application's own ``--save-as`` and ``--sheet`` options
instead of a script, so these builders return argument lists.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

SHEET_TYPES = ("horizontal", "vertical", "rows", "columns", "packed")


@dataclass(frozen=True)
class CliInvocation:
    args: List[str]
    outputs: List[str] = field(default_factory=list)


def export_sprite(
    file_path: str,
    output_path: str,
    *,
    scale: Optional[int] = None,
    layer: Optional[str] = None,
    tag: Optional[str] = None,
) -> CliInvocation:
    args = [file_path]
    if scale is not None:
        args.extend(["--scale", str(scale)])
    if layer is not None:
        args.extend(["--layer", layer])
    if tag is not None:
        args.extend(["--tag", tag])
    args.extend(["--save-as", output_path])
    return CliInvocation(args=args, outputs=[output_path])


def export_spritesheet(
    file_path: str,
    output_image: str,
    *,
    output_data: Optional[str] = None,
    sheet_type: Optional[str] = None,
    columns: Optional[int] = None,
    trim: bool = False,
) -> CliInvocation:
    args = [file_path, "--sheet", output_image]
    outputs = [output_image]
    if output_data is not None:
        args.extend(["--data", output_data])
        outputs.append(output_data)
    if sheet_type is not None:
        args.extend(["--sheet-type", sheet_type])
    if columns is not None:
        args.extend(["--sheet-columns", str(columns)])
    if trim:
        args.append("--trim")
    return CliInvocation(args=args, outputs=outputs)
