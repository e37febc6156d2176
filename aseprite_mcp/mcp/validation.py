"""Argument validators for tool handlers.

Every check runs before a script is rendered, so a rejected request never
starts a process.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple

from aseprite_mcp.core.colors import Color, ColorFormatError


class ToolValidationError(Exception):
    """Input validation error for tool arguments."""

    kind = "validation"

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = str(message)
        self.field = field

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"kind": self.kind, "message": self.message}
        if self.field is not None:
            payload["field"] = self.field
        return payload


def expect_object(value: Any, field_name: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ToolValidationError(f"Field '{field_name}' must be an object.", field_name)
    return value


def expect_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ToolValidationError(f"Field '{field_name}' must be a non-empty string.", field_name)
    return value.strip()


def expect_name(value: Any, field_name: str) -> str:
    """Layer, tag and slice names are matched exactly, so surrounding spaces are kept."""
    if not isinstance(value, str) or not value.strip():
        raise ToolValidationError(f"Field '{field_name}' must be a non-empty string.", field_name)
    return value


def expect_document_path(value: Any, field_name: str) -> str:
    # paths are passed on the command line; a leading dash would read as an option
    path = expect_non_empty_string(value, field_name)
    if path.startswith("-"):
        raise ToolValidationError(f"Field '{field_name}' must not start with '-'.", field_name)
    return path


def expect_string(value: Any, field_name: str) -> str:
    """Like ``expect_non_empty_string`` but keeps the text as given (slice data)."""
    if not isinstance(value, str):
        raise ToolValidationError(f"Field '{field_name}' must be a string.", field_name)
    return value


def expect_int(
    value: Any,
    field_name: str,
    *,
    minimum: Optional[int] = None,
    maximum: Optional[int] = None,
) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ToolValidationError(f"Field '{field_name}' must be an integer.", field_name)
    if minimum is not None and value < minimum:
        raise ToolValidationError(f"Field '{field_name}' must be >= {minimum}.", field_name)
    if maximum is not None and value > maximum:
        raise ToolValidationError(f"Field '{field_name}' must be <= {maximum}.", field_name)
    return value


def expect_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ToolValidationError(f"Field '{field_name}' must be a boolean.", field_name)
    return value


def expect_choice(value: Any, field_name: str, choices: Iterable[str]) -> str:
    options = list(choices)
    if not isinstance(value, str) or value not in options:
        raise ToolValidationError(
            f"Field '{field_name}' must be one of: {', '.join(options)}.", field_name
        )
    return value


def expect_color(value: Any, field_name: str) -> Color:
    try:
        return Color.parse(value)
    except ColorFormatError as exc:
        raise ToolValidationError(f"Field '{field_name}': {exc}", field_name) from exc


def expect_list(value: Any, field_name: str, *, max_items: Optional[int] = None) -> List[Any]:
    """A non-empty array; empty arrays are rejected rather than treated as no-ops."""
    if not isinstance(value, list) or not value:
        raise ToolValidationError(f"Field '{field_name}' must be a non-empty array.", field_name)
    if max_items is not None and len(value) > max_items:
        raise ToolValidationError(
            f"Field '{field_name}' must have at most {max_items} items.", field_name
        )
    return value


def expect_point(value: Any, field_name: str) -> Tuple[int, int]:
    value_obj = expect_object(value, field_name)
    validate_allowed_keys(value_obj, allowed={"x", "y"}, required={"x", "y"}, label=f"Field '{field_name}'")
    return (
        expect_int(value_obj["x"], f"{field_name}.x"),
        expect_int(value_obj["y"], f"{field_name}.y"),
    )


def expect_rect(value: Any, field_name: str) -> Tuple[int, int, int, int]:
    value_obj = expect_object(value, field_name)
    keys = {"x", "y", "width", "height"}
    validate_allowed_keys(value_obj, allowed=keys, required=keys, label=f"Field '{field_name}'")
    return (
        expect_int(value_obj["x"], f"{field_name}.x"),
        expect_int(value_obj["y"], f"{field_name}.y"),
        expect_int(value_obj["width"], f"{field_name}.width", minimum=1),
        expect_int(value_obj["height"], f"{field_name}.height", minimum=1),
    )


def validate_allowed_keys(
    payload: Dict[str, Any],
    *,
    allowed: set[str],
    required: set[str],
    label: str,
) -> None:
    unknown = sorted(set(payload) - allowed)
    if unknown:
        raise ToolValidationError(
            f"{label} has unknown field(s): {', '.join(unknown)}.", unknown[0]
        )

    missing = sorted(field for field in required if field not in payload)
    if missing:
        raise ToolValidationError(
            f"{label} missing required field(s): {', '.join(missing)}.", missing[0]
        )
