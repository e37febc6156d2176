"""Hex color parsing for tool arguments."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Tuple

_HEX_RGB = re.compile(r"^[0-9a-fA-F]{6}$")
_HEX_RGBA = re.compile(r"^[0-9a-fA-F]{8}$")


class ColorFormatError(ValueError):
    """Raised for strings that are not 6- or 8-digit hex colors."""


@dataclass(frozen=True)
class Color:
    red: int
    green: int
    blue: int
    alpha: int = 255

    @classmethod
    def parse(cls, text: str) -> "Color":
        """Parse ``rrggbb`` or ``rrggbbaa`` (case-insensitive, optional leading ``#``).

        Alpha defaults to 255 when only six digits are given.
        """
        if not isinstance(text, str):
            raise ColorFormatError("expected a hex color string")
        digits = text[1:] if text.startswith("#") else text
        if _HEX_RGB.match(digits):
            alpha = 255
        elif _HEX_RGBA.match(digits):
            alpha = int(digits[6:8], 16)
        else:
            raise ColorFormatError(
                f"expected 6 or 8 hex digits (#rrggbb or #rrggbbaa), got {text!r}"
            )
        return cls(
            red=int(digits[0:2], 16),
            green=int(digits[2:4], 16),
            blue=int(digits[4:6], 16),
            alpha=alpha,
        )

    def to_hex(self, with_alpha: bool = True) -> str:
        if with_alpha:
            return f"#{self.red:02x}{self.green:02x}{self.blue:02x}{self.alpha:02x}"
        return f"#{self.red:02x}{self.green:02x}{self.blue:02x}"

    @property
    def rgba(self) -> Tuple[int, int, int, int]:
        return (self.red, self.green, self.blue, self.alpha)
