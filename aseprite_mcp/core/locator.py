"""Locate the Aseprite executable once per process."""

from __future__ import annotations

import logging
import os
import shutil
import sys
from pathlib import Path
from typing import Callable, List, Optional, Union

from aseprite_mcp.core import config
from aseprite_mcp.core.errors import ExecutableNotFoundError

logger = logging.getLogger(__name__)

_NOT_FOUND = object()

NOT_FOUND_MESSAGE = (
    "Could not find the Aseprite executable. Set the ASEPRITE_PATH environment "
    "variable to the full path of the Aseprite executable."
)


def default_candidates(platform: Optional[str] = None) -> List[Path]:
    """Well-known install locations, in probe order, for one platform."""
    platform = platform or sys.platform
    home = Path(os.path.expanduser("~"))
    if platform.startswith("win"):
        return [
            Path(r"C:\Program Files\Aseprite\Aseprite.exe"),
            Path(r"C:\Program Files (x86)\Steam\steamapps\common\Aseprite\Aseprite.exe"),
            Path(r"C:\Program Files\Steam\steamapps\common\Aseprite\Aseprite.exe"),
        ]
    if platform == "darwin":
        return [
            Path("/Applications/Aseprite.app/Contents/MacOS/aseprite"),
            home
            / "Library/Application Support/Steam/steamapps/common/Aseprite"
            / "Aseprite.app/Contents/MacOS/aseprite",
        ]
    return [
        Path("/usr/bin/aseprite"),
        Path("/usr/local/bin/aseprite"),
        home / ".steam/debian-installation/steamapps/common/Aseprite/aseprite",
        home / ".local/share/Steam/steamapps/common/Aseprite/aseprite",
    ]


def _is_executable_file(path: Path) -> bool:
    return path.is_file() and os.access(str(path), os.X_OK)


class ExecutableLocator:
    """Resolves the editor binary lazily and caches the outcome.

    The cached value is written at most once per instance. Concurrent first
    calls may both probe the filesystem; they converge on the same answer,
    so no lock is taken.
    """

    def __init__(
        self,
        *,
        override: Optional[Union[str, Path]] = None,
        candidates: Optional[List[Path]] = None,
        which: Callable[[str], Optional[str]] = shutil.which,
    ) -> None:
        self._override = override
        self._candidates = candidates
        self._which = which
        self._resolved: object = None

    def resolve(self) -> Path:
        cached = self._resolved
        if cached is None:
            found = self._probe()
            cached = found if found is not None else _NOT_FOUND
            self._resolved = cached
            if found is not None:
                logger.info("Using Aseprite executable at %s", found)
            else:
                logger.error(NOT_FOUND_MESSAGE)
        if cached is _NOT_FOUND:
            raise ExecutableNotFoundError(NOT_FOUND_MESSAGE)
        return cached  # type: ignore[return-value]

    def _probe(self) -> Optional[Path]:
        override = self._override if self._override is not None else config.ASEPRITE_PATH
        if override:
            path = Path(override)
            if path.exists():
                return path
            logger.debug("ASEPRITE_PATH=%s does not exist, searching...", path)

        candidates = self._candidates if self._candidates is not None else default_candidates()
        for candidate in candidates:
            if _is_executable_file(candidate):
                return candidate

        on_path = self._which("aseprite")
        if on_path:
            return Path(on_path)
        return None


_default_locator: Optional[ExecutableLocator] = None


def get_default_locator() -> ExecutableLocator:
    global _default_locator
    if _default_locator is None:
        _default_locator = ExecutableLocator()
    return _default_locator
