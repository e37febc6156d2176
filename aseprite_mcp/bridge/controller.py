"""Command layer between the tool router and the Aseprite process."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

from aseprite_mcp.bridge.results import parse_cli_result, parse_script_result
from aseprite_mcp.bridge.runner import ProcessRunner
from aseprite_mcp.core.errors import ResultParseError
from aseprite_mcp.core.locator import ExecutableLocator, get_default_locator
from aseprite_mcp.templates.lua import GeneratedScript

logger = logging.getLogger(__name__)


class AsepriteController:
    """Runs rendered scripts and raw CLI invocations, returning parsed payloads.

    Failures surface as ``AsepriteError`` subclasses. The executable is
    resolved before anything is written or spawned, so a missing install
    fails fast.
    """

    def __init__(
        self,
        *,
        locator: Optional[ExecutableLocator] = None,
        runner: Optional[ProcessRunner] = None,
    ) -> None:
        self.locator = locator or get_default_locator()
        self.runner = runner or ProcessRunner()

    def run_script(
        self,
        script: GeneratedScript,
        *,
        allow_plain_output: bool = False,
    ) -> Dict[str, Any]:
        executable = self.locator.resolve()
        outcome = self.runner.run_script(executable, script.source, file_path=script.file_path)
        try:
            return parse_script_result(outcome, timeout=self.runner.timeout)
        except ResultParseError:
            if allow_plain_output and outcome.exit_code == 0:
                return {"output": outcome.stdout.strip()}
            logger.error(
                "Script%s produced no JSON result (exit=%s): %s",
                f" on {script.file_path}" if script.file_path else "",
                outcome.exit_code,
                outcome.stderr.strip(),
            )
            raise

    def run_cli(self, args: Sequence[str]) -> Dict[str, Any]:
        executable = self.locator.resolve()
        outcome = self.runner.run_cli(executable, args)
        return parse_cli_result(outcome, timeout=self.runner.timeout)
