"""Run the Aseprite executable in batch mode and capture its output."""

from __future__ import annotations

import contextvars
import itertools
import logging
import os
import subprocess
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Union

from aseprite_mcp.core import config
from aseprite_mcp.core.errors import SpawnError

logger = logging.getLogger(__name__)

BATCH_FLAG = "--batch"

# Set by the transport for the duration of one tool call; the runner kills
# its subprocess as soon as the event fires.
CURRENT_CANCEL_EVENT: contextvars.ContextVar[Optional[threading.Event]] = contextvars.ContextVar(
    "aseprite_mcp_cancel_event", default=None
)

_script_counter = itertools.count()


@dataclass(frozen=True)
class ProcessOutcome:
    exit_code: int
    stdout: str
    stderr: str
    duration_ms: float
    timed_out: bool = False
    cancelled: bool = False

    @property
    def success(self) -> bool:
        return self.exit_code == 0 and not self.timed_out and not self.cancelled


class ProcessRunner:
    """Executes one editor process per call.

    Every invocation carries ``--batch`` and receives no stdin, so the editor
    cannot wait on a prompt. Temporary script files are removed on every
    exit path.
    """

    def __init__(
        self,
        *,
        timeout: Optional[float] = None,
        temp_dir: Optional[Union[str, Path]] = None,
        poll_interval: Optional[float] = None,
    ) -> None:
        self._timeout = timeout
        self._temp_dir = temp_dir
        self._poll_interval = poll_interval

    @property
    def timeout(self) -> float:
        return self._timeout if self._timeout is not None else config.PROCESS_TIMEOUT_SECONDS

    @property
    def temp_dir(self) -> Path:
        return Path(self._temp_dir if self._temp_dir is not None else config.TEMP_DIR)

    def run_script(
        self,
        executable: Union[str, Path],
        script: str,
        *,
        file_path: Optional[str] = None,
        script_params: Optional[Mapping[str, str]] = None,
    ) -> ProcessOutcome:
        script_path = self._write_temp_script(script)
        try:
            argv: List[str] = [str(executable), BATCH_FLAG]
            if file_path is not None:
                argv.append(file_path)
            for key, value in (script_params or {}).items():
                argv.extend(["--script-param", f"{key}={value}"])
            argv.extend(["--script", str(script_path)])
            return self._execute(argv)
        finally:
            self._remove_temp_script(script_path)

    def run_cli(self, executable: Union[str, Path], args: Sequence[str]) -> ProcessOutcome:
        argv = [str(executable), BATCH_FLAG, *[str(arg) for arg in args]]
        return self._execute(argv)

    def _write_temp_script(self, script: str) -> Path:
        temp_dir = self.temp_dir
        try:
            temp_dir.mkdir(parents=True, exist_ok=True)
            script_path = temp_dir / f"mcp_{time.time_ns()}_{next(_script_counter)}.lua"
            script_path.write_text(script, encoding="utf-8")
        except OSError as exc:
            raise SpawnError(
                f"Failed to write temporary Lua script: {exc}",
                {"tempDir": str(temp_dir)},
            ) from exc
        return script_path

    def _remove_temp_script(self, script_path: Path) -> None:
        try:
            os.remove(script_path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Failed to clean up temp script %s: %s", script_path, exc)

    def _execute(self, argv: List[str]) -> ProcessOutcome:
        logger.debug("Spawning Aseprite: %s", argv)
        started = time.monotonic()
        try:
            process = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as exc:
            raise SpawnError(
                f"Failed to spawn Aseprite process: {exc}",
                {"executable": argv[0]},
            ) from exc

        cancel_event = CURRENT_CANCEL_EVENT.get()
        poll_interval = (
            self._poll_interval if self._poll_interval is not None else config.PROCESS_POLL_INTERVAL
        )
        timeout = self.timeout
        deadline = started + timeout
        timed_out = False
        cancelled = False
        stdout_bytes = b""
        stderr_bytes = b""

        while True:
            if cancel_event is not None and cancel_event.is_set():
                cancelled = True
                break
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                timed_out = True
                break
            try:
                stdout_bytes, stderr_bytes = process.communicate(
                    timeout=min(poll_interval, remaining)
                )
                break
            except subprocess.TimeoutExpired:
                continue

        if timed_out or cancelled:
            if timed_out:
                logger.warning("Aseprite process timed out after %ss, killing...", timeout)
            else:
                logger.warning("Aseprite process cancelled, killing...")
            process.kill()
            stdout_bytes, stderr_bytes = process.communicate()

        duration_ms = (time.monotonic() - started) * 1000.0
        outcome = ProcessOutcome(
            exit_code=process.returncode if process.returncode is not None else -1,
            stdout=stdout_bytes.decode("utf-8", errors="replace"),
            stderr=stderr_bytes.decode("utf-8", errors="replace"),
            duration_ms=duration_ms,
            timed_out=timed_out,
            cancelled=cancelled,
        )
        logger.debug(
            "Aseprite exit=%s stdout_len=%d stderr_len=%d duration_ms=%.1f",
            outcome.exit_code,
            len(outcome.stdout),
            len(outcome.stderr),
            outcome.duration_ms,
        )
        return outcome

