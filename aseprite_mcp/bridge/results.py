"""Turn a finished editor process into a result payload or a typed failure."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from aseprite_mcp.bridge.runner import ProcessOutcome
from aseprite_mcp.core.errors import (
    LogicalError,
    ResultParseError,
    ScriptCancelledError,
    ScriptTimeoutError,
)

_decoder = json.JSONDecoder()


def find_json_objects(text: str) -> List[Dict[str, Any]]:
    """Every top-level JSON object embedded in ``text``, in stream order.

    Scripts may print diagnostics around the result line, so decoding is
    attempted at each ``{``; a decoded object consumes its whole span.
    """
    objects: List[Dict[str, Any]] = []
    index = text.find("{")
    while index != -1:
        try:
            value, end = _decoder.raw_decode(text, index)
        except json.JSONDecodeError:
            index = text.find("{", index + 1)
            continue
        if isinstance(value, dict):
            objects.append(value)
        index = text.find("{", end)
    return objects


def last_json_object(text: str) -> Optional[Dict[str, Any]]:
    objects = find_json_objects(text)
    return objects[-1] if objects else None


def _raise_for_interrupted(outcome: ProcessOutcome, timeout: Optional[float]) -> None:
    if outcome.timed_out:
        seconds = f"{timeout:g} seconds" if timeout is not None else "the configured timeout"
        raise ScriptTimeoutError(
            f"Aseprite process timed out after {seconds}. The operation may be too "
            "complex or Aseprite may be unresponsive.",
            {"timeoutSeconds": timeout, "stderr": outcome.stderr},
        )
    if outcome.cancelled:
        raise ScriptCancelledError("Request was cancelled; the Aseprite process was terminated.")


def parse_script_result(outcome: ProcessOutcome, *, timeout: Optional[float] = None) -> Dict[str, Any]:
    """Classify the outcome of a generated script.

    The last JSON object on stdout is the result. An ``error`` field marks a
    logical failure, as does a non-zero exit code after an otherwise
    successful-looking result.
    """
    _raise_for_interrupted(outcome, timeout)

    result = last_json_object(outcome.stdout)
    if result is None:
        raise ResultParseError(
            "Aseprite produced no JSON result.",
            {
                "exitCode": outcome.exit_code,
                "stdout": outcome.stdout,
                "stderr": outcome.stderr,
            },
        )

    if "error" in result:
        raise LogicalError(
            str(result["error"]),
            {"exitCode": outcome.exit_code, "result": result},
        )

    if outcome.exit_code != 0:
        message = outcome.stderr.strip() or f"Aseprite exited with status {outcome.exit_code}."
        raise LogicalError(message, {"exitCode": outcome.exit_code, "result": result})

    return result


def parse_cli_result(outcome: ProcessOutcome, *, timeout: Optional[float] = None) -> Dict[str, Any]:
    """Classify a raw CLI run, which reports through its exit code instead of JSON."""
    _raise_for_interrupted(outcome, timeout)
    if outcome.exit_code != 0:
        message = (
            outcome.stderr.strip()
            or outcome.stdout.strip()
            or f"Aseprite exited with status {outcome.exit_code}."
        )
        raise LogicalError(
            message,
            {"exitCode": outcome.exit_code, "stdout": outcome.stdout, "stderr": outcome.stderr},
        )
    return {
        "exitCode": outcome.exit_code,
        "stdout": outcome.stdout,
        "stderr": outcome.stderr,
    }
