"""Failure taxonomy shared by the process bridge and the tool router."""

from __future__ import annotations

from typing import Any, Dict, Optional


class AsepriteError(Exception):
    """Structured failure raised anywhere between script rendering and result parsing."""

    kind = "error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = str(message)
        self.details: Dict[str, Any] = dict(details or {})

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"kind": self.kind, "message": self.message}
        payload.update(self.details)
        return payload


class ExecutableNotFoundError(AsepriteError):
    kind = "executable_not_found"


class SpawnError(AsepriteError):
    kind = "spawn"


class ScriptTimeoutError(AsepriteError):
    kind = "timeout"


class ScriptCancelledError(AsepriteError):
    kind = "cancelled"


class LogicalError(AsepriteError):
    """The editor ran the script and reported the operation as failed."""

    kind = "logical"


class ResultParseError(AsepriteError):
    """No decodable JSON result; raw streams are attached for diagnosis."""

    kind = "parse"
