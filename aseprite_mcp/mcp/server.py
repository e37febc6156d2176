"""MCP server exposing Aseprite editing tools over stdio JSON-RPC."""

from __future__ import annotations

import json
import logging
import sys
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Tuple

from aseprite_mcp.bridge.controller import AsepriteController
from aseprite_mcp.bridge.runner import CURRENT_CANCEL_EVENT
from aseprite_mcp.core import config
from aseprite_mcp.core.errors import AsepriteError
from aseprite_mcp.mcp.tools.common import ToolDefinition
from aseprite_mcp.mcp.tools.registry import build_registry
from aseprite_mcp.mcp.validation import (
    ToolValidationError,
    expect_non_empty_string,
    expect_object,
    validate_allowed_keys,
)

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"
MCP_PROTOCOL_VERSION = "2024-11-05"

JSONRPC_PARSE_ERROR = -32700
JSONRPC_INVALID_REQUEST = -32600
JSONRPC_METHOD_NOT_FOUND = -32601
JSONRPC_INVALID_PARAMS = -32602
JSONRPC_INTERNAL_ERROR = -32603

SERVER_INSTRUCTIONS = (
    "Tools edit Aseprite documents on disk by running Aseprite in batch mode. "
    "Every tool takes the document path (filePath) and saves its changes in place "
    "unless an outputPath is given. Frame numbers are 1-based; palette indices are "
    "0-based; colors are hex strings (#rrggbb or #rrggbbaa)."
)


class McpError(Exception):
    """JSON-RPC / MCP protocol-level error."""

    def __init__(self, code: int, message: str, *, framed: bool = True) -> None:
        super().__init__(message)
        self.code = int(code)
        self.message = str(message)
        self.framed = framed


class AsepriteMcpServer:
    """Dispatches JSON-RPC messages to the tool catalog.

    ``tools/call`` requests may be handled concurrently from several threads;
    each registers a cancel event under its request id for the duration of
    the call so ``notifications/cancelled`` can stop its subprocess.
    """

    def __init__(
        self,
        *,
        controller: Optional[AsepriteController] = None,
        server_name: str = config.SERVER_NAME,
        server_version: str = config.SERVER_VERSION,
    ) -> None:
        self.controller = controller or AsepriteController()
        self.server_name = server_name
        self.server_version = server_version
        self._tools: Dict[str, ToolDefinition] = build_registry()
        self._in_flight: Dict[Any, threading.Event] = {}
        self._in_flight_lock = threading.Lock()

    def list_tools(self) -> List[Dict[str, Any]]:
        return [
            {
                "name": tool.name,
                "description": tool.description,
                "inputSchema": tool.input_schema,
            }
            for tool in self._tools.values()
        ]

    def cancel_request(self, request_id: Any) -> bool:
        with self._in_flight_lock:
            event = self._in_flight.get(request_id)
        if event is None:
            logger.debug("Cancellation for unknown or finished request %r", request_id)
            return False
        logger.info("Cancelling request %r", request_id)
        event.set()
        return True

    def handle_jsonrpc_message(self, message: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        request_id: Any = None
        is_notification = False
        try:
            if not isinstance(message, dict):
                raise McpError(JSONRPC_INVALID_REQUEST, "Request must be a JSON object.")

            request_id = message.get("id")
            is_notification = "id" not in message

            if message.get("jsonrpc") != JSONRPC_VERSION:
                raise McpError(JSONRPC_INVALID_REQUEST, "Only JSON-RPC 2.0 requests are supported.")

            if isinstance(request_id, (dict, list)):
                request_id = None
                raise McpError(JSONRPC_INVALID_REQUEST, "Field 'id' must be a string, number or null.")

            method = message.get("method")
            if not isinstance(method, str) or not method.strip():
                raise McpError(JSONRPC_INVALID_REQUEST, "Field 'method' must be a non-empty string.")

            params = message.get("params", {})
            if params is None:
                params = {}
            if not isinstance(params, dict):
                raise McpError(JSONRPC_INVALID_PARAMS, "Field 'params' must be an object.")

            if method == "initialize":
                result = {
                    "protocolVersion": MCP_PROTOCOL_VERSION,
                    "serverInfo": {
                        "name": self.server_name,
                        "version": self.server_version,
                    },
                    "capabilities": {
                        "tools": {
                            "listChanged": False,
                        }
                    },
                    "instructions": SERVER_INSTRUCTIONS,
                }
                return self._success_response(request_id, result)

            if method == "notifications/initialized":
                return None

            if method == "notifications/cancelled":
                self.cancel_request(params.get("requestId"))
                return None

            if method == "ping":
                return self._success_response(request_id, {})

            if method == "tools/list":
                return self._success_response(request_id, {"tools": self.list_tools()})

            if method == "tools/call":
                cancel_event = self._register(request_id, is_notification)
                try:
                    if cancel_event.is_set():
                        logger.info("Skipping request %r, cancelled before it started", request_id)
                        return None
                    tool_result = self._call_with_cancel_event(params, cancel_event)
                finally:
                    self._unregister(request_id, is_notification)
                if cancel_event.is_set():
                    # cancelled requests get no response
                    return None
                return self._success_response(request_id, tool_result)

            raise McpError(JSONRPC_METHOD_NOT_FOUND, f"Method '{method}' is not supported.")
        except McpError as exc:
            if is_notification:
                return None
            return self._error_response(request_id, exc.code, exc.message)
        except Exception as exc:
            logger.exception("Internal error while handling a JSON-RPC message")
            if is_notification:
                return None
            return self._error_response(
                request_id,
                JSONRPC_INTERNAL_ERROR,
                f"Internal server error: {exc}",
            )

    def track_request(self, message: Any) -> bool:
        """Make a ``tools/call`` cancellable while it is still waiting for a worker.

        The caller must hand the same message to ``handle_jsonrpc_message``
        or ``release_request`` afterwards.
        """
        if not _is_tool_call(message) or "id" not in message:
            return False
        request_id = message["id"]
        if isinstance(request_id, (dict, list)):
            return False
        self._register(request_id, False)
        return True

    def release_request(self, message: Any) -> None:
        if _is_tool_call(message) and "id" in message and not isinstance(message["id"], (dict, list)):
            self._unregister(message["id"], False)

    def _register(self, request_id: Any, is_notification: bool) -> threading.Event:
        if is_notification:
            return threading.Event()
        with self._in_flight_lock:
            # a request queued through track_request already has its event
            event = self._in_flight.get(request_id)
            if event is None:
                event = threading.Event()
                self._in_flight[request_id] = event
        return event

    def _unregister(self, request_id: Any, is_notification: bool) -> None:
        if not is_notification:
            with self._in_flight_lock:
                self._in_flight.pop(request_id, None)

    def _call_with_cancel_event(self, params: Dict[str, Any], cancel_event: threading.Event) -> Dict[str, Any]:
        token = CURRENT_CANCEL_EVENT.set(cancel_event)
        try:
            return self._handle_tools_call(params)
        finally:
            CURRENT_CANCEL_EVENT.reset(token)

    def _handle_tools_call(self, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            validate_allowed_keys(
                params,
                allowed={"name", "arguments", "_meta"},
                required={"name"},
                label="tools/call params",
            )
            tool_name = expect_non_empty_string(params.get("name"), "name")
            raw_arguments = params.get("arguments", {})
            if raw_arguments is None:
                raw_arguments = {}
            arguments = expect_object(raw_arguments, "arguments")
        except ToolValidationError as exc:
            raise McpError(JSONRPC_INVALID_PARAMS, exc.message) from exc

        tool = self._tools.get(tool_name)
        if tool is None:
            return self._tool_error(
                ToolValidationError(f"Unknown tool '{tool_name}'.", "name").to_payload()
            )

        logger.debug("tools/call %s", tool_name)
        try:
            tool.check_arguments(arguments)
            payload = tool.handler(self.controller, arguments)
        except ToolValidationError as exc:
            logger.info("Rejected arguments for '%s': %s", tool_name, exc.message)
            return self._tool_error(exc.to_payload())
        except AsepriteError as exc:
            logger.warning("Tool '%s' failed (%s): %s", tool_name, exc.kind, exc.message)
            return self._tool_error(exc.to_payload())
        except Exception as exc:
            logger.exception("Unhandled tool error in '%s'", tool_name)
            return self._tool_error(
                {"kind": "internal", "message": f"Unhandled tool error in '{tool_name}': {exc}"}
            )

        return {
            "content": [
                {
                    "type": "text",
                    "text": json.dumps(payload, sort_keys=True),
                }
            ],
            "structuredContent": payload,
            "isError": False,
        }

    def _tool_error(self, error: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "content": [{"type": "text", "text": f"{error['kind']}: {error['message']}"}],
            "structuredContent": {"error": error},
            "isError": True,
        }

    def _success_response(self, request_id: Any, result: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "jsonrpc": JSONRPC_VERSION,
            "id": request_id,
            "result": result,
        }

    def _error_response(self, request_id: Any, code: int, message: str) -> Dict[str, Any]:
        return {
            "jsonrpc": JSONRPC_VERSION,
            "id": request_id,
            "error": {"code": code, "message": message},
        }


def _read_message(stdin_buffer) -> Optional[Tuple[Any, bool]]:
    """Read one message and report whether it was Content-Length framed.

    Newline-delimited JSON and header-framed messages may be mixed on the
    same stream. Returns None at end of input.
    """
    while True:
        line = stdin_buffer.readline()
        if not line:
            return None
        if line.strip():
            break

    stripped = line.strip()
    if stripped.startswith((b"{", b"[")):
        try:
            return json.loads(stripped.decode("utf-8")), False
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise McpError(JSONRPC_PARSE_ERROR, f"Malformed JSON payload: {exc}", framed=False) from exc

    headers: Dict[str, str] = {}
    while True:
        decoded = line.decode("utf-8", errors="replace").strip()
        if ":" not in decoded:
            raise McpError(JSONRPC_PARSE_ERROR, f"Malformed header line: {decoded}")
        key, value = decoded.split(":", 1)
        headers[key.strip().lower()] = value.strip()
        line = stdin_buffer.readline()
        if not line:
            raise McpError(JSONRPC_PARSE_ERROR, "Unexpected EOF while reading headers.")
        if line in (b"\r\n", b"\n"):
            break

    if "content-length" not in headers:
        raise McpError(JSONRPC_PARSE_ERROR, "Missing Content-Length header.")
    try:
        content_length = int(headers["content-length"])
    except ValueError as exc:
        raise McpError(JSONRPC_PARSE_ERROR, "Invalid Content-Length value.") from exc

    payload_bytes = stdin_buffer.read(content_length)
    if len(payload_bytes) != content_length:
        raise McpError(JSONRPC_PARSE_ERROR, "Unexpected EOF while reading request payload.")

    try:
        return json.loads(payload_bytes.decode("utf-8")), True
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise McpError(JSONRPC_PARSE_ERROR, f"Malformed JSON payload: {exc}") from exc


def _write_message(stdout_buffer, payload: Dict[str, Any], *, framed: bool) -> None:
    body = json.dumps(payload).encode("utf-8")
    if framed:
        stdout_buffer.write(f"Content-Length: {len(body)}\r\n\r\n".encode("ascii"))
        stdout_buffer.write(body)
    else:
        stdout_buffer.write(body + b"\n")
    stdout_buffer.flush()


def _is_tool_call(message: Any) -> bool:
    return isinstance(message, dict) and message.get("method") == "tools/call"


def run_stdio_mcp_server(
    server: Optional[AsepriteMcpServer] = None,
    *,
    stdin=None,
    stdout=None,
    max_workers: Optional[int] = None,
) -> int:
    active_server = server or AsepriteMcpServer()
    stdin_buffer = stdin if stdin is not None else sys.stdin.buffer
    stdout_buffer = stdout if stdout is not None else sys.stdout.buffer
    write_lock = threading.Lock()

    def respond(payload: Dict[str, Any], framed: bool) -> None:
        with write_lock:
            try:
                _write_message(stdout_buffer, payload, framed=framed)
            except (OSError, ValueError) as exc:
                logger.warning("Failed to write response: %s", exc)

    def serve_tool_call(message: Dict[str, Any], framed: bool) -> None:
        try:
            response = active_server.handle_jsonrpc_message(message)
        finally:
            # envelope errors return before the call unregisters itself
            active_server.release_request(message)
        if response is not None:
            respond(response, framed)

    workers = max_workers or config.MAX_WORKERS
    logger.debug("Serving stdio with %d tool worker(s)", workers)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="aseprite-tool") as executor:
        while True:
            try:
                incoming = _read_message(stdin_buffer)
            except McpError as exc:
                respond(
                    {
                        "jsonrpc": JSONRPC_VERSION,
                        "id": None,
                        "error": {"code": exc.code, "message": exc.message},
                    },
                    exc.framed,
                )
                continue

            if incoming is None:
                break

            message, framed = incoming
            if _is_tool_call(message):
                active_server.track_request(message)
                executor.submit(serve_tool_call, message, framed)
                continue

            response = active_server.handle_jsonrpc_message(message)
            if response is not None:
                respond(response, framed)
    return 0


def main() -> int:
    config.configure_logging()
    logger.info("Starting %s %s", config.SERVER_NAME, config.SERVER_VERSION)
    return run_stdio_mcp_server()


if __name__ == "__main__":
    raise SystemExit(main())
