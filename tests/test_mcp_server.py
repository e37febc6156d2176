import io
import json
import threading

import pytest

from aseprite_mcp.bridge.controller import AsepriteController
from aseprite_mcp.bridge.runner import BATCH_FLAG, CURRENT_CANCEL_EVENT, ProcessOutcome, ProcessRunner
from aseprite_mcp.core import config
from aseprite_mcp.core.errors import LogicalError, ScriptCancelledError, ScriptTimeoutError
from aseprite_mcp.core.locator import ExecutableLocator
from aseprite_mcp.mcp.server import (
    JSONRPC_INVALID_PARAMS,
    JSONRPC_INVALID_REQUEST,
    JSONRPC_METHOD_NOT_FOUND,
    JSONRPC_PARSE_ERROR,
    MCP_PROTOCOL_VERSION,
    AsepriteMcpServer,
    run_stdio_mcp_server,
)
from aseprite_mcp.mcp.tools.registry import all_tools


class FakeController:
    def __init__(self, result=None, error=None):
        self.calls = []
        self.result = result if result is not None else {"status": "ok"}
        self.error = error

    def run_script(self, script, *, allow_plain_output=False):
        self.calls.append(("run_script", script, allow_plain_output))
        if self.error is not None:
            raise self.error
        return dict(self.result)

    def run_cli(self, args):
        self.calls.append(("run_cli", list(args)))
        if self.error is not None:
            raise self.error
        return {"exitCode": 0, "stdout": "done\n", "stderr": ""}


class RecordingRunner(ProcessRunner):
    """Real temp-file handling, with the spawn replaced by a canned outcome."""

    def __init__(self, stdout, **kwargs):
        super().__init__(**kwargs)
        self.argvs = []
        self._stdout = stdout

    def _execute(self, argv):
        self.argvs.append(list(argv))
        return ProcessOutcome(exit_code=0, stdout=self._stdout, stderr="", duration_ms=3.0)


def _rpc_request(request_id, method, params=None):
    payload = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        payload["params"] = params
    return payload


def _call(server, request_id, name, arguments):
    return server.handle_jsonrpc_message(
        _rpc_request(request_id, "tools/call", {"name": name, "arguments": arguments})
    )


def test_mcp_initialize_and_tools_list():
    server = AsepriteMcpServer(controller=FakeController())

    init_response = server.handle_jsonrpc_message(_rpc_request(1, "initialize", {}))
    assert init_response["id"] == 1
    assert init_response["result"]["protocolVersion"] == MCP_PROTOCOL_VERSION
    assert init_response["result"]["serverInfo"]["name"] == "aseprite-mcp"
    assert init_response["result"]["capabilities"]["tools"]["listChanged"] is False
    assert "1-based" in init_response["result"]["instructions"]

    list_response = server.handle_jsonrpc_message(_rpc_request(2, "tools/list", {}))
    tools = list_response["result"]["tools"]
    tool_names = {tool["name"] for tool in tools}
    assert len(tool_names) == len(tools)
    assert {
        "create_sprite",
        "get_sprite_info",
        "draw_pixels",
        "use_tool",
        "get_pixel_data",
        "export_sprite",
        "export_spritesheet",
        "run_lua_script",
        "execute_cli",
    } <= tool_names


def test_every_tool_schema_is_closed_and_consistent():
    server = AsepriteMcpServer(controller=FakeController())

    for tool in server.list_tools():
        schema = tool["inputSchema"]
        assert tool["description"], tool["name"]
        assert schema["type"] == "object"
        assert schema["additionalProperties"] is False
        assert set(schema.get("required", [])) <= set(schema["properties"]), tool["name"]


def test_ping_and_initialized_notification():
    server = AsepriteMcpServer(controller=FakeController())

    assert server.handle_jsonrpc_message(_rpc_request(5, "ping"))["result"] == {}
    assert server.handle_jsonrpc_message({"jsonrpc": "2.0", "method": "notifications/initialized"}) is None


def test_unknown_method_and_bad_envelopes():
    server = AsepriteMcpServer(controller=FakeController())

    unknown = server.handle_jsonrpc_message(_rpc_request(6, "resources/list"))
    assert unknown["error"]["code"] == JSONRPC_METHOD_NOT_FOUND

    wrong_version = server.handle_jsonrpc_message({"jsonrpc": "1.0", "id": 7, "method": "ping"})
    assert wrong_version["error"]["code"] == JSONRPC_INVALID_REQUEST

    bad_params = server.handle_jsonrpc_message(
        _rpc_request(8, "tools/call", {"name": "get_sprite_info", "arguments": ["a.aseprite"]})
    )
    assert bad_params["error"]["code"] == JSONRPC_INVALID_PARAMS

    assert server.handle_jsonrpc_message({"jsonrpc": "2.0", "method": "unknown/notification"}) is None


def test_unknown_tool_is_validation_failure():
    controller = FakeController()
    server = AsepriteMcpServer(controller=controller)

    response = _call(server, 9, "erase_everything", {})

    result = response["result"]
    assert result["isError"] is True
    assert result["structuredContent"]["error"]["kind"] == "validation"
    assert result["content"][0]["text"].startswith("validation:")
    assert controller.calls == []


def test_missing_required_argument_never_reaches_controller():
    controller = FakeController()
    server = AsepriteMcpServer(controller=controller)

    response = _call(server, 10, "resize_sprite", {"filePath": "hero.aseprite", "width": 32})

    error = response["result"]["structuredContent"]["error"]
    assert response["result"]["isError"] is True
    assert error["kind"] == "validation"
    assert error["field"] == "height"
    assert controller.calls == []


@pytest.mark.parametrize(
    "name,missing",
    [
        (tool.name, field)
        for tool in all_tools()
        for field in tool.input_schema.get("required", [])
    ],
)
def test_every_required_argument_is_enforced(name, missing):
    controller = FakeController()
    server = AsepriteMcpServer(controller=controller)
    tool = next(tool for tool in all_tools() if tool.name == name)
    arguments = {
        field: "x" for field in tool.input_schema["required"] if field != missing
    }

    response = _call(server, 23, name, arguments)

    error = response["result"]["structuredContent"]["error"]
    assert response["result"]["isError"] is True
    assert error["kind"] == "validation"
    assert error["field"] == missing
    assert controller.calls == []


@pytest.mark.parametrize(
    "name,arguments",
    [
        ("get_sprite_info", {"filePath": "--script=evil.lua"}),
        ("create_sprite", {"filePath": "-x.aseprite", "width": 8, "height": 8}),
        ("run_lua_script", {"script": "print(1)", "filePath": "--shell"}),
        ("export_sprite", {"filePath": "hero.aseprite", "outputPath": "--list-layers"}),
    ],
)
def test_paths_that_look_like_options_are_rejected(name, arguments, monkeypatch):
    monkeypatch.setattr(config, "OUTPUT_DIR", None)
    controller = FakeController()
    server = AsepriteMcpServer(controller=controller)

    response = _call(server, 24, name, arguments)

    result = response["result"]
    assert result["isError"] is True
    assert result["structuredContent"]["error"]["kind"] == "validation"
    assert controller.calls == []


def test_layer_names_keep_surrounding_spaces():
    controller = FakeController()
    server = AsepriteMcpServer(controller=controller)

    response = _call(
        server,
        25,
        "set_layer_property",
        {"filePath": " hero.aseprite ", "name": " Ink ", "newName": "  Ink 2"},
    )

    assert response["result"]["isError"] is False
    script = controller.calls[0][1]
    assert script.file_path == "hero.aseprite"
    assert 'find_layer(spr.layers, " Ink ")' in script.source
    assert 'layer.name = "  Ink 2"' in script.source


def test_blank_layer_name_is_rejected():
    controller = FakeController()
    server = AsepriteMcpServer(controller=controller)

    response = _call(server, 26, "remove_layer", {"filePath": "hero.aseprite", "name": "   "})

    assert response["result"]["structuredContent"]["error"]["field"] == "name"
    assert controller.calls == []


def test_unknown_argument_is_rejected():
    controller = FakeController()
    server = AsepriteMcpServer(controller=controller)

    response = _call(server, 11, "get_sprite_info", {"filePath": "hero.aseprite", "verbose": True})

    assert response["result"]["isError"] is True
    assert response["result"]["structuredContent"]["error"]["field"] == "verbose"
    assert controller.calls == []


@pytest.mark.parametrize(
    "name,arguments,field",
    [
        ("set_layer_property", {"filePath": "a.aseprite", "name": "Ink", "opacity": 300}, "opacity"),
        ("set_layer_property", {"filePath": "a.aseprite", "name": "Ink", "blendMode": "glow"}, "blendMode"),
        ("draw_pixels", {"filePath": "a.aseprite", "pixels": []}, "pixels"),
        (
            "draw_pixels",
            {"filePath": "a.aseprite", "pixels": [{"x": 0, "y": 0, "color": "#ff00"}]},
            "pixels[0].color",
        ),
        ("use_tool", {"filePath": "a.aseprite", "tool": "laser", "points": [{"x": 0, "y": 0}], "color": "#000000"}, "tool"),
        ("use_tool", {"filePath": "a.aseprite", "tool": "pencil", "points": [], "color": "#000000"}, "points"),
        ("create_sprite", {"filePath": "a.aseprite", "width": 0, "height": 16}, "width"),
        ("create_sprite", {"filePath": "a.aseprite", "width": True, "height": 16}, "width"),
        ("rotate_sprite", {"filePath": "a.aseprite", "angle": 45}, "angle"),
        ("get_pixel_data", {"filePath": "a.aseprite", "x": 0, "y": 0, "width": 512, "height": 512}, "width"),
        ("set_palette_color", {"filePath": "a.aseprite", "colors": [{"index": 256, "color": "#000000"}]}, "colors[0].index"),
        ("execute_cli", {"args": []}, "args"),
        ("execute_cli", {"args": ["--version", 3]}, "args[1]"),
        ("select_region", {"filePath": "a.aseprite", "x": 0, "y": 0, "width": 4, "height": 4, "mode": "xor"}, "mode"),
        ("create_tag", {"filePath": "a.aseprite", "name": "walk", "fromFrame": 4, "toFrame": 2}, "toFrame"),
    ],
)
def test_invalid_arguments_are_rejected_before_any_process(name, arguments, field):
    controller = FakeController()
    server = AsepriteMcpServer(controller=controller)

    response = _call(server, 12, name, arguments)

    result = response["result"]
    assert result["isError"] is True
    assert result["structuredContent"]["error"]["kind"] == "validation"
    assert result["structuredContent"]["error"]["field"] == field
    assert controller.calls == []


def test_set_layer_property_needs_one_property():
    controller = FakeController()
    server = AsepriteMcpServer(controller=controller)

    response = _call(server, 13, "set_layer_property", {"filePath": "a.aseprite", "name": "Ink"})

    assert response["result"]["isError"] is True
    assert controller.calls == []


def test_create_sprite_runs_exactly_one_batch_process(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "OUTPUT_DIR", None)
    executable = tmp_path / "aseprite"
    executable.write_text("", encoding="utf-8")
    runner = RecordingRunner(
        '{"status":"created","width":64,"height":64,"filename":"player.aseprite","colorMode":"ColorMode.INDEXED"}\n',
        timeout=5,
        temp_dir=tmp_path / "scripts",
    )
    controller = AsepriteController(locator=ExecutableLocator(override=executable), runner=runner)
    server = AsepriteMcpServer(controller=controller)

    response = _call(
        server,
        14,
        "create_sprite",
        {"filePath": "player.aseprite", "width": 64, "height": 64, "colorMode": "indexed"},
    )

    result = response["result"]
    assert result["isError"] is False
    assert result["structuredContent"]["width"] == 64
    assert result["structuredContent"]["height"] == 64
    assert json.loads(result["content"][0]["text"]) == result["structuredContent"]
    assert len(runner.argvs) == 1
    argv = runner.argvs[0]
    assert argv[0] == str(executable)
    assert argv[1] == BATCH_FLAG
    assert argv[2] == "--script"
    assert list((tmp_path / "scripts").glob("*.lua")) == []


def test_create_sprite_resolves_against_output_dir(tmp_path, monkeypatch):
    out_dir = tmp_path / "out"
    monkeypatch.setattr(config, "OUTPUT_DIR", str(out_dir))
    controller = FakeController()
    server = AsepriteMcpServer(controller=controller)

    _call(server, 15, "create_sprite", {"filePath": "player.aseprite", "width": 8, "height": 8})

    script = controller.calls[0][1]
    assert (out_dir / "player.aseprite").as_posix() in script.source
    assert out_dir.is_dir()


def test_draw_pixels_builds_single_script():
    controller = FakeController(result={"status": "drawn", "pixelCount": 2, "requested": 2})
    server = AsepriteMcpServer(controller=controller)

    response = _call(
        server,
        16,
        "draw_pixels",
        {
            "filePath": "hero.aseprite",
            "pixels": [
                {"x": 1, "y": 1, "color": "#ff0000"},
                {"x": 2, "y": 1, "color": "00ff00cc"},
            ],
            "layer": "Ink",
            "frame": 2,
        },
    )

    assert response["result"]["isError"] is False
    assert response["result"]["structuredContent"]["pixelCount"] == 2
    kind, script, allow_plain = controller.calls[0]
    assert kind == "run_script"
    assert allow_plain is False
    assert script.file_path == "hero.aseprite"
    assert "{ 2, 1, 0, 255, 0, 204 }," in script.source


def test_run_lua_script_allows_plain_output():
    controller = FakeController(result={"output": "hello"})
    server = AsepriteMcpServer(controller=controller)

    response = _call(server, 17, "run_lua_script", {"script": 'print("hello")'})

    assert response["result"]["structuredContent"] == {"output": "hello"}
    assert controller.calls[0][2] is True
    assert controller.calls[0][1].file_path is None


def test_export_spritesheet_lists_outputs(monkeypatch):
    monkeypatch.setattr(config, "OUTPUT_DIR", None)
    controller = FakeController()
    server = AsepriteMcpServer(controller=controller)

    response = _call(
        server,
        18,
        "export_spritesheet",
        {"filePath": "hero.aseprite", "outputImage": "sheet.png", "outputData": "sheet.json", "trim": True},
    )

    payload = response["result"]["structuredContent"]
    assert payload["status"] == "exported"
    assert payload["outputs"] == ["sheet.png", "sheet.json"]
    assert controller.calls == [
        ("run_cli", ["hero.aseprite", "--sheet", "sheet.png", "--data", "sheet.json", "--trim"])
    ]


def test_execute_cli_returns_streams():
    controller = FakeController()
    server = AsepriteMcpServer(controller=controller)

    response = _call(server, 19, "execute_cli", {"args": ["--version"]})

    assert response["result"]["structuredContent"] == {"exitCode": 0, "stdout": "done\n", "stderr": ""}
    assert controller.calls == [("run_cli", ["--version"])]


@pytest.mark.parametrize(
    "error,kind",
    [
        (LogicalError("Layer not found: Ink", {"exitCode": 0}), "logical"),
        (ScriptTimeoutError("Aseprite process timed out", {"timeoutSeconds": 1.0}), "timeout"),
    ],
)
def test_bridge_errors_become_tool_failures(error, kind):
    server = AsepriteMcpServer(controller=FakeController(error=error))

    response = _call(server, 20, "list_layers", {"filePath": "hero.aseprite"})

    result = response["result"]
    assert result["isError"] is True
    assert result["structuredContent"]["error"]["kind"] == kind
    assert result["structuredContent"]["error"]["message"] == error.message
    assert result["content"][0]["text"] == f"{kind}: {error.message}"


def test_unexpected_handler_exception_is_internal_tool_error():
    server = AsepriteMcpServer(controller=FakeController(error=RuntimeError("boom")))

    response = _call(server, 21, "list_layers", {"filePath": "hero.aseprite"})

    assert response["result"]["isError"] is True
    assert response["result"]["structuredContent"]["error"]["kind"] == "internal"


class BlockingController:
    def __init__(self):
        self.started = threading.Event()
        self.saw_cancel_event = False

    def run_script(self, script, *, allow_plain_output=False):
        cancel_event = CURRENT_CANCEL_EVENT.get()
        self.saw_cancel_event = cancel_event is not None
        self.started.set()
        if cancel_event is not None and cancel_event.wait(5):
            raise ScriptCancelledError("Request was cancelled")
        return {"status": "ok"}


def test_cancelled_request_gets_no_response():
    controller = BlockingController()
    server = AsepriteMcpServer(controller=controller)
    responses = []

    worker = threading.Thread(
        target=lambda: responses.append(_call(server, 22, "list_layers", {"filePath": "hero.aseprite"}))
    )
    worker.start()
    assert controller.started.wait(5)

    ack = server.handle_jsonrpc_message(
        {"jsonrpc": "2.0", "method": "notifications/cancelled", "params": {"requestId": 22}}
    )
    worker.join(5)

    assert ack is None
    assert controller.saw_cancel_event is True
    assert responses == [None]
    assert server.cancel_request(22) is False


def test_stdio_loop_newline_framing():
    controller = FakeController(result={"status": "ok", "layers": []})
    lines = [
        _rpc_request(1, "initialize", {}),
        {"jsonrpc": "2.0", "method": "notifications/initialized"},
        _rpc_request(2, "tools/call", {"name": "list_layers", "arguments": {"filePath": "a.aseprite"}}),
        _rpc_request(3, "ping"),
    ]
    stdin = io.BytesIO(b"".join(json.dumps(line).encode("utf-8") + b"\n" for line in lines))
    stdout = io.BytesIO()

    exit_code = run_stdio_mcp_server(
        AsepriteMcpServer(controller=controller), stdin=stdin, stdout=stdout, max_workers=1
    )

    assert exit_code == 0
    responses = {
        message["id"]: message
        for message in (json.loads(line) for line in stdout.getvalue().splitlines() if line.strip())
    }
    assert set(responses) == {1, 2, 3}
    assert responses[2]["result"]["structuredContent"] == {"status": "ok", "layers": []}


def test_stdio_loop_content_length_framing():
    body = json.dumps(_rpc_request(4, "ping")).encode("utf-8")
    stdin = io.BytesIO(f"Content-Length: {len(body)}\r\n\r\n".encode("ascii") + body)
    stdout = io.BytesIO()

    run_stdio_mcp_server(AsepriteMcpServer(controller=FakeController()), stdin=stdin, stdout=stdout)

    raw = stdout.getvalue()
    header, _, payload = raw.partition(b"\r\n\r\n")
    assert header.startswith(b"Content-Length: ")
    assert int(header.split(b":", 1)[1]) == len(payload)
    assert json.loads(payload) == {"jsonrpc": "2.0", "id": 4, "result": {}}


def test_stdio_loop_reports_malformed_json_and_continues():
    stdin = io.BytesIO(b'{"jsonrpc": "2.0", "id": 1,\n' + json.dumps(_rpc_request(2, "ping")).encode("utf-8") + b"\n")
    stdout = io.BytesIO()

    run_stdio_mcp_server(AsepriteMcpServer(controller=FakeController()), stdin=stdin, stdout=stdout)

    first, second = [json.loads(line) for line in stdout.getvalue().splitlines()]
    assert first["id"] is None
    assert first["error"]["code"] == JSONRPC_PARSE_ERROR
    assert second == {"jsonrpc": "2.0", "id": 2, "result": {}}


def test_request_cancelled_while_queued_never_runs():
    controller = FakeController()
    server = AsepriteMcpServer(controller=controller)
    message = _rpc_request(27, "tools/call", {"name": "list_layers", "arguments": {"filePath": "a.aseprite"}})

    assert server.track_request(message) is True
    assert server.cancel_request(27) is True

    assert server.handle_jsonrpc_message(message) is None
    assert controller.calls == []
    assert server.cancel_request(27) is False


class CancelAwareServer(AsepriteMcpServer):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.cancel_seen = threading.Event()

    def cancel_request(self, request_id):
        found = super().cancel_request(request_id)
        self.cancel_seen.set()
        return found


class WaitForCancelController(FakeController):
    """Holds the only worker until the reader has processed the cancellation."""

    def __init__(self):
        super().__init__()
        self.server = None

    def run_script(self, script, *, allow_plain_output=False):
        self.server.cancel_seen.wait(5)
        return super().run_script(script, allow_plain_output=allow_plain_output)


def test_stdio_loop_skips_queued_request_that_was_cancelled():
    controller = WaitForCancelController()
    server = CancelAwareServer(controller=controller)
    controller.server = server
    lines = [
        _rpc_request(1, "tools/call", {"name": "list_layers", "arguments": {"filePath": "a.aseprite"}}),
        _rpc_request(2, "tools/call", {"name": "list_layers", "arguments": {"filePath": "b.aseprite"}}),
        {"jsonrpc": "2.0", "method": "notifications/cancelled", "params": {"requestId": 2}},
    ]
    stdin = io.BytesIO(b"".join(json.dumps(line).encode("utf-8") + b"\n" for line in lines))
    stdout = io.BytesIO()

    run_stdio_mcp_server(server, stdin=stdin, stdout=stdout, max_workers=1)

    responses = [json.loads(line) for line in stdout.getvalue().splitlines() if line.strip()]
    assert [response["id"] for response in responses] == [1]
    assert len(controller.calls) == 1
    assert server.cancel_request(2) is False
