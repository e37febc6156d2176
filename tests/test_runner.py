import json
import sys
import threading
import time
from pathlib import Path

import pytest

from aseprite_mcp.bridge.runner import BATCH_FLAG, CURRENT_CANCEL_EVENT, ProcessRunner
from aseprite_mcp.core.errors import SpawnError

pytestmark = pytest.mark.skipif(
    sys.platform.startswith("win"), reason="fake editor relies on a POSIX shebang"
)


def _fake_editor(path: Path, body: str) -> Path:
    path.write_text(f"#!{sys.executable}\nimport json, sys, time\n{body}\n", encoding="utf-8")
    path.chmod(0o755)
    return path


ECHO_ARGV = """
script = sys.argv[sys.argv.index("--script") + 1]
with open(script, encoding="utf-8") as handle:
    source = handle.read()
print(json.dumps({"argv": sys.argv[1:], "source": source}))
"""


def test_run_script_passes_batch_flag_document_and_script(tmp_path):
    editor = _fake_editor(tmp_path / "aseprite", ECHO_ARGV)
    temp_dir = tmp_path / "scripts"
    runner = ProcessRunner(timeout=10, temp_dir=temp_dir)

    outcome = runner.run_script(
        editor,
        'print("hi")',
        file_path="sprites/player.aseprite",
        script_params={"mode": "fast"},
    )

    assert outcome.success
    echoed = json.loads(outcome.stdout)
    argv = echoed["argv"]
    assert argv[0] == BATCH_FLAG
    assert argv[1] == "sprites/player.aseprite"
    assert argv[2:4] == ["--script-param", "mode=fast"]
    assert argv[4] == "--script"
    assert argv[5].endswith(".lua")
    assert Path(argv[5]).parent == temp_dir
    assert echoed["source"] == 'print("hi")'
    assert list(temp_dir.glob("*.lua")) == []


def test_run_script_without_document(tmp_path):
    editor = _fake_editor(tmp_path / "aseprite", ECHO_ARGV)
    runner = ProcessRunner(timeout=10, temp_dir=tmp_path / "scripts")

    outcome = runner.run_script(editor, "-- empty")

    argv = json.loads(outcome.stdout)["argv"]
    assert argv[:2] == [BATCH_FLAG, "--script"]


def test_run_cli_prefixes_batch_flag(tmp_path):
    editor = _fake_editor(tmp_path / "aseprite", 'print(json.dumps(sys.argv[1:]))')
    runner = ProcessRunner(timeout=10, temp_dir=tmp_path / "scripts")

    outcome = runner.run_cli(editor, ["in.aseprite", "--save-as", "out.png"])

    assert json.loads(outcome.stdout) == [BATCH_FLAG, "in.aseprite", "--save-as", "out.png"]
    assert not (tmp_path / "scripts").exists()


def test_exit_code_and_stderr_are_captured(tmp_path):
    editor = _fake_editor(
        tmp_path / "aseprite",
        'sys.stderr.write("boom\\n")\nsys.exit(3)',
    )
    runner = ProcessRunner(timeout=10, temp_dir=tmp_path / "scripts")

    outcome = runner.run_cli(editor, [])

    assert outcome.exit_code == 3
    assert outcome.stderr.strip() == "boom"
    assert not outcome.success


def test_editor_gets_no_stdin(tmp_path):
    editor = _fake_editor(
        tmp_path / "aseprite",
        'print(json.dumps({"stdin": sys.stdin.read()}))',
    )
    runner = ProcessRunner(timeout=10, temp_dir=tmp_path / "scripts")

    outcome = runner.run_cli(editor, [])

    assert json.loads(outcome.stdout) == {"stdin": ""}


def test_timeout_kills_process_and_removes_script(tmp_path):
    editor = _fake_editor(tmp_path / "aseprite", "time.sleep(30)")
    temp_dir = tmp_path / "scripts"
    runner = ProcessRunner(timeout=0.5, temp_dir=temp_dir, poll_interval=0.05)

    started = time.monotonic()
    outcome = runner.run_script(editor, "-- never finishes")
    elapsed = time.monotonic() - started

    assert outcome.timed_out is True
    assert outcome.cancelled is False
    assert not outcome.success
    assert elapsed < 10
    assert list(temp_dir.glob("*.lua")) == []


def test_cancel_event_stops_running_process(tmp_path):
    editor = _fake_editor(tmp_path / "aseprite", "time.sleep(30)")
    temp_dir = tmp_path / "scripts"
    runner = ProcessRunner(timeout=30, temp_dir=temp_dir, poll_interval=0.05)
    cancel_event = threading.Event()
    timer = threading.Timer(0.3, cancel_event.set)

    token = CURRENT_CANCEL_EVENT.set(cancel_event)
    timer.start()
    try:
        started = time.monotonic()
        outcome = runner.run_script(editor, "-- cancelled")
        elapsed = time.monotonic() - started
    finally:
        timer.cancel()
        CURRENT_CANCEL_EVENT.reset(token)

    assert outcome.cancelled is True
    assert outcome.timed_out is False
    assert elapsed < 10
    assert list(temp_dir.glob("*.lua")) == []


def test_spawn_failure_raises_and_removes_script(tmp_path):
    temp_dir = tmp_path / "scripts"
    runner = ProcessRunner(timeout=5, temp_dir=temp_dir)

    with pytest.raises(SpawnError) as excinfo:
        runner.run_script(tmp_path / "no-such-editor", "-- unused")

    assert excinfo.value.kind == "spawn"
    assert excinfo.value.details["executable"] == str(tmp_path / "no-such-editor")
    assert list(temp_dir.glob("*.lua")) == []


def test_script_names_are_unique(tmp_path):
    editor = _fake_editor(tmp_path / "aseprite", ECHO_ARGV)
    runner = ProcessRunner(timeout=10, temp_dir=tmp_path / "scripts")

    names = set()
    for _ in range(3):
        argv = json.loads(runner.run_script(editor, "--").stdout)["argv"]
        names.add(argv[argv.index("--script") + 1])

    assert len(names) == 3
