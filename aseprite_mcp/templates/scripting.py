"""User-supplied Lua, run inside the same error harness as generated scripts."""

from __future__ import annotations

from typing import Optional

from aseprite_mcp.templates.lua import GeneratedScript, render


def run_lua_script(script: str, file_path: Optional[str] = None) -> GeneratedScript:
    # ``spr`` is not bound; user code reads ``app.sprite`` itself
    return render(script, file_path=file_path, requires_sprite=False)
