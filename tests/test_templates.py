import pytest

from aseprite_mcp.core.colors import Color
from aseprite_mcp.templates import drawing, export, frame, layer, lua, palette, scripting, selection, sprite


def test_lua_string_escapes_quotes_backslashes_and_newlines():
    assert lua.lua_string('say "hi"') == '"say \\"hi\\""'
    assert lua.lua_string("a\\b") == '"a\\\\b"'
    assert lua.lua_string("line1\nline2\r") == '"line1\\nline2\\r"'


def test_lua_string_cannot_break_out_of_the_literal():
    quoted = lua.lua_string('x") os.execute("rm -rf /") print("')

    assert quoted.startswith('"') and quoted.endswith('"')
    inner = quoted[1:-1]
    assert '"' not in inner.replace('\\"', "")


def test_lua_path_normalizes_windows_separators():
    assert lua.lua_path(r"C:\art\hero.aseprite") == '"C:/art/hero.aseprite"'


def test_render_wraps_body_in_error_harness():
    script = lua.render('print("body")', file_path="hero.aseprite")

    assert script.file_path == "hero.aseprite"
    assert "local ok, err = pcall(run)" in script.source
    assert "json.encode({ error = tostring(message) })" in script.source
    assert 'return fail("No sprite loaded")' in script.source
    assert 'print("body")' in script.source


def test_render_without_sprite_skips_prelude():
    script = lua.render("-- nothing", requires_sprite=False)

    assert "app.sprite" not in script.source
    assert script.file_path is None


def test_transaction_indents_statements():
    text = lua.transaction("Edit", ["a = 1", "if a then\n    b = 2\nend"])

    assert text == (
        'app.transaction("Edit", function()\n'
        "    a = 1\n"
        "    if a then\n"
        "        b = 2\n"
        "    end\n"
        "end)\n"
    )


def test_save_statement_in_place_or_copy():
    assert lua.save_statement(None) == "spr:saveAs(spr.filename)\n"
    assert lua.save_statement("out/copy.png") == 'spr:saveCopyAs("out/copy.png")\n'


def test_create_sprite_script_builds_new_document():
    script = sprite.create_sprite("player.aseprite", 64, 64, "indexed")

    assert script.file_path is None
    assert "Sprite(64, 64, ColorMode.INDEXED)" in script.source
    assert 'spr:saveAs("player.aseprite")' in script.source
    assert 'status = "created"' in script.source


def test_draw_pixels_runs_in_one_transaction():
    pixels = [(1, 2, Color.parse("#ff0000")), (3, 4, Color.parse("#00ff0080"))]

    script = drawing.draw_pixels("hero.aseprite", pixels, layer="Ink", frame_number=2)

    source = script.source
    assert source.count("app.transaction(") == 1
    assert 'app.transaction("Draw Pixels"' in source
    assert "{ 1, 2, 255, 0, 0, 255 }," in source
    assert "{ 3, 4, 0, 255, 0, 128 }," in source
    assert "requested = 2" in source
    assert 'find_layer(spr.layers, "Ink")' in source
    assert "spr.frames[2]" in source
    assert source.index("app.transaction(") < source.index("spr:saveAs(spr.filename)")


def test_draw_pixels_uses_active_layer_by_default():
    script = drawing.draw_pixels("hero.aseprite", [(0, 0, Color.parse("#000000"))])

    assert "local target_layer = app.layer" in script.source
    assert "find_layer" not in script.source


def test_use_tool_passes_points_and_brush():
    script = drawing.use_tool(
        "hero.aseprite",
        "line",
        [(0, 0), (7, 7)],
        Color.parse("#102030"),
        brush_size=2,
        opacity=128,
    )

    assert 'tool = "line"' in script.source
    assert "points = { Point(0, 0), Point(7, 7) }" in script.source
    assert "Brush { size = 2 }" in script.source
    assert "color = Color(16, 32, 48, 255)" in script.source
    assert "opacity = 128" in script.source


def test_get_pixel_data_reads_flattened_frame_without_layer():
    script = drawing.get_pixel_data("hero.aseprite", 2, 3, 4, 5)

    assert "img:drawSprite(spr, target_frame)" in script.source
    assert "for py = 3, 7 do" in script.source
    assert "for px = 2, 5 do" in script.source


def test_layer_property_only_touches_given_fields():
    script = layer.set_layer_property("hero.aseprite", "Ink", opacity=40)

    assert "layer.opacity = 40" in script.source
    assert "layer.isVisible = " not in script.source
    assert "layer.name = " not in script.source


def test_frame_duration_converted_to_seconds():
    script = frame.set_frame_duration("hero.aseprite", 3, 150)

    assert "frame.duration = 0.15" in script.source
    assert "spr.frames[3]" in script.source


def test_palette_script_checks_highest_index():
    entries = [(0, Color.parse("#000000")), (12, Color.parse("#ffffff"))]

    script = palette.set_palette_color("hero.aseprite", entries)

    assert "if 12 >= #pal then" in script.source
    assert "pal:setColor(12, Color(255, 255, 255, 255))" in script.source


@pytest.mark.parametrize("mode,method", [("replace", "select"), ("add", "add"), ("intersect", "intersect")])
def test_select_region_modes(mode, method):
    script = selection.select_region("hero.aseprite", 1, 2, 3, 4, mode)

    assert f"spr.selection:{method}(Rectangle(1, 2, 3, 4))" in script.source


def test_user_script_runs_inside_harness():
    script = scripting.run_lua_script('print(json.encode({ n = #app.sprite.layers }))', "hero.aseprite")

    assert script.file_path == "hero.aseprite"
    assert "pcall(run)" in script.source
    assert "#app.sprite.layers" in script.source


def test_export_sprite_arguments():
    invocation = export.export_sprite("hero.aseprite", "out/hero.gif", scale=4, tag="walk")

    assert invocation.args == [
        "hero.aseprite",
        "--scale",
        "4",
        "--tag",
        "walk",
        "--save-as",
        "out/hero.gif",
    ]
    assert invocation.outputs == ["out/hero.gif"]


def test_export_spritesheet_arguments():
    invocation = export.export_spritesheet(
        "hero.aseprite",
        "sheet.png",
        output_data="sheet.json",
        sheet_type="rows",
        columns=4,
        trim=True,
    )

    assert invocation.args == [
        "hero.aseprite",
        "--sheet",
        "sheet.png",
        "--data",
        "sheet.json",
        "--sheet-type",
        "rows",
        "--sheet-columns",
        "4",
        "--trim",
    ]
    assert invocation.outputs == ["sheet.png", "sheet.json"]
