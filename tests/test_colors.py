import pytest

from aseprite_mcp.core.colors import Color, ColorFormatError


def test_parse_six_digits_defaults_alpha_to_opaque():
    color = Color.parse("#FF8000")
    assert color.rgba == (255, 128, 0, 255)


def test_parse_eight_digits_reads_alpha_and_ignores_case():
    assert Color.parse("00ff0080") == Color(0, 255, 0, 128)
    assert Color.parse("#00FF0080") == Color.parse("00ff0080")


@pytest.mark.parametrize(
    "text",
    ["", "#", "#fff", "#12345", "#1234567", "#123456789", "#gg0000", "##ff0000", "ff 000"],
)
def test_parse_rejects_malformed_strings(text):
    with pytest.raises(ColorFormatError):
        Color.parse(text)


def test_parse_rejects_non_strings():
    with pytest.raises(ColorFormatError):
        Color.parse([255, 0, 0])


def test_to_hex_is_lowercase():
    color = Color.parse("#ABCDEF")
    assert color.to_hex() == "#abcdefff"
    assert color.to_hex(with_alpha=False) == "#abcdef"


@pytest.mark.parametrize("text", ["#12ab34cd", "#00000000", "#FFFFFF80"])
def test_to_hex_parses_back_to_the_same_color(text):
    color = Color.parse(text)
    assert Color.parse(color.to_hex()) == color


def test_to_hex_without_alpha_parses_back_for_opaque_colors():
    color = Color.parse("#12ab34")
    assert Color.parse(color.to_hex(with_alpha=False)) == color
