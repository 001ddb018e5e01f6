"""Tests for byte-count formatting."""

import pytest

import membuddy.colors
from membuddy.colors import ANSI_THEME, BLUE, GRAY, GREEN, RED, RESET, resolve_theme
from membuddy.formatting import format_size


@pytest.mark.parametrize(
    "size, expected",
    [
        (0, "0 bytes"),
        (512, "512 bytes"),
        (1023, "1023 bytes"),
        (1024, "1.00 KB"),
        (1536, "1.50 KB"),
        (5 * 1024 * 1024, "5.00 MB"),
        (3 * 1024**3, "3.00 GB"),
        (1024**4, "1024.00 GB"),
    ],
)
def test_plain(size, expected):
    assert format_size(size) == expected


def test_bytes_number_is_green():
    assert format_size(512, ANSI_THEME) == f"{GREEN}512{RESET}{GRAY} bytes{RESET}"


def test_scaled_number_is_red():
    assert format_size(1536, ANSI_THEME) == f"{RED}1.50{RESET}{GRAY} KB{RESET}"


def test_missing_theme_names_render_empty():
    assert format_size(1536, {"red": "<r>"}) == "<r>1.50 KB"


def test_resolve_theme_fills_every_name():
    assert resolve_theme(None) == {"reset": "", "green": "", "red": "", "gray": "", "blue": ""}


def test_every_escape_constant_belongs_to_the_theme():
    escapes = {
        value for name, value in vars(membuddy.colors).items()
        if name.isupper() and isinstance(value, str) and value.startswith("\033[")
    }
    assert escapes == set(ANSI_THEME.values()) == {RESET, RED, GREEN, BLUE, GRAY}
