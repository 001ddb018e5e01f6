"""Terminal color constants and report themes.

A theme maps color names to escape sequences. Report code asks for names only
(reset, green, red, gray, blue); any name a theme does not define renders as
the empty string.
"""

from collections.abc import Mapping

RESET = "\033[0m"

# Foreground
RED = "\033[31m"
GREEN = "\033[32m"
BLUE = "\033[34m"
GRAY = "\033[90m"

THEME_NAMES = ("reset", "green", "red", "gray", "blue")

ANSI_THEME: dict[str, str] = {
    "reset": RESET,
    "green": GREEN,
    "red": RED,
    "gray": GRAY,
    "blue": BLUE,
}

PLAIN_THEME: dict[str, str] = {name: "" for name in THEME_NAMES}


def resolve_theme(theme: Mapping[str, str] | None) -> dict[str, str]:
    """Return a complete theme; None or missing names become empty strings."""
    if theme is None:
        return dict(PLAIN_THEME)
    return {name: str(theme.get(name, "") or "") for name in THEME_NAMES}
