"""Human-readable byte counts."""

from collections.abc import Mapping

from membuddy.colors import resolve_theme

UNITS = ("bytes", "KB", "MB", "GB")


def scale_size(size_bytes: float) -> tuple[float, str]:
    """Divide by 1024 while the value is >= 1024 and a larger unit remains."""
    size = float(size_bytes)
    unit_index = 0
    while size >= 1024 and unit_index < len(UNITS) - 1:
        size /= 1024
        unit_index += 1
    return size, UNITS[unit_index]


def format_size(size_bytes: float, theme: Mapping[str, str] | None = None) -> str:
    """Format a byte count like "512 bytes" or "1.50 KB".

    With a theme, the number is green at the bytes unit and red above it, and
    the unit is gray.
    """
    size, unit = scale_size(size_bytes)
    number = f"{size:.0f}" if unit == UNITS[0] else f"{size:.2f}"
    if theme is None:
        return f"{number} {unit}"
    c = resolve_theme(theme)
    number_color = c["green"] if unit == UNITS[0] else c["red"]
    return f"{number_color}{number}{c['reset']}{c['gray']} {unit}{c['reset']}"
