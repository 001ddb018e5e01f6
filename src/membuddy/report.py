"""Report builder: rank, filter and cap a ProfileResult, then render it.

Two stages:
- build_report() turns a result plus DisplayOptions into a Report of plain
  rows, with no formatting or color.
- format_report() turns a Report into text lines using a color theme.

// [LAW:one-way-deps] Depends on results/options/formatting only; never on the walker.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

from membuddy.colors import resolve_theme
from membuddy.formatting import format_size
from membuddy.options import DisplayOptions
from membuddy.results import ProfileResult

CycleKind = Literal["root", "self", "cross"]

CYCLE_LABELS: dict[str, str] = {
    "root": "self-reference",
    "self": "direct self-reference",
}


@dataclass(frozen=True)
class SizeRow:
    path: str
    size: int


@dataclass(frozen=True)
class CycleRow:
    path: str
    target: str
    size: int
    kind: CycleKind


@dataclass(frozen=True)
class Report:
    """Display-ready view of one result under one set of display options."""

    total_size: int
    reference_count: int
    rows: tuple[SizeRow, ...]
    hidden_rows: int
    hidden_size: int
    cycle_rows: tuple[CycleRow, ...]
    hidden_cycles: int
    hidden_cycles_size: int
    show_header: bool
    show_cycles: bool

    @property
    def filtered_count(self) -> int:
        """Rows dropped by the top cap, both sections together."""
        return self.hidden_rows + self.hidden_cycles


def classify_cycle(path: str, target: str) -> CycleKind:
    if target == "":
        return "root"
    if target == path:
        return "self"
    return "cross"


def _sort_key(row) -> tuple[int, str]:
    return (-row.size, row.path)


def _cap(rows: list, limit: int | None) -> tuple[tuple, int, int]:
    """Split sorted rows into (shown, hidden count, hidden summed size)."""
    if limit is None or limit >= len(rows):
        return tuple(rows), 0, 0
    hidden = rows[limit:]
    return tuple(rows[:limit]), len(hidden), sum(row.size for row in hidden)


def size_rows(result: ProfileResult, min_size: float) -> list[SizeRow]:
    """Rows for every path at or above min_size, largest first.

    A path with a cumulative size is shown and sorted by it; its raw size
    stays untouched in the result.
    """
    rows = []
    for path, size in result.sizes.items():
        display = result.total_sizes.get(path, size)
        if display >= min_size:
            rows.append(SizeRow(path=path, size=display))
    rows.sort(key=_sort_key)
    return rows


def cycle_rows(result: ProfileResult) -> list[CycleRow]:
    """Rows for cycles whose target has a known, non-zero subtree size."""
    rows = []
    for path, target in result.cycles.items():
        size = result.total_sizes.get(target, 0)
        # Zero-sized targets are host internals or depth-capped subtrees.
        if size <= 0:
            continue
        rows.append(CycleRow(path=path, target=target, size=size, kind=classify_cycle(path, target)))
    rows.sort(key=_sort_key)
    return rows


def build_report(result: ProfileResult, display: DisplayOptions | None = None) -> Report:
    display = display or DisplayOptions()
    rows, hidden_rows, hidden_size = _cap(size_rows(result, display.min_size), display.limit)

    show_cycles = bool(result.cycles) and display.cycles
    if show_cycles:
        cycles, hidden_cycles, hidden_cycles_size = _cap(cycle_rows(result), display.limit)
    else:
        cycles, hidden_cycles, hidden_cycles_size = (), 0, 0

    return Report(
        total_size=result.total_size,
        reference_count=len(result.sizes) + len(result.cycles),
        rows=rows,
        hidden_rows=hidden_rows,
        hidden_size=hidden_size,
        cycle_rows=cycles,
        hidden_cycles=hidden_cycles,
        hidden_cycles_size=hidden_cycles_size,
        show_header=not display.no_header,
        show_cycles=show_cycles,
    )


def _display_path(path: str, c: dict[str, str]) -> str:
    if path == "...":
        return f"{c['green']}...{c['gray']}"
    if path.endswith("/..."):
        base = path[: -len("/...")]
        return f"{c['blue']}{base}{c['reset']}{c['gray']}/{c['green']}...{c['gray']}"
    return f"{c['blue']}{path}{c['gray']}"


def _cycle_line(row: CycleRow, c: dict[str, str], theme) -> str:
    size = format_size(row.size, theme)
    if row.kind in CYCLE_LABELS:
        label = CYCLE_LABELS[row.kind]
        return f"    {c['blue']}{row.path}{c['reset']}: {c['gray']}{label}{c['reset']} ({size})"
    return (
        f"    {c['blue']}{row.path}{c['reset']} {c['gray']}→{c['reset']} "
        f"{c['green']}{row.target}{c['reset']} ({size})"
    )


def format_report(report: Report, theme: Mapping[str, str] | None = None) -> list[str]:
    """Render a Report as text lines; theme=None gives plain text."""
    c = resolve_theme(theme)
    lines: list[str] = []

    if report.show_header:
        lines.append(
            f"{c['blue']}   ===================== {c['red']}MEM{c['green']}BUDDY"
            f"{c['gray']}{c['blue']} ====================={c['reset']}"
        )
    lines.append("")
    lines.append(
        f"{c['gray']}Analyzed a total of {c['green']}{report.reference_count}{c['gray']}"
        f" references.{c['reset']}"
    )
    lines.append(f"{c['gray']}Total memory utilized: {format_size(report.total_size, theme)}{c['gray']}.{c['reset']}")
    lines.append("")

    lines.append(f"{c['gray']}Memory usage by reference name:{c['reset']}")
    for row in report.rows:
        lines.append(f"    {_display_path(row.path, c)} → {format_size(row.size, theme)}")
    if report.hidden_rows:
        lines.append(
            f"{c['gray']}...and {c['green']}{report.hidden_rows}{c['gray']} other references, "
            f"totalling {format_size(report.hidden_size, theme)}.{c['reset']}"
        )

    if report.show_cycles:
        lines.append("")
        lines.append(
            f"{c['gray']}Found circular references "
            f"(potentially retaining data unnecessarily):{c['reset']}"
        )
        if report.cycle_rows:
            lines.extend(_cycle_line(row, c, theme) for row in report.cycle_rows)
            if report.hidden_cycles:
                lines.append(
                    f"{c['gray']}...and {c['green']}{report.hidden_cycles}{c['gray']} other "
                    f"circular references, totalling "
                    f"{format_size(report.hidden_cycles_size, theme)}.{c['reset']}"
                )
        else:
            lines.append(f"    {c['gray']}No significant circular references found{c['reset']}")

    if report.filtered_count:
        lines.append("")
        lines.append(
            f"{c['green']}{report.filtered_count}{c['gray']} results were filtered. "
            f"Use {c['blue']}top=<n>|False{c['gray']} to show more results.{c['reset']}"
        )
    return lines
