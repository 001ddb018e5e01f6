"""Tests for report ranking, filtering, capping and text rendering."""

import pytest

from membuddy.colors import ANSI_THEME, BLUE
from membuddy.options import DisplayOptions
from membuddy.report import build_report, classify_cycle, cycle_rows, format_report, size_rows
from membuddy.results import ProfileResult


@pytest.fixture
def result():
    return ProfileResult.from_maps(
        sizes={
            "config": 64,
            "config/name": 30,
            "cache/...": 2048,
            "tiny": 0,
            "items": 64,
            "items/0": 20,
            "items/1": 20,
            "self": 64,
            "items/2": 64,
            "config/parent": 64,
            "ghost": 64,
        },
        total_sizes={"": 4000, "config": 94, "items": 168, "items/2": 100},
        cycles={
            "self": "",
            "items/2": "items/2",
            "config/parent": "items",
            "ghost": "native/module",
        },
    )


def _text(result, **display):
    return "\n".join(format_report(build_report(result, DisplayOptions(**display))))


class TestRows:
    def test_cumulative_size_used_for_display_and_sort(self, result):
        rows = size_rows(result, min_size=1)
        assert rows[0].path == "cache/..."
        assert (rows[1].path, rows[1].size) == ("items", 168)
        assert ("config", 94) in [(r.path, r.size) for r in rows]
        # raw value untouched in the result
        assert result.sizes["items"] == 64

    def test_sort_is_descending_and_deterministic(self, result):
        sizes = [row.size for row in size_rows(result, 1)]
        assert sizes == sorted(sizes, reverse=True)
        assert size_rows(result, 1) == size_rows(result, 1)

    @pytest.mark.parametrize("min_size", [0, 1, 21, 65, 100, 5000])
    def test_min_size_filter(self, result, min_size):
        rows = size_rows(result, min_size)
        assert all(row.size >= min_size for row in rows)
        shown = {row.path for row in rows}
        for path, size in result.sizes.items():
            display = result.total_sizes.get(path, size)
            if display < min_size:
                assert path not in shown
                assert path in result.sizes

    def test_top_caps_and_summarizes_hidden(self, result):
        report = build_report(result, DisplayOptions(top=2))
        all_rows = size_rows(result, 1)
        assert [r.path for r in report.rows] == [r.path for r in all_rows[:2]]
        assert report.hidden_rows == len(all_rows) - 2
        assert report.hidden_size == sum(r.size for r in all_rows[2:])

    def test_false_top_shows_all(self, result):
        report = build_report(result, DisplayOptions(top=False))
        assert report.hidden_rows == 0
        assert len(report.rows) == len(size_rows(result, 1))

    def test_totals_do_not_depend_on_filters(self, result):
        narrow = build_report(result, DisplayOptions(min_size=10_000, top=1))
        assert narrow.total_size == result.total_size
        assert narrow.reference_count == len(result.sizes) + len(result.cycles)


class TestCycleRows:
    def test_classification(self):
        assert classify_cycle("self", "") == "root"
        assert classify_cycle("a/b", "a/b") == "self"
        assert classify_cycle("a/b", "c") == "cross"

    def test_sized_by_target_and_zero_targets_suppressed(self, result):
        rows = {row.path: row for row in cycle_rows(result)}
        assert set(rows) == {"self", "items/2", "config/parent"}
        assert rows["self"].size == 4000
        assert rows["self"].kind == "root"
        assert rows["items/2"].kind == "self"
        assert rows["config/parent"].target == "items"
        assert rows["config/parent"].size == 168

    def test_cycle_rows_have_their_own_cap(self, result):
        report = build_report(result, DisplayOptions(top=1))
        assert len(report.cycle_rows) == 1
        assert report.cycle_rows[0].path == "self"
        assert report.hidden_cycles == 2
        assert report.hidden_cycles_size == 168 + 100
        assert report.filtered_count == report.hidden_rows + 2

    def test_cycle_section_can_be_hidden(self, result):
        report = build_report(result, DisplayOptions(cycles=False))
        assert not report.show_cycles
        assert report.cycle_rows == ()

    def test_no_cycles_means_no_section(self):
        empty = ProfileResult.from_maps({"a": 10}, {}, {})
        assert not build_report(empty).show_cycles


class TestText:
    def test_plain_report(self, result):
        text = _text(result, top=False)
        lines = text.splitlines()
        assert lines[0] == "   ===================== MEMBUDDY ====================="
        assert "Analyzed a total of 15 references." in lines
        assert "Total memory utilized: 2.44 KB." in lines
        assert "    cache/... → 2.00 KB" in lines
        assert "    items → 168 bytes" in lines
        assert "    self: self-reference (3.91 KB)" in lines
        assert "    items/2: direct self-reference (100 bytes)" in lines
        assert "    config/parent → items (168 bytes)" in lines
        assert "filtered" not in text
        assert "tiny" not in text

    def test_hidden_summaries(self, result):
        text = _text(result, top=1)
        assert "...and 9 other references, totalling" in text
        assert "...and 2 other circular references, totalling 268 bytes." in text
        assert "11 results were filtered. Use top=<n>|False to show more results." in text

    def test_no_header(self, result):
        assert "MEMBUDDY" not in _text(result, no_header=True)

    def test_no_significant_cycles(self):
        only_native = ProfileResult.from_maps({"m": 8}, {}, {"m": "native"})
        assert "    No significant circular references found" in _text(only_native)

    def test_rerender_is_identical(self, result):
        assert _text(result, top=3, min_size=10) == _text(result, top=3, min_size=10)

    def test_themed_capped_path_colors_ellipsis(self, result):
        lines = format_report(build_report(result), ANSI_THEME)
        capped = next(line for line in lines if "cache" in line)
        assert capped.startswith(f"    {BLUE}cache")
        assert "\033[" in capped
