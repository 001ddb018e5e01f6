"""Programmatic entry points: profile a value graph and render the report.

Each call works through an explicit Profiler handle. The module-level
functions create a fresh handle per call, so no measurement state outlives
the call that produced it.

Not thread-safe: the accountant's counter is process-wide, so concurrent
profile() calls must be serialized by the caller.
"""

from __future__ import annotations

import dataclasses
import logging
import sys
import time
from collections.abc import Mapping

from rich.console import Console
from rich.text import Text

import membuddy.report
from membuddy.core.accountant import MemoryAccountant, TracemallocAccountant
from membuddy.core.meter import AllocationMeter
from membuddy.core.walker import GraphWalker
from membuddy.errors import ConfigError
from membuddy.options import DEFAULT_TARGET, DisplayOptions, ProfileOptions, partition_options
from membuddy.results import ProfileResult, is_result

logger = logging.getLogger(__name__)


def default_target() -> dict:
    """The __main__ module namespace, or an empty dict when there is none."""
    main = sys.modules.get("__main__")
    return vars(main) if main is not None else {}


def make_console() -> Console:
    return Console(highlight=False, soft_wrap=True)


def _profile_options(options, overrides: Mapping[str, object]) -> ProfileOptions:
    if isinstance(options, ProfileOptions):
        profile_kw, _display_kw = partition_options(overrides)
        return dataclasses.replace(options, **profile_kw) if profile_kw else options
    if options is None:
        options = {}
    if not isinstance(options, Mapping):
        raise ConfigError(f"options must be ProfileOptions or a mapping, got {type(options).__name__}")
    # Display-only keys are accepted and ignored here; render() consumes them.
    profile_kw, _display_kw = partition_options({**options, **overrides})
    return ProfileOptions(**profile_kw)


class Profiler:
    """Handle bundling one accountant with the meter that reads it."""

    def __init__(self, accountant: MemoryAccountant | None = None):
        self._owns_accountant = accountant is None
        self.accountant = accountant if accountant is not None else TracemallocAccountant()
        self.meter = AllocationMeter(self.accountant)

    def profile(self, options=None, **overrides) -> ProfileResult:
        """Walk the target once and return an immutable ProfileResult."""
        opts = _profile_options(options, overrides)
        target = default_target() if opts.target is DEFAULT_TARGET else opts.target
        if opts.calibrate:
            self.meter.calibrate()

        walker = GraphWalker(self.meter, depth_limit=opts.max_depth, track_cycles=opts.cycles)
        calls_before = self.meter.calls
        started = time.monotonic()
        walker.walk(target)
        elapsed = time.monotonic() - started

        # The root's own overhead is not a named reference.
        sizes = {path: size for path, size in walker.raw_sizes.items() if path != ""}
        result = ProfileResult.from_maps(sizes, walker.cumulative_sizes, walker.cycles)
        logger.info(
            "profiled nodes=%d entries=%d cycles=%d capped=%d measurements=%d total=%d elapsed=%.3fs",
            len(walker.visited),
            len(sizes),
            len(walker.cycles),
            walker.capped_count,
            self.meter.calls - calls_before,
            result.total_size,
            elapsed,
        )
        return result

    def report(self, source=None, display: DisplayOptions | None = None, **overrides):
        """Resolve the inputs of render() into a Report."""
        result, display = self._resolve(source, display, overrides)
        return membuddy.report.build_report(result, display)

    def render_lines(self, source=None, display=None, *, theme=None, **overrides) -> list[str]:
        report = self.report(source, display, **overrides)
        return membuddy.report.format_report(report, theme)

    def render_text(self, source=None, display=None, *, theme=None, **overrides) -> str:
        return "\n".join(self.render_lines(source, display, theme=theme, **overrides))

    def render(self, source=None, display=None, *, theme=None, console: Console | None = None, **overrides) -> None:
        """Write the report for ``source`` to ``console`` (stdout by default).

        ``source`` may be None or a mapping of options (profile first),
        ProfileOptions (profile first), a ProfileResult, or a mapping in
        ProfileResult.to_dict() form.
        """
        console = console or make_console()
        for line in self.render_lines(source, display, theme=theme, **overrides):
            console.print(Text.from_ansi(line))

    def _resolve(self, source, display, overrides) -> tuple[ProfileResult, DisplayOptions]:
        profile_kw, display_kw = partition_options(overrides)
        if display is not None:
            clashing = set(display_kw) - {"cycles"}
            if clashing:
                raise ConfigError(f"display options given twice: {sorted(clashing)}")
            display_kw = {}

        if is_result(source):
            unused = set(profile_kw) - {"cycles"}
            if unused:
                raise ConfigError(f"cannot apply {sorted(unused)} to a computed result")
            result = source if isinstance(source, ProfileResult) else ProfileResult.from_dict(source)
        elif isinstance(source, ProfileOptions):
            result = self.profile(source, **profile_kw)
        elif source is None or isinstance(source, Mapping):
            merged_profile, merged_display = partition_options(source or {})
            merged_profile.update(profile_kw)
            result = self.profile(merged_profile)
            if display is None:
                display_kw = {**merged_display, **display_kw}
        else:
            raise ConfigError(f"cannot render {type(source).__name__}")

        return result, display if display is not None else DisplayOptions(**display_kw)

    def close(self) -> None:
        if self._owns_accountant and hasattr(self.accountant, "close"):
            self.accountant.close()

    def __enter__(self) -> Profiler:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def create(accountant: MemoryAccountant | None = None) -> Profiler:
    """Return a new Profiler handle; the caller owns and closes it."""
    return Profiler(accountant)


def profile(options=None, **overrides) -> ProfileResult:
    with create() as profiler:
        return profiler.profile(options, **overrides)


def render(source=None, display=None, *, theme=None, console: Console | None = None, **overrides) -> None:
    with create() as profiler:
        profiler.render(source, display, theme=theme, console=console, **overrides)


def render_text(source=None, display=None, *, theme=None, **overrides) -> str:
    with create() as profiler:
        return profiler.render_text(source, display, theme=theme, **overrides)
