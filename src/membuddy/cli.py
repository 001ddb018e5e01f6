"""CLI entry point for membuddy."""

import argparse
import importlib
import json
import logging
import runpy
import sys
from collections.abc import Mapping
from pathlib import Path

import membuddy.api
import membuddy.io.logging_setup
import membuddy.io.settings
from membuddy.colors import ANSI_THEME
from membuddy.errors import ConfigError, MembuddyError
from membuddy.options import DisplayOptions, ProfileOptions
from membuddy.results import ProfileResult

logger = logging.getLogger(__name__)

EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="membuddy",
        description="Estimate the memory footprint of a Python value graph",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--script", type=str, help="Run a Python file and profile its globals")
    source.add_argument("--module", type=str, help="Import a module and profile its namespace")
    source.add_argument("--json", type=str, help="Profile the value decoded from a JSON file")
    source.add_argument("--results", type=str, help="Re-render a result saved with --save")
    parser.add_argument(
        "--attr",
        type=str,
        default=None,
        help="Dotted member path to profile inside the loaded target (e.g. config.cache)",
    )
    parser.add_argument(
        "--max-depth",
        type=str,
        default=None,
        help="Expand at most N container levels, or 'inf' (default: 3)",
    )
    parser.add_argument(
        "--no-cycles", action="store_true", default=False, help="Do not report circular references"
    )
    parser.add_argument(
        "--top", type=str, default=None, help="Rows per section, or 'all' (default: 20)"
    )
    parser.add_argument(
        "--min-size", type=int, default=None, help="Hide rows below N bytes (default: 1)"
    )
    parser.add_argument(
        "--no-header", action="store_true", default=False, help="Omit the banner line"
    )
    parser.add_argument(
        "--no-color", action="store_true", default=False, help="Disable colored output"
    )
    parser.add_argument(
        "--save", type=str, default=None, help="Write the result as JSON to this path"
    )
    return parser


def _strip_dunders(namespace: Mapping) -> dict:
    return {
        k: v for k, v in namespace.items()
        if not (isinstance(k, str) and k.startswith("__") and k.endswith("__"))
    }


def load_target(args: argparse.Namespace):
    """Load the value named by the source flags."""
    if args.script:
        logger.info("running script %s", args.script)
        return _strip_dunders(runpy.run_path(args.script, run_name="__membuddy__"))
    if args.module:
        return _strip_dunders(vars(importlib.import_module(args.module)))
    return json.loads(Path(args.json).read_text(encoding="utf-8"))


def resolve_attr(target, dotted: str | None):
    """Follow a dotted path through mapping keys and attributes."""
    if not dotted:
        return target
    current = target
    for part in dotted.split("."):
        if isinstance(current, Mapping) and part in current:
            current = current[part]
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        elif hasattr(current, part):
            current = getattr(current, part)
        else:
            raise ConfigError(f"--attr: no member {part!r} in {dotted!r}")
    return current


def _options_from(args: argparse.Namespace) -> tuple[dict, dict, bool]:
    profile_kw, display_kw, color = membuddy.io.settings.load_defaults()
    if args.max_depth is not None:
        profile_kw["max_depth"] = args.max_depth
    if args.no_cycles:
        profile_kw["cycles"] = False
        display_kw["cycles"] = False
    if args.top is not None:
        display_kw["top"] = args.top
    if args.min_size is not None:
        display_kw["min_size"] = args.min_size
    if args.no_header:
        display_kw["no_header"] = True
    if args.no_color:
        color = False
    return profile_kw, display_kw, color


def run(args: argparse.Namespace, console=None) -> int:
    profile_kw, display_kw, color = _options_from(args)
    display = DisplayOptions(**display_kw)
    console = console or membuddy.api.make_console()
    theme = ANSI_THEME if color and console.is_terminal and not console.no_color else None

    with membuddy.api.create() as profiler:
        if args.results:
            data = json.loads(Path(args.results).read_text(encoding="utf-8"))
            result = ProfileResult.from_dict(data)
        else:
            target = resolve_attr(load_target(args), args.attr)
            result = profiler.profile(ProfileOptions(target=target, **profile_kw))

        if args.save:
            Path(args.save).write_text(json.dumps(result.to_dict(), indent=2) + "\n", encoding="utf-8")
            logger.info("saved result to %s", args.save)

        profiler.render(result, display, theme=theme, console=console)
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    # [LAW:single-enforcer] Runtime logger configuration is centralized in io.logging_setup.
    log_runtime = membuddy.io.logging_setup.configure()
    logger.info(
        "logging configured level=%s file=%s",
        log_runtime.level_name,
        log_runtime.file_path,
    )
    try:
        return run(args)
    except MembuddyError as exc:
        logger.error("%s", exc)
        return EXIT_ERROR
    except (OSError, json.JSONDecodeError, ImportError) as exc:
        logger.error("cannot load target: %s", exc)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
