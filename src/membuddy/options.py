"""Validated option structures for profiling and report display.

Every recognized option and its default is enumerated here and checked once,
when the options object is built. Downstream code never re-validates.

// [LAW:one-source-of-truth] Defaults live in the dataclass fields below.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, fields

from membuddy.errors import ConfigError

DEFAULT_MAX_DEPTH = 3
DEFAULT_TOP = 20
DEFAULT_MIN_SIZE = 1

UNBOUNDED = math.inf
"""Pass as max_depth to disable the depth cap."""

_UNBOUNDED_WORDS = frozenset({"inf", "infinity", "unbounded", "none"})
_ALL_WORDS = frozenset({"all", "false"})


class _DefaultTarget:
    def __repr__(self) -> str:
        return "DEFAULT_TARGET"


DEFAULT_TARGET = _DefaultTarget()
"""Sentinel: profile the __main__ module namespace."""


def parse_depth(raw) -> int | None:
    """Normalize a depth limit. None means unbounded."""
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise ConfigError(f"max_depth must be an integer or unbounded, got {raw!r}")
    if isinstance(raw, str):
        word = raw.strip().lower()
        if word in _UNBOUNDED_WORDS:
            return None
        try:
            raw = int(word)
        except ValueError:
            raise ConfigError(f"max_depth must be an integer or 'inf', got {raw!r}") from None
    if isinstance(raw, float):
        if math.isinf(raw) and raw > 0:
            return None
        if not raw.is_integer():
            raise ConfigError(f"max_depth must be a whole number, got {raw!r}")
        raw = int(raw)
    if not isinstance(raw, int):
        raise ConfigError(f"max_depth must be an integer or unbounded, got {raw!r}")
    if raw < 0:
        raise ConfigError(f"max_depth must be >= 0, got {raw}")
    return raw


def parse_top(raw) -> int | bool:
    """Normalize a row cap. False means show every row; None is rejected."""
    if raw is False:
        return False
    if isinstance(raw, str):
        word = raw.strip().lower()
        if word in _ALL_WORDS:
            return False
        try:
            raw = int(word)
        except ValueError:
            raise ConfigError(f"top must be an integer or 'all', got {raw!r}") from None
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ConfigError(f"top must be an integer or False, got {raw!r}")
    if raw < 0:
        raise ConfigError(f"top must be >= 0, got {raw}")
    return raw


def _require_bool(name: str, raw) -> bool:
    if not isinstance(raw, bool):
        raise ConfigError(f"{name} must be True or False, got {raw!r}")
    return raw


@dataclass(frozen=True)
class ProfileOptions:
    """What to walk and how deep.

    max_depth accepts an int, None, math.inf or the strings "inf"/"infinity";
    after construction it is always an int or None (unbounded).
    """

    target: object = DEFAULT_TARGET
    max_depth: int | float | str | None = DEFAULT_MAX_DEPTH
    cycles: bool = True
    calibrate: bool = True

    def __post_init__(self):
        object.__setattr__(self, "max_depth", parse_depth(self.max_depth))
        _require_bool("cycles", self.cycles)
        _require_bool("calibrate", self.calibrate)


@dataclass(frozen=True)
class DisplayOptions:
    """How to filter, cap and decorate a rendered report."""

    min_size: int | float = DEFAULT_MIN_SIZE
    top: int | bool = DEFAULT_TOP
    no_header: bool = False
    cycles: bool = True

    def __post_init__(self):
        if isinstance(self.min_size, bool) or not isinstance(self.min_size, (int, float)):
            raise ConfigError(f"min_size must be a number, got {self.min_size!r}")
        if self.min_size < 0:
            raise ConfigError(f"min_size must be >= 0, got {self.min_size}")
        object.__setattr__(self, "top", parse_top(self.top))
        _require_bool("no_header", self.no_header)
        _require_bool("cycles", self.cycles)

    @property
    def limit(self) -> int | None:
        """Row cap as an int, or None when every row is shown."""
        return None if self.top is False else self.top


# Accepted spellings for option keys arriving as loose mappings.
_KEY_ALIASES = {
    "maxDepth": "max_depth",
    "depth": "max_depth",
    "minSize": "min_size",
    "noHeader": "no_header",
}

_PROFILE_KEYS = frozenset(f.name for f in fields(ProfileOptions))
_DISPLAY_KEYS = frozenset(f.name for f in fields(DisplayOptions))


def partition_options(values: Mapping[str, object]) -> tuple[dict, dict]:
    """Sort a flat option mapping into (profile kwargs, display kwargs).

    ``cycles`` lands in both: it controls cycle tracking during the walk and
    the cycle section of the report. Unknown keys raise ConfigError.
    """
    profile_kwargs: dict[str, object] = {}
    display_kwargs: dict[str, object] = {}
    for raw_key, value in values.items():
        key = _KEY_ALIASES.get(raw_key, raw_key)
        known = False
        if key in _PROFILE_KEYS:
            profile_kwargs[key] = value
            known = True
        if key in _DISPLAY_KEYS:
            display_kwargs[key] = value
            known = True
        if not known:
            raise ConfigError(f"unknown option {raw_key!r}")
    return profile_kwargs, display_kwargs


def split_options(values: Mapping[str, object]) -> tuple[ProfileOptions, DisplayOptions]:
    """Build both option objects from one flat mapping."""
    profile_kwargs, display_kwargs = partition_options(values)
    return ProfileOptions(**profile_kwargs), DisplayOptions(**display_kwargs)
