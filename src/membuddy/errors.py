"""Exception types raised at membuddy's boundaries.

The measurement path itself never raises: degraded measurements surface as
smaller numbers, not exceptions. These types cover the few conditions that
cannot produce a meaningful estimate at all.
"""


class MembuddyError(Exception):
    """Base class for all membuddy errors."""


class AccountantError(MembuddyError):
    """The live-byte counter could not be read or the collector could not run."""


class ConfigError(MembuddyError, ValueError):
    """An option or settings value failed validation."""


class ResultFormatError(MembuddyError, ValueError):
    """A mapping passed as a profiling result is not one."""
