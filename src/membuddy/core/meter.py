"""Allocation-delta meter.

Turns the accountant's single global byte counter into a per-value size
estimate: quiesce the heap, read the counter, materialize one transient value
of the same category, read again, then drop the transient and quiesce.

Preconditions: nothing else allocates or frees on the shared heap during a
measurement window. Violations degrade accuracy; they are not detected.

Known blind spots:
- objects the counter does not trace (interpreter internals) measure 0;
- tuples are measured in their one-slot form, header plus one pointer,
  because the empty tuple is an interpreter-wide singleton;
- other empty immutable containers the interpreter shares measure 0.

// [LAW:single-enforcer] The before/after protocol lives only in _delta().
// Everything between the two reads is the transient's own constructor:
// category dispatch happens in transient_factory(), before the window opens.
"""

from __future__ import annotations

import logging
import types
from collections.abc import Callable, Mapping
from functools import partial

from membuddy.core.accountant import MemoryAccountant
from membuddy.core.graph import SEQUENCE_TYPES, is_composite, is_inline
from membuddy.errors import AccountantError

logger = logging.getLogger(__name__)

# One pass may only promote garbage to an older generation; two reclaim it.
DEFAULT_COLLECT_PASSES = 2

_CONTAINER_BASES = (dict, *SEQUENCE_TYPES)
_PROBE_MODULE_NAME = "_membuddy_probe"


def _nothing():
    return None


def _copy_str(value: str) -> str:
    # str(s) and s[:] both return s itself.
    return (value + " ")[:-1]


def _copy_bytes(value: bytes) -> bytes:
    return bytes(bytearray(value))


def _one_slot_tuple(value) -> tuple:
    return (value,)


def _hold(value) -> list:
    return [value]


def _new_container(base: type, cls: type):
    try:
        return base.__new__(cls)
    except TypeError:
        return base()


def _new_instance(cls: type):
    try:
        return object.__new__(cls)
    except TypeError:
        # Builtin-layout instance; approximate by its attribute table.
        return {}


def transient_factory(value) -> Callable[[], object]:
    """Return a zero-argument constructor for ``value``'s transient.

    Runs outside the measurement window, so none of the type dispatch here is
    counted. Calling the result allocates the transient and nothing else.
    """
    if is_inline(value):
        return _nothing
    if isinstance(value, str):
        return partial(_copy_str, value)
    if isinstance(value, bytes):
        return partial(_copy_bytes, value)
    if isinstance(value, bytearray):
        return partial(bytearray, value)
    if not is_composite(value):
        return partial(_hold, value)
    if isinstance(value, types.ModuleType):
        return partial(types.ModuleType, _PROBE_MODULE_NAME)
    cls = type(value)
    if cls is tuple:
        return partial(_one_slot_tuple, None)
    for base in _CONTAINER_BASES:
        if isinstance(value, base):
            return base if cls is base else partial(_new_container, base, cls)
    if isinstance(value, Mapping):
        return dict
    return partial(_new_instance, cls)


def materialize(value):
    """Build the transient that stands in for ``value`` during a measurement."""
    try:
        return transient_factory(value)()
    except Exception as exc:
        logger.debug("cannot materialize %s: %r", type(value).__name__, exc)
        return None


class AllocationMeter:
    """Measures the marginal heap cost of one value of a given category."""

    def __init__(
        self,
        accountant: MemoryAccountant,
        *,
        collect_passes: int = DEFAULT_COLLECT_PASSES,
    ):
        self._accountant = accountant
        self._collect_passes = collect_passes
        self.baseline = 0
        self.calls = 0

    @property
    def accountant(self) -> MemoryAccountant:
        return self._accountant

    def measure(self, value) -> int:
        """Return the estimated bytes for one value like ``value`` (never < 0).

        Numbers, bools and None are assumed inline and cost nothing; they do
        not run the protocol at all.
        """
        if is_inline(value):
            return 0
        self.calls += 1
        return self._delta(transient_factory(value), type(value).__name__)

    def calibrate(self) -> int:
        """Record the protocol's own footprint with nothing materialized.

        Runs the same window as measure(), calling a constructor that returns
        None. Subsequent measurements subtract it. Returns the new baseline.
        """
        self.baseline = 0
        self.baseline = self._delta(_nothing, "calibration")
        logger.debug("meter baseline=%d", self.baseline)
        return self.baseline

    def _quiesce(self) -> None:
        try:
            for _ in range(self._collect_passes):
                self._accountant.collect()
        except AccountantError:
            raise
        except Exception as exc:
            raise AccountantError(f"collector unavailable: {exc!r}") from exc

    def _read(self) -> int:
        try:
            return int(self._accountant.snapshot())
        except AccountantError:
            raise
        except Exception as exc:
            raise AccountantError(f"live-byte counter unreadable: {exc!r}") from exc

    def _delta(self, factory: Callable[[], object], label: str) -> int:
        failure = None
        self._quiesce()
        before = self._read()
        try:
            transient = factory()
        except Exception as exc:
            transient = None
            failure = exc
        after = self._read()
        del transient
        self._quiesce()
        if failure is not None:
            logger.debug("cannot materialize %s: %r", label, failure)
            return 0
        return max(0, after - before - self.baseline)
