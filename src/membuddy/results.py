"""Immutable profiling result and its serialized form.

The serialized field names (totalSize, sizes, totalSizes, cycles, type) are
stable: saved results from one run can be re-rendered by another.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from membuddy.errors import ResultFormatError

RESULT_TYPE = "membuddy-results"


def _frozen(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class ProfileResult:
    """Output of one profile() call.

    sizes maps each path to the bytes attributed to that node alone;
    total_sizes maps expanded composite paths to their subtree totals;
    cycles maps each revisiting path to the canonical path it points at.
    """

    total_size: int
    sizes: Mapping[str, int]
    total_sizes: Mapping[str, int]
    cycles: Mapping[str, str]
    type: str = field(default=RESULT_TYPE)

    def __post_init__(self):
        object.__setattr__(self, "sizes", _frozen(self.sizes))
        object.__setattr__(self, "total_sizes", _frozen(self.total_sizes))
        object.__setattr__(self, "cycles", _frozen(self.cycles))

    @classmethod
    def from_maps(
        cls,
        sizes: Mapping[str, int],
        total_sizes: Mapping[str, int],
        cycles: Mapping[str, str],
    ) -> ProfileResult:
        """Build a result, deriving total_size as the sum of raw sizes."""
        return cls(
            total_size=sum(sizes.values()),
            sizes=sizes,
            total_sizes=total_sizes,
            cycles=cycles,
        )

    def to_dict(self) -> dict:
        return {
            "totalSize": self.total_size,
            "sizes": dict(self.sizes),
            "totalSizes": dict(self.total_sizes),
            "cycles": dict(self.cycles),
            "type": self.type,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> ProfileResult:
        """Rebuild a result from its to_dict() form.

        Raises ResultFormatError when the type tag is missing or the maps are
        malformed.
        """
        if not is_result(data):
            tag = data.get("type") if isinstance(data, Mapping) else type(data).__name__
            raise ResultFormatError(f"not a {RESULT_TYPE} mapping (type={tag!r})")
        try:
            sizes = {str(k): int(v) for k, v in data.get("sizes", {}).items()}
            total_sizes = {str(k): int(v) for k, v in data.get("totalSizes", {}).items()}
            cycles = {str(k): str(v) for k, v in data.get("cycles", {}).items()}
            total_size = int(data.get("totalSize", sum(sizes.values())))
        except (AttributeError, TypeError, ValueError) as exc:
            raise ResultFormatError(f"malformed {RESULT_TYPE} mapping: {exc}") from exc
        return cls(total_size=total_size, sizes=sizes, total_sizes=total_sizes, cycles=cycles)


def is_result(value) -> bool:
    """True for a ProfileResult or a mapping carrying the result type tag."""
    if isinstance(value, ProfileResult):
        return True
    return isinstance(value, Mapping) and value.get("type") == RESULT_TYPE
