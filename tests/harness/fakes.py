"""Deterministic stand-ins for the accountant and meter."""

from membuddy.core.graph import is_composite, is_inline


class ScriptedAccountant:
    """Accountant that replays a fixed list of counter readings."""

    def __init__(self, readings):
        self.readings = list(readings)
        self.snapshots = 0
        self.collections = 0

    def snapshot(self) -> int:
        self.snapshots += 1
        return self.readings.pop(0)

    def collect(self) -> None:
        self.collections += 1


class SteppingAccountant:
    """Accountant whose counter grows by ``step`` between each before/after pair."""

    def __init__(self, step: int = 16):
        self.step = step
        self._reads = 0
        self.collections = 0

    def snapshot(self) -> int:
        self._reads += 1
        # Odd reads are "before", even reads are "after".
        return 1000 + (self._reads // 2) * self.step

    def collect(self) -> None:
        self.collections += 1


class StubMeter:
    """Deterministic meter: strings cost len + 10, containers 40, opaque values 8."""

    CONTAINER = 40
    OPAQUE = 8

    def __init__(self):
        self.calls = 0
        self.measured: list[object] = []

    def measure(self, value) -> int:
        if is_inline(value):
            return 0
        self.calls += 1
        self.measured.append(value)
        if isinstance(value, (str, bytes)):
            return len(value) + 10
        if is_composite(value):
            return self.CONTAINER
        return self.OPAQUE
