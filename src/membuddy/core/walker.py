"""Depth-bounded graph walker.

Visits every node reachable from a root, assigns each a slash-delimited path,
measures it through the meter, records revisits as cycles and rolls child
sizes up into parent totals. Composite nodes at or past the depth limit are
summarised as one aggregate entry instead of being expanded.

The walk uses an explicit stack, so graph depth is bounded by memory rather
than by the interpreter's recursion limit.

// [LAW:one-source-of-truth] visited[id] is written once per node; the first
// path to reach a node is its canonical path for the rest of the walk.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from membuddy.core.graph import capped_path, child_path, children, is_composite, is_inline
from membuddy.core.meter import AllocationMeter

logger = logging.getLogger(__name__)


@dataclass
class _Frame:
    """An expanded composite whose children are still being visited."""

    path: str
    depth: int
    pending: Iterator[tuple[object, object]]
    total: int


class GraphWalker:
    """Single-use traversal state for one top-level walk.

    Attributes:
        raw_sizes: path -> own shallow bytes (plus synthetic ``/...`` entries)
        cumulative_sizes: path -> bytes including descendants, for expanded
            composites only
        cycles: revisiting path -> canonical path of the first visit
        visited: id(node) -> canonical path
    """

    def __init__(
        self,
        meter: AllocationMeter,
        *,
        depth_limit: int | None = None,
        track_cycles: bool = True,
    ):
        self._meter = meter
        self.depth_limit = depth_limit
        self.track_cycles = track_cycles
        self.visited: dict[int, str] = {}
        self.raw_sizes: dict[str, int] = {}
        self.cumulative_sizes: dict[str, int] = {}
        self.cycles: dict[str, str] = {}
        self.capped_count = 0
        # Keeps visited nodes alive so their ids cannot be reused mid-walk.
        self._pinned: list[object] = []

    def walk(self, node, path: str = "", depth: int = 0) -> int:
        """Walk the graph under ``node`` and return the bytes attributed to it."""
        stack: list[_Frame] = []
        result = self._visit(node, path, depth, stack)
        while stack:
            frame = stack[-1]
            item = next(frame.pending, None)
            if item is None:
                stack.pop()
                self.cumulative_sizes[frame.path] = frame.total
                if stack:
                    stack[-1].total += frame.total
                else:
                    result = frame.total
                continue
            key, value = item
            size = self._visit(value, child_path(frame.path, key), frame.depth + 1, stack)
            if size is not None:
                frame.total += size
        return result

    def _visit(self, node, path: str, depth: int, stack: list[_Frame]) -> int | None:
        """Handle one node. Returns its size, or None when a frame was pushed."""
        if not is_inline(node):
            canonical = self.visited.get(id(node))
            if canonical is not None:
                return self._revisit(path, canonical)
            self.visited[id(node)] = path
            self._pinned.append(node)

        if not is_composite(node):
            size = self._meter.measure(node)
            self.raw_sizes[path] = size
            return size

        if self.depth_limit is not None and depth >= self.depth_limit:
            size = self._aggregate(node)
            self.raw_sizes[capped_path(path)] = size
            self.capped_count += 1
            logger.debug("depth cap at %r depth=%d size=%d", path, depth, size)
            return size

        overhead = self._meter.measure(node)
        self.raw_sizes[path] = overhead
        stack.append(_Frame(path=path, depth=depth, pending=iter(children(node)), total=overhead))
        return None

    def _revisit(self, path: str, canonical: str) -> int:
        if self.track_cycles:
            self.cycles[path] = canonical
        # One reference slot, approximated by an empty container.
        overhead = self._meter.measure({})
        self.raw_sizes[path] = overhead
        return overhead

    def _aggregate(self, root) -> int:
        """Sum the cost of every distinct node under ``root``, keys included.

        Uses its own seen set: nodes counted here are neither registered in nor
        excluded by the walk's visited map.
        """
        seen: set[int] = set()
        pinned: list[object] = []
        pending = [root]
        total = 0
        while pending:
            node = pending.pop()
            if not is_inline(node):
                if id(node) in seen:
                    continue
                seen.add(id(node))
                pinned.append(node)
            total += self._meter.measure(node)
            if not is_composite(node):
                continue
            for key, value in children(node):
                if is_composite(key):
                    pending.append(key)
                else:
                    total += self._meter.measure(key)
                pending.append(value)
        return total
