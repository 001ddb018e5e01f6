"""Node classification for the target value graph.

A node is either composite (it has enumerable children) or scalar. Inline
scalars (numbers, bools, None) are additionally treated as having no identity
of their own: the interpreter shares them freely, so seeing one twice says
nothing about the shape of the graph.

// [LAW:one-source-of-truth] What counts as a container is decided here only;
// the meter and the walker both ask this module.
"""

from __future__ import annotations

import logging
import types
from collections import deque
from collections.abc import Mapping

logger = logging.getLogger(__name__)

INLINE_TYPES = (int, float, complex, type(None))
BUFFER_TYPES = (str, bytes, bytearray)
SEQUENCE_TYPES = (list, tuple, set, frozenset, deque)
_COMPOSITE_TYPES = (Mapping, *SEQUENCE_TYPES, types.ModuleType)

# Objects that carry a __dict__ but are code, not data.
_OPAQUE_TYPES = (
    type,
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.BuiltinMethodType,
    types.CodeType,
    types.FrameType,
    types.GeneratorType,
    types.CoroutineType,
)


def is_inline(value) -> bool:
    """True for values the host stores inline (no separate heap identity)."""
    return isinstance(value, INLINE_TYPES)


def _instance_dict(value) -> dict | None:
    if isinstance(value, _OPAQUE_TYPES) or isinstance(value, BUFFER_TYPES):
        return None
    try:
        attrs = object.__getattribute__(value, "__dict__")
    except AttributeError:
        return None
    return attrs if isinstance(attrs, dict) else None


def is_composite(value) -> bool:
    if is_inline(value) or isinstance(value, BUFFER_TYPES):
        return False
    if isinstance(value, _COMPOSITE_TYPES):
        return True
    return _instance_dict(value) is not None


def children(value) -> list[tuple[object, object]]:
    """Return a snapshot of (key, child) pairs for a composite node.

    Mappings yield their own keys, sequences and sets their enumeration index,
    modules and instances their attribute names. Enumeration failures yield no
    children; the node still contributes its own overhead.
    """
    try:
        if isinstance(value, Mapping):
            return list(value.items())
        if isinstance(value, SEQUENCE_TYPES):
            return list(enumerate(value))
        if isinstance(value, types.ModuleType):
            return list(vars(value).items())
        attrs = _instance_dict(value)
        if attrs is not None:
            return list(attrs.items())
    except Exception as exc:
        logger.debug("cannot enumerate %s: %r", type(value).__name__, exc)
    return []


def child_path(path: str, key) -> str:
    """Join a parent path and a child key into a slash-delimited path."""
    key_str = str(key)
    return f"{path}/{key_str}" if path else key_str


def capped_path(path: str) -> str:
    """Synthetic path under which a depth-capped subtree is reported."""
    return f"{path}/..." if path else "..."
