"""Logging bootstrap for the membuddy CLI.

Library modules only create loggers; handlers are attached here, and only
when an entry point asks for it. Environment:

    MEMBUDDY_LOG_LEVEL  level name, default WARNING (unknown names fall back)
    MEMBUDDY_LOG_FILE   explicit log file path
    MEMBUDDY_LOG_DIR    directory for a timestamped file when no path is given

// [LAW:single-enforcer] Logger handler wiring is enforced in this module only.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER = "membuddy"
DEFAULT_LEVEL = "WARNING"
DEFAULT_LOG_DIR = "~/.local/share/membuddy/logs"

_STREAM_FORMAT = "[%(name)s] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


@dataclass(frozen=True)
class LoggingRuntime:
    """Where CLI logs go and at which level."""

    level_name: str
    level: int
    file_path: str


_RUNTIME: LoggingRuntime | None = None


def _level_from_env() -> int:
    name = os.environ.get("MEMBUDDY_LOG_LEVEL", DEFAULT_LEVEL).strip().upper()
    # getLevelName maps known names to ints and anything else to a string.
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING


def _log_file_from_env() -> Path:
    explicit = os.environ.get("MEMBUDDY_LOG_FILE")
    if explicit:
        return Path(explicit)
    log_dir = Path(os.path.expanduser(os.environ.get("MEMBUDDY_LOG_DIR", DEFAULT_LOG_DIR)))
    ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    return log_dir / f"membuddy-{ts}-{os.getpid()}.log"


def _handlers(level: int, file_path: Path) -> list[logging.Handler]:
    stream = logging.StreamHandler()
    stream.setFormatter(logging.Formatter(_STREAM_FORMAT))
    rotating = RotatingFileHandler(file_path, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8")
    rotating.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))
    for handler in (stream, rotating):
        handler.setLevel(level)
    return [stream, rotating]


def configure() -> LoggingRuntime:
    """Attach stderr and rotating-file handlers to the ``membuddy`` logger.

    Idempotent until reset(): repeated calls return the first runtime.
    """
    global _RUNTIME
    if _RUNTIME is not None:
        return _RUNTIME

    level = _level_from_env()
    file_path = _log_file_from_env()
    file_path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.propagate = False
    logger.handlers.clear()
    for handler in _handlers(level, file_path):
        logger.addHandler(handler)

    _RUNTIME = LoggingRuntime(
        level_name=logging.getLevelName(level), level=level, file_path=str(file_path)
    )
    return _RUNTIME


def reset() -> None:
    """Detach and close the handlers configure() attached."""
    global _RUNTIME
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    _RUNTIME = None
