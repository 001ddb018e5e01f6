"""Settings file I/O for membuddy.

Stores default report options in a JSON file at
XDG_CONFIG_HOME/membuddy/settings.json. The CLI layers its flags over these
defaults.
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from membuddy.errors import ConfigError
from membuddy.options import DisplayOptions, ProfileOptions, partition_options

logger = logging.getLogger(__name__)

# Keys a settings file may hold besides the option fields themselves.
_EXTRA_KEYS = frozenset({"color"})


def get_config_path() -> Path:
    """Return path to settings file.

    Uses XDG_CONFIG_HOME (default ~/.config) / membuddy / settings.json.
    """
    config_home = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(config_home) / "membuddy" / "settings.json"


def load_settings() -> dict:
    """Load settings from JSON file. Returns empty dict on missing/corrupt file."""
    path = get_config_path()
    # [LAW:dataflow-not-control-flow] Always attempt read; empty dict is the "no data" value.
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("ignoring unreadable settings file %s: %s", path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_settings(data: dict) -> None:
    """Atomic write of settings dict to JSON file.

    Creates parent directories if needed. Writes to temp file then renames
    to avoid partial writes on crash.
    """
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        os.replace(tmp_path, path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def load_setting(key: str, default=None):
    """Load a single setting by key. Returns default if absent."""
    return load_settings().get(key, default)


def save_setting(key: str, value) -> None:
    """Save a single setting by key (merge into existing settings)."""
    data = load_settings()
    data[key] = value
    save_settings(data)


def load_defaults() -> tuple[dict, dict, bool]:
    """Return validated (profile kwargs, display kwargs, color) from settings.

    ``target`` cannot be set from a file. Raises ConfigError naming the
    settings file when a value is invalid.
    """
    data = load_settings()
    color = data.get("color", True)
    options = {k: v for k, v in data.items() if k not in _EXTRA_KEYS}
    path = get_config_path()
    try:
        if not isinstance(color, bool):
            raise ConfigError(f"color must be true or false, got {color!r}")
        if "target" in options:
            raise ConfigError("target cannot be set in a settings file")
        profile_kw, display_kw = partition_options(options)
        ProfileOptions(**profile_kw)
        DisplayOptions(**display_kw)
    except ConfigError as exc:
        raise ConfigError(f"{path}: {exc}") from exc
    return profile_kw, display_kw, color
