"""
Core configuration settings for bluebus.

Settings come from three layers, lowest priority first: built-in defaults, an
optional YAML file, then environment variables.
"""

import os
import math
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from bluebus.bt_ref.constants import (
    CONNECT_TIMEOUT_MS,
    OBEX_POLL_INTERVAL,
    OBEX_POLL_INTERVAL_MAX,
)

# Base paths
DATA_DIR = Path(os.getenv("XDG_DATA_HOME", Path.home() / ".local/share")) / "bluebus"
CONFIG_DIR = Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config")) / "bluebus"
CONFIG_FILE = Path(os.getenv("BLUEBUS_CONFIG", CONFIG_DIR / "config.yaml"))

# Logging configuration
LOG_DIR = DATA_DIR / "logs"

# Log types
LOG__GENERAL = "GENERAL"
LOG__DEBUG = "DEBUG"
LOG__SIGNAL = "SIGNAL"
LOG__OBEX = "OBEX"


@dataclass
class Settings:
    """Runtime knobs that are safe to tune without changing the wire contract."""

    log_level: int = logging.INFO
    connect_timeout_ms: int = CONNECT_TIMEOUT_MS
    obex_poll_interval: float = OBEX_POLL_INTERVAL


def clamp_poll_interval(value: float) -> float:
    """Keep the OBEX poll interval inside (0, OBEX_POLL_INTERVAL_MAX]."""
    value = float(value)
    if math.isnan(value) or value <= 0:
        return OBEX_POLL_INTERVAL
    return min(value, OBEX_POLL_INTERVAL_MAX)


def _parse_level(value: Any) -> int:
    if isinstance(value, int):
        return value
    level = logging.getLevelName(str(value).upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {value!r}")
    return level


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        return {}
    with path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top-level YAML value must be a mapping")
    return data


def load_settings(path: Optional[Path] = None, environ: Optional[Dict[str, str]] = None) -> Settings:
    """Build a :class:`Settings` from *path* (YAML) and *environ*."""
    environ = os.environ if environ is None else environ
    data = _read_yaml(Path(path) if path else CONFIG_FILE)

    settings = Settings()
    if "log_level" in data:
        settings.log_level = _parse_level(data["log_level"])
    if "connect_timeout_ms" in data:
        settings.connect_timeout_ms = int(data["connect_timeout_ms"])
    if "obex_poll_interval" in data:
        settings.obex_poll_interval = clamp_poll_interval(data["obex_poll_interval"])

    if environ.get("BLUEBUS_LOG_LEVEL"):
        settings.log_level = _parse_level(environ["BLUEBUS_LOG_LEVEL"])
    if environ.get("BLUEBUS_OBEX_POLL_INTERVAL"):
        settings.obex_poll_interval = clamp_poll_interval(environ["BLUEBUS_OBEX_POLL_INTERVAL"])

    return settings


def load_settings_or_defaults(path: Optional[Path] = None, environ: Optional[Dict[str, str]] = None) -> Settings:
    """Like :func:`load_settings` but falls back to defaults on a bad file or variable."""
    try:
        return load_settings(path, environ)
    except (OSError, TypeError, ValueError, yaml.YAMLError) as e:
        logging.getLogger("bluebus").warning(f"Ignoring invalid bluebus settings, using defaults: {e}")
        return Settings()


settings = load_settings_or_defaults()
