"""
Core logging functionality for bluebus.

One file per log category under ``config.LOG_DIR``; records go through a
single ``bluebus`` logger hierarchy so applications can attach their own
handlers as usual.
"""

import logging
from pathlib import Path
from typing import Dict, Optional
from . import config

# Re-export log type constants for external modules
LOG__GENERAL = config.LOG__GENERAL
LOG__DEBUG = config.LOG__DEBUG
LOG__SIGNAL = config.LOG__SIGNAL
LOG__OBEX = config.LOG__OBEX

_LOG_PATHS: Dict[str, Path] = {
    LOG__GENERAL: config.LOG_DIR / "general.log",
    LOG__DEBUG: config.LOG_DIR / "debug.log",
    LOG__SIGNAL: config.LOG_DIR / "signal.log",
    LOG__OBEX: config.LOG_DIR / "obex.log",
}

_formatter = logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s")


def _make_handler(path: Path) -> logging.Handler:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(path, mode="a", encoding="utf-8", delay=True)
    except OSError:
        # Read-only home or sandbox; logging still works through the hierarchy
        handler = logging.NullHandler()
    handler.setFormatter(_formatter)
    return handler


_handlers: Dict[str, logging.Handler] = {
    log_type: _make_handler(path) for log_type, path in _LOG_PATHS.items()
}

# Root logger for bluebus
_logger = logging.getLogger("bluebus")
_logger.setLevel(config.settings.log_level)

# Each category logger writes to its own file only
_category_loggers: Dict[str, logging.Logger] = {}
for _log_type, _handler in _handlers.items():
    _cat = _logger.getChild(_log_type.lower())
    _cat.addHandler(_handler)
    _category_loggers[_log_type] = _cat

del _log_type, _handler, _cat


def _emit(line: str, log_type: str, level: int) -> None:
    _category_loggers.get(log_type, _category_loggers[LOG__GENERAL]).log(level, line.rstrip("\n"))


def logging__debug_log(msg: str) -> None:
    """Write to debug log."""
    _emit(msg, LOG__DEBUG, logging.DEBUG)


def logging__general_log(msg: str) -> None:
    """Write to general log."""
    _emit(msg, LOG__GENERAL, logging.INFO)


def logging__signal_log(msg: str) -> None:
    """Write to signal log."""
    _emit(msg, LOG__SIGNAL, logging.DEBUG)


def logging__obex_log(msg: str) -> None:
    """Write to OBEX log."""
    _emit(msg, LOG__OBEX, logging.INFO)


_log_func_map = {
    LOG__GENERAL: logging__general_log,
    LOG__DEBUG: logging__debug_log,
    LOG__SIGNAL: logging__signal_log,
    LOG__OBEX: logging__obex_log,
}


def logging__log_event(log_type: str, string_to_log: str) -> None:
    """Log an event to the specified log type."""
    _log_func_map.get(log_type, logging__general_log)(string_to_log)


def print_and_log(output_string: str, log_type: str = LOG__GENERAL) -> None:
    """Print to stdout and log to the specified log type."""
    if log_type not in (LOG__DEBUG, LOG__SIGNAL):
        print(output_string)
    logging__log_event(log_type, output_string)


def set_level(level: int) -> None:
    """Change the verbosity of every bluebus logger at runtime."""
    _logger.setLevel(level)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger with the specified name.

    Module loggers live under ``bluebus`` and propagate to whatever the
    application configured on the root logger.
    """
    if name:
        if name.startswith("bluebus."):
            name = name[len("bluebus."):]
        return _logger.getChild(name)
    return _logger
