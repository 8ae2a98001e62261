"""Console logging for servedir.

Four verbosity levels:
- QUIET (0): Warnings + errors
- NORMAL (1): Info + warnings + errors
- VERBOSE (2): Detailed info
- DEBUG (3): Everything including internal state

Usage:
    from servedir.core.logging import get_logger, set_verbosity

    logger = get_logger(__name__)
    set_verbosity(2)  # VERBOSE

    logger.verbose("Resolved prefix /srv/www")
    logger.info("Listening")
    logger.error("Address already in use")
"""

from __future__ import annotations

import sys
from enum import IntEnum
from typing import TextIO

from servedir.core.config import LoggingPolicy


class VerbosityLevel(IntEnum):
    """Verbosity levels for servedir."""

    QUIET = 0  # Warnings + errors
    NORMAL = 1  # Info + warnings + errors
    VERBOSE = 2  # Detailed info
    DEBUG = 3  # Everything


_VERBOSITY: VerbosityLevel = VerbosityLevel.NORMAL

_USE_COLORS: bool = True


def set_verbosity(level: int | VerbosityLevel) -> None:
    """Set global verbosity level.

    Args:
        level: Verbosity level (0-3 or VerbosityLevel enum)
    """
    global _VERBOSITY

    if isinstance(level, int):
        level = VerbosityLevel(level)

    _VERBOSITY = level


def get_verbosity() -> VerbosityLevel:
    return _VERBOSITY


def set_colors(enabled: bool) -> None:
    global _USE_COLORS
    _USE_COLORS = enabled


def colors_enabled(stream: TextIO | None = None) -> bool:
    """True when ANSI colors should be written to ``stream`` (stdout by default)."""
    stream = stream or sys.stdout
    return _USE_COLORS and hasattr(stream, "isatty") and stream.isatty()


def apply_logging_policy(policy: LoggingPolicy) -> None:
    """Apply a resolved LoggingPolicy to the global logger state."""
    if policy.emit_debug:
        set_verbosity(VerbosityLevel.DEBUG)
    elif policy.emit_verbose:
        set_verbosity(VerbosityLevel.VERBOSE)
    elif policy.emit_info:
        set_verbosity(VerbosityLevel.NORMAL)
    else:
        set_verbosity(VerbosityLevel.QUIET)
    set_colors(policy.color)


class ServedirLogger:
    """Logger with verbosity support."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "VERBOSE": "\033[34m",  # Blue
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "RESET": "\033[0m",
    }

    def __init__(self, name: str):
        self.name = name

    def _format_message(self, level: str, message: str, stream: TextIO) -> str:
        if colors_enabled(stream):
            color = self.COLORS.get(level, "")
            reset = self.COLORS["RESET"]
            return f"{color}[{level.lower()}]{reset} {message}"
        return f"[{level.lower()}] {message}"

    def _log(self, level: VerbosityLevel, level_name: str, message: str) -> None:
        if level > _VERBOSITY:
            return

        stream = sys.stderr if level_name == "ERROR" else sys.stdout
        print(self._format_message(level_name, message, stream), file=stream)

    def debug(self, message: str) -> None:
        """Log debug message (verbosity >= DEBUG)."""
        self._log(VerbosityLevel.DEBUG, "DEBUG", message)

    def verbose(self, message: str) -> None:
        """Log verbose message (verbosity >= VERBOSE)."""
        self._log(VerbosityLevel.VERBOSE, "VERBOSE", message)

    def info(self, message: str) -> None:
        """Log info message (verbosity >= NORMAL)."""
        self._log(VerbosityLevel.NORMAL, "INFO", message)

    def warning(self, message: str) -> None:
        """Log warning message (verbosity >= QUIET)."""
        self._log(VerbosityLevel.QUIET, "WARNING", message)

    def error(self, message: str) -> None:
        """Log error message (always shown)."""
        print(self._format_message("ERROR", message, sys.stderr), file=sys.stderr)


_LOGGERS: dict[str, ServedirLogger] = {}


def get_logger(name: str = __name__) -> ServedirLogger:
    """Get logger instance for module.

    Args:
        name: Logger name (usually __name__)
    """
    if name not in _LOGGERS:
        _LOGGERS[name] = ServedirLogger(name)

    return _LOGGERS[name]
