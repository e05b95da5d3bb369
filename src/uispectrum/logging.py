"""Diagnostics logging for uispectrum.

The "uispectrum" logger carries the tool's own diagnostics: tracking,
node pool statistics, scheduling. Reports never go through it unless the
engine was given a LoggingSink, which writes to "uispectrum.report".

Levels below DEBUG: VERBOSE (15) sits between DEBUG and INFO for detailed
progress, TRACE (5) covers per-event and per-node chatter.

Output goes to the file named by config (or SPECTRUM_LOG); without one,
to stderr when it is a terminal, and nowhere otherwise.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from uispectrum.config.schema import LoggingConfig

TRACE = 5
VERBOSE = 15

logging.addLevelName(TRACE, "TRACE")
logging.addLevelName(VERBOSE, "VERBOSE")

PACKAGE_LOGGER = "uispectrum"

logger = logging.getLogger(PACKAGE_LOGGER)

_installed: list[logging.Handler] = []
_configured = False

_NAMED_LEVELS = {
    "TRACE": TRACE,
    "VERBOSE": VERBOSE,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# -v count: 0 errors only ... 4 everything
_VERBOSITY_LEVELS = (logging.ERROR, logging.WARNING, logging.INFO, VERBOSE, TRACE)


class DiagnosticsFormatter(logging.Formatter):
    """HH:MM:SS level [area]: message, with the area taken from the logger name.

    "uispectrum.engine" shows as [engine]; the package logger shows no area.
    """

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)s%(area)s: %(message)s", datefmt="%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        record.levelname = record.levelname.lower()
        area = record.name[len(PACKAGE_LOGGER) + 1 :] if record.name.startswith(PACKAGE_LOGGER + ".") else ""
        record.area = f" [{area}]" if area else ""
        return super().format(record)


def level_from_name(name: str | None, default: int = logging.INFO) -> int:
    """Resolve a level name such as "debug" or "trace"; unknown names give default."""
    if not name:
        return default
    return _NAMED_LEVELS.get(name.strip().upper(), default)


def resolve_level(config: LoggingConfig | None = None, verbose: int | None = None) -> int:
    """Level from a -v count, else from config.level, else INFO."""
    if verbose is not None:
        return _VERBOSITY_LEVELS[max(0, min(verbose, len(_VERBOSITY_LEVELS) - 1))]
    if config is not None:
        return level_from_name(config.level)
    return logging.INFO


def setup_logging(
    config: LoggingConfig | None = None,
    verbose: int | None = None,
    stream: TextIO | None = None,
) -> None:
    """Install diagnostics handlers. Later calls do nothing until reset_logging().

    Args:
        config: Level and file settings.
        verbose: -v count (0-4); wins over config.level.
        stream: Write here instead of a file or the terminal.
    """
    global _configured
    if _configured:
        return
    _configured = True

    level = resolve_level(config, verbose)
    logger.setLevel(level)

    handler = _make_handler(config, stream)
    if handler is None:
        return
    handler.setLevel(level)
    handler.setFormatter(DiagnosticsFormatter())
    logger.addHandler(handler)
    _installed.append(handler)


def _make_handler(config: LoggingConfig | None, stream: TextIO | None) -> logging.Handler | None:
    if stream is not None:
        return logging.StreamHandler(stream)

    log_path = (config.file if config else None) or os.environ.get("SPECTRUM_LOG")
    if log_path:
        try:
            return logging.FileHandler(os.path.expanduser(log_path), mode="a", encoding="utf-8")
        except OSError as e:
            if not sys.stderr.isatty():
                return None
            print(f"[uispectrum] Can't open log file {log_path}: {e}", file=sys.stderr)

    if sys.stderr.isatty():
        return logging.StreamHandler(sys.stderr)
    return None


def reset_logging() -> None:
    """Remove the handlers setup_logging() installed (tests)."""
    global _configured
    while _installed:
        handler = _installed.pop()
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    _configured = False


def get_logger(name: str | None = None) -> logging.Logger:
    """The package logger, or its child for one area ("engine", "tree", ...)."""
    return logger.getChild(name) if name else logger
