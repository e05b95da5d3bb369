"""Report severities, modelled on logcat priorities."""

from __future__ import annotations

import logging
from enum import IntEnum

from uispectrum.logging import TRACE


class Severity(IntEnum):
    """Priority attached to every message handed to a TextSink."""

    VERBOSE = 2
    DEBUG = 3
    INFO = 4
    WARN = 5
    ERROR = 6
    ASSERT = 7

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def logging_level(self) -> int:
        """Equivalent level for the stdlib logging module."""
        return _LOGGING_LEVELS[self]

    @classmethod
    def parse(cls, value: Severity | str | int) -> Severity:
        """Parse a severity from a name ("debug", "WARN", "warning") or a priority.

        Raises:
            ValueError: If the value names no severity.
        """
        if isinstance(value, Severity):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid severity: {value!r}")
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise ValueError(f"Invalid severity: {value!r}") from None
        name = str(value).strip().upper()
        name = _ALIASES.get(name, name)
        try:
            return cls[name]
        except KeyError:
            raise ValueError(f"Invalid severity: {value!r}") from None


_ALIASES = {
    "WARNING": "WARN",
    "CRITICAL": "ASSERT",
    "TRACE": "VERBOSE",
}

_LOGGING_LEVELS = {
    Severity.VERBOSE: TRACE,
    Severity.DEBUG: logging.DEBUG,
    Severity.INFO: logging.INFO,
    Severity.WARN: logging.WARNING,
    Severity.ERROR: logging.ERROR,
    Severity.ASSERT: logging.CRITICAL,
}
