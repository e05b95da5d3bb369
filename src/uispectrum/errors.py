"""Exception types raised by uispectrum."""

from __future__ import annotations


class SpectrumError(Exception):
    """Base class for uispectrum errors."""


class TrackingError(SpectrumError):
    """A target cannot be explored (missing lifecycle support, no weak refs)."""

    def __init__(self, target_name: str, reason: str) -> None:
        self.target_name = target_name
        self.reason = reason
        super().__init__(f"{target_name} can't be explored: {reason}")


class ContextError(SpectrumError, RuntimeError):
    """An operation needs the UI event loop but none is bound."""


class SceneError(SpectrumError):
    """A scene file cannot be read or does not describe a valid scene."""
