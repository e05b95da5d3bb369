"""Spectrum: snapshots of a UI's activity, view and fragment hierarchy as text reports."""

__version__ = "0.1.0"

from typing import Any

# Public API
from uispectrum.config import Config, ConfigurationBuilder, ReportConfig, get_config, load_config
from uispectrum.engine import ReportEngine, get_engine, init_engine, reset_engine
from uispectrum.errors import ContextError, SceneError, SpectrumError, TrackingError
from uispectrum.report import CollectingSink, ConsoleSink, LoggingSink, TextSink
from uispectrum.scheduling import UiContext
from uispectrum.severity import Severity
from uispectrum.toolkit import (
    ActivityLifecycleEvent,
    FragmentLifecycleEvent,
    LayoutChangedEvent,
    SceneToolkit,
    ToolkitAccessor,
    load_scene,
)


def explore(target: Any) -> None:
    """Start observing an application or an activity with the process engine."""
    get_engine().explore(target)


def report() -> None:
    """Build and emit a report with the process engine."""
    get_engine().report()


def configure() -> ConfigurationBuilder:
    """Builder over the process engine's report configuration."""
    return get_engine().configure()


__all__ = [
    # Main entry points
    "configure",
    "explore",
    "report",
    # Engine
    "ReportEngine",
    "UiContext",
    "get_engine",
    "init_engine",
    "reset_engine",
    # Config
    "Config",
    "ConfigurationBuilder",
    "ReportConfig",
    "get_config",
    "load_config",
    # Output
    "CollectingSink",
    "ConsoleSink",
    "LoggingSink",
    "Severity",
    "TextSink",
    # Toolkit
    "ActivityLifecycleEvent",
    "FragmentLifecycleEvent",
    "LayoutChangedEvent",
    "SceneToolkit",
    "ToolkitAccessor",
    "load_scene",
    # Errors
    "ContextError",
    "SceneError",
    "SpectrumError",
    "TrackingError",
]
