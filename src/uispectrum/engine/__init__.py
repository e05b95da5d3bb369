"""Report engine and the process-wide engine instance."""

from uispectrum.engine.engine import (
    LifecycleMessage,
    ReportEngine,
    get_engine,
    init_engine,
    reset_engine,
)
from uispectrum.engine.tracking import ActivityTracker, ApplicationObserver

__all__ = [
    "ActivityTracker",
    "ApplicationObserver",
    "LifecycleMessage",
    "ReportEngine",
    "get_engine",
    "init_engine",
    "reset_engine",
]
