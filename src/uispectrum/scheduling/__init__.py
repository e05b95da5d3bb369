"""UI context and report scheduling."""

from uispectrum.scheduling.changes import PendingChangeLog
from uispectrum.scheduling.scheduler import ChangeScheduler
from uispectrum.scheduling.ui_context import UiContext

__all__ = [
    "ChangeScheduler",
    "PendingChangeLog",
    "UiContext",
]
