"""Report scheduling: change accumulation and throttling.

With throttling on, the first change after a quiet period schedules one
report a window ahead; changes arriving before it fires only join the
pending log. With throttling off every change reports immediately.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from uispectrum.errors import ContextError
from uispectrum.logging import TRACE, get_logger
from uispectrum.scheduling.changes import PendingChangeLog

if TYPE_CHECKING:
    from uispectrum.config.schema import ReportConfig
    from uispectrum.scheduling.ui_context import UiContext

log = get_logger("scheduling")


class ChangeScheduler:
    """Decides when the report trigger runs.

    Args:
        ui: The UI context every trigger runs on.
        trigger: Builds and emits one report; called on the UI context.
        config: Live report configuration, read on every change.
        on_warning: Receives irregularities (default: the module logger).
    """

    def __init__(
        self,
        ui: UiContext,
        trigger: Callable[[], None],
        config: ReportConfig,
        on_warning: Callable[[str], None] | None = None,
    ) -> None:
        self._ui = ui
        self._trigger = trigger
        self._config = config
        self._on_warning = on_warning or log.warning
        self._warned_no_timers = False
        self.pending = PendingChangeLog()
        self.scheduled_fire_time: float | None = None
        self._handle: Any = None

    @property
    def config(self) -> ReportConfig:
        return self._config

    @config.setter
    def config(self, config: ReportConfig) -> None:
        self._config = config

    @property
    def is_scheduled(self) -> bool:
        return self._handle is not None

    def on_change_detected(self, description: str) -> None:
        """Record a change and schedule a report if auto reporting is on."""
        if not self._ui.is_current():
            self._ui.post(self.on_change_detected, description)
            return

        if self.pending.append(description):
            log.debug("Change detected: %s", description)
        else:
            log.log(TRACE, "Repeated change ignored: %s", description)

        config = self._config
        if not config.auto_report:
            return
        if not config.throttle:
            self._trigger()
            return

        now = self._ui.time()
        if self.scheduled_fire_time is None or self.scheduled_fire_time <= now:
            try:
                self.schedule(config.throttle_window_ms / 1000)
            except ContextError:
                # Synchronous mode has no timers: report unthrottled
                if not self._warned_no_timers:
                    self._warned_no_timers = True
                    self._on_warning("Throttling needs a UI event loop; reporting every change immediately.")
                self._trigger()

    def request_report(self) -> None:
        """Manual trigger: inline on the UI context, posted from anywhere else."""
        if self._ui.is_current():
            self._trigger()
        else:
            self._ui.post(self.schedule, 0)

    def schedule(self, delay: float) -> None:
        """Replace any pending report with one delay seconds from now.

        A zero delay posts the report without a deadline.
        """
        self.cancel()
        if delay <= 0:
            self._ui.post(self._fire)
            return
        fire_time = self._ui.time() + delay
        self._handle = self._ui.post_delayed(delay, self._fire)
        self.scheduled_fire_time = fire_time
        log.log(TRACE, "Report scheduled in %.3f s", delay)

    def cancel(self) -> None:
        """Drop the pending timer, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self.scheduled_fire_time = None

    def _fire(self) -> None:
        self._handle = None
        self._trigger()
