"""The report engine: tracking, scheduling and report emission.

One engine observes one toolkit. Lifecycle messages from the toolkit become
change descriptions, changes schedule reports, and a report builds a
composite tree, renders it, and hands it to the sink in chunks.

Everything runs on the UI context. Calls from other threads are posted
onto it and return immediately.

Example:
    engine = init_engine(toolkit, ConsoleSink())
    engine.explore(application)
    engine.report()
"""

from __future__ import annotations

import copy
import time
from collections.abc import Hashable
from typing import Any

from uispectrum.config.builder import ConfigurationBuilder
from uispectrum.config.schema import Config, ReportConfig
from uispectrum.engine.tracking import ActivityTracker, ApplicationObserver
from uispectrum.errors import SpectrumError, TrackingError
from uispectrum.logging import TRACE, get_logger
from uispectrum.report.chunker import OutputChunker
from uispectrum.report.format import format_class_name
from uispectrum.report.renderer import ReportRenderer
from uispectrum.report.sink import LoggingSink, TextSink
from uispectrum.scheduling.changes import PendingChangeLog
from uispectrum.scheduling.scheduler import ChangeScheduler
from uispectrum.scheduling.ui_context import UiContext
from uispectrum.severity import Severity
from uispectrum.toolkit.events import (
    ActivityLifecycleEvent,
    FragmentLifecycleEvent,
    LayoutChangedEvent,
)
from uispectrum.toolkit.protocol import ToolkitAccessor
from uispectrum.tree.merger import TreeMerger
from uispectrum.tree.pool import NodePools

log = get_logger("engine")

LifecycleMessage = ActivityLifecycleEvent | FragmentLifecycleEvent | LayoutChangedEvent


class ReportEngine:
    """Observes activities of a toolkit and reports their hierarchy.

    Args:
        toolkit: Accessor over the toolkit's object graph.
        sink: Destination of reports (default: LoggingSink).
        config: Root configuration (default: a copy of get_config()).
        loop: Event loop acting as the UI context. Without one the engine
            binds the loop running when it is first used, or runs
            synchronously on the creating thread.
        ui: Explicit UI context, overrides loop.
    """

    def __init__(
        self,
        toolkit: ToolkitAccessor,
        sink: TextSink | None = None,
        config: Config | None = None,
        loop: Any = None,
        ui: UiContext | None = None,
    ) -> None:
        if config is None:
            from uispectrum.config import get_config

            config = copy.deepcopy(get_config())

        self.toolkit = toolkit
        self.sink: TextSink = sink if sink is not None else LoggingSink()
        self.config = config
        # Disabled when configured off or when asserts are stripped (python -O)
        self.enabled = config.enabled and __debug__

        self._ui = ui or UiContext(loop)
        self._pools = NodePools()
        self._merger = TreeMerger(toolkit, self._pools, config.report, on_warning=self._warn)
        self._renderer = ReportRenderer(config.report)
        self._scheduler = ChangeScheduler(self._ui, self._run_report, config.report, on_warning=self._warn)
        self._trackers: dict[Hashable, ActivityTracker] = {}
        self._applications = ApplicationObserver(self.explore)
        self._reporting = False
        self._report_again = False
        self._closed = False

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def report_config(self) -> ReportConfig:
        return self.config.report

    @property
    def ui(self) -> UiContext:
        return self._ui

    @property
    def pools(self) -> NodePools:
        return self._pools

    @property
    def pending(self) -> PendingChangeLog:
        """Changes detected since the last report."""
        return self._scheduler.pending

    @property
    def scheduler(self) -> ChangeScheduler:
        return self._scheduler

    @property
    def tracked_count(self) -> int:
        return sum(1 for tracker in self._trackers.values() if tracker.alive)

    def tracked(self) -> list[ActivityTracker]:
        """Trackers of live, created activities, in exploration order.

        An activity explored before its first lifecycle event has no state
        yet and stays out of reports until it is created.
        """
        return [
            tracker for tracker in self._trackers.values() if tracker.alive and tracker.state is not None
        ]

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def explore(self, target: Any) -> None:
        """Start observing an application or a single activity.

        An application registers an activity-created listener, and each
        activity it creates is explored. An activity is tracked once;
        exploring it again does nothing.
        """
        if not self.enabled or self._closed:
            log.debug("Engine disabled, not exploring %r", target)
            return
        if not self._ui.is_current():
            self._ui.post(self.explore, target)
            return

        if self.toolkit.is_application(target):
            if self._applications.observe(target, self.toolkit.observe_activities):
                log.debug("Observing application %s", self.toolkit.qualified_name(target))
            return

        try:
            self._track(target)
        except TrackingError as e:
            self._warn(str(e))

    def dispatch(self, event: LifecycleMessage) -> None:
        """Feed one lifecycle message into the engine."""
        if self._closed:
            return
        if not self._ui.is_current():
            self._ui.post(self.dispatch, event)
            return

        if isinstance(event, ActivityLifecycleEvent):
            self._on_activity_event(event)
        elif isinstance(event, FragmentLifecycleEvent):
            self._on_fragment_event(event)
        elif isinstance(event, LayoutChangedEvent):
            self._scheduler.on_change_detected("layout changed")
        else:
            raise TypeError(f"Not a lifecycle event: {event!r}")

    def report(self) -> None:
        """Build and emit a report now, or as soon as the UI context is free."""
        if self._closed:
            return
        self._scheduler.request_report()

    def configure(self) -> ConfigurationBuilder:
        """Builder over the live report configuration."""
        return ConfigurationBuilder(self.config.report)

    def close(self) -> None:
        """Unsubscribe every listener, cancel timers and forget all activities."""
        if self._closed:
            return
        self._closed = True
        self._applications.close()
        for tracker in self._trackers.values():
            tracker.close()
        self._trackers.clear()
        self._scheduler.cancel()
        self._scheduler.pending.clear()
        self._pools.clear()
        log.debug("Engine closed")

    # -------------------------------------------------------------------------
    # Tracking
    # -------------------------------------------------------------------------

    def _track(self, activity: Any) -> None:
        toolkit = self.toolkit
        key = toolkit.identity(activity)
        existing = self._trackers.get(key)
        if existing is not None and existing.alive:
            return

        name = toolkit.qualified_name(activity)
        if not toolkit.supports_lifecycle(activity):
            raise TrackingError(name, "it does not report lifecycle events")

        tracker = ActivityTracker(activity, key, name)
        self._trackers[key] = tracker
        log.debug("Tracking %s", name)

        if toolkit.supports_fragments(activity):
            tracker.unsubscribers.append(toolkit.observe_fragments(activity, self.dispatch))
        tracker.unsubscribers.append(toolkit.observe_layout(activity, self.dispatch))
        # Registered last: the lifecycle observer replays reached states
        tracker.unsubscribers.append(toolkit.observe_lifecycle(activity, self.dispatch))

    def _on_activity_event(self, event: ActivityLifecycleEvent) -> None:
        tracker = self._trackers.get(event.activity_id)
        if tracker is None:
            log.log(TRACE, "Lifecycle event of untracked activity %s ignored", event.activity_id)
            return

        tracker.transition(event.event, self._warn)
        if event.event == "destroyed":
            tracker.close()
            del self._trackers[tracker.key]
        self._scheduler.on_change_detected(f"{self._name(tracker.qualified_name)} {event.event}")

    def _on_fragment_event(self, event: FragmentLifecycleEvent) -> None:
        name = self._name(event.fragment_class)
        if event.event == "attached":
            if event.parent:
                description = f"{name} attached to {self._name(event.parent)}"
            else:
                description = f"{name} attached"
        else:
            description = f"{name} detached"
        self._scheduler.on_change_detected(description)

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def _run_report(self) -> None:
        # A report requested while one is being built runs after it completes
        if self._reporting:
            log.debug("Report requested while building one, deferred")
            self._report_again = True
            return

        self._reporting = True
        try:
            while True:
                self._report_again = False
                self._emit_report()
                if not self._report_again:
                    break
        finally:
            self._reporting = False

    def _emit_report(self) -> None:
        config = self.config.report
        started = time.perf_counter()
        tree = self._merger.build(self.tracked())
        try:
            lines = self._renderer.render(tree, self.pending, time.perf_counter() - started)
        finally:
            self._merger.release(tree)

        chunker = OutputChunker(config.max_message_bytes)
        chunker.extend(lines)
        messages = chunker.build()
        log.log(TRACE, "Report of %d lines in %d message(s)", len(lines), len(messages))
        for message in messages:
            self.sink.print(config.log_level, config.log_tag, message)

    def _name(self, qualified_name: str) -> str:
        return format_class_name(qualified_name, self.config.report.append_package_names)

    def _warn(self, message: str) -> None:
        log.warning(message)
        self.sink.print(Severity.WARN, self.config.report.log_tag, message + "\n")


# -----------------------------------------------------------------------------
# Process engine
# -----------------------------------------------------------------------------

_engine: ReportEngine | None = None


def get_engine() -> ReportEngine:
    """Return the process engine.

    Raises:
        SpectrumError: If init_engine() has not been called.
    """
    if _engine is None:
        raise SpectrumError("Report engine not initialized, call init_engine(toolkit) first")
    return _engine


def init_engine(
    toolkit: ToolkitAccessor,
    sink: TextSink | None = None,
    config: Config | None = None,
    loop: Any = None,
) -> ReportEngine:
    """Create the process engine; later calls return the existing one."""
    global _engine
    if _engine is None:
        _engine = ReportEngine(toolkit, sink, config, loop)
    return _engine


def reset_engine() -> None:
    """Close and drop the process engine (tests)."""
    global _engine
    if _engine is not None:
        _engine.close()
    _engine = None
