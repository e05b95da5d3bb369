"""Weak tracking of explored activities and their lifecycle state."""

from __future__ import annotations

import weakref
from collections.abc import Callable, Hashable
from typing import Any

from uispectrum.errors import TrackingError
from uispectrum.logging import get_logger
from uispectrum.toolkit.protocol import Unsubscribe

log = get_logger("engine")

# Lifecycle transitions a well-behaved toolkit delivers
_TRANSITIONS: dict[str | None, frozenset[str]] = {
    None: frozenset({"created"}),
    "created": frozenset({"started", "destroyed"}),
    "started": frozenset({"resumed", "stopped"}),
    "resumed": frozenset({"paused"}),
    "paused": frozenset({"resumed", "stopped"}),
    "stopped": frozenset({"started", "destroyed"}),
    "destroyed": frozenset(),
}


class ActivityTracker:
    """Lifecycle state of one explored activity.

    Holds the activity weakly: a collected activity drops out of reports
    without ever being destroyed through its lifecycle.
    """

    def __init__(self, activity: Any, key: Hashable, qualified_name: str) -> None:
        try:
            self._ref = weakref.ref(activity)
        except TypeError:
            raise TrackingError(qualified_name, "it does not support weak references") from None
        self.key = key
        self.qualified_name = qualified_name
        self.state: str | None = None
        self.unsubscribers: list[Unsubscribe] = []

    @property
    def activity(self) -> Any | None:
        return self._ref()

    @property
    def alive(self) -> bool:
        return self._ref() is not None

    def transition(self, event: str, on_warning: Callable[[str], None] | None = None) -> None:
        """Move to the state named by event.

        Unexpected transitions are reported through on_warning and applied
        anyway; the toolkit is the authority on the activity's state.
        """
        if event not in _TRANSITIONS.get(self.state, frozenset()):
            message = f"Unexpected lifecycle transition of {self.qualified_name}: {self.state} -> {event}"
            (on_warning or log.warning)(message)
        self.state = event

    def close(self) -> None:
        """Unregister every listener registered for this activity."""
        unsubscribers, self.unsubscribers = self.unsubscribers, []
        for unsubscribe in unsubscribers:
            unsubscribe()

    def __repr__(self) -> str:
        return f"ActivityTracker({self.qualified_name!r}, state={self.state!r}, alive={self.alive})"


class ApplicationObserver:
    """Explores every activity an application creates.

    Observes one application at a time; observing another one unregisters
    from the previous.
    """

    def __init__(self, on_created: Callable[[Any], None]) -> None:
        self._on_created = on_created
        self._ref: weakref.ReferenceType[Any] | None = None
        self._unsubscribe: Unsubscribe | None = None

    @property
    def application(self) -> Any | None:
        return self._ref() if self._ref is not None else None

    def observe(self, application: Any, register: Callable[[Any, Callable[[Any], None]], Unsubscribe]) -> bool:
        """Observe application; False if it is already the observed one."""
        if self.application is application:
            return False
        self.close()
        self._ref = weakref.ref(application)
        self._unsubscribe = register(application, self._on_created)
        return True

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._ref = None
