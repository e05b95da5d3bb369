"""The UI context: the event loop that owns every toolkit object.

All tree building, rendering and emission run on one asyncio event loop.
Work arriving from other threads is posted onto it with
call_soon_threadsafe and never waits for the result.

Without a loop the thread that created the context acts as the UI context
(synchronous mode): posted callbacks run inline on that thread and timers
are unavailable.
"""

from __future__ import annotations

import asyncio
import threading
import time
from collections.abc import Callable
from typing import Any

from uispectrum.errors import ContextError
from uispectrum.logging import TRACE, get_logger

log = get_logger("scheduling")


class UiContext:
    """An asyncio loop bound to the UI thread."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread_id = threading.get_ident()
        if loop is not None:
            self.bind(loop)

    def bind(self, loop: asyncio.AbstractEventLoop) -> None:
        """Bind loop as the UI context; the calling thread becomes the UI thread."""
        self._loop = loop
        self._thread_id = threading.get_ident()
        log.debug("UI context bound to %r", loop)

    @property
    def loop(self) -> asyncio.AbstractEventLoop | None:
        """The bound loop.

        An unbound context binds the loop running on its thread the first
        time it is asked; a closed loop is dropped.
        """
        loop = self._loop
        if loop is not None and loop.is_closed():
            log.debug("UI loop closed, back to synchronous mode")
            self._loop = loop = None
        if loop is None and threading.get_ident() == self._thread_id:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                return None
            self.bind(loop)
        return loop

    def is_current(self) -> bool:
        """True when called on the UI context."""
        loop = self.loop
        if loop is None:
            return threading.get_ident() == self._thread_id
        try:
            return asyncio.get_running_loop() is loop
        except RuntimeError:
            # Loop bound but not started yet
            return not loop.is_running() and threading.get_ident() == self._thread_id

    def post(self, callback: Callable[..., Any], *args: Any) -> None:
        """Run callback on the UI context soon; never blocks the caller.

        Raises:
            ContextError: Called off the UI thread while no loop is bound.
        """
        loop = self.loop
        if loop is None:
            if threading.get_ident() != self._thread_id:
                raise ContextError("No UI event loop bound, can't post from another thread")
            callback(*args)
            return
        if self.is_current():
            loop.call_soon(callback, *args)
        else:
            log.log(TRACE, "Redirecting %s onto the UI context", getattr(callback, "__name__", callback))
            loop.call_soon_threadsafe(callback, *args)

    def post_delayed(self, delay: float, callback: Callable[..., Any], *args: Any) -> asyncio.TimerHandle:
        """Run callback on the UI context after delay seconds.

        Must be called on the UI context.

        Raises:
            ContextError: If no loop is bound or the caller is off the UI context.
        """
        loop = self.loop
        if loop is None:
            raise ContextError("Timers need a UI event loop; none is bound")
        if not self.is_current():
            raise ContextError("Timers can only be scheduled on the UI context")
        return loop.call_later(delay, callback, *args)

    def time(self) -> float:
        """Current time in seconds on the clock timers use."""
        loop = self.loop
        if loop is None:
            return time.monotonic()
        return loop.time()
