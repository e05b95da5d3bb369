"""Shared test utilities for uispectrum tests."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from uispectrum.config import Config
from uispectrum.engine import ReportEngine
from uispectrum.report import CollectingSink
from uispectrum.toolkit import Scene, parse_scene

# MainActivity with a page container hosting a tagged fragment, and a footer
MAIN_SCENE: dict[str, Any] = {
    "application": "com.example.DemoApplication",
    "activities": [
        {
            "class": "com.example.MainActivity",
            "content": {
                "class": "android.widget.LinearLayout",
                "id": "root",
                "children": [
                    {"class": "android.widget.FrameLayout", "id": "page_container", "children": []},
                    {"class": "android.widget.TextView", "id": "footer"},
                ],
            },
            "fragments": [
                {
                    "class": "com.example.DetailFragment",
                    "container": "page_container",
                    "tag": "detail",
                    "view": {"class": "android.widget.TextView"},
                },
            ],
        },
    ],
}

MAIN_SCENE_HIERARCHY = [
    "⬟[Activity] MainActivity [resumed]",
    "⡇   ▸[ViewGroup] LinearLayout [id/root]",
    "⡇   ⡇   ▸[ViewGroup] FrameLayout [id/page_container]",
    "⡇   ⡇   ⡇ ■[Fragment] DetailFragment [tag 'detail']",
    "⡇   ⡇   ⡇   ●[View] TextView",
    "⡇   ⡇   ●[View] TextView [id/footer]",
]

MAIN_SCENE_CHANGES = [
    "MainActivity created",
    "DetailFragment attached to MainActivity",
    "layout changed",
    "MainActivity started",
    "MainActivity resumed",
]


@dataclass
class ManualTimer:
    """Timer handle of a ManualUiContext."""

    when: float
    callback: Callable[..., Any]
    args: tuple[Any, ...]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class ManualUiContext:
    """UI context driven by hand: a virtual clock and an explicit run queue.

    Posted callbacks wait in `posted` until run_posted() or advance() runs
    them. Setting `current` to False makes callers look like other threads.
    """

    now: float = 0.0
    current: bool = True
    posted: list[tuple[Callable[..., Any], tuple[Any, ...]]] = field(default_factory=list)
    timers: list[ManualTimer] = field(default_factory=list)

    def is_current(self) -> bool:
        return self.current

    def post(self, callback: Callable[..., Any], *args: Any) -> None:
        self.posted.append((callback, args))

    def post_delayed(self, delay: float, callback: Callable[..., Any], *args: Any) -> ManualTimer:
        timer = ManualTimer(self.now + delay, callback, args)
        self.timers.append(timer)
        return timer

    def time(self) -> float:
        return self.now

    @property
    def active_timers(self) -> list[ManualTimer]:
        return [timer for timer in self.timers if not timer.cancelled]

    def run_posted(self) -> None:
        """Run posted callbacks on the UI context, including ones they post."""
        was_current, self.current = self.current, True
        try:
            while self.posted:
                callback, args = self.posted.pop(0)
                callback(*args)
        finally:
            self.current = was_current

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due timers in deadline order."""
        target = self.now + seconds
        while True:
            due = [t for t in self.timers if not t.cancelled and t.when <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.when)
            self.timers.remove(timer)
            self.now = timer.when
            timer.callback(*timer.args)
            self.run_posted()
        self.now = target
        self.run_posted()


def make_config(**report: Any) -> Config:
    """Default Config with report fields overridden."""
    config = Config()
    for key, value in report.items():
        setattr(config.report, key, value)
    return config


def make_engine(
    scene: Scene,
    ui: Any = None,
    sink: CollectingSink | None = None,
    **report: Any,
) -> ReportEngine:
    """Engine over scene's toolkit with a collecting sink."""
    return ReportEngine(
        scene.toolkit,
        sink if sink is not None else CollectingSink(),
        make_config(**report),
        ui=ui if ui is not None else ManualUiContext(),
    )


def main_scene() -> Scene:
    """Unlaunched copy of MAIN_SCENE."""
    return parse_scene(MAIN_SCENE)


def hierarchy_lines(lines: list[str]) -> list[str]:
    """Lines between the HIERARCHY: header and the end of the hierarchy."""
    start = lines.index("HIERARCHY:") + 1
    end = start
    while end < len(lines) and lines[end] and not lines[end].startswith("―"):
        end += 1
    return lines[start:end]


def changes_lines(lines: list[str]) -> list[str]:
    """Change entries of a report, without the " - " prefix."""
    if "CHANGES:" not in lines:
        return []
    start = lines.index("CHANGES:") + 1
    return [line[3:] for line in lines[start:] if line.startswith(" - ")]


async def drain_loop(iterations: int = 5) -> None:
    """Let the running loop process callbacks posted so far."""
    for _ in range(iterations):
        await asyncio.sleep(0)
