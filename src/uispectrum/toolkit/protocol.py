"""Read-only accessor over a GUI toolkit's live object graph.

The report engine never imports a toolkit. It reads activities, views and
fragments through a ToolkitAccessor and receives lifecycle messages through
the listeners it registers with one.

Implementations:
- SceneToolkit: in-memory toolkit (uispectrum.toolkit.scene)
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from uispectrum.toolkit.events import (
    ActivityLifecycleEvent,
    FragmentLifecycleEvent,
    LayoutChangedEvent,
)

Unsubscribe = Callable[[], None]


class Visibility(Enum):
    """Visibility of a view."""

    VISIBLE = "visible"
    INVISIBLE = "invisible"
    GONE = "gone"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Rect:
    """Screen rectangle in pixels."""

    left: int
    top: int
    right: int
    bottom: int

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top


@runtime_checkable
class ToolkitAccessor(Protocol):
    """Protocol for reading a toolkit's UI state."""

    # Identity and naming

    def identity(self, obj: Any) -> Hashable:
        """Opaque identity used in lifecycle events."""
        ...

    def qualified_name(self, obj: Any) -> str:
        """Dotted class name, e.g. "com.example.MainActivity"."""
        ...

    # Capabilities

    def is_application(self, target: Any) -> bool:
        """Whether target is an application (a source of activities)."""
        ...

    def supports_lifecycle(self, activity: Any) -> bool:
        """Whether activity can report lifecycle events."""
        ...

    def supports_fragments(self, activity: Any) -> bool:
        """Whether activity hosts a fragment manager."""
        ...

    # Listener registration

    def observe_activities(
        self, application: Any, on_created: Callable[[Any], None]
    ) -> Unsubscribe:
        """Call on_created with every activity the application creates."""
        ...

    def observe_lifecycle(
        self, activity: Any, listener: Callable[[ActivityLifecycleEvent], None]
    ) -> Unsubscribe:
        """Deliver lifecycle events, replaying the states already reached."""
        ...

    def observe_fragments(
        self, activity: Any, listener: Callable[[FragmentLifecycleEvent], None]
    ) -> Unsubscribe:
        """Deliver attach/detach events of all fragments, nested ones included."""
        ...

    def observe_layout(
        self, activity: Any, listener: Callable[[LayoutChangedEvent], None]
    ) -> Unsubscribe:
        """Deliver an event on every global layout pass."""
        ...

    # View graph

    def content_view(self, activity: Any) -> Any | None:
        """The activity's content container, if any."""
        ...

    def is_view_group(self, view: Any) -> bool:
        ...

    def children(self, view: Any) -> Sequence[Any]:
        ...

    def parent_of(self, view: Any) -> Any | None:
        ...

    def visibility(self, view: Any) -> Visibility:
        ...

    def element_id_name(self, view: Any) -> str | None:
        """Identifier name of the view, None when it has no readable id.

        Raises:
            LookupError: The view has an id that names no resource.
        """
        ...

    def screen_rect(self, view: Any) -> Rect:
        """Visible rectangle of the view in screen coordinates."""
        ...

    # Fragment graph

    def fragments(self, activity: Any) -> Sequence[Any]:
        """Fragments of the activity's top-level fragment manager."""
        ...

    def child_fragments(self, fragment: Any) -> Sequence[Any]:
        """Fragments of the fragment's own child manager."""
        ...

    def fragment_view(self, fragment: Any) -> Any | None:
        """Root view hosted by the fragment, if it created one."""
        ...

    def fragment_tag(self, fragment: Any) -> str | None:
        ...

    def is_dialog_fragment(self, fragment: Any) -> bool:
        ...
