"""In-memory UI toolkit.

A small model of an activity/view/fragment toolkit that behaves like the
real thing where the report engine can observe it: activities walk a
lifecycle state machine and replay it to late observers, fragment managers
nest and report attach/detach recursively, fragments host their view inside
a container of the activity's view tree, and view identifiers resolve through
a resource table.

It backs the command line (scene files) and the test suite, and is the
reference implementation of ToolkitAccessor.

Example:
    app = Application()
    activity = Activity("com.example.MainActivity")
    page = ViewGroup("android.widget.FrameLayout", element_id=app.resources.id_for("page"))
    activity.set_content_view(page)
    app.launch(activity)
    activity.fragment_manager.add(Fragment("com.example.DetailFragment"), page, tag="detail")
"""

from __future__ import annotations

import itertools
from collections.abc import Callable, Hashable, Sequence
from typing import Any

from uispectrum.toolkit.events import (
    ActivityLifecycleEvent,
    FragmentLifecycleEvent,
    LayoutChangedEvent,
)
from uispectrum.toolkit.protocol import Rect, Unsubscribe, Visibility

_uid_counter = itertools.count(1)

# First id handed out by Resources, in the application package id space
_FIRST_RESOURCE_ID = 0x7F0A0000

# Lifecycle ranks: 0 initialized/destroyed, 1 created, 2 started, 3 resumed
_STATE_RANK = {
    "created": 1,
    "started": 2,
    "resumed": 3,
    "paused": 2,
    "stopped": 1,
    "destroyed": 0,
}
_UP_EVENTS = {1: "created", 2: "started", 3: "resumed"}
_DOWN_EVENTS = {3: "paused", 2: "stopped", 1: "destroyed"}
_DOWN_STATES = frozenset(_DOWN_EVENTS.values())


class ResourceNotFoundError(LookupError):
    """A resource id has no entry in the resource table."""


def is_generated_id(element_id: int) -> bool:
    """Whether the id was generated at runtime rather than declared."""
    return (element_id & 0xFF000000) == 0 and (element_id & 0x00FFFFFF) != 0


def _next_uid(prefix: str) -> str:
    return f"{prefix}@{next(_uid_counter)}"


def _subscribe(listeners: list[Any], listener: Any) -> Unsubscribe:
    """Append listener; the returned callable removes it again.

    The callable holds the list only, never its owner, so keeping it does
    not keep the observed object alive.
    """
    listeners.append(listener)

    def unsubscribe() -> None:
        if listener in listeners:
            listeners.remove(listener)

    return unsubscribe


class Resources:
    """Identifier name table."""

    def __init__(self) -> None:
        self._names: dict[int, str] = {}
        self._ids: dict[str, int] = {}
        self._next_declared = _FIRST_RESOURCE_ID
        self._next_generated = 1

    def id_for(self, name: str) -> int:
        """Declared id for name, allocating one on first use."""
        element_id = self._ids.get(name)
        if element_id is None:
            element_id = self._next_declared
            self._next_declared += 1
            self._ids[name] = element_id
            self._names[element_id] = name
        return element_id

    def generate_id(self) -> int:
        """Runtime id without a resource entry."""
        element_id = self._next_generated
        self._next_generated += 1
        return element_id

    def entry_name(self, element_id: int) -> str:
        try:
            return self._names[element_id]
        except KeyError:
            raise ResourceNotFoundError(f"No resource found for id {element_id:#010x}") from None


class SceneObject:
    """Common identity and naming of scene objects."""

    def __init__(self, class_name: str | None = None, uid: str | None = None) -> None:
        self.class_name = class_name or f"{type(self).__module__}.{type(self).__qualname__}"
        self.uid = uid or _next_uid(self.class_name.rsplit(".", 1)[-1])

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.class_name!r}, uid={self.uid!r})"


# -----------------------------------------------------------------------------
# Views
# -----------------------------------------------------------------------------


class View(SceneObject):
    """Leaf UI element."""

    def __init__(
        self,
        class_name: str | None = None,
        *,
        element_id: int | None = None,
        visibility: Visibility = Visibility.VISIBLE,
        bounds: Rect | None = None,
        uid: str | None = None,
    ) -> None:
        super().__init__(class_name, uid)
        self.element_id = element_id
        self.visibility = visibility
        self.bounds = bounds or Rect(0, 0, 0, 0)
        self.parent: ViewGroup | None = None

    def find_view_by_id(self, element_id: int) -> View | None:
        return self if self.element_id == element_id else None


class ViewGroup(View):
    """UI element holding ordered children."""

    def __init__(self, class_name: str | None = None, **kwargs: Any) -> None:
        super().__init__(class_name, **kwargs)
        self.children: list[View] = []

    def add_view(self, view: View, index: int | None = None) -> None:
        if view.parent is not None:
            raise ValueError(f"{view!r} already has a parent, remove it first")
        if index is None:
            self.children.append(view)
        else:
            self.children.insert(index, view)
        view.parent = self

    def remove_view(self, view: View) -> None:
        self.children.remove(view)
        view.parent = None

    def remove_all_views(self) -> None:
        for child in self.children:
            child.parent = None
        self.children.clear()

    def find_view_by_id(self, element_id: int) -> View | None:
        if self.element_id == element_id:
            return self
        for child in self.children:
            found = child.find_view_by_id(element_id)
            if found is not None:
                return found
        return None


# -----------------------------------------------------------------------------
# Fragments
# -----------------------------------------------------------------------------


class Fragment(SceneObject):
    """A reusable piece of UI with its own child fragment manager.

    The view passed in is the root view the fragment creates; it is hosted
    in a container only when the fragment is added with one.
    """

    def __init__(
        self,
        class_name: str | None = None,
        *,
        view: View | None = None,
        uid: str | None = None,
    ) -> None:
        super().__init__(class_name, uid)
        self.tag: str | None = None
        self.view = view
        self.manager: FragmentManager | None = None
        self.child_fragment_manager = FragmentManager(self)

    @property
    def parent_fragment(self) -> Fragment | None:
        if self.manager is not None and isinstance(self.manager.host, Fragment):
            return self.manager.host
        return None

    @property
    def is_added(self) -> bool:
        return self.manager is not None


class DialogFragment(Fragment):
    """Fragment shown in its own window; its view never joins the content tree."""

    def show(self, manager: FragmentManager, tag: str | None = None) -> None:
        manager.add(self, tag=tag)


class FragmentManager:
    """Ordered fragments of an activity or of a parent fragment."""

    def __init__(self, host: Activity | Fragment) -> None:
        self.host = host
        self._fragments: list[Fragment] = []
        self._listeners: list[Callable[[FragmentLifecycleEvent], None]] = []

    @property
    def fragments(self) -> list[Fragment]:
        return list(self._fragments)

    @property
    def activity(self) -> Activity | None:
        host: Activity | Fragment | None = self.host
        while isinstance(host, Fragment):
            host = host.manager.host if host.manager is not None else None
        return host

    def add(
        self,
        fragment: Fragment,
        container: ViewGroup | int | None = None,
        tag: str | None = None,
    ) -> Fragment:
        """Attach fragment, hosting its view in container when one is given.

        Args:
            fragment: Fragment to attach (must not be attached already).
            container: Container view, or its element id looked up in the
                host's view tree.
            tag: Optional tag.
        """
        if fragment.manager is not None:
            raise ValueError(f"{fragment!r} is already added")

        if isinstance(container, int):
            container = self._find_container(container)

        fragment.manager = self
        fragment.tag = tag
        self._fragments.append(fragment)
        self._dispatch(
            FragmentLifecycleEvent(
                fragment_id=fragment.uid,
                fragment_class=fragment.class_name,
                event="attached",
                parent=self.host.class_name,
            )
        )

        if container is not None:
            if fragment.view is None:
                fragment.view = ViewGroup("android.widget.FrameLayout")
            container.add_view(fragment.view)
        self._request_layout()
        return fragment

    def replace(self, container: ViewGroup, fragment: Fragment, tag: str | None = None) -> Fragment:
        """Remove every fragment hosted in container, then add fragment there."""
        for existing in self.fragments:
            if existing.view is not None and existing.view.parent is container:
                self.remove(existing)
        return self.add(fragment, container, tag)

    def remove(self, fragment: Fragment) -> None:
        """Detach fragment and its nested fragments, removing hosted views."""
        if fragment.manager is not self:
            raise ValueError(f"{fragment!r} is not managed here")

        for child in fragment.child_fragment_manager.fragments:
            fragment.child_fragment_manager.remove(child)

        if fragment.view is not None and fragment.view.parent is not None:
            fragment.view.parent.remove_view(fragment.view)

        self._fragments.remove(fragment)
        fragment.manager = None
        self._dispatch(
            FragmentLifecycleEvent(
                fragment_id=fragment.uid,
                fragment_class=fragment.class_name,
                event="detached",
                parent=self.host.class_name,
            )
        )
        self._request_layout()

    def register_callbacks(self, listener: Callable[[FragmentLifecycleEvent], None]) -> Unsubscribe:
        """Receive events of this manager and every nested manager."""
        return _subscribe(self._listeners, listener)

    def _dispatch(self, event: FragmentLifecycleEvent) -> None:
        manager: FragmentManager | None = self
        while manager is not None:
            for listener in list(manager._listeners):
                listener(event)
            host = manager.host
            manager = host.manager if isinstance(host, Fragment) else None

    def _find_container(self, element_id: int) -> ViewGroup:
        if isinstance(self.host, Fragment):
            root = self.host.view
        else:
            root = self.host.content
        found = root.find_view_by_id(element_id) if root is not None else None
        if not isinstance(found, ViewGroup):
            raise ValueError(f"No container with id {element_id:#010x} in {self.host!r}")
        return found

    def _request_layout(self) -> None:
        activity = self.activity
        if activity is not None:
            activity.request_layout()


# -----------------------------------------------------------------------------
# Activities and application
# -----------------------------------------------------------------------------


class Activity(SceneObject):
    """Top-level window with a lifecycle, a content container and fragments."""

    def __init__(
        self,
        class_name: str | None = None,
        *,
        uid: str | None = None,
        lifecycle: bool = True,
        fragments: bool = True,
    ) -> None:
        super().__init__(class_name, uid)
        self.lifecycle_aware = lifecycle
        self.content = ViewGroup("android.widget.FrameLayout", uid=f"{self.uid}/content")
        self.fragment_manager: FragmentManager | None = FragmentManager(self) if fragments else None
        self.state: str | None = None
        self.application: Application | None = None
        self._lifecycle_listeners: list[Callable[[ActivityLifecycleEvent], None]] = []
        self._layout_listeners: list[Callable[[LayoutChangedEvent], None]] = []

    @property
    def rank(self) -> int:
        return _STATE_RANK[self.state] if self.state else 0

    def set_content_view(self, view: View) -> None:
        self.content.remove_all_views()
        self.content.add_view(view)
        self.request_layout()

    def find_view_by_id(self, element_id: int) -> View | None:
        return self.content.find_view_by_id(element_id)

    def move_to(self, state: str) -> None:
        """Walk the lifecycle to state, emitting every intermediate event."""
        if state not in _STATE_RANK:
            raise ValueError(f"Unknown lifecycle state: {state}")
        if self.state == "destroyed":
            raise RuntimeError(f"{self!r} is destroyed")

        target = _STATE_RANK[state]
        # paused, stopped and destroyed are only entered from above
        peak = target
        if state in _DOWN_STATES and self.state != state and self.rank <= target:
            peak = target + 1
        while self.rank < peak:
            self._emit(_UP_EVENTS[self.rank + 1])
        while self.rank > target:
            self._emit(_DOWN_EVENTS[self.rank])

    def finish(self) -> None:
        self.move_to("destroyed")

    def request_layout(self) -> None:
        """Run a layout pass, notifying global layout listeners."""
        event = LayoutChangedEvent(activity_id=self.uid)
        for listener in list(self._layout_listeners):
            listener(event)

    def add_lifecycle_observer(self, listener: Callable[[ActivityLifecycleEvent], None]) -> Unsubscribe:
        """Register listener and replay the events that led to the current state."""
        unsubscribe = _subscribe(self._lifecycle_listeners, listener)
        if self.state != "destroyed":
            for rank in range(1, self.rank + 1):
                listener(ActivityLifecycleEvent(activity_id=self.uid, event=_UP_EVENTS[rank]))
        return unsubscribe

    def add_layout_listener(self, listener: Callable[[LayoutChangedEvent], None]) -> Unsubscribe:
        return _subscribe(self._layout_listeners, listener)

    def _emit(self, event: str) -> None:
        self.state = event
        message = ActivityLifecycleEvent(activity_id=self.uid, event=event)
        for listener in list(self._lifecycle_listeners):
            listener(message)


class Application(SceneObject):
    """Process-wide owner of activities."""

    def __init__(self, class_name: str | None = None, *, resources: Resources | None = None) -> None:
        super().__init__(class_name)
        self.resources = resources or Resources()
        self.activities: list[Activity] = []
        self._created_listeners: list[Callable[[Activity], None]] = []

    def launch(self, activity: Activity, state: str = "resumed") -> Activity:
        """Create activity (notifying listeners first) and walk it to state."""
        activity.application = self
        self.activities.append(activity)
        for listener in list(self._created_listeners):
            listener(activity)
        activity.move_to(state)
        return activity

    def finish(self, activity: Activity) -> None:
        activity.finish()
        if activity in self.activities:
            self.activities.remove(activity)

    def register_activity_callbacks(self, on_created: Callable[[Activity], None]) -> Unsubscribe:
        return _subscribe(self._created_listeners, on_created)


# -----------------------------------------------------------------------------
# Accessor
# -----------------------------------------------------------------------------


class SceneToolkit:
    """ToolkitAccessor over scene objects."""

    def __init__(self, resources: Resources | None = None) -> None:
        self.resources = resources or Resources()

    def identity(self, obj: Any) -> Hashable:
        return obj.uid if isinstance(obj, SceneObject) else id(obj)

    def qualified_name(self, obj: Any) -> str:
        if isinstance(obj, SceneObject):
            return obj.class_name
        cls = type(obj)
        return f"{cls.__module__}.{cls.__qualname__}"

    def is_application(self, target: Any) -> bool:
        return isinstance(target, Application)

    def supports_lifecycle(self, activity: Any) -> bool:
        return isinstance(activity, Activity) and activity.lifecycle_aware

    def supports_fragments(self, activity: Any) -> bool:
        return isinstance(activity, Activity) and activity.fragment_manager is not None

    def observe_activities(self, application: Any, on_created: Callable[[Any], None]) -> Unsubscribe:
        return application.register_activity_callbacks(on_created)

    def observe_lifecycle(
        self, activity: Any, listener: Callable[[ActivityLifecycleEvent], None]
    ) -> Unsubscribe:
        return activity.add_lifecycle_observer(listener)

    def observe_fragments(
        self, activity: Any, listener: Callable[[FragmentLifecycleEvent], None]
    ) -> Unsubscribe:
        return activity.fragment_manager.register_callbacks(listener)

    def observe_layout(
        self, activity: Any, listener: Callable[[LayoutChangedEvent], None]
    ) -> Unsubscribe:
        return activity.add_layout_listener(listener)

    def content_view(self, activity: Any) -> Any | None:
        return getattr(activity, "content", None)

    def is_view_group(self, view: Any) -> bool:
        return isinstance(view, ViewGroup)

    def children(self, view: Any) -> Sequence[Any]:
        return tuple(view.children) if isinstance(view, ViewGroup) else ()

    def parent_of(self, view: Any) -> Any | None:
        return view.parent

    def visibility(self, view: Any) -> Visibility:
        return view.visibility

    def element_id_name(self, view: Any) -> str | None:
        element_id = view.element_id
        if element_id is None or is_generated_id(element_id):
            return None
        return self.resources.entry_name(element_id)

    def screen_rect(self, view: Any) -> Rect:
        return view.bounds

    def fragments(self, activity: Any) -> Sequence[Any]:
        manager = getattr(activity, "fragment_manager", None)
        return manager.fragments if manager is not None else ()

    def child_fragments(self, fragment: Any) -> Sequence[Any]:
        return fragment.child_fragment_manager.fragments

    def fragment_view(self, fragment: Any) -> Any | None:
        return fragment.view

    def fragment_tag(self, fragment: Any) -> str | None:
        return fragment.tag

    def is_dialog_fragment(self, fragment: Any) -> bool:
        return isinstance(fragment, DialogFragment)
