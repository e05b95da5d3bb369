"""Toolkit boundary: accessor protocol, lifecycle events and the in-memory toolkit."""

from uispectrum.toolkit.events import (
    ACTIVITY_STATES,
    ActivityLifecycleEvent,
    FragmentLifecycleEvent,
    LayoutChangedEvent,
    LifecycleEvent,
    parse_event,
)
from uispectrum.toolkit.loader import Scene, load_scene, parse_scene
from uispectrum.toolkit.protocol import Rect, ToolkitAccessor, Visibility
from uispectrum.toolkit.scene import (
    Activity,
    Application,
    DialogFragment,
    Fragment,
    FragmentManager,
    ResourceNotFoundError,
    Resources,
    SceneToolkit,
    View,
    ViewGroup,
)

__all__ = [
    "ACTIVITY_STATES",
    "Activity",
    "ActivityLifecycleEvent",
    "Application",
    "DialogFragment",
    "Fragment",
    "FragmentLifecycleEvent",
    "FragmentManager",
    "LayoutChangedEvent",
    "LifecycleEvent",
    "Rect",
    "ResourceNotFoundError",
    "Resources",
    "Scene",
    "SceneToolkit",
    "ToolkitAccessor",
    "View",
    "ViewGroup",
    "Visibility",
    "load_scene",
    "parse_event",
    "parse_scene",
]
