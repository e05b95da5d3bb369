"""Lifecycle event messages delivered by a toolkit to the report engine.

Toolkits push these through the listeners they were given by
ToolkitAccessor.observe_*(). Feeds that carry plain dicts (JSON over a pipe,
recorded sessions) can use parse_event().
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

ActivityState = Literal["created", "started", "resumed", "paused", "stopped", "destroyed"]
FragmentEventKind = Literal["attached", "detached"]

# Opaque identity assigned by the toolkit
ObjectId = Union[int, str]

ACTIVITY_STATES: tuple[str, ...] = (
    "created",
    "started",
    "resumed",
    "paused",
    "stopped",
    "destroyed",
)


class EventModel(BaseModel):
    """Base model for lifecycle events (immutable once built)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ActivityLifecycleEvent(EventModel):
    """An activity moved to a new lifecycle state."""

    kind: Literal["activity"] = "activity"
    activity_id: ObjectId = Field(alias="activityId")
    event: ActivityState


class FragmentLifecycleEvent(EventModel):
    """A fragment was attached to or detached from its host."""

    kind: Literal["fragment"] = "fragment"
    fragment_id: ObjectId = Field(alias="fragmentId")
    fragment_class: str = Field(alias="fragmentClass")  # Qualified class name
    event: FragmentEventKind
    parent: str | None = None  # Qualified class name of the host


class LayoutChangedEvent(EventModel):
    """The view tree of an activity was laid out again."""

    kind: Literal["layout"] = "layout"
    activity_id: ObjectId | None = Field(default=None, alias="activityId")


LifecycleEvent = Annotated[
    Union[ActivityLifecycleEvent, FragmentLifecycleEvent, LayoutChangedEvent],
    Field(discriminator="kind"),
]

_event_adapter: TypeAdapter[Any] = TypeAdapter(LifecycleEvent)


def parse_event(
    data: dict[str, Any],
) -> ActivityLifecycleEvent | FragmentLifecycleEvent | LayoutChangedEvent:
    """Validate a dict payload into the matching event model.

    Raises:
        pydantic.ValidationError: If the payload matches no event.
    """
    return _event_adapter.validate_python(data)
