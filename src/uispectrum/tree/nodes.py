"""Node records of the composite activity/view/fragment tree.

Nodes are pooled: a NodePool hands them out, reset() clears them when they
come back. Everything a report prints is captured into the nodes while the
tree is built, so rendering never reads the toolkit.

Nodes compare by identity (eq=False): list.remove() during splicing must
remove the exact record, never an equal-looking one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from uispectrum.toolkit.protocol import Rect, Visibility


@dataclass(slots=True, eq=False)
class PooledNode:
    """Base of pooled records; owned is True while a live tree holds the node."""

    owned: bool = field(default=False, repr=False)

    def reset(self) -> None:
        raise NotImplementedError


@dataclass(slots=True, eq=False)
class ViewNode(PooledNode):
    """One view of the content tree."""

    view: Any = None
    qualified_name: str = ""
    is_group: bool = False
    visibility: Visibility = Visibility.VISIBLE
    attached: bool = False  # Has a parent view
    id_name: str | None = None
    rect: Rect | None = None
    children: list[ViewNode] = field(default_factory=list)
    fragments: list[FragmentNode] = field(default_factory=list)

    @property
    def visible(self) -> bool:
        return self.visibility is Visibility.VISIBLE

    def reset(self) -> None:
        self.view = None
        self.qualified_name = ""
        self.is_group = False
        self.visibility = Visibility.VISIBLE
        self.attached = False
        self.id_name = None
        self.rect = None
        self.children.clear()
        self.fragments.clear()


@dataclass(slots=True, eq=False)
class FragmentNode(PooledNode):
    """One fragment; view is set only when the fragment was spliced into a view."""

    fragment: Any = None
    qualified_name: str = ""
    tag: str | None = None
    is_dialog: bool = False
    attached_to_layout: bool = False
    children: list[FragmentNode] = field(default_factory=list)
    view: ViewNode | None = None

    def reset(self) -> None:
        self.fragment = None
        self.qualified_name = ""
        self.tag = None
        self.is_dialog = False
        self.attached_to_layout = False
        self.children.clear()
        self.view = None


@dataclass(slots=True, eq=False)
class ActivityNode(PooledNode):
    """One tracked activity with its view roots and unspliced fragments."""

    activity: Any = None
    qualified_name: str = ""
    state: str | None = None
    views: list[ViewNode] = field(default_factory=list)
    fragments: list[FragmentNode] = field(default_factory=list)

    def reset(self) -> None:
        self.activity = None
        self.qualified_name = ""
        self.state = None
        self.views.clear()
        self.fragments.clear()


@dataclass(slots=True, eq=False)
class CompositeTree(PooledNode):
    """The merged hierarchy of one report."""

    activities: list[ActivityNode] = field(default_factory=list)

    def reset(self) -> None:
        self.activities.clear()
