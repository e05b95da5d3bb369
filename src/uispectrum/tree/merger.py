"""Composite tree building: the view tree and the fragment forest, spliced.

Per tracked activity the merger builds two trees independently:

- the view tree under the activity's content container, indexing every
  view by identity;
- the fragment forest of the activity's fragment manager, following each
  fragment's child manager.

Splicing then moves every fragment whose hosted view has an indexed parent
view under that parent: the hosted view's node leaves the parent's children
and becomes the fragment's view, and the fragment joins the parent's
fragments. Fragments without a view, or whose view's parent is not indexed,
stay where the forest put them.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

from uispectrum.logging import TRACE, get_logger
from uispectrum.toolkit.protocol import Visibility
from uispectrum.tree.nodes import ActivityNode, CompositeTree, FragmentNode, PooledNode, ViewNode

if TYPE_CHECKING:
    from uispectrum.config.schema import ReportConfig
    from uispectrum.toolkit.protocol import ToolkitAccessor
    from uispectrum.tree.pool import NodePool, NodePools

log = get_logger("tree")

ViewIndex = dict[int, ViewNode]

N = TypeVar("N", bound=PooledNode)


class TrackedActivity(Protocol):
    """What the merger needs to know about a tracked activity."""

    @property
    def activity(self) -> Any | None:
        """The live activity, None once it was collected."""
        ...

    @property
    def state(self) -> str | None:
        ...


class TreeMerger:
    """Builds composite trees from pooled nodes and hands them back."""

    def __init__(
        self,
        toolkit: ToolkitAccessor,
        pools: NodePools,
        config: ReportConfig,
        on_warning: Callable[[str], None] | None = None,
    ) -> None:
        self._toolkit = toolkit
        self._pools = pools
        self._config = config
        self._on_warning = on_warning or log.warning
        # Nodes acquired by the build in progress
        self._acquired: list[tuple[NodePool[Any], PooledNode]] = []

    def build(self, tracked: Iterable[TrackedActivity]) -> CompositeTree:
        """Build the composite tree of all live tracked activities.

        If the toolkit raises partway, every node acquired so far goes back
        to its pool before the exception propagates.
        """
        tree = self._pools.trees.acquire()
        try:
            for entry in tracked:
                activity = entry.activity
                if activity is None:
                    continue
                tree.activities.append(self._build_activity(activity, entry.state))
        except BaseException:
            for pool, node in reversed(self._acquired):
                pool.release(node)
            self._pools.trees.release(tree)
            raise
        finally:
            self._acquired.clear()
        if log.isEnabledFor(TRACE):
            log.log(TRACE, "Built tree, pools: %s", self._pools.stats())
        return tree

    def release(self, tree: CompositeTree) -> None:
        """Return every node of tree to its pool."""
        pools = self._pools
        views: list[ViewNode] = []
        fragments: list[FragmentNode] = []

        for activity_node in tree.activities:
            views.extend(activity_node.views)
            fragments.extend(activity_node.fragments)
            pools.activities.release(activity_node)

        while views or fragments:
            while fragments:
                fragment_node = fragments.pop()
                fragments.extend(fragment_node.children)
                if fragment_node.view is not None:
                    views.append(fragment_node.view)
                pools.fragments.release(fragment_node)
            while views:
                view_node = views.pop()
                views.extend(view_node.children)
                fragments.extend(view_node.fragments)
                pools.views.release(view_node)

        pools.trees.release(tree)

    # -------------------------------------------------------------------------
    # Building
    # -------------------------------------------------------------------------

    def _acquire(self, pool: NodePool[N]) -> N:
        node = pool.acquire()
        self._acquired.append((pool, node))
        return node

    def _build_activity(self, activity: Any, state: str | None) -> ActivityNode:
        toolkit = self._toolkit
        node = self._acquire(self._pools.activities)
        node.activity = activity
        node.state = state
        node.qualified_name = toolkit.qualified_name(activity)

        if toolkit.supports_fragments(activity):
            fragments = self._build_fragments(toolkit.fragments(activity))
        else:
            fragments = []

        if self._config.show_hierarchy:
            container = toolkit.content_view(activity)
            if container is not None and toolkit.is_view_group(container):
                index: ViewIndex = {}
                for child in toolkit.children(container):
                    node.views.append(self._build_view(child, index))
                self.splice(fragments, index)

        node.fragments.extend(fragments)
        return node

    def _build_view(self, view: Any, index: ViewIndex) -> ViewNode:
        toolkit = self._toolkit
        config = self._config
        node = self._acquire(self._pools.views)
        node.view = view
        node.qualified_name = toolkit.qualified_name(view)
        node.is_group = toolkit.is_view_group(view)
        node.visibility = toolkit.visibility(view)
        node.attached = toolkit.parent_of(view) is not None

        if config.append_element_id:
            node.id_name = self._element_id_name(view)
        if config.append_element_location and node.attached and node.visibility is not Visibility.GONE:
            node.rect = toolkit.screen_rect(view)

        index[id(view)] = node
        if node.is_group:
            for child in toolkit.children(view):
                node.children.append(self._build_view(child, index))
        return node

    def _element_id_name(self, view: Any) -> str | None:
        try:
            return self._toolkit.element_id_name(view)
        except LookupError:
            self._on_warning("Failed to obtain view id name. Possibly id was manually generated.")
            return None

    def _build_fragments(self, fragments: Sequence[Any]) -> list[FragmentNode]:
        toolkit = self._toolkit
        nodes: list[FragmentNode] = []
        for fragment in fragments:
            node = self._acquire(self._pools.fragments)
            node.fragment = fragment
            node.qualified_name = toolkit.qualified_name(fragment)
            node.tag = toolkit.fragment_tag(fragment)
            node.is_dialog = toolkit.is_dialog_fragment(fragment)
            hosted = toolkit.fragment_view(fragment)
            node.attached_to_layout = hosted is not None and toolkit.parent_of(hosted) is not None
            node.children.extend(self._build_fragments(toolkit.child_fragments(fragment)))
            nodes.append(node)
        return nodes

    # -------------------------------------------------------------------------
    # Splicing
    # -------------------------------------------------------------------------

    def splice(self, roots: list[FragmentNode], index: ViewIndex) -> None:
        """Move fragments under the view nodes hosting their views.

        Fragments are visited once each in pre-order. Spliced fragments are
        removed from their sibling lists after the walk, so no list is
        mutated while it is being traversed.
        """
        spliced: set[int] = set()
        touched: dict[int, list[FragmentNode]] = {}

        for node, siblings in _preorder(roots):
            if self._attach_to_host(node, index):
                spliced.add(id(node))
                touched[id(siblings)] = siblings

        for siblings in touched.values():
            siblings[:] = [node for node in siblings if id(node) not in spliced]

    def _attach_to_host(self, node: FragmentNode, index: ViewIndex) -> bool:
        toolkit = self._toolkit
        hosted = toolkit.fragment_view(node.fragment)
        if hosted is None:
            return False
        parent = toolkit.parent_of(hosted)
        if parent is None:
            return False
        # Only the immediate parent counts; ancestors are not searched.
        parent_node = index.get(id(parent))
        if parent_node is None:
            return False

        hosted_node = index.get(id(hosted))
        if hosted_node is not None and hosted_node in parent_node.children:
            parent_node.children.remove(hosted_node)
        parent_node.fragments.append(node)
        node.view = hosted_node
        return True


def _preorder(
    roots: list[FragmentNode],
) -> Iterator[tuple[FragmentNode, list[FragmentNode]]]:
    """Yield (node, list holding it) for the forest in pre-order."""
    stack: list[tuple[FragmentNode, list[FragmentNode]]] = [
        (node, roots) for node in reversed(roots)
    ]
    while stack:
        node, siblings = stack.pop()
        yield node, siblings
        stack.extend((child, node.children) for child in reversed(node.children))
