"""Free-lists of node records reused across report builds."""

from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

from uispectrum.tree.nodes import ActivityNode, CompositeTree, FragmentNode, PooledNode, ViewNode

N = TypeVar("N", bound=PooledNode)


class NodePool(Generic[N]):
    """Unbounded LIFO free-list for one node kind.

    Ownership is checked with assert: acquiring a node still held by a tree
    or releasing a node no tree holds is a programming error.
    """

    __slots__ = ("kind", "_factory", "_free", "allocated", "live")

    def __init__(self, factory: Callable[[], N], kind: str | None = None) -> None:
        self.kind = kind or getattr(factory, "__name__", "node")
        self._factory = factory
        self._free: list[N] = []
        self.allocated = 0  # Records ever created
        self.live = 0  # Records currently owned

    @property
    def free(self) -> int:
        return len(self._free)

    def acquire(self) -> N:
        """Return a cleared record, reusing the most recently released one."""
        if self._free:
            node = self._free.pop()
        else:
            node = self._factory()
            self.allocated += 1
        assert not node.owned, f"{self.kind} acquired while still owned by a tree"
        node.owned = True
        self.live += 1
        return node

    def release(self, node: N) -> None:
        """Clear node and put it back on the free-list."""
        assert node.owned, f"{self.kind} released while not owned by a live tree"
        node.reset()
        node.owned = False
        self.live -= 1
        self._free.append(node)

    def clear(self) -> None:
        """Drop all free records."""
        self._free.clear()

    def __repr__(self) -> str:
        return f"NodePool({self.kind}, allocated={self.allocated}, live={self.live}, free={self.free})"


class NodePools:
    """The pools of every node kind used by one engine."""

    def __init__(self) -> None:
        self.trees: NodePool[CompositeTree] = NodePool(CompositeTree, "CompositeTree")
        self.activities: NodePool[ActivityNode] = NodePool(ActivityNode, "ActivityNode")
        self.views: NodePool[ViewNode] = NodePool(ViewNode, "ViewNode")
        self.fragments: NodePool[FragmentNode] = NodePool(FragmentNode, "FragmentNode")

    def __iter__(self):
        return iter((self.trees, self.activities, self.views, self.fragments))

    @property
    def live(self) -> int:
        """Records currently held by trees, across all kinds."""
        return sum(pool.live for pool in self)

    def stats(self) -> dict[str, dict[str, int]]:
        return {
            pool.kind: {"allocated": pool.allocated, "live": pool.live, "free": pool.free}
            for pool in self
        }

    def clear(self) -> None:
        for pool in self:
            pool.clear()
