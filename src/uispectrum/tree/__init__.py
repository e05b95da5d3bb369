"""Composite tree: pooled nodes and the view/fragment merger."""

from uispectrum.tree.merger import TrackedActivity, TreeMerger
from uispectrum.tree.nodes import ActivityNode, CompositeTree, FragmentNode, PooledNode, ViewNode
from uispectrum.tree.pool import NodePool, NodePools

__all__ = [
    "ActivityNode",
    "CompositeTree",
    "FragmentNode",
    "NodePool",
    "NodePools",
    "PooledNode",
    "TrackedActivity",
    "TreeMerger",
    "ViewNode",
]
