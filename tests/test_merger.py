"""Tests for composite tree building and fragment splicing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pytest

from uispectrum.config import ReportConfig
from uispectrum.toolkit import (
    Activity,
    Application,
    DialogFragment,
    Fragment,
    Rect,
    SceneToolkit,
    View,
    ViewGroup,
    Visibility,
)
from uispectrum.tree import NodePools, TreeMerger


@dataclass
class Tracked:
    activity: Any
    state: str | None = "resumed"


@pytest.fixture
def app() -> Application:
    return Application("com.example.App")


@pytest.fixture
def toolkit(app: Application) -> SceneToolkit:
    return SceneToolkit(app.resources)


@pytest.fixture
def pools() -> NodePools:
    return NodePools()


def make_merger(
    toolkit: SceneToolkit, pools: NodePools, warnings: list[str] | None = None, **options: Any
) -> TreeMerger:
    config = ReportConfig(**options)
    on_warning = warnings.append if warnings is not None else None
    return TreeMerger(toolkit, pools, config, on_warning=on_warning)


class TestSplice:
    """Test moving fragments under the views hosting them."""

    def test_nested_view_splice(self, app: Application, toolkit: SceneToolkit, pools: NodePools) -> None:
        """Test A(B(C)) with a root fragment hosting C: F moves under B."""
        activity = Activity("com.example.MainActivity")
        a = ViewGroup("android.widget.LinearLayout")
        b = ViewGroup("android.widget.FrameLayout")
        c = View("android.widget.TextView")
        a.add_view(b)
        activity.set_content_view(a)
        fragment = Fragment("com.example.DetailFragment", view=c)
        activity.fragment_manager.add(fragment, b)

        merger = make_merger(toolkit, pools)
        tree = merger.build([Tracked(activity)])

        activity_node = tree.activities[0]
        assert activity_node.fragments == []
        a_node = activity_node.views[0]
        b_node = a_node.children[0]
        assert b_node.view is b
        assert len(b_node.fragments) == 1
        f_node = b_node.fragments[0]
        assert f_node.fragment is fragment
        assert f_node.view is not None
        assert f_node.view.view is c
        assert all(child.view is not c for child in b_node.children)
        assert b_node.children == []

        merger.release(tree)
        assert pools.live == 0

    def test_nested_fragments_splice_into_parent_view(
        self, app: Application, toolkit: SceneToolkit, pools: NodePools
    ) -> None:
        """Test a child fragment hosted inside its parent fragment's view."""
        activity = Activity("com.example.MainActivity")
        page = ViewGroup("android.widget.FrameLayout")
        activity.set_content_view(page)

        inner = ViewGroup("android.widget.FrameLayout")
        parent_view = ViewGroup("android.widget.LinearLayout")
        parent_view.add_view(inner)
        parent = Fragment("com.example.ParentFragment", view=parent_view)
        child = Fragment("com.example.ChildFragment", view=View("android.widget.TextView"))
        activity.fragment_manager.add(parent, page)
        parent.child_fragment_manager.add(child, inner)

        tree = make_merger(toolkit, pools).build([Tracked(activity)])

        page_node = tree.activities[0].views[0]
        parent_node = page_node.fragments[0]
        assert parent_node.fragment is parent
        assert parent_node.children == []
        inner_node = parent_node.view.children[0]
        assert inner_node.view is inner
        assert [node.fragment for node in inner_node.fragments] == [child]
        assert tree.activities[0].fragments == []

    def test_fragment_without_view_stays(
        self, app: Application, toolkit: SceneToolkit, pools: NodePools
    ) -> None:
        """Test that a headless fragment keeps its place and gets no view."""
        activity = Activity("com.example.MainActivity")
        activity.set_content_view(ViewGroup("android.widget.FrameLayout"))
        headless = Fragment("com.example.RetainedFragment")
        activity.fragment_manager.add(headless, tag="retained")

        tree = make_merger(toolkit, pools).build([Tracked(activity)])

        activity_node = tree.activities[0]
        assert [node.fragment for node in activity_node.fragments] == [headless]
        node = activity_node.fragments[0]
        assert node.view is None
        assert node.tag == "retained"
        assert not node.attached_to_layout

    def test_dialog_fragment_stays(self, app: Application, toolkit: SceneToolkit, pools: NodePools) -> None:
        """Test that a dialog fragment's detached view is never spliced."""
        activity = Activity("com.example.MainActivity")
        activity.set_content_view(ViewGroup("android.widget.FrameLayout"))
        dialog = DialogFragment("com.example.ConfirmDialog", view=ViewGroup("android.widget.LinearLayout"))
        dialog.show(activity.fragment_manager, "confirm")

        tree = make_merger(toolkit, pools).build([Tracked(activity)])

        node = tree.activities[0].fragments[0]
        assert node.is_dialog
        assert node.view is None
        assert not node.attached_to_layout

    def test_parent_outside_tree_stays(self, app: Application, toolkit: SceneToolkit, pools: NodePools) -> None:
        """Test that a fragment hosted outside the indexed views stays unspliced."""
        activity = Activity("com.example.MainActivity")
        activity.set_content_view(ViewGroup("android.widget.FrameLayout"))
        elsewhere = ViewGroup("android.widget.FrameLayout")
        fragment = Fragment("com.example.FloatingFragment")
        activity.fragment_manager.add(fragment, elsewhere)

        tree = make_merger(toolkit, pools).build([Tracked(activity)])

        node = tree.activities[0].fragments[0]
        assert node.view is None
        assert node.attached_to_layout

    def test_no_hierarchy_keeps_forest(self, app: Application, toolkit: SceneToolkit, pools: NodePools) -> None:
        """Test that without the view tree every fragment stays in the forest."""
        activity = Activity("com.example.MainActivity")
        page = ViewGroup("android.widget.FrameLayout")
        activity.set_content_view(page)
        activity.fragment_manager.add(Fragment("com.example.DetailFragment"), page)

        tree = make_merger(toolkit, pools, show_hierarchy=False).build([Tracked(activity)])

        activity_node = tree.activities[0]
        assert activity_node.views == []
        assert len(activity_node.fragments) == 1
        assert activity_node.fragments[0].view is None


class TestViewCapture:
    """Test what view nodes capture at build time."""

    def test_identifier_names(self, app: Application, toolkit: SceneToolkit, pools: NodePools) -> None:
        """Test declared, generated and unknown identifiers."""
        activity = Activity("com.example.MainActivity")
        root = ViewGroup("android.widget.LinearLayout", element_id=app.resources.id_for("root"))
        root.add_view(View("android.widget.TextView", element_id=app.resources.generate_id()))
        root.add_view(View("android.widget.TextView", element_id=0x7F0B0042))
        activity.set_content_view(root)

        warnings: list[str] = []
        tree = make_merger(toolkit, pools, warnings).build([Tracked(activity)])

        root_node = tree.activities[0].views[0]
        assert root_node.id_name == "root"
        assert root_node.children[0].id_name is None
        assert root_node.children[1].id_name is None
        assert warnings == ["Failed to obtain view id name. Possibly id was manually generated."]

    def test_ids_not_read_when_disabled(self, app: Application, toolkit: SceneToolkit, pools: NodePools) -> None:
        """Test that identifier lookup is skipped entirely when ids are off."""
        activity = Activity("com.example.MainActivity")
        activity.set_content_view(View("android.widget.TextView", element_id=0x7F0B0042))

        warnings: list[str] = []
        tree = make_merger(toolkit, pools, warnings, append_element_id=False).build([Tracked(activity)])

        assert tree.activities[0].views[0].id_name is None
        assert warnings == []

    def test_locations(self, app: Application, toolkit: SceneToolkit, pools: NodePools) -> None:
        """Test that rects are captured for attached views that are not gone."""
        activity = Activity("com.example.MainActivity")
        root = ViewGroup("android.widget.LinearLayout", bounds=Rect(0, 0, 1080, 1920))
        root.add_view(View("android.widget.TextView", bounds=Rect(0, 0, 1080, 100)))
        root.add_view(View("android.widget.ImageView", visibility=Visibility.GONE, bounds=Rect(1, 2, 3, 4)))
        activity.set_content_view(root)

        tree = make_merger(toolkit, pools, append_element_location=True).build([Tracked(activity)])

        root_node = tree.activities[0].views[0]
        assert root_node.rect == Rect(0, 0, 1080, 1920)
        assert root_node.children[0].rect == Rect(0, 0, 1080, 100)
        assert root_node.children[1].rect is None
        assert root_node.children[1].visibility is Visibility.GONE


class TestBuild:
    """Test tree building over tracked activities."""

    def test_collected_activity_skipped(self, app: Application, toolkit: SceneToolkit, pools: NodePools) -> None:
        """Test that entries whose activity is gone are left out."""
        live = Activity("com.example.MainActivity")
        tree = make_merger(toolkit, pools).build([Tracked(None), Tracked(live, "paused")])

        assert [node.activity for node in tree.activities] == [live]
        assert tree.activities[0].state == "paused"
        assert tree.activities[0].qualified_name == "com.example.MainActivity"

    def test_release_returns_everything(self, app: Application, toolkit: SceneToolkit, pools: NodePools) -> None:
        """Test that release() puts every node of a tree back."""
        activity = Activity("com.example.MainActivity")
        page = ViewGroup("android.widget.FrameLayout")
        activity.set_content_view(page)
        parent = Fragment("com.example.ParentFragment", view=ViewGroup("android.widget.FrameLayout"))
        activity.fragment_manager.add(parent, page)
        parent.child_fragment_manager.add(Fragment("com.example.ChildFragment"))
        activity.fragment_manager.add(Fragment("com.example.HeadlessFragment"))

        merger = make_merger(toolkit, pools)
        tree = merger.build([Tracked(activity)])
        assert pools.live > 0
        merger.release(tree)
        assert pools.live == 0

        # Rebuilding reuses the released records
        allocated = {kind: stats["allocated"] for kind, stats in pools.stats().items()}
        merger.release(merger.build([Tracked(activity)]))
        assert {kind: stats["allocated"] for kind, stats in pools.stats().items()} == allocated

    def test_failed_build_returns_nodes(self, app: Application, pools: NodePools) -> None:
        """Test that an accessor raising midway leaves no node owned."""

        class BrokenToolkit(SceneToolkit):
            def screen_rect(self, view: Any) -> Rect:
                if view.class_name == "android.widget.ImageView":
                    raise RuntimeError("window detached")
                return super().screen_rect(view)

        activity = Activity("com.example.MainActivity")
        page = ViewGroup("android.widget.FrameLayout", bounds=Rect(0, 0, 1080, 1920))
        page.add_view(View("android.widget.TextView", bounds=Rect(0, 0, 1080, 100)))
        page.add_view(View("android.widget.ImageView", bounds=Rect(0, 100, 1080, 600)))
        activity.set_content_view(page)
        activity.fragment_manager.add(Fragment("com.example.HeadlessFragment"))

        broken = make_merger(BrokenToolkit(app.resources), pools, append_element_location=True)
        with pytest.raises(RuntimeError, match="window detached"):
            broken.build([Tracked(activity)])

        assert pools.live == 0
        assert pools.stats()["ViewNode"]["allocated"] == 3

        merger = make_merger(SceneToolkit(app.resources), pools)
        tree = merger.build([Tracked(activity)])
        assert len(tree.activities[0].views) == 1
        merger.release(tree)
        assert pools.live == 0
