"""Serializes a composite tree into report lines.

Layout of a report:

    Report built in 0.4 ms
    ――――――――――――――――――――――――
                 SPECTRUM REPORT
    HIERARCHY:
    ⬟[Activity] MainActivity [resumed]
    ⡇   ▸[ViewGroup] LinearLayout [id/root]
    ⡇   ⡇   ▸[ViewGroup] FrameLayout [id/page_container]
    ⡇   ⡇   ⡇ ■[Fragment] DetailFragment [tag 'detail']
    ⡇   ⡇   ⡇   ●[View] TextView

    CHANGES:
     - MainActivity resumed
    ――――――――――――――――――――――――

Levels count half steps. Children of an activity or a view sit two levels
deeper; a fragment spliced into a view sits one level deeper, and so do the
children and hosted view of a hosted fragment, which keeps hosted content
aligned with the view's own children.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from uispectrum.report import format as fmt
from uispectrum.toolkit.protocol import Visibility

if TYPE_CHECKING:
    from uispectrum.config.schema import ReportConfig
    from uispectrum.scheduling.changes import PendingChangeLog
    from uispectrum.tree.nodes import ActivityNode, CompositeTree, FragmentNode, ViewNode


class ReportRenderer:
    """Depth-first, pre-order serializer of composite trees."""

    def __init__(self, config: ReportConfig) -> None:
        self._config = config

    def render(
        self,
        tree: CompositeTree,
        pending: PendingChangeLog,
        build_duration: float,
    ) -> list[str]:
        """Render tree and consume the pending change log.

        Args:
            tree: Tree to render; it is only read.
            pending: Change log; drained when non-empty.
            build_duration: Seconds spent building tree.

        Returns:
            Report lines without line terminators.
        """
        lines = [fmt.format_duration(build_duration), fmt.DIVIDER, fmt.TITLE, fmt.HEADER_HIERARCHY]

        for activity_node in tree.activities:
            self._visit_activity(activity_node, lines)

        changes = pending.drain()
        if changes:
            lines.append("")
            lines.append(fmt.HEADER_CHANGES)
            lines.extend(f" - {change}" for change in changes)

        lines.append(fmt.DIVIDER)
        return lines

    def _name(self, qualified_name: str) -> str:
        return fmt.format_class_name(qualified_name, self._config.append_package_names)

    def _visit_activity(self, node: ActivityNode, lines: list[str]) -> None:
        level = 0
        lines.append(
            f"{fmt.indent(level)}{fmt.ACTIVITY}{self._name(node.qualified_name)} [{node.state}]"
        )
        for fragment_node in node.fragments:
            self._visit_fragment(fragment_node, level + 2, lines)
        for view_node in node.views:
            self._visit_view(view_node, level + 2, lines)

    def _visit_view(self, node: ViewNode, level: int, lines: list[str]) -> None:
        if node.is_group:
            glyph = fmt.VIEW_GROUP if node.visible else fmt.VIEW_GROUP_HIDDEN
        else:
            glyph = fmt.VIEW if node.visible else fmt.VIEW_HIDDEN

        line = f"{fmt.indent(level)}{glyph}{self._name(node.qualified_name)}"

        if self._config.append_element_id and node.id_name:
            line += f" [id/{node.id_name}]"

        if self._config.append_element_location:
            if not node.attached:
                line += " [out of layout]"
            elif node.visibility is Visibility.GONE:
                line += " [gone]"
            elif node.rect is not None:
                line += " " + fmt.format_location(node.rect)

        lines.append(line)

        for fragment_node in node.fragments:
            self._visit_fragment(fragment_node, level + 1, lines)
        for child in node.children:
            self._visit_view(child, level + 2, lines)

    def _visit_fragment(self, node: FragmentNode, level: int, lines: list[str]) -> None:
        if node.is_dialog:
            glyph = fmt.DIALOG_FRAGMENT
        elif node.attached_to_layout:
            glyph = fmt.FRAGMENT
        else:
            glyph = fmt.FRAGMENT_OUT_OF_LAYOUT

        line = f"{fmt.indent(level)}{glyph}{self._name(node.qualified_name)}"
        if node.tag is not None:
            line += f" [tag '{node.tag}']"
        lines.append(line)

        next_level = level + 1 if node.view is not None else level + 2
        for child in node.children:
            self._visit_fragment(child, next_level, lines)
        if node.view is not None:
            self._visit_view(node.view, next_level, lines)
