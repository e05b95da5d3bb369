"""Text fragments shared by report lines and change descriptions."""

from __future__ import annotations

from uispectrum.toolkit.protocol import Rect

DIVIDER = "―" * 100
TITLE = "SPECTRUM REPORT".center(100).rstrip()
HEADER_HIERARCHY = "HIERARCHY:"
HEADER_CHANGES = "CHANGES:"

ACTIVITY = "⬟[Activity] "
VIEW_GROUP = "▸[ViewGroup] "
VIEW_GROUP_HIDDEN = "▹[ViewGroup] "
VIEW = "●[View] "
VIEW_HIDDEN = "○[View] "
FRAGMENT = "■[Fragment] "
FRAGMENT_OUT_OF_LAYOUT = "□[Fragment(out-of-layout)] "
DIALOG_FRAGMENT = "◇[DialogFragment] "

_CONNECTOR = "⡇ "
_SPACER = "  "


def indent(level: int) -> str:
    """Indentation for level: connector and spacer units, alternating."""
    return "".join(_CONNECTOR if i % 2 == 0 else _SPACER for i in range(level))


def format_class_name(qualified_name: str, append_packages: bool = False) -> str:
    """Class name for display, with or without its package."""
    if append_packages:
        return qualified_name
    return qualified_name.rsplit(".", 1)[-1]


def format_location(rect: Rect) -> str:
    return f"[{rect.left} ⇔ {rect.right}]×[{rect.top} ⇕ {rect.bottom}]"


def format_duration(seconds: float) -> str:
    return f"Report built in {seconds * 1000:.1f} ms"
