"""Change descriptions accumulated between reports."""

from __future__ import annotations

from collections.abc import Iterator


class PendingChangeLog:
    """Ordered change descriptions; consecutive duplicates collapse into one.

    Only the tail is compared: "a", "b", "a" keeps all three entries.
    """

    def __init__(self) -> None:
        self._entries: list[str] = []

    def append(self, description: str) -> bool:
        """Add description unless it equals the last entry; True if added."""
        if self._entries and self._entries[-1] == description:
            return False
        self._entries.append(description)
        return True

    def drain(self) -> list[str]:
        """Return all entries and empty the log."""
        entries, self._entries = self._entries, []
        return entries

    @property
    def last(self) -> str | None:
        return self._entries[-1] if self._entries else None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __repr__(self) -> str:
        return f"PendingChangeLog({self._entries!r})"
