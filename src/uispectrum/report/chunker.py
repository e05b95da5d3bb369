"""Splits report lines into messages that fit the sink's line buffer."""

from __future__ import annotations

from collections.abc import Iterable

from uispectrum.config.schema import DEFAULT_MAX_MESSAGE_BYTES


class OutputChunker:
    """Packs whole lines into messages of at most max_bytes UTF-8 bytes.

    Lines are never split: a single line larger than the ceiling becomes a
    message of its own. Joining the built messages gives back every line
    with a trailing newline, in order.
    """

    def __init__(self, max_bytes: int = DEFAULT_MAX_MESSAGE_BYTES) -> None:
        if max_bytes <= 0:
            raise ValueError(f"max_bytes must be positive, got {max_bytes}")
        self.max_bytes = max_bytes
        self._chunks: list[str] = []
        self._buffer: list[str] = []
        self._size = 0

    def append(self, line: str) -> None:
        """Add one line; flushes the buffer first if the line would overflow it."""
        text = line + "\n"
        size = len(text.encode("utf-8"))
        if self._buffer and self._size + size > self.max_bytes:
            self._flush()
        self._buffer.append(text)
        self._size += size

    def extend(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.append(line)

    def build(self) -> list[str]:
        """Return the messages built so far and start over."""
        self._flush()
        chunks, self._chunks = self._chunks, []
        return chunks

    def _flush(self) -> None:
        if self._buffer:
            self._chunks.append("".join(self._buffer))
            self._buffer.clear()
            self._size = 0
