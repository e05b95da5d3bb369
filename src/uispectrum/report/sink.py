"""Destinations for report messages.

A sink receives each message of a report through print(severity, tag,
message), once per chunk and in order. Messages end with a newline.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from rich.console import Console

from uispectrum.severity import Severity

_STYLES = {
    Severity.VERBOSE: "dim",
    Severity.DEBUG: "cyan",
    Severity.INFO: "green",
    Severity.WARN: "yellow",
    Severity.ERROR: "red",
    Severity.ASSERT: "bold red",
}


@runtime_checkable
class TextSink(Protocol):
    """Anything that accepts tagged report messages."""

    def print(self, severity: Severity, tag: str, message: str) -> None: ...


class LoggingSink:
    """Routes messages into stdlib logging.

    Each message becomes one record on the "uispectrum.report" logger (or
    the logger given), at the logging level matching its severity.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("uispectrum.report")

    def print(self, severity: Severity, tag: str, message: str) -> None:
        self.logger.log(severity.logging_level, "%s: %s", tag, message.rstrip("\n"))


class ConsoleSink:
    """Writes messages to a rich Console, styled by severity."""

    def __init__(self, console: Console | None = None, show_tag: bool = False) -> None:
        self.console = console or Console()
        self.show_tag = show_tag

    def print(self, severity: Severity, tag: str, message: str) -> None:
        text = message.rstrip("\n")
        if self.show_tag:
            text = "\n".join(f"{tag}: {line}" for line in text.split("\n"))
        self.console.print(
            text,
            style=_STYLES.get(severity),
            markup=False,
            highlight=False,
            emoji=False,
            soft_wrap=True,
        )


@dataclass
class Message:
    """One message received by a CollectingSink."""

    severity: Severity
    tag: str
    text: str


class CollectingSink:
    """Keeps every message in memory."""

    def __init__(self) -> None:
        self.messages: list[Message] = []

    def print(self, severity: Severity, tag: str, message: str) -> None:
        self.messages.append(Message(severity, tag, message))

    @property
    def text(self) -> str:
        """All messages joined."""
        return "".join(message.text for message in self.messages)

    def lines(self, severity: Severity | None = None) -> list[str]:
        """Lines of all messages, optionally only those of one severity."""
        return "".join(
            m.text for m in self.messages if severity is None or m.severity == severity
        ).splitlines()

    def clear(self) -> None:
        self.messages.clear()

    def __len__(self) -> int:
        return len(self.messages)
