"""Report rendering, chunking and delivery."""

from uispectrum.report.chunker import OutputChunker
from uispectrum.report.renderer import ReportRenderer
from uispectrum.report.sink import CollectingSink, ConsoleSink, LoggingSink, Message, TextSink

__all__ = [
    "CollectingSink",
    "ConsoleSink",
    "LoggingSink",
    "Message",
    "OutputChunker",
    "ReportRenderer",
    "TextSink",
]
