"""Configuration schema dataclasses for uispectrum.

Defines the structure of configuration at all levels (system, user, project).
Every field has a default so partial configs merge together.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from uispectrum.severity import Severity

# Maximum bytes of one message handed to the sink (logcat line buffer)
DEFAULT_MAX_MESSAGE_BYTES = 4000


@dataclass
class ReportConfig:
    """What reports contain and when they are built.

    Example config.yaml:
        report:
          log_tag: Spectrum
          log_level: debug
          append_element_location: true
          throttle_window_ms: 250
    """

    log_tag: str = "Spectrum"
    log_level: Severity = Severity.DEBUG
    append_package_names: bool = False  # Qualified class names
    append_element_id: bool = True  # [id/name] on views
    append_element_location: bool = False  # Screen rect on views
    show_hierarchy: bool = True  # Build the view tree at all
    auto_report: bool = True  # Report after detected changes
    throttle: bool = True  # Coalesce changes into one report per window
    throttle_window_ms: int = 500
    max_message_bytes: int = DEFAULT_MAX_MESSAGE_BYTES


@dataclass
class LoggingConfig:
    """Diagnostics logging configuration."""

    level: str | None = None  # TRACE, DEBUG, VERBOSE, INFO, WARNING, ERROR
    file: str | None = None  # Log file path


@dataclass
class Config:
    """Root configuration object."""

    enabled: bool = True  # False turns explore() into a no-op
    report: ReportConfig = field(default_factory=ReportConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Unknown top-level sections, kept for forward compatibility
    extra: dict[str, Any] = field(default_factory=dict)
