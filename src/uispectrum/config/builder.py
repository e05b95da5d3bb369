"""Chainable runtime configuration.

    uispectrum.configure().log_tag("Screens").append_element_location(True)

Each setter writes straight into the live ReportConfig, so the next report
picks the change up.
"""

from __future__ import annotations

from uispectrum.config.schema import ReportConfig
from uispectrum.severity import Severity


class ConfigurationBuilder:
    """Builder-style access to a ReportConfig."""

    def __init__(self, config: ReportConfig) -> None:
        self._config = config

    @property
    def config(self) -> ReportConfig:
        return self._config

    def log_tag(self, tag: str) -> ConfigurationBuilder:
        """Set the tag passed to the sink."""
        if not tag:
            raise ValueError("log tag must not be empty")
        self._config.log_tag = tag
        return self

    def log_level(self, level: Severity | str | int) -> ConfigurationBuilder:
        """Set the severity reports are printed with."""
        self._config.log_level = Severity.parse(level)
        return self

    def append_package_names(self, append: bool) -> ConfigurationBuilder:
        """Whether to print qualified class names."""
        self._config.append_package_names = append
        return self

    def append_element_id(self, append: bool) -> ConfigurationBuilder:
        """Whether to append [id/name] to view lines."""
        self._config.append_element_id = append
        return self

    def append_element_location(self, append: bool) -> ConfigurationBuilder:
        """Whether to append the screen rectangle to view lines."""
        self._config.append_element_location = append
        return self

    def show_hierarchy(self, show: bool) -> ConfigurationBuilder:
        """Whether to build the view hierarchy at all."""
        self._config.show_hierarchy = show
        return self

    def auto_report(self, enable: bool) -> ConfigurationBuilder:
        """Whether detected changes trigger a report."""
        self._config.auto_report = enable
        return self

    def throttle(self, enable: bool) -> ConfigurationBuilder:
        """Whether to coalesce changes within one window into a single report."""
        self._config.throttle = enable
        return self

    def throttle_window_ms(self, window_ms: int) -> ConfigurationBuilder:
        if window_ms < 0:
            raise ValueError(f"throttle window must be >= 0, got {window_ms}")
        self._config.throttle_window_ms = int(window_ms)
        return self

    def max_message_bytes(self, limit: int) -> ConfigurationBuilder:
        if limit <= 0:
            raise ValueError(f"message size limit must be > 0, got {limit}")
        self._config.max_message_bytes = int(limit)
        return self
