"""Configuration management for uispectrum.

Provides hierarchical YAML-based configuration with:
- System-level config (/etc/uispectrum/ or %PROGRAMDATA%)
- User-level config (~/.config/uispectrum/, ~/.spectrum/ or %APPDATA%)
- Project-level config ($project_root/.spectrum/)
- Environment variable overrides (highest priority)

Example usage:
    from uispectrum.config import load_config

    config = load_config(project_root="/path/to/app")
    print(config.report.throttle_window_ms)
"""

from uispectrum.config.builder import ConfigurationBuilder
from uispectrum.config.loader import (
    dict_to_config,
    get_config,
    load_config,
    on_config_reload,
    reload_config,
    reset_config,
)
from uispectrum.config.paths import (
    get_config_paths,
    get_project_config_path,
    get_system_config_path,
    get_user_config_path,
)
from uispectrum.config.schema import Config, LoggingConfig, ReportConfig

__all__ = [
    "Config",
    "ConfigurationBuilder",
    "LoggingConfig",
    "ReportConfig",
    "dict_to_config",
    "get_config",
    "load_config",
    "on_config_reload",
    "reload_config",
    "reset_config",
    "get_config_paths",
    "get_project_config_path",
    "get_system_config_path",
    "get_user_config_path",
]
