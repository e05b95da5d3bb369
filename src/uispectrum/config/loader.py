"""Configuration file loading and caching.

Handles:
- YAML file parsing
- Layer merging (system -> user -> project -> explicit file -> environment)
- Environment variable overrides
- Config caching with reload support
- Conversion from dict to the typed Config dataclass
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml

from uispectrum.config.paths import get_config_paths
from uispectrum.config.schema import Config, LoggingConfig, ReportConfig
from uispectrum.severity import Severity

_log = logging.getLogger("uispectrum.config")

_cached_config: Config | None = None

_reload_callbacks: list[Callable[[Config], None]] = []

_TRUE_STRINGS = {"1", "true", "yes", "on"}
_FALSE_STRINGS = {"0", "false", "no", "off"}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file, returning empty dict if not found or invalid."""
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except yaml.YAMLError as e:
        _log.warning("Invalid YAML in %s: %s", path, e)
        return {}
    except PermissionError:
        _log.debug("Permission denied reading %s", path)
        return {}
    except OSError as e:
        _log.warning("Error reading %s: %s", path, e)
        return {}


def merge_layers(*layers: dict[str, Any]) -> dict[str, Any]:
    """Merge config layers in order, later layers winning.

    Nested sections merge key by key, None never overrides a value and
    lists are replaced as a whole.
    """
    result: dict[str, Any] = {}
    for layer in layers:
        if layer:
            result = _merge_into(result, layer)
    return result


def _merge_into(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if value is None:
            continue
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _merge_into(current, value)
        else:
            merged[key] = value
    return merged


def env_overrides() -> dict[str, Any]:
    """Build a config layer from SPECTRUM_* environment variables."""
    overrides: dict[str, Any] = {}
    report: dict[str, Any] = {}

    log_path = os.environ.get("SPECTRUM_LOG")
    if log_path:
        overrides["logging"] = {"file": log_path}

    enabled = os.environ.get("SPECTRUM_ENABLED")
    if enabled:
        overrides["enabled"] = enabled

    tag = os.environ.get("SPECTRUM_LOG_TAG")
    if tag:
        report["log_tag"] = tag

    level = os.environ.get("SPECTRUM_LOG_LEVEL")
    if level:
        report["log_level"] = level

    window = os.environ.get("SPECTRUM_THROTTLE_WINDOW_MS")
    if window:
        report["throttle_window_ms"] = window

    if report:
        overrides["report"] = report
    return overrides


def _as_bool(value: Any, default: bool, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    if value is not None:
        _log.warning("Ignoring non-boolean value for %s: %r", key, value)
    return default


def _as_int(value: Any, default: int, key: str, minimum: int) -> int:
    if value is None:
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        _log.warning("Ignoring non-integer value for %s: %r", key, value)
        return default
    if number < minimum:
        _log.warning("Ignoring out of range value for %s: %r", key, value)
        return default
    return number


def _as_severity(value: Any, default: Severity) -> Severity:
    if value is None:
        return default
    try:
        return Severity.parse(value)
    except ValueError:
        _log.warning("Ignoring unknown log_level: %r", value)
        return default


def dict_to_config(data: dict[str, Any]) -> Config:
    """Convert a merged dict to the typed Config dataclass.

    Malformed values are logged and replaced by their defaults.
    """
    defaults = ReportConfig()
    report_data = data.get("report") or {}
    if not isinstance(report_data, dict):
        _log.warning("Ignoring malformed report section: %r", report_data)
        report_data = {}

    report = ReportConfig(
        log_tag=str(report_data.get("log_tag") or defaults.log_tag),
        log_level=_as_severity(report_data.get("log_level"), defaults.log_level),
        append_package_names=_as_bool(
            report_data.get("append_package_names"),
            defaults.append_package_names,
            "append_package_names",
        ),
        append_element_id=_as_bool(
            report_data.get("append_element_id"), defaults.append_element_id, "append_element_id"
        ),
        append_element_location=_as_bool(
            report_data.get("append_element_location"),
            defaults.append_element_location,
            "append_element_location",
        ),
        show_hierarchy=_as_bool(
            report_data.get("show_hierarchy"), defaults.show_hierarchy, "show_hierarchy"
        ),
        auto_report=_as_bool(report_data.get("auto_report"), defaults.auto_report, "auto_report"),
        throttle=_as_bool(report_data.get("throttle"), defaults.throttle, "throttle"),
        throttle_window_ms=_as_int(
            report_data.get("throttle_window_ms"),
            defaults.throttle_window_ms,
            "throttle_window_ms",
            minimum=0,
        ),
        max_message_bytes=_as_int(
            report_data.get("max_message_bytes"),
            defaults.max_message_bytes,
            "max_message_bytes",
            minimum=1,
        ),
    )

    log_data = data.get("logging") or {}
    logging_config = LoggingConfig(
        level=log_data.get("level") if isinstance(log_data, dict) else None,
        file=log_data.get("file") if isinstance(log_data, dict) else None,
    )

    known_keys = {"enabled", "report", "logging"}
    extra = {k: v for k, v in data.items() if k not in known_keys}

    return Config(
        enabled=_as_bool(data.get("enabled"), True, "enabled"),
        report=report,
        logging=logging_config,
        extra=extra,
    )


def load_config(
    project_root: str | Path | None = None,
    config_file: str | Path | None = None,
    reload: bool = False,
) -> Config:
    """Load and merge config from all sources.

    Priority order (highest to lowest):
    1. Environment variables (SPECTRUM_*)
    2. Explicit config file (e.g. --config on the command line)
    3. Project config ($project_root/.spectrum/config.yaml)
    4. User config
    5. System config

    Args:
        project_root: Project directory for project-level config.
        config_file: Extra YAML file layered above the project config.
        reload: Force reload even if cached.

    Returns:
        Merged Config object.
    """
    global _cached_config

    is_global = project_root is None and config_file is None
    if _cached_config is not None and not reload and is_global:
        return _cached_config

    layers: list[dict[str, Any]] = []

    paths = get_config_paths(project_root)
    if config_file:
        paths.append(Path(config_file))

    for path in paths:
        data = load_yaml_file(path)
        if data:
            _log.debug("Loaded config from %s", path)
            layers.append(data)

    env_config = env_overrides()
    if env_config:
        layers.append(env_config)

    config = dict_to_config(merge_layers(*layers))

    if is_global:
        _cached_config = config

    return config


def get_config() -> Config:
    """Get the cached global config, loading it on first use."""
    if _cached_config is None:
        return load_config()
    return _cached_config


def reset_config() -> None:
    """Reset cached config (tests, forced reload)."""
    global _cached_config
    _cached_config = None


def reload_config(project_root: str | Path | None = None) -> Config:
    """Reload config from files and notify callbacks."""
    config = load_config(project_root=project_root, reload=True)

    for callback in list(_reload_callbacks):
        try:
            callback(config)
        except Exception as e:
            _log.warning("Config reload callback error: %s", e)

    return config


def on_config_reload(callback: Callable[[Config], None]) -> Callable[[], None]:
    """Register a callback to be called when config is reloaded.

    Returns:
        A function to unregister the callback.
    """
    _reload_callbacks.append(callback)

    def unregister() -> None:
        if callback in _reload_callbacks:
            _reload_callbacks.remove(callback)

    return unregister
