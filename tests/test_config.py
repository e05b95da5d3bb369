"""Tests for the configuration module."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from uispectrum.config import (
    Config,
    ConfigurationBuilder,
    ReportConfig,
    get_config,
    load_config,
    on_config_reload,
    reload_config,
    reset_config,
)
from uispectrum.config.loader import dict_to_config, env_overrides, merge_layers
from uispectrum.config.paths import (
    get_config_paths,
    get_project_config_path,
    get_system_config_path,
    get_user_config_path,
)
from uispectrum.severity import Severity


class TestMergeLayers:
    """Test the layer merge algorithm."""

    def test_simple_override(self) -> None:
        """Test that later layers replace earlier values."""
        result = merge_layers({"a": 1, "b": 2}, {"b": 3, "c": 4})
        assert result == {"a": 1, "b": 3, "c": 4}

    def test_nested_merge(self) -> None:
        """Test that nested sections merge key by key."""
        base = {"report": {"log_tag": "Spectrum", "throttle": True}}
        override = {"report": {"throttle": False}}
        result = merge_layers(base, override)
        assert result["report"] == {"log_tag": "Spectrum", "throttle": False}

    def test_none_does_not_override(self) -> None:
        """Test that None values never replace values."""
        assert merge_layers({"a": 1}, {"a": None}) == {"a": 1}

    def test_list_replaced_not_merged(self) -> None:
        """Test that lists are replaced, not concatenated."""
        assert merge_layers({"items": [1, 2, 3]}, {"items": [4, 5]}) == {"items": [4, 5]}

    def test_inputs_untouched(self) -> None:
        """Test that merging never mutates a layer."""
        base = {"report": {"log_tag": "Spectrum"}}
        merge_layers(base, {"report": {"log_tag": "Other"}})
        assert base == {"report": {"log_tag": "Spectrum"}}


class TestConfigPaths:
    """Test platform-aware path resolution."""

    def test_windows_system_path(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test system config path on Windows."""
        monkeypatch.setattr(sys, "platform", "win32")
        monkeypatch.setenv("PROGRAMDATA", "C:\\ProgramData")

        path = get_system_config_path()
        assert path is not None
        assert "ProgramData" in str(path)
        assert "uispectrum" in str(path)
        assert "config.yaml" in str(path)

    def test_windows_user_path(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test user config path on Windows."""
        monkeypatch.setattr(sys, "platform", "win32")
        monkeypatch.setenv("APPDATA", "C:\\Users\\Test\\AppData\\Roaming")

        path = get_user_config_path()
        assert path is not None
        assert "AppData" in str(path)
        assert "uispectrum" in str(path)

    def test_unix_system_path(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test system config path on Unix."""
        monkeypatch.setattr(sys, "platform", "linux")
        assert get_system_config_path() == Path("/etc/uispectrum/config.yaml")

    def test_unix_user_path_xdg(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test user config path respects XDG_CONFIG_HOME."""
        monkeypatch.setattr(sys, "platform", "linux")
        monkeypatch.setenv("XDG_CONFIG_HOME", "/home/test/.config-custom")

        path = get_user_config_path()
        assert path == Path("/home/test/.config-custom/uispectrum/config.yaml")

    def test_unix_user_path_fallback(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Test ~/.spectrum when there is no ~/.config directory."""
        monkeypatch.setattr(sys, "platform", "linux")
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_user_config_path() == tmp_path / ".spectrum" / "config.yaml"

    def test_project_config_path(self) -> None:
        """Test project config path construction."""
        path = get_project_config_path("/home/user/myapp")
        assert path == Path("/home/user/myapp/.spectrum/config.yaml")

    def test_get_config_paths_order(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that config paths are in priority order."""
        monkeypatch.setattr(sys, "platform", "linux")

        paths = get_config_paths(project_root="/project")
        assert len(paths) == 3
        assert "etc" in paths[0].parts
        assert "uispectrum" in paths[1].parts
        assert "project" in paths[2].parts

    def test_no_project_path_without_root(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that only system and user paths are used without a project."""
        monkeypatch.setattr(sys, "platform", "linux")
        assert len(get_config_paths()) == 2


class TestConfigLoading:
    """Test configuration loading."""

    @pytest.fixture
    def temp_config_dir(self, tmp_path: Path) -> Path:
        """Create a temporary project config directory."""
        config_dir = tmp_path / ".spectrum"
        config_dir.mkdir()
        return config_dir

    def test_defaults(self, tmp_path: Path) -> None:
        """Test that missing files give the documented defaults."""
        config = load_config(project_root=str(tmp_path))
        assert isinstance(config, Config)
        assert config.enabled
        report = config.report
        assert report.log_tag == "Spectrum"
        assert report.log_level is Severity.DEBUG
        assert not report.append_package_names
        assert report.append_element_id
        assert not report.append_element_location
        assert report.show_hierarchy
        assert report.auto_report
        assert report.throttle
        assert report.throttle_window_ms == 500
        assert report.max_message_bytes == 4000

    def test_load_yaml_config(self, temp_config_dir: Path) -> None:
        """Test loading a valid YAML config file."""
        (temp_config_dir / "config.yaml").write_text(
            """
report:
  log_tag: Screens
  log_level: info
  append_element_location: true
  throttle_window_ms: 250
logging:
  level: trace
"""
        )
        config = load_config(project_root=str(temp_config_dir.parent))
        assert config.report.log_tag == "Screens"
        assert config.report.log_level is Severity.INFO
        assert config.report.append_element_location
        assert config.report.throttle_window_ms == 250
        assert config.logging.level == "trace"

    def test_explicit_file_over_project(self, temp_config_dir: Path, tmp_path: Path) -> None:
        """Test that an explicit file is layered above the project config."""
        (temp_config_dir / "config.yaml").write_text("report:\n  log_tag: Project\n  throttle: false\n")
        explicit = tmp_path / "explicit.yaml"
        explicit.write_text("report:\n  log_tag: Explicit\n")

        config = load_config(project_root=str(tmp_path), config_file=explicit)
        assert config.report.log_tag == "Explicit"
        assert not config.report.throttle

    def test_user_config_layer(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Test that the user config is read from XDG_CONFIG_HOME."""
        monkeypatch.setattr(sys, "platform", "linux")
        user_dir = tmp_path / "xdg" / "uispectrum"
        user_dir.mkdir(parents=True)
        (user_dir / "config.yaml").write_text("report:\n  append_package_names: yes\n")
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))

        config = load_config(project_root=str(tmp_path))
        assert config.report.append_package_names

    def test_env_overrides_config(self, temp_config_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that SPECTRUM_* variables win over files."""
        (temp_config_dir / "config.yaml").write_text("report:\n  log_tag: FromFile\n")
        monkeypatch.setenv("SPECTRUM_LOG_TAG", "FromEnv")
        monkeypatch.setenv("SPECTRUM_LOG_LEVEL", "warning")
        monkeypatch.setenv("SPECTRUM_THROTTLE_WINDOW_MS", "100")
        monkeypatch.setenv("SPECTRUM_ENABLED", "false")
        monkeypatch.setenv("SPECTRUM_LOG", "/tmp/spectrum.log")

        config = load_config(project_root=str(temp_config_dir.parent))
        assert config.report.log_tag == "FromEnv"
        assert config.report.log_level is Severity.WARN
        assert config.report.throttle_window_ms == 100
        assert not config.enabled
        assert config.logging.file == "/tmp/spectrum.log"

    def test_env_overrides_empty(self) -> None:
        """Test that no variables give no layer."""
        assert env_overrides() == {}

    def test_invalid_yaml_uses_defaults(
        self, temp_config_dir: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test that invalid YAML falls back to defaults."""
        (temp_config_dir / "config.yaml").write_text("invalid: yaml: :")

        config = load_config(project_root=str(temp_config_dir.parent))
        assert config.report == ReportConfig()
        assert "Invalid YAML" in caplog.text

    def test_malformed_values_use_defaults(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that bad values are logged and replaced by defaults."""
        config = dict_to_config(
            {
                "report": {
                    "log_level": "loud",
                    "throttle": "sometimes",
                    "throttle_window_ms": -5,
                    "max_message_bytes": "many",
                }
            }
        )
        assert config.report == ReportConfig()
        assert "log_level" in caplog.text
        assert "throttle_window_ms" in caplog.text

    def test_extra_fields_preserved(self, temp_config_dir: Path) -> None:
        """Test that unknown sections are kept in extra."""
        (temp_config_dir / "config.yaml").write_text(
            """
custom_field: custom_value
nested:
  field: value
"""
        )
        config = load_config(project_root=str(temp_config_dir.parent))
        assert config.extra["custom_field"] == "custom_value"
        assert config.extra["nested"]["field"] == "value"

    def test_global_config_cached(self) -> None:
        """Test that get_config() caches until reset."""
        first = get_config()
        assert get_config() is first
        reset_config()
        assert get_config() is not first

    def test_reload_notifies(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test reload callbacks and their removal."""
        seen: list[Config] = []
        unregister = on_config_reload(seen.append)

        monkeypatch.setenv("SPECTRUM_LOG_TAG", "Reloaded")
        config = reload_config()
        assert seen == [config]
        assert config.report.log_tag == "Reloaded"

        unregister()
        reload_config()
        assert len(seen) == 1


class TestConfigurationBuilder:
    """Test chainable runtime configuration."""

    def test_chaining_writes_through(self) -> None:
        """Test that setters write into the live config and chain."""
        report = ReportConfig()
        builder = ConfigurationBuilder(report)
        result = (
            builder.log_tag("Screens")
            .log_level("warning")
            .append_package_names(True)
            .append_element_id(False)
            .append_element_location(True)
            .show_hierarchy(False)
            .auto_report(False)
            .throttle(False)
            .throttle_window_ms(0)
            .max_message_bytes(1000)
        )
        assert result is builder
        assert builder.config is report
        assert report == ReportConfig(
            log_tag="Screens",
            log_level=Severity.WARN,
            append_package_names=True,
            append_element_id=False,
            append_element_location=True,
            show_hierarchy=False,
            auto_report=False,
            throttle=False,
            throttle_window_ms=0,
            max_message_bytes=1000,
        )

    @pytest.mark.parametrize(
        "call",
        [
            lambda b: b.log_tag(""),
            lambda b: b.log_level("loud"),
            lambda b: b.throttle_window_ms(-1),
            lambda b: b.max_message_bytes(0),
        ],
    )
    def test_invalid_values(self, call) -> None:
        """Test that invalid values are rejected."""
        with pytest.raises(ValueError):
            call(ConfigurationBuilder(ReportConfig()))


class TestSeverity:
    """Test severity parsing."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("debug", Severity.DEBUG),
            ("WARN", Severity.WARN),
            ("warning", Severity.WARN),
            ("critical", Severity.ASSERT),
            ("trace", Severity.VERBOSE),
            (4, Severity.INFO),
            (Severity.ERROR, Severity.ERROR),
        ],
    )
    def test_parse(self, value, expected: Severity) -> None:
        """Test names, aliases and priorities."""
        assert Severity.parse(value) is expected

    @pytest.mark.parametrize("value", ["loud", 1, 8, True])
    def test_parse_invalid(self, value) -> None:
        """Test that unknown severities raise ValueError."""
        with pytest.raises(ValueError):
            Severity.parse(value)

    def test_str_and_logging_level(self) -> None:
        """Test display names and stdlib logging levels."""
        import logging

        assert str(Severity.WARN) == "warn"
        assert Severity.WARN.logging_level == logging.WARNING
        assert Severity.VERBOSE.logging_level == 5
