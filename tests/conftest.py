"""Root pytest configuration for all tests."""

from __future__ import annotations

import pytest

from uispectrum.config import Config, reset_config
from uispectrum.engine import reset_engine
from uispectrum.logging import reset_logging
from uispectrum.report import CollectingSink
from tests.utils import ManualUiContext

# Configure pytest-asyncio to use auto mode
# This is redundant with pyproject.toml but ensures it's set
pytest_plugins = ("pytest_asyncio",)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory):
    """Keep user config and SPECTRUM_* variables out of every test."""
    for name in (
        "SPECTRUM_LOG",
        "SPECTRUM_LOG_TAG",
        "SPECTRUM_LOG_LEVEL",
        "SPECTRUM_ENABLED",
        "SPECTRUM_THROTTLE_WINDOW_MS",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path_factory.mktemp("xdg")))
    reset_config()
    reset_engine()
    yield
    reset_engine()
    reset_config()
    reset_logging()


@pytest.fixture
def config() -> Config:
    """Default configuration, independent of any file."""
    return Config()


@pytest.fixture
def sink() -> CollectingSink:
    return CollectingSink()


@pytest.fixture
def ui() -> ManualUiContext:
    """UI context with a manual clock."""
    return ManualUiContext()
