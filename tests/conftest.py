"""Shared pytest fixtures for test isolation helpers."""

from pathlib import Path

import pytest

import neuroshell.config as config_module
from neuroshell.context import NeuroContext, reset_global_context
from neuroshell.models import NeuroConfig


@pytest.fixture()
def neuro_config_paths(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> tuple[Path, Path]:
    """Redirect neuroshell config paths to a temp directory."""
    config_dir = tmp_path / ".neuroshell"
    config_file = config_dir / "config.json"
    monkeypatch.setattr(config_module, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_file)
    monkeypatch.setattr(config_module, "TEST_CONFIG_DIR", tmp_path / "test-config")
    return config_dir, config_file


@pytest.fixture()
def config_dir(neuro_config_paths: tuple[Path, Path]) -> Path:
    return neuro_config_paths[0]


@pytest.fixture()
def config_file(neuro_config_paths: tuple[Path, Path]) -> Path:
    return neuro_config_paths[1]


@pytest.fixture()
def ctx(neuro_config_paths: tuple[Path, Path]) -> NeuroContext:
    """A production-mode context whose config dir lives under tmp_path."""
    return NeuroContext(NeuroConfig())


@pytest.fixture()
def test_ctx(neuro_config_paths: tuple[Path, Path]) -> NeuroContext:
    """A test-mode context with deterministic ids, time and system values."""
    return NeuroContext(NeuroConfig(test_mode=True))


@pytest.fixture(autouse=True)
def isolated_global_context():
    reset_global_context()
    yield
    reset_global_context()
