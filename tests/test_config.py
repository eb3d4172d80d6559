"""Tests for configuration management."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from uiflow.core.config import ConfigLoadingError, UiFlowConfig


def test_default_config() -> None:
    """Test default configuration values."""
    config = UiFlowConfig()

    assert config.project.name == "my-project"
    assert config.project.base_url == "http://localhost:4321"
    assert config.project.artifacts_dir is None

    assert config.browser.headless is True
    assert config.browser.viewport.width == 1280
    assert config.browser.viewport.height == 720

    assert config.timeouts.expect == 5.0
    assert config.timeouts.action == 15.0
    assert config.timeouts.navigation == 30.0
    assert config.timeouts.case == 45.0

    assert config.hydration.loading_text == "Loading..."
    assert config.auth.password == "testpassword123"
    assert config.run.workers == 4
    assert config.run.retries == 0


def test_save_and_load_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Test saving and loading configuration."""
    monkeypatch.chdir(tmp_path)

    config = UiFlowConfig()
    config.project.name = "test-project"
    config.project.base_url = "http://localhost:8080"
    config.timeouts.expect = 2.5

    saved = config.save()
    assert saved == tmp_path / "uiflow.yaml"

    loaded_config = UiFlowConfig.load_config()

    assert loaded_config.project.name == "test-project"
    assert loaded_config.project.base_url == "http://localhost:8080"
    assert loaded_config.timeouts.expect == 2.5


def test_missing_config_falls_back_to_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Test a missing uiflow.yaml yields the default configuration."""
    monkeypatch.chdir(tmp_path)
    assert UiFlowConfig.load_config() == UiFlowConfig()


def test_missing_required_config(tmp_path: Path) -> None:
    """Test a required but missing file raises ConfigLoadingError."""
    with pytest.raises(ConfigLoadingError):
        UiFlowConfig.load_config(tmp_path / "uiflow.yaml", required=True)


def test_partial_config_keeps_other_defaults(tmp_path: Path) -> None:
    """Test a partial file only overrides the keys it names."""
    path = tmp_path / "uiflow.yaml"
    path.write_text("timeouts:\n  expect: 1\nauth:\n  email_selector: null\n")

    config = UiFlowConfig.load_config(path)

    assert config.timeouts.expect == 1.0
    assert config.timeouts.action == 15.0
    assert config.auth.email_selector is None
    assert config.auth.username_prefix == "e2e"


@pytest.mark.parametrize(
    "content",
    [
        "project: [unclosed\n",
        "- just\n- a list\n",
        "timeouts:\n  expect: -1\n",
        "run:\n  workers: many\n",
    ],
)
def test_invalid_config(tmp_path: Path, content: str) -> None:
    """Test malformed or invalid files raise ConfigLoadingError."""
    path = tmp_path / "uiflow.yaml"
    path.write_text(content)

    with pytest.raises(ConfigLoadingError):
        UiFlowConfig.load_config(path)


def test_env_overrides(tmp_path: Path) -> None:
    """Test environment variables override the file."""
    path = tmp_path / "uiflow.yaml"
    path.write_text("project:\n  base_url: http://from-file\n")

    with patch.dict(os.environ, {"UIFLOW_BASE_URL": "http://from-env", "UIFLOW_HEADLESS": "false"}):
        config = UiFlowConfig.load_config(path)

    assert config.project.base_url == "http://from-env"
    assert config.browser.headless is False

    with patch.dict(os.environ, {"UIFLOW_HEADLESS": "1"}):
        assert UiFlowConfig.load_config(path).browser.headless is True


def test_env_overrides_return_a_copy() -> None:
    """Test environment overrides leave the source configuration untouched."""
    config = UiFlowConfig()
    with patch.dict(os.environ, {"UIFLOW_BASE_URL": "http://elsewhere"}):
        overridden = config.with_env_overrides()

    assert overridden.project.base_url == "http://elsewhere"
    assert config.project.base_url == "http://localhost:4321"
